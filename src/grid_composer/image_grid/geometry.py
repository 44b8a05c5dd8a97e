"""
Grid geometry shared by the raster and vector backends.

Nothing here touches pixel data. Both backends consume the layout and
the per-cell placement helpers from this module so the two output
paths cannot drift apart.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from grid_composer.config_defaults import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_BORDER_COLOR,
    DEFAULT_BORDER_WIDTH,
    DEFAULT_CORNER_RADIUS,
    DEFAULT_IMAGE_FIT,
    DEFAULT_PADDING,
    DEFAULT_PREVIEW_FACTOR,
)
from grid_composer.constants import MIN_CELL_PX
from grid_composer.errors import ConfigError
from grid_composer.logging_utils import logger
from grid_composer.type_defs import IMAGE_FITS, ImageFit, Size
from grid_composer.utils import is_transparent, parse_hex_color, round_half_up

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence


@dataclass(frozen=True)
class GridSpec:
    """
    Immutable grid configuration for one build request.

    ``rows`` and ``canvas_height`` only determine the cell height; the
    rendered canvas height follows the number of rows actually filled.
    """

    cols: int
    rows: int
    canvas_width: int
    canvas_height: int
    padding: int = DEFAULT_PADDING
    background_color: str = DEFAULT_BACKGROUND_COLOR
    border_width: int = DEFAULT_BORDER_WIDTH
    border_color: str = DEFAULT_BORDER_COLOR
    corner_radius: int = DEFAULT_CORNER_RADIUS
    image_fit: ImageFit = DEFAULT_IMAGE_FIT

    def __post_init__(self) -> None:
        """Reject configurations that cannot describe a grid."""
        if self.cols < 1:
            msg = f"cols must be at least 1, got {self.cols}"
            raise ConfigError(msg)
        if self.rows < 1:
            msg = f"rows must be at least 1, got {self.rows}"
            raise ConfigError(msg)
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            msg = (
                "canvas size must be positive, got "
                f"{self.canvas_width}x{self.canvas_height}"
            )
            raise ConfigError(msg)
        for name in ("padding", "border_width", "corner_radius"):
            if getattr(self, name) < 0:
                msg = f"{name} must not be negative, got {getattr(self, name)}"
                raise ConfigError(msg)
        if self.image_fit not in IMAGE_FITS:
            msg = (
                f"image_fit must be one of {', '.join(IMAGE_FITS)}, "
                f"got {self.image_fit!r}"
            )
            raise ConfigError(msg)
        colors = [("border_color", self.border_color)]
        if not is_transparent(self.background_color):
            colors.append(("background_color", self.background_color))
        for name, value in colors:
            try:
                parse_hex_color(value)
            except ValueError as exc:
                msg = f"{name}: {exc}"
                raise ConfigError(msg) from exc

    @property
    def capacity(self) -> int:
        """Number of cells the configured grid holds."""
        return self.cols * self.rows

    def scaled_for_preview(
        self,
        factor: float = DEFAULT_PREVIEW_FACTOR,
    ) -> GridSpec:
        """
        Return a copy scaled for a reduced-size preview render.

        Canvas size, padding, border width and corner radius are scaled
        and rounded half up. Grid shape, colours and fit are unchanged.
        """
        if factor <= 0:
            msg = f"preview factor must be positive, got {factor}"
            raise ConfigError(msg)
        return replace(
            self,
            canvas_width=max(1, round_half_up(self.canvas_width * factor)),
            canvas_height=max(1, round_half_up(self.canvas_height * factor)),
            padding=round_half_up(self.padding * factor),
            border_width=round_half_up(self.border_width * factor),
            corner_radius=round_half_up(self.corner_radius * factor),
        )


@dataclass(frozen=True)
class SourceImage:
    """Encoded image bytes plus their placement order."""

    data: bytes = field(repr=False)
    order: int
    ref: str | None = None

    @property
    def label(self) -> str:
        """Reference used to name this image in errors and logs."""
        return self.ref if self.ref is not None else f"image[{self.order}]"


@dataclass(frozen=True)
class CellPosition:
    """Pixel rectangle of one grid cell on the canvas."""

    x: int
    y: int
    width: int
    height: int

    def size(self) -> Size:
        """Return (width, height)."""
        return self.width, self.height

    def border_box(self, border_width: int) -> tuple[int, int, int, int]:
        """Return (x, y, w, h) of the border overlay straddling the cell."""
        return (
            self.x - border_width,
            self.y - border_width,
            self.width + 2 * border_width,
            self.height + 2 * border_width,
        )


@dataclass(frozen=True)
class GridLayout:
    """Canvas dimensions and cell rectangles for one request."""

    canvas_width: int
    canvas_height: int
    actual_rows: int
    cell_width: int
    cell_height: int
    positions: tuple[CellPosition, ...]

    @property
    def canvas_size(self) -> Size:
        """Return (canvas_width, canvas_height)."""
        return self.canvas_width, self.canvas_height


def actual_rows(image_count: int, cols: int) -> int:
    """Return the number of rows needed to hold ``image_count`` images."""
    return math.ceil(image_count / cols)


def cell_size(spec: GridSpec) -> Size:
    """
    Return the uniform cell size for a spec.

    Width comes from the canvas width and column count, height from the
    configured canvas height and row count. Both floor at one pixel.
    """
    available_w = (
        spec.canvas_width
        - spec.padding * (spec.cols + 1)
        - spec.border_width * spec.cols * 2
    )
    available_h = (
        spec.canvas_height
        - spec.padding * (spec.rows + 1)
        - spec.border_width * spec.rows * 2
    )
    cell_w = max(MIN_CELL_PX, available_w // spec.cols)
    cell_h = max(MIN_CELL_PX, available_h // spec.rows)
    return cell_w, cell_h


def compute_layout(spec: GridSpec, image_count: int) -> GridLayout:
    """
    Compute canvas size and row-major cell positions.

    Images beyond ``actual_rows * cols`` never receive a position. The
    canvas shrinks vertically to the rows actually filled while every
    cell keeps the height the configured grid would give it.
    """
    if image_count < 0:
        msg = f"image_count must not be negative, got {image_count}"
        raise ConfigError(msg)

    rows = actual_rows(image_count, spec.cols)
    cell_w, cell_h = cell_size(spec)
    pad, border = spec.padding, spec.border_width
    final_h = pad * (rows + 1) + border * rows * 2 + cell_h * rows

    step_x = cell_w + border * 2 + pad
    step_y = cell_h + border * 2 + pad
    positions: list[CellPosition] = []
    for i in range(image_count):
        row, col = divmod(i, spec.cols)
        if row >= rows:
            continue
        positions.append(CellPosition(
            x=pad + border + col * step_x,
            y=pad + border + row * step_y,
            width=cell_w,
            height=cell_h,
        ))

    return GridLayout(
        canvas_width=spec.canvas_width,
        canvas_height=final_h,
        actual_rows=rows,
        cell_width=cell_w,
        cell_height=cell_h,
        positions=tuple(positions),
    )


@dataclass(frozen=True)
class ContainPlacement:
    """Scaled child size and its offset inside a ``contain`` cell."""

    width: int
    height: int
    offset_x: int
    offset_y: int


def contain_placement(src_size: Size, target: Size) -> ContainPlacement:
    """
    Scale ``src_size`` to fit inside ``target`` and centre it.

    The scale is ``min(tw / sw, th / sh)``; the scaled size is rounded
    half up and clamped to ``[1, target]`` on each axis. Offsets also
    round half up, so an odd gap leaves the extra pixel before the image.
    """
    src_w, src_h = src_size
    target_w, target_h = target
    if src_w <= 0 or src_h <= 0:
        msg = f"source size must be positive, got {src_w}x{src_h}"
        raise ValueError(msg)
    scale = min(target_w / src_w, target_h / src_h)
    new_w = min(target_w, max(MIN_CELL_PX, round_half_up(src_w * scale)))
    new_h = min(target_h, max(MIN_CELL_PX, round_half_up(src_h * scale)))
    return ContainPlacement(
        width=new_w,
        height=new_h,
        offset_x=round_half_up((target_w - new_w) / 2),
        offset_y=round_half_up((target_h - new_h) / 2),
    )


def border_radius(corner_radius: int, border_width: int) -> float:
    """Return the outer radius of a border stroke around a rounded cell."""
    if corner_radius <= 0:
        return 0
    return corner_radius + border_width / 2


def ordered_sources(
    images: Sequence[SourceImage],
    spec: GridSpec,
) -> list[SourceImage]:
    """Stable-sort images by ``order`` and keep those that fit the grid."""
    ordered = sorted(images, key=lambda im: im.order)
    placed = len(compute_layout(spec, len(ordered)).positions)
    if placed < len(ordered):
        logger.debug(
            "Dropping %d images that do not fit the grid",
            len(ordered) - placed,
        )
    return ordered[:placed]

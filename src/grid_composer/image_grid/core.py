"""Core raster primitives: decoding, cell fitting, and cell framing."""

from __future__ import annotations

import io
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from PIL import Image, ImageChops, ImageDraw, ImageOps

from grid_composer.constants import COLOR_MODE_RGBA, COLOR_TRANSPARENT
from grid_composer.errors import ConfigError, DecodeError
from grid_composer.image_grid.geometry import (
    ContainPlacement,
    border_radius,
    contain_placement,
)
from grid_composer.utils import parse_hex_color, round_half_up

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence

    from grid_composer.type_defs import ImageFit, Size

T = TypeVar("T")
R = TypeVar("R")

_DECODE_ERRORS = (
    OSError,
    ValueError,
    SyntaxError,
    Image.DecompressionBombError,
)


def decode_image(data: bytes, ref: str) -> Image.Image:
    """
    Decode an encoded buffer into a fully loaded RGBA image.

    Raises:
        DecodeError: If Pillow cannot identify or read the buffer.

    """
    if not data:
        raise DecodeError(ref, "empty buffer")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.convert(COLOR_MODE_RGBA)
    except _DECODE_ERRORS as exc:
        raise DecodeError(ref, str(exc)) from exc


def fit_contain(
    image: Image.Image,
    target: Size,
) -> tuple[Image.Image, ContainPlacement]:
    """Scale ``image`` to fit inside ``target``; return it with placement."""
    placement = contain_placement(image.size, target)
    resized = image.resize(
        (placement.width, placement.height),
        Image.Resampling.LANCZOS,
    )
    return resized, placement


def fit_cell(image: Image.Image, target: Size, policy: ImageFit) -> Image.Image:
    """
    Resize ``image`` to exactly ``target`` under a fit policy.

    policy:
        - "fill": stretches to the cell, aspect ratio not kept
        - "cover": fills the cell and centre-crops the overflow
        - "contain": letterboxes on a transparent cell
    """
    image = image.convert(COLOR_MODE_RGBA)
    if policy == "fill":
        return image.resize(target, Image.Resampling.LANCZOS)
    if policy == "cover":
        return ImageOps.fit(
            image,
            target,
            method=Image.Resampling.LANCZOS,
            centering=(0.5, 0.5),
        )
    if policy == "contain":
        resized, placement = fit_contain(image, target)
        cell = Image.new(COLOR_MODE_RGBA, target, COLOR_TRANSPARENT)
        cell.paste(resized, (placement.offset_x, placement.offset_y))
        return cell
    msg = f"Unknown image fit policy: {policy!r}"
    raise ConfigError(msg)


def rounded_mask(size: Size, radius: float) -> Image.Image:
    """Return an ``L`` mask that is opaque inside a rounded rectangle."""
    w, h = size
    mask = Image.new("L", (w, h), 0)
    draw = ImageDraw.Draw(mask)
    draw.rounded_rectangle(
        [0, 0, w - 1, h - 1],
        radius=round_half_up(radius),
        fill=255,
    )
    return mask


def apply_rounded_corners(image: Image.Image, radius: int) -> Image.Image:
    """Clip ``image`` to a rounded rectangle (destination-in)."""
    if radius <= 0:
        return image
    clipped = image.convert(COLOR_MODE_RGBA)
    alpha = ImageChops.multiply(
        clipped.getchannel("A"),
        rounded_mask(clipped.size, radius),
    )
    clipped.putalpha(alpha)
    return clipped


def draw_cell_border(
    cell_size: Size,
    border_width: int,
    border_color: str,
    corner_radius: int,
) -> Image.Image | None:
    """
    Draw a stroke-only border that straddles a cell.

    The overlay is ``border_width`` larger than the cell on every side so
    it is pasted at ``(x - border_width, y - border_width)``.
    """
    if border_width <= 0:
        return None
    w, h = cell_size
    total_w = w + 2 * border_width
    total_h = h + 2 * border_width
    border = Image.new(COLOR_MODE_RGBA, (total_w, total_h), COLOR_TRANSPARENT)
    draw = ImageDraw.Draw(border)
    draw.rounded_rectangle(
        [0, 0, total_w - 1, total_h - 1],
        radius=round_half_up(border_radius(corner_radius, border_width)),
        outline=(*parse_hex_color(border_color), 255),
        width=border_width,
    )
    return border


@dataclass(frozen=True)
class FramedCell:
    """A fitted, clipped cell image and its optional border overlay."""

    image: Image.Image
    border: Image.Image | None = None


def frame_cell(
    cell: Image.Image,
    corner_radius: int,
    border_width: int,
    border_color: str,
) -> FramedCell:
    """Apply rounded-corner clipping and build the border overlay."""
    return FramedCell(
        image=apply_rounded_corners(cell, corner_radius),
        border=draw_cell_border(
            cell.size, border_width, border_color, corner_radius,
        ),
    )


def map_cells(
    func: Callable[[T], R],
    items: Sequence[T],
    max_workers: int | None = None,
) -> list[R]:
    """
    Apply ``func`` to every cell input, preserving order.

    With ``max_workers`` above one the work runs in a thread pool. The
    first exception raised by any cell propagates to the caller.
    """
    if max_workers is None or max_workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(func, items))

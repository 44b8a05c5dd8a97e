"""Raster backend: fit, frame, and composite cells onto a pixel canvas."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from PIL import Image

from grid_composer.constants import COLOR_MODE_RGBA
from grid_composer.errors import CompositeError, ConfigError
from grid_composer.image_grid.core import (
    FramedCell,
    decode_image,
    fit_cell,
    frame_cell,
    map_cells,
)
from grid_composer.image_grid.geometry import (
    CellPosition,
    GridLayout,
    GridSpec,
    SourceImage,
    compute_layout,
    ordered_sources,
)
from grid_composer.logging_utils import logger
from grid_composer.utils import background_rgba

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence


def new_canvas(size: tuple[int, int], background_color: str) -> Image.Image:
    """Allocate an RGBA canvas, wrapping allocation failures."""
    try:
        return Image.new(COLOR_MODE_RGBA, size, background_rgba(background_color))
    except (MemoryError, ValueError, Image.DecompressionBombError) as exc:
        msg = f"Could not allocate a {size[0]}x{size[1]} canvas: {exc}"
        raise CompositeError(msg) from exc


def _prepare_cell(
    spec: GridSpec,
    item: tuple[SourceImage, CellPosition],
) -> FramedCell:
    """Decode, fit and frame one cell."""
    source, position = item
    decoded = decode_image(source.data, source.label)
    fitted = fit_cell(decoded, position.size(), spec.image_fit)
    return frame_cell(
        fitted,
        spec.corner_radius,
        spec.border_width,
        spec.border_color,
    )


def composite(
    spec: GridSpec,
    layout: GridLayout,
    cells: Sequence[FramedCell],
) -> Image.Image:
    """
    Paint the background, then every cell image, then every border.

    Borders go in a second pass so a neighbouring image never covers
    them, even with zero padding.
    """
    if len(cells) != len(layout.positions):
        msg = (
            f"Got {len(cells)} cells for {len(layout.positions)} "
            "grid positions"
        )
        raise CompositeError(msg)

    image_layers = [
        (cell.image, (pos.x, pos.y))
        for cell, pos in zip(cells, layout.positions, strict=True)
    ]
    border_layers = [
        (cell.border, pos.border_box(spec.border_width)[:2])
        for cell, pos in zip(cells, layout.positions, strict=True)
        if cell.border is not None
    ]

    canvas = new_canvas(layout.canvas_size, spec.background_color)
    # offsets are never negative: x - border_width >= padding >= 0
    for layer, dest in [*image_layers, *border_layers]:
        canvas.alpha_composite(layer, dest=dest)
    return canvas


def build_raster_grid(
    images: Sequence[SourceImage],
    spec: GridSpec,
    *,
    max_workers: int | None = None,
) -> Image.Image:
    """
    Build the grid as an RGBA image of the computed canvas size.

    Images are placed row-major by ascending ``order``. Any decode
    failure aborts the build.
    """
    if not images:
        msg = "No images provided"
        raise ConfigError(msg)

    ordered = ordered_sources(images, spec)
    layout = compute_layout(spec, len(ordered))
    logger.debug(
        "Raster grid %dx%d: %d cells of %dx%d in %d rows",
        layout.canvas_width, layout.canvas_height, len(layout.positions),
        layout.cell_width, layout.cell_height, layout.actual_rows,
    )

    cells = map_cells(
        partial(_prepare_cell, spec),
        list(zip(ordered, layout.positions, strict=True)),
        max_workers,
    )
    return composite(spec, layout, cells)

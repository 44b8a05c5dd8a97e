"""
Vector backend: assemble the grid as a single SVG document.

Cells are embedded as base64 PNG images, rounded corners become
``clipPath`` masks and borders become stroked rectangles. Geometry comes
from :mod:`grid_composer.image_grid.geometry`, so the declared SVG size
always equals the raster canvas size for the same inputs.
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from grid_composer.constants import SVG_EMBED_MIME
from grid_composer.errors import ConfigError
from grid_composer.image_grid.core import (
    decode_image,
    fit_cell,
    fit_contain,
    map_cells,
)
from grid_composer.image_grid.geometry import (
    CellPosition,
    GridLayout,
    GridSpec,
    SourceImage,
    border_radius,
    compute_layout,
    ordered_sources,
)
from grid_composer.image_grid.overlays import shadow_filter, svg_text_elements
from grid_composer.image_grid.svg import SvgDocument, svg_element
from grid_composer.logging_utils import logger
from grid_composer.utils import is_transparent

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from PIL import Image

    from grid_composer.image_grid.overlays import TextOverlay


@dataclass(frozen=True)
class EmbeddedCell:
    """A fitted bitmap and the rectangle it occupies on the canvas."""

    image: Image.Image
    x: int
    y: int

    @property
    def width(self) -> int:
        """Width of the embedded bitmap."""
        return self.image.width

    @property
    def height(self) -> int:
        """Height of the embedded bitmap."""
        return self.image.height


def png_data_uri(image: Image.Image) -> str:
    """Encode ``image`` as a base64 PNG data URI."""
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    payload = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:{SVG_EMBED_MIME};base64,{payload}"


def embed_cell(
    image: Image.Image,
    position: CellPosition,
    spec: GridSpec,
) -> EmbeddedCell:
    """
    Fit ``image`` for embedding at ``position``.

    For ``contain`` only the scaled child is embedded, offset inside the
    cell; the remaining cell area stays empty instead of being padded.
    """
    if spec.image_fit == "contain":
        child, placement = fit_contain(image, position.size())
        return EmbeddedCell(
            image=child,
            x=position.x + placement.offset_x,
            y=position.y + placement.offset_y,
        )
    return EmbeddedCell(
        image=fit_cell(image, position.size(), spec.image_fit),
        x=position.x,
        y=position.y,
    )


def _prepare_cell(
    spec: GridSpec,
    item: tuple[SourceImage, CellPosition],
) -> EmbeddedCell:
    """Decode and fit one cell for embedding."""
    source, position = item
    return embed_cell(decode_image(source.data, source.label), position, spec)


def assemble_svg(
    spec: GridSpec,
    layout: GridLayout,
    cells: Sequence[EmbeddedCell],
    overlays: Sequence[TextOverlay] = (),
) -> SvgDocument:
    """Build the SVG document for fitted cells and text overlays."""
    width, height = layout.canvas_size
    doc = SvgDocument.create(width, height)
    defs = svg_element("defs", doc.root)
    radius = spec.corner_radius
    border = spec.border_width

    if not is_transparent(spec.background_color):
        svg_element(
            "rect", doc.root,
            x=0, y=0, width=width, height=height,
            fill=spec.background_color,
        )

    for i, (cell, pos) in enumerate(
        zip(cells, layout.positions, strict=True),
    ):
        clip_ref = None
        if radius > 0:
            clip = svg_element("clipPath", defs, id=f"clip-{i}")
            svg_element(
                "rect", clip,
                x=pos.x, y=pos.y, width=pos.width, height=pos.height,
                rx=radius, ry=radius,
            )
            clip_ref = f"url(#clip-{i})"
        svg_element(
            "image", doc.root,
            x=cell.x, y=cell.y, width=cell.width, height=cell.height,
            href=png_data_uri(cell.image),
            clip_path=clip_ref,
        )

    if border > 0:
        # strokes are centred on the path: grow the rect by half a stroke
        outer_radius = border_radius(radius, border)
        for pos in layout.positions:
            svg_element(
                "rect", doc.root,
                x=pos.x - border / 2,
                y=pos.y - border / 2,
                width=pos.width + border,
                height=pos.height + border,
                rx=outer_radius,
                ry=outer_radius,
                fill="none",
                stroke=spec.border_color,
                stroke_width=border,
            )

    if any(overlay.shadow is not None for overlay in overlays):
        defs.append(shadow_filter())
    for overlay in overlays:
        doc.root.extend(svg_text_elements(overlay, width, height))
    return doc


def build_vector_grid(
    images: Sequence[SourceImage],
    spec: GridSpec,
    overlays: Sequence[TextOverlay] = (),
    *,
    max_workers: int | None = None,
) -> SvgDocument:
    """
    Build the grid as an SVG document with overlays folded in.

    Uses the same ordering, layout and fitting as the raster backend.
    """
    if not images:
        msg = "No images provided"
        raise ConfigError(msg)

    ordered = ordered_sources(images, spec)
    layout = compute_layout(spec, len(ordered))
    logger.debug(
        "Vector grid %dx%d: %d cells, %d overlays",
        layout.canvas_width, layout.canvas_height,
        len(layout.positions), len(overlays),
    )

    cells = map_cells(
        partial(_prepare_cell, spec),
        list(zip(ordered, layout.positions, strict=True)),
        max_workers,
    )
    return assemble_svg(spec, layout, cells, overlays)

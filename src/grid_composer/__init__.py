"""Public package exports for the grid composer."""

from __future__ import annotations

from .errors import CompositeError, ConfigError, DecodeError, GridComposerError
from .image_grid import (
    CellPosition,
    GridLayout,
    GridSpec,
    SourceImage,
    SvgDocument,
    TextOverlay,
    TextShadow,
    TextStroke,
    build_raster_grid,
    build_vector_grid,
    compute_layout,
    render_overlays,
)

__all__ = [
    "CellPosition",
    "CompositeError",
    "ConfigError",
    "DecodeError",
    "GridComposerError",
    "GridLayout",
    "GridSpec",
    "SourceImage",
    "SvgDocument",
    "TextOverlay",
    "TextShadow",
    "TextStroke",
    "build_raster_grid",
    "build_vector_grid",
    "compute_layout",
    "render_overlays",
]

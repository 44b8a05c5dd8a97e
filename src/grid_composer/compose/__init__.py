"""Public request-level rendering API re-exports."""

from __future__ import annotations

from .api import (
    GridPreview,
    GridRenderOptions,
    load_sources,
    non_negative_int,
    positive_int,
    render_grid,
    render_grid_bytes,
    render_preview,
    size_2d,
    text_position,
)

__all__ = [
    "GridPreview",
    "GridRenderOptions",
    "load_sources",
    "non_negative_int",
    "positive_int",
    "render_grid",
    "render_grid_bytes",
    "render_preview",
    "size_2d",
    "text_position",
]

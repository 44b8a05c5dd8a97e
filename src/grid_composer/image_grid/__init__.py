"""
Grid composition engine split into geometry, primitives, and backends.

The package exposes the most commonly used entry points directly so
callers rarely need to reach into the submodules.
"""

from __future__ import annotations

from . import core, export, geometry, overlays, raster, svg, vector
from .core import FramedCell, decode_image, fit_cell, frame_cell
from .export import export_raster, export_svg, save_grid
from .geometry import (
    CellPosition,
    GridLayout,
    GridSpec,
    SourceImage,
    compute_layout,
)
from .overlays import (
    TextOverlay,
    TextShadow,
    TextStroke,
    render_overlays,
)
from .raster import build_raster_grid, composite
from .svg import SvgDocument
from .vector import assemble_svg, build_vector_grid

__all__ = [
    "CellPosition",
    "FramedCell",
    "GridLayout",
    "GridSpec",
    "SourceImage",
    "SvgDocument",
    "TextOverlay",
    "TextShadow",
    "TextStroke",
    "assemble_svg",
    "build_raster_grid",
    "build_vector_grid",
    "composite",
    "compute_layout",
    "core",
    "decode_image",
    "export",
    "export_raster",
    "export_svg",
    "fit_cell",
    "frame_cell",
    "geometry",
    "overlays",
    "raster",
    "render_overlays",
    "save_grid",
    "svg",
    "vector",
]

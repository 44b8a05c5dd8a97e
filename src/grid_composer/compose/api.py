"""
Request-level grid rendering shared by the CLI and tests.

The engine never performs I/O; this module plays the role of the file
store collaborator. It reads source files, runs the requested backend,
applies overlays and encodes the result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from grid_composer.config_defaults import (
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_PREVIEW_FACTOR,
    DEFAULT_QUALITY,
)
from grid_composer.errors import ConfigError
from grid_composer.image_grid import (
    GridSpec,
    SourceImage,
    build_raster_grid,
    build_vector_grid,
    render_overlays,
)
from grid_composer.image_grid.export import (
    data_uri,
    default_grid_name,
    export_raster,
    export_svg,
    normalize_format,
    save_grid,
)
from grid_composer.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from grid_composer.image_grid import TextOverlay

_SIZE_PARTS = 2


@dataclass(slots=True)
class GridRenderOptions:
    """
    Configuration for one grid render request.

    ``out_path`` defaults to a deterministic name inside ``out_dir``.
    """

    image_paths: list[Path]
    spec: GridSpec
    overlays: list[TextOverlay] = field(default_factory=list)
    output_format: str = DEFAULT_OUTPUT_FORMAT
    quality: int = DEFAULT_QUALITY
    out_path: Path | None = None
    out_dir: Path = field(default_factory=Path)
    max_workers: int | None = None


def positive_int(text: str) -> int:
    """Argparse-style validator that enforces a strictly positive integer."""
    value = non_negative_int(text)
    if value == 0:
        msg = "must be positive"
        raise ValueError(msg)
    return value


def non_negative_int(text: str) -> int:
    """Argparse-style validator for integers that may be zero."""
    try:
        value = int(text)
    except ValueError as exc:
        msg = "must be an integer"
        raise ValueError(msg) from exc
    if value < 0:
        msg = "must not be negative"
        raise ValueError(msg)
    return value


def size_2d(text: str) -> tuple[int, int]:
    """Parse ``WxH`` strings into integer tuples and validate positivity."""
    parts = text.lower().split("x")
    if len(parts) != _SIZE_PARTS:
        msg = "must look like WxH, e.g., 1080x1080"
        raise ValueError(msg)
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError as exc:
        msg = "width and height must be integers"
        raise ValueError(msg) from exc
    if width <= 0 or height <= 0:
        msg = "width and height must be positive"
        raise ValueError(msg)
    return width, height


def text_position(text: str) -> tuple[str, float, float]:
    """
    Parse ``TEXT@X,Y`` into label text and fractional coordinates.

    Without ``@X,Y`` the label is centred.
    """
    label, sep, coords = text.rpartition("@")
    if not sep:
        return text, 0.5, 0.5
    try:
        x_text, y_text = coords.split(",")
        x, y = float(x_text), float(y_text)
    except ValueError as exc:
        msg = "position must look like TEXT@X,Y with X and Y in [0, 1]"
        raise ValueError(msg) from exc
    if not (0 <= x <= 1 and 0 <= y <= 1):
        msg = "X and Y must be between 0 and 1"
        raise ValueError(msg)
    return label, x, y


@dataclass(frozen=True)
class GridPreview:
    """A reduced-size PNG preview and its pixel dimensions."""

    data_uri: str
    width: int
    height: int


def load_sources(paths: Sequence[Path]) -> list[SourceImage]:
    """Read image files into ``SourceImage`` values in list order."""
    sources: list[SourceImage] = []
    for order, path in enumerate(paths):
        image_path = Path(path)
        if not image_path.is_file():
            msg = f"Image not found: {image_path}"
            raise FileNotFoundError(msg)
        sources.append(SourceImage(
            data=image_path.read_bytes(),
            order=order,
            ref=str(image_path),
        ))
    return sources


def render_grid_bytes(  # noqa: PLR0913
    sources: Sequence[SourceImage],
    spec: GridSpec,
    overlays: Sequence[TextOverlay] = (),
    output_format: str = DEFAULT_OUTPUT_FORMAT,
    quality: int = DEFAULT_QUALITY,
    *,
    max_workers: int | None = None,
) -> bytes:
    """
    Render a grid and encode it in ``output_format``.

    SVG output folds the overlays into the document; raster output
    composites them onto the finished canvas before encoding.
    """
    fmt = normalize_format(output_format)
    if fmt == "svg":
        document = build_vector_grid(
            sources, spec, overlays, max_workers=max_workers,
        )
        return export_svg(document)

    grid = build_raster_grid(sources, spec, max_workers=max_workers)
    grid = render_overlays(grid, overlays)
    return export_raster(grid, fmt, quality)


def render_grid(options: GridRenderOptions) -> Path:
    """
    Render the grid described by ``options`` and save it.

    Returns the saved ``Path``. Engine errors propagate unchanged.
    """
    if not options.image_paths:
        msg = "No images provided"
        raise ConfigError(msg)

    fmt = normalize_format(options.output_format)
    sources = load_sources(options.image_paths)
    payload = render_grid_bytes(
        sources,
        options.spec,
        options.overlays,
        fmt,
        options.quality,
        max_workers=options.max_workers,
    )
    out_path = options.out_path or default_grid_name(
        options.spec, len(sources), options.out_dir, fmt,
    )
    return save_grid(payload, Path(out_path))


def render_preview(
    sources: Sequence[SourceImage],
    spec: GridSpec,
    overlays: Sequence[TextOverlay] = (),
    factor: float = DEFAULT_PREVIEW_FACTOR,
) -> GridPreview:
    """Render a scaled-down PNG preview as a data URI."""
    preview_spec = spec.scaled_for_preview(factor)
    scaled = [overlay.scaled(factor) for overlay in overlays]
    grid = render_overlays(build_raster_grid(sources, preview_spec), scaled)
    logger.debug("Preview rendered at %dx%d", grid.width, grid.height)
    return GridPreview(
        data_uri=data_uri(export_raster(grid, "png")),
        width=grid.width,
        height=grid.height,
    )

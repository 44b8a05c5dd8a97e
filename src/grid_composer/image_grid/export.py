"""Serialization and persistence helpers for finished grids."""

from __future__ import annotations

import base64
import io
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image

from grid_composer.constants import (
    COLOR_MODE_RGB,
    COLOR_MODE_RGBA,
    COLOR_WHITE,
    MIME_TYPES,
    QUALITY_MAX,
    QUALITY_MIN,
)
from grid_composer.config_defaults import DEFAULT_QUALITY
from grid_composer.errors import CompositeError, ConfigError
from grid_composer.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from grid_composer.image_grid.geometry import GridSpec
    from grid_composer.image_grid.svg import SvgDocument
    from grid_composer.type_defs import RGB

_RASTER_FORMATS = {"png": "PNG", "jpg": "JPEG", "jpeg": "JPEG", "webp": "WEBP"}


def normalize_format(fmt: str) -> str:
    """Return the canonical lowercase extension for an output format."""
    key = fmt.lower().lstrip(".")
    if key == "jpeg":
        return "jpg"
    if key not in MIME_TYPES:
        msg = f"Unsupported output format: {fmt!r}"
        raise ConfigError(msg)
    return key


def mime_type(fmt: str) -> str:
    """Return the MIME type for an output format."""
    return MIME_TYPES[normalize_format(fmt)]


def to_rgb(img: Image.Image, *, bg_color: RGB = COLOR_WHITE) -> Image.Image:
    """Convert PIL image to RGB, alpha compositing if needed."""
    if img.mode == COLOR_MODE_RGB:
        return img
    if img.mode in ("RGBA", "LA", "P"):
        bg = Image.new(COLOR_MODE_RGBA, img.size, (*bg_color, 255))
        comp = Image.alpha_composite(bg, img.convert(COLOR_MODE_RGBA))
        return comp.convert(COLOR_MODE_RGB)
    return img.convert(COLOR_MODE_RGB)


def export_raster(
    image: Image.Image,
    fmt: str = "png",
    quality: int = DEFAULT_QUALITY,
) -> bytes:
    """
    Encode a raster grid as PNG, JPEG or WebP bytes.

    JPEG has no alpha channel, so transparent areas are flattened onto
    white first.
    """
    key = normalize_format(fmt)
    if key not in _RASTER_FORMATS:
        msg = f"{fmt!r} is not a raster format"
        raise ConfigError(msg)
    if not QUALITY_MIN <= quality <= QUALITY_MAX:
        msg = (
            f"quality must be between {QUALITY_MIN} and {QUALITY_MAX}, "
            f"got {quality}"
        )
        raise ConfigError(msg)

    pil_format = _RASTER_FORMATS[key]
    buf = io.BytesIO()
    try:
        if pil_format == "PNG":
            image.save(buf, format=pil_format)
        elif pil_format == "JPEG":
            to_rgb(image).save(buf, format=pil_format, quality=quality)
        else:
            image.save(buf, format=pil_format, quality=quality)
    except OSError as exc:
        msg = f"Could not encode grid as {key}: {exc}"
        raise CompositeError(msg) from exc
    return buf.getvalue()


def export_svg(document: SvgDocument) -> bytes:
    """Encode an SVG document as UTF-8 bytes."""
    return document.to_bytes()


def data_uri(payload: bytes, fmt: str = "png") -> str:
    """Wrap encoded bytes in a base64 data URI."""
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type(fmt)};base64,{encoded}"


def default_grid_name(
    spec: GridSpec,
    image_count: int,
    out_dir: Path,
    fmt: str = "png",
) -> Path:
    """Build a deterministic filename for a grid output."""
    name = (
        f"grid_{spec.cols}x{spec.rows}_{spec.canvas_width}x"
        f"{spec.canvas_height}_{image_count}img.{normalize_format(fmt)}"
    )
    return out_dir / name


def save_grid(payload: bytes, out_path: Path) -> Path:
    """Write encoded grid bytes to ``out_path``, creating parents."""
    if not isinstance(out_path, Path):
        msg = "out_path must be a pathlib.Path"
        raise TypeError(msg)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(payload)
    logger.info("Grid saved to: %s", out_path)
    return out_path

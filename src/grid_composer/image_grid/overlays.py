"""
Text overlay rendering for both backends.

Overlays are positioned with fractions of the canvas size. Each overlay
renders as up to three layers, back to front: a blurred shadow, a
stroke outline, and the filled text. Alignment is delegated to the
backend's native text anchoring; text is never measured, so very long
strings may overflow the canvas.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import TYPE_CHECKING

from PIL import Image, ImageChops, ImageDraw, ImageFilter, ImageFont

from grid_composer.config_defaults import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_FONT_WEIGHT,
    DEFAULT_OVERLAY_TEXT,
    DEFAULT_TEXT_ALIGN,
    DEFAULT_TEXT_COLOR,
)
from grid_composer.constants import (
    COLOR_MODE_RGBA,
    COLOR_TRANSPARENT,
    FONT_SIZE_MAX,
    FONT_SIZE_MIN,
    SHADOW_ALPHA,
    SHADOW_FILTER_ID,
    SHADOW_STD_DEVIATION,
)
from grid_composer.errors import ConfigError
from grid_composer.image_grid.svg import SvgDocument, svg_element
from grid_composer.type_defs import TEXT_ALIGNS
from grid_composer.utils import (
    css_rgba,
    parse_hex_color,
    rgba_with_alpha,
    round_half_up,
)

if TYPE_CHECKING:  # pragma: no cover
    import xml.etree.ElementTree as ET
    from collections.abc import Sequence

    from grid_composer.type_defs import FontWeight, Size, TextAlign

_TEXT_ANCHORS: dict[str, str] = {
    "left": "start",
    "center": "middle",
    "right": "end",
}
# Pillow anchors on the alphabetic baseline, like SVG <text>
_PIL_ANCHORS: dict[str, str] = {
    "left": "ls",
    "center": "ms",
    "right": "rs",
}
_FONT_STACKS: dict[str, str] = {
    "Arial": "Arial, sans-serif",
    "Helvetica": "Helvetica, Arial, sans-serif",
    "Georgia": "Georgia, serif",
    "Times New Roman": "Times New Roman, Times, serif",
    "Courier New": "Courier New, Courier, monospace",
    "Verdana": "Verdana, sans-serif",
    "Impact": "Impact, sans-serif",
}
_FALLBACK_STACK = _FONT_STACKS["Arial"]
# (regular, bold) TrueType file names tried before DejaVu
_FONT_FILES: dict[str, tuple[str, str]] = {
    "Arial": ("arial.ttf", "arialbd.ttf"),
    "Helvetica": ("Helvetica.ttc", "Helvetica.ttc"),
    "Georgia": ("georgia.ttf", "georgiab.ttf"),
    "Times New Roman": ("times.ttf", "timesbd.ttf"),
    "Courier New": ("cour.ttf", "courbd.ttf"),
    "Verdana": ("verdana.ttf", "verdanab.ttf"),
    "Impact": ("impact.ttf", "impact.ttf"),
}
_DEJAVU_FILES = ("DejaVuSans.ttf", "DejaVuSans-Bold.ttf")


@dataclass(frozen=True)
class TextShadow:
    """Drop shadow drawn behind overlay text."""

    color: str = "#000000"
    blur_radius: int = 4
    offset_x: int = 2
    offset_y: int = 2


@dataclass(frozen=True)
class TextStroke:
    """Outline drawn around overlay text."""

    color: str = "#000000"
    width: int = 2


@dataclass(frozen=True)
class TextOverlay:
    """A text label placed with fractions of the canvas size."""

    text: str
    x: float = 0.5
    y: float = 0.5
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: int = DEFAULT_FONT_SIZE
    font_weight: FontWeight = DEFAULT_FONT_WEIGHT
    color: str = DEFAULT_TEXT_COLOR
    align: TextAlign = DEFAULT_TEXT_ALIGN
    shadow: TextShadow | None = None
    stroke: TextStroke | None = None

    def __post_init__(self) -> None:
        """
        Reject overlays neither backend can draw.

        Only a font size of at least one pixel is required here so that
        preview scaling can go below the user-facing minimum.
        """
        problems = validate_text_overlay(
            self, min_font_size=1, max_font_size=None,
        )
        if problems:
            raise ConfigError("; ".join(problems))

    def scaled(self, factor: float) -> TextOverlay:
        """Return a copy with the font size scaled for a preview render."""
        return replace(
            self, font_size=max(1, round_half_up(self.font_size * factor)),
        )


def default_text_overlay() -> TextOverlay:
    """Return the overlay a new label starts from."""
    return TextOverlay(
        text=DEFAULT_OVERLAY_TEXT,
        x=0.5,
        y=0.5,
        font_family=DEFAULT_FONT_FAMILY,
        font_size=DEFAULT_FONT_SIZE,
        font_weight=DEFAULT_FONT_WEIGHT,
        color=DEFAULT_TEXT_COLOR,
        align=DEFAULT_TEXT_ALIGN,
    )


def validate_text_overlay(
    overlay: TextOverlay,
    *,
    min_font_size: int = FONT_SIZE_MIN,
    max_font_size: int | None = FONT_SIZE_MAX,
) -> list[str]:
    """Return human readable problems with ``overlay``; empty when valid."""
    errors: list[str] = []
    if not overlay.text or not overlay.text.strip():
        errors.append("Text content is required")
    if max_font_size is None:
        if overlay.font_size < min_font_size:
            errors.append(f"Font size must be at least {min_font_size}")
    elif not min_font_size <= overlay.font_size <= max_font_size:
        errors.append(
            f"Font size must be between {min_font_size} and {max_font_size}",
        )
    if not 0 <= overlay.x <= 1:
        errors.append("X position must be between 0 and 1")
    if not 0 <= overlay.y <= 1:
        errors.append("Y position must be between 0 and 1")
    if overlay.align not in TEXT_ALIGNS:
        errors.append("Alignment must be left, center or right")
    colors = [("Text color", overlay.color)]
    if overlay.shadow is not None:
        colors.append(("Shadow color", overlay.shadow.color))
    if overlay.stroke is not None:
        colors.append(("Stroke color", overlay.stroke.color))
    for label, value in colors:
        try:
            parse_hex_color(value)
        except ValueError:
            errors.append(f"{label} must look like #rrggbb, got {value!r}")
    return errors


def anchor_point(overlay: TextOverlay, width: int, height: int) -> Size:
    """Return the absolute anchor of ``overlay`` on a canvas."""
    return round_half_up(overlay.x * width), round_half_up(overlay.y * height)


def text_anchor(align: TextAlign) -> str:
    """Map an alignment to an SVG ``text-anchor`` value."""
    return _TEXT_ANCHORS.get(align, "start")


def font_stack(font_family: str) -> str:
    """Map a font name to a CSS family list with generic fallbacks."""
    return _FONT_STACKS.get(font_family, _FALLBACK_STACK)


# --------------------------
# Vector backend
# --------------------------

def shadow_filter() -> ET.Element:
    """Return the Gaussian blur filter referenced by shadow text."""
    flt = svg_element(
        "filter", id=SHADOW_FILTER_ID,
        x="-50%", y="-50%", width="200%", height="200%",
    )
    blur = svg_element(
        "feGaussianBlur", flt, stdDeviation=SHADOW_STD_DEVIATION,
    )
    blur.set("in", "SourceGraphic")
    return flt


def svg_text_elements(
    overlay: TextOverlay,
    width: int,
    height: int,
) -> list[ET.Element]:
    """Return the shadow, stroke and fill ``<text>`` elements in order."""
    abs_x, abs_y = anchor_point(overlay, width, height)
    common = {
        "font_family": font_stack(overlay.font_family),
        "font_size": overlay.font_size,
        "font_weight": overlay.font_weight,
        "text_anchor": text_anchor(overlay.align),
    }
    elements: list[ET.Element] = []

    if overlay.shadow is not None:
        elements.append(svg_element(
            "text",
            x=abs_x + overlay.shadow.offset_x,
            y=abs_y + overlay.shadow.offset_y,
            fill=css_rgba(overlay.shadow.color, SHADOW_ALPHA),
            filter=f"url(#{SHADOW_FILTER_ID})",
            **common,
        ))

    if overlay.stroke is not None and overlay.stroke.width > 0:
        elements.append(svg_element(
            "text",
            x=abs_x,
            y=abs_y,
            fill="none",
            stroke=overlay.stroke.color,
            stroke_width=overlay.stroke.width,
            **common,
        ))

    elements.append(svg_element(
        "text", x=abs_x, y=abs_y, fill=overlay.color, **common,
    ))
    for element in elements:
        element.text = overlay.text
    return elements


def overlay_svg(
    overlays: Sequence[TextOverlay],
    width: int,
    height: int,
) -> SvgDocument:
    """Build a standalone SVG holding only the text overlays."""
    doc = SvgDocument.create(width, height)
    defs = svg_element("defs", doc.root)
    defs.append(shadow_filter())
    for overlay in overlays:
        doc.root.extend(svg_text_elements(overlay, width, height))
    return doc


# --------------------------
# Raster backend
# --------------------------

@lru_cache(maxsize=32)
def _get_font(
    font_family: str,
    font_weight: str,
    px: int,
) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a font for a family and weight with fallback; cached."""
    bold = font_weight == "bold"
    candidates: list[str] = []
    if font_family in _FONT_FILES:
        candidates.append(_FONT_FILES[font_family][bold])
    candidates.append(_DEJAVU_FILES[bold])
    for name in candidates:
        try:
            return ImageFont.truetype(name, px)
        except OSError:
            continue
    return ImageFont.load_default(size=px)


def _text_options(
    overlay: TextOverlay,
) -> dict[str, ImageFont.FreeTypeFont | ImageFont.ImageFont | str]:
    """Return font and anchor keyword arguments for ``ImageDraw.text``."""
    font = _get_font(overlay.font_family, overlay.font_weight, overlay.font_size)
    options: dict[str, ImageFont.FreeTypeFont | ImageFont.ImageFont | str] = {
        "font": font,
    }
    # bitmap fonts cannot anchor; they draw from the top left
    if isinstance(font, ImageFont.FreeTypeFont):
        options["anchor"] = _PIL_ANCHORS.get(overlay.align, "ls")
    return options


def _text_mask(
    size: Size,
    overlay: TextOverlay,
    xy: Size,
    stroke_width: int = 0,
) -> Image.Image:
    """Render the glyph coverage of ``overlay`` into an ``L`` mask."""
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).text(
        xy,
        overlay.text,
        fill=255,
        stroke_width=stroke_width,
        stroke_fill=255,
        **_text_options(overlay),  # type: ignore[arg-type]
    )
    return mask


def _color_layer(
    size: Size,
    rgba: tuple[int, int, int, int],
    mask: Image.Image,
) -> Image.Image:
    """Return a solid colour layer whose alpha is ``mask`` scaled by alpha."""
    layer = Image.new(COLOR_MODE_RGBA, size, (*rgba[:3], 0))
    alpha = mask.point(lambda v: v * rgba[3] // 255)
    layer.putalpha(alpha)
    return layer


def _overlay_layer(size: Size, overlay: TextOverlay) -> Image.Image:
    """Draw the shadow, stroke and fill layers of one overlay."""
    layer = Image.new(COLOR_MODE_RGBA, size, COLOR_TRANSPARENT)
    xy = anchor_point(overlay, *size)

    if overlay.shadow is not None:
        shadow_xy = (xy[0] + overlay.shadow.offset_x,
                     xy[1] + overlay.shadow.offset_y)
        shadow = _color_layer(
            size,
            rgba_with_alpha(overlay.shadow.color, SHADOW_ALPHA),
            _text_mask(size, overlay, shadow_xy),
        ).filter(ImageFilter.GaussianBlur(radius=SHADOW_STD_DEVIATION))
        layer = Image.alpha_composite(layer, shadow)

    if overlay.stroke is not None and overlay.stroke.width > 0:
        # SVG strokes straddle the outline; only the outer half shows
        half = max(1, round_half_up(overlay.stroke.width / 2))
        ring = ImageChops.subtract(
            _text_mask(size, overlay, xy, stroke_width=half),
            _text_mask(size, overlay, xy),
        )
        stroke = _color_layer(
            size, (*parse_hex_color(overlay.stroke.color), 255), ring,
        )
        layer = Image.alpha_composite(layer, stroke)

    fill = _color_layer(
        size,
        (*parse_hex_color(overlay.color), 255),
        _text_mask(size, overlay, xy),
    )
    return Image.alpha_composite(layer, fill)


def render_overlays(
    buffer: Image.Image,
    overlays: Sequence[TextOverlay],
) -> Image.Image:
    """
    Composite text overlays onto a copy of a raster grid.

    The overlays are sized against the buffer's own dimensions, which
    are the final canvas dimensions of the grid.
    """
    if not overlays:
        return buffer
    result = buffer.convert(COLOR_MODE_RGBA)
    for overlay in overlays:
        result = Image.alpha_composite(
            result, _overlay_layer(result.size, overlay),
        )
    return result

"""
Small shared helpers for colour parsing and pixel rounding.

Colours travel through the engine as the caller supplied them (hex
strings) so the vector backend can emit them verbatim; the raster
backend converts them with :func:`parse_hex_color`.
"""
from __future__ import annotations

import math

from grid_composer.constants import COLOR_TRANSPARENT, TRANSPARENT
from grid_composer.type_defs import RGB, RGBA

_SHORT_HEX_LENGTH = 3
_HEX_RGB_LENGTH = 6


def parse_hex_color(text: str) -> RGB:
    """Parse ``#rgb`` or ``#rrggbb`` strings into RGB triples."""
    stripped = text.strip().lstrip("#")
    if len(stripped) == _SHORT_HEX_LENGTH:
        stripped = "".join(ch * 2 for ch in stripped)
    if len(stripped) != _HEX_RGB_LENGTH:
        msg = f"color must look like #rrggbb, got {text!r}"
        raise ValueError(msg)
    try:
        red = int(stripped[0:2], 16)
        green = int(stripped[2:4], 16)
        blue = int(stripped[4:6], 16)
    except ValueError as exc:
        msg = f"color {text!r} contains invalid hex digits"
        raise ValueError(msg) from exc
    return red, green, blue


def is_transparent(color: str) -> bool:
    """Return True for the ``transparent`` background keyword."""
    return color.strip().lower() == TRANSPARENT


def background_rgba(color: str) -> RGBA:
    """Return the RGBA fill for a canvas background colour."""
    if is_transparent(color):
        return COLOR_TRANSPARENT
    return (*parse_hex_color(color), 255)


def rgba_with_alpha(color: str, alpha: float) -> RGBA:
    """Return ``color`` as RGBA with a fractional alpha in [0, 1]."""
    return (*parse_hex_color(color), round_half_up(alpha * 255))


def css_rgba(color: str, alpha: float) -> str:
    """Format ``color`` as a CSS ``rgba()`` string for SVG output."""
    red, green, blue = parse_hex_color(color)
    return f"rgba({red},{green},{blue},{alpha:g})"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)


def format_number(value: float) -> str:
    """Format a coordinate for SVG attributes without trailing zeros."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")

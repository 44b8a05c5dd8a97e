"""
Defines shared type aliases for the grid composer.

Centralizes reusable type hints to improve consistency and readability.
"""
from __future__ import annotations

from typing import Literal

ImageFit = Literal["cover", "contain", "fill"]
FontWeight = Literal["normal", "bold"]
TextAlign = Literal["left", "center", "right"]
OutputFormat = Literal["png", "jpg", "webp", "svg"]
RGB = tuple[int, int, int]
RGBA = tuple[int, int, int, int]
Size = tuple[int, int]

IMAGE_FITS: tuple[ImageFit, ...] = ("cover", "contain", "fill")
TEXT_ALIGNS: tuple[TextAlign, ...] = ("left", "center", "right")
OUTPUT_FORMATS: tuple[OutputFormat, ...] = ("png", "jpg", "webp", "svg")

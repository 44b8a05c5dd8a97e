"""Named canvas resolutions and grid shapes offered to users."""

from __future__ import annotations

from grid_composer.config_defaults import (
    DEFAULT_COLS,
    DEFAULT_HEIGHT,
    DEFAULT_ROWS,
    DEFAULT_WIDTH,
)

# name -> (width, height)
RESOLUTION_PRESETS: dict[str, tuple[int, int]] = {
    "1080x1080": (1080, 1080),
    "1920x1080": (1920, 1080),
    "1080x1920": (1080, 1920),
    "1200x628": (1200, 628),
}

# name is "<rows>x<cols>"; value is (rows, cols)
LAYOUT_PRESETS: dict[str, tuple[int, int]] = {
    "1x2": (1, 2),
    "2x1": (2, 1),
    "2x2": (2, 2),
    "2x3": (2, 3),
    "3x2": (3, 2),
    "3x3": (3, 3),
    "4x4": (4, 4),
}


def get_preset_dimensions(name: str) -> tuple[int, int]:
    """Return (width, height) for a resolution preset, default square."""
    return RESOLUTION_PRESETS.get(name, (DEFAULT_WIDTH, DEFAULT_HEIGHT))


def get_layout_preset(name: str) -> tuple[int, int]:
    """Return (rows, cols) for a layout preset, default 2x2."""
    return LAYOUT_PRESETS.get(name, (DEFAULT_ROWS, DEFAULT_COLS))

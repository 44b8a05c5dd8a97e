"""
Constants used internally by the grid composer.

These are implementation-level values that should not be overridden
via config files or CLI arguments.
"""

# Internal color constants
COLOR_MODE_RGB = "RGB"
COLOR_MODE_RGBA = "RGBA"
COLOR_WHITE = (255, 255, 255)
COLOR_TRANSPARENT = (0, 0, 0, 0)
TRANSPARENT = "transparent"

# Cells never collapse below one pixel
MIN_CELL_PX = 1

# Text shadow rendering
SHADOW_ALPHA = 0.5
SHADOW_STD_DEVIATION = 2
SHADOW_FILTER_ID = "shadow-blur"

# SVG output
SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"
SVG_EMBED_MIME = "image/png"

# Overlay validation bounds
FONT_SIZE_MIN = 8
FONT_SIZE_MAX = 500

# Export
QUALITY_MIN = 1
QUALITY_MAX = 100
MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "svg": "image/svg+xml",
}

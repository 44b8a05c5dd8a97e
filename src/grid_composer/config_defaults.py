"""Shared default values for user-facing configuration settings."""
from grid_composer.type_defs import FontWeight, ImageFit, OutputFormat, TextAlign

# Grid
DEFAULT_COLS = 2
DEFAULT_ROWS = 2
DEFAULT_WIDTH = 1080
DEFAULT_HEIGHT = 1080
DEFAULT_PADDING = 20
DEFAULT_BACKGROUND_COLOR = "#ffffff"
DEFAULT_BORDER_WIDTH = 0
DEFAULT_BORDER_COLOR = "#000000"
DEFAULT_CORNER_RADIUS = 0
DEFAULT_IMAGE_FIT: ImageFit = "cover"

# Text overlays
DEFAULT_OVERLAY_TEXT = "New Text"
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_FONT_SIZE = 48
DEFAULT_FONT_WEIGHT: FontWeight = "bold"
DEFAULT_TEXT_COLOR = "#ffffff"
DEFAULT_TEXT_ALIGN: TextAlign = "center"

# Output
DEFAULT_OUTPUT_FORMAT: OutputFormat = "png"
DEFAULT_QUALITY = 90
DEFAULT_OUTPUT_DIR = "out"

# Preview renders at half the configured size
DEFAULT_PREVIEW_FACTOR = 0.5

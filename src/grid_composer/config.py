"""
Configuration schema and loader for the grid composer.

Defines Pydantic models representing structured configuration sections
and a TOML-based config loader with validation support. The models
convert into the immutable engine types used by the backends.
"""

from pathlib import Path

import tomlkit
from pydantic import BaseModel, Field, field_validator

from grid_composer.config_defaults import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_BORDER_COLOR,
    DEFAULT_BORDER_WIDTH,
    DEFAULT_COLS,
    DEFAULT_CORNER_RADIUS,
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_FONT_WEIGHT,
    DEFAULT_HEIGHT,
    DEFAULT_IMAGE_FIT,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_PADDING,
    DEFAULT_QUALITY,
    DEFAULT_ROWS,
    DEFAULT_TEXT_ALIGN,
    DEFAULT_TEXT_COLOR,
    DEFAULT_WIDTH,
)
from grid_composer.constants import (
    FONT_SIZE_MAX,
    FONT_SIZE_MIN,
    QUALITY_MAX,
    QUALITY_MIN,
)
from grid_composer.image_grid.geometry import GridSpec
from grid_composer.image_grid.overlays import (
    TextOverlay,
    TextShadow,
    TextStroke,
)
from grid_composer.presets import get_layout_preset, get_preset_dimensions
from grid_composer.type_defs import (
    FontWeight,
    ImageFit,
    OutputFormat,
    TextAlign,
)
from grid_composer.utils import is_transparent, parse_hex_color


def _hex_color(value: str) -> str:
    parse_hex_color(value)
    return value


def _background_color(value: str) -> str:
    """Accept ``transparent`` as well as a hex colour."""
    if is_transparent(value):
        return value
    return _hex_color(value)


class GridConfig(BaseModel):
    """
    Control grid shape, canvas size, and cell framing.

    ``layout`` and ``resolution`` name presets; when set they take
    precedence over the explicit rows/cols and width/height values.
    """

    cols: int = Field(DEFAULT_COLS, ge=1)
    rows: int = Field(DEFAULT_ROWS, ge=1)
    width: int = Field(DEFAULT_WIDTH, ge=1)
    height: int = Field(DEFAULT_HEIGHT, ge=1)
    layout: str | None = None
    resolution: str | None = None
    padding: int = Field(DEFAULT_PADDING, ge=0)
    background_color: str = DEFAULT_BACKGROUND_COLOR
    border_width: int = Field(DEFAULT_BORDER_WIDTH, ge=0)
    border_color: str = DEFAULT_BORDER_COLOR
    corner_radius: int = Field(DEFAULT_CORNER_RADIUS, ge=0)
    image_fit: ImageFit = Field(DEFAULT_IMAGE_FIT)

    check_background = field_validator("background_color")(_background_color)
    check_border = field_validator("border_color")(_hex_color)

    def to_spec(self) -> GridSpec:
        """Resolve presets and build the engine ``GridSpec``."""
        rows, cols = self.rows, self.cols
        if self.layout is not None:
            rows, cols = get_layout_preset(self.layout)
        width, height = self.width, self.height
        if self.resolution is not None:
            width, height = get_preset_dimensions(self.resolution)
        return GridSpec(
            cols=cols,
            rows=rows,
            canvas_width=width,
            canvas_height=height,
            padding=self.padding,
            background_color=self.background_color,
            border_width=self.border_width,
            border_color=self.border_color,
            corner_radius=self.corner_radius,
            image_fit=self.image_fit,
        )


class ShadowConfig(BaseModel):
    """Drop shadow settings for a text overlay."""

    color: str = "#000000"
    blur_radius: int = Field(4, ge=0)
    offset_x: int = 2
    offset_y: int = 2

    check_color = field_validator("color")(_hex_color)


class StrokeConfig(BaseModel):
    """Outline settings for a text overlay."""

    color: str = "#000000"
    width: int = Field(2, ge=0)

    check_color = field_validator("color")(_hex_color)


class TextOverlayConfig(BaseModel):
    """One text label positioned by fractions of the canvas size."""

    text: str = Field(min_length=1)
    x: float = Field(0.5, ge=0.0, le=1.0)
    y: float = Field(0.5, ge=0.0, le=1.0)
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: int = Field(DEFAULT_FONT_SIZE, ge=FONT_SIZE_MIN, le=FONT_SIZE_MAX)
    font_weight: FontWeight = Field(DEFAULT_FONT_WEIGHT)
    color: str = DEFAULT_TEXT_COLOR
    align: TextAlign = Field(DEFAULT_TEXT_ALIGN)
    shadow: ShadowConfig | None = None
    stroke: StrokeConfig | None = None

    check_color = field_validator("color")(_hex_color)

    def to_overlay(self) -> TextOverlay:
        """Build the engine ``TextOverlay``."""
        return TextOverlay(
            text=self.text,
            x=self.x,
            y=self.y,
            font_family=self.font_family,
            font_size=self.font_size,
            font_weight=self.font_weight,
            color=self.color,
            align=self.align,
            shadow=(
                TextShadow(**self.shadow.model_dump())
                if self.shadow is not None else None
            ),
            stroke=(
                TextStroke(**self.stroke.model_dump())
                if self.stroke is not None else None
            ),
        )


class OutputConfig(BaseModel):
    """Configure output encoding and destination."""

    format: OutputFormat = Field(DEFAULT_OUTPUT_FORMAT)
    quality: int = Field(DEFAULT_QUALITY, ge=QUALITY_MIN, le=QUALITY_MAX)
    output: str = Field(DEFAULT_OUTPUT_DIR)
    path: str | None = None
    max_workers: int | None = Field(None, ge=1)


class GridComposerConfig(BaseModel):
    """
    Root configuration object combining all supported sections.

    Mirrors the structure of a grid TOML file: ``[grid]``,
    ``[[overlays]]`` and ``[output]``.
    """

    grid: GridConfig = Field(
        default_factory=lambda: GridConfig.model_validate({}),
    )
    overlays: list[TextOverlayConfig] = Field(default_factory=list)
    output: OutputConfig = Field(
        default_factory=lambda: OutputConfig.model_validate({}),
    )

    def text_overlays(self) -> list[TextOverlay]:
        """Return the configured overlays as engine objects."""
        return [overlay.to_overlay() for overlay in self.overlays]


class ConfigLoader:
    """
    Loads and parses a TOML configuration file into a typed config object.

    Falls back to defaults for any missing subsections or fields.
    """

    @staticmethod
    def load(path: str) -> GridComposerConfig:
        """
        Load a grid configuration from a TOML file.

        Returns a validated GridComposerConfig instance based on the file
        contents.
        """
        config_path = Path(path)
        if not config_path.is_file():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        with config_path.open("r", encoding="utf-8") as f:
            doc = tomlkit.load(f)

        return GridComposerConfig.model_validate(doc.unwrap())

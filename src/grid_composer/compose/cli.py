"""Command-line entry point for grid rendering."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import ValidationError

from grid_composer.compose.api import (
    GridRenderOptions,
    non_negative_int,
    positive_int,
    render_grid,
    size_2d,
    text_position,
)
from grid_composer.config import (
    ConfigLoader,
    GridComposerConfig,
    GridConfig,
    OutputConfig,
    TextOverlayConfig,
)
from grid_composer.config_defaults import DEFAULT_PREVIEW_FACTOR
from grid_composer.errors import GridComposerError
from grid_composer.logging_utils import logger, set_verbosity
from grid_composer.presets import LAYOUT_PRESETS, RESOLUTION_PRESETS
from grid_composer.runtime.version import resolve_project_version
from grid_composer.type_defs import IMAGE_FITS, OUTPUT_FORMATS

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence

T = TypeVar("T")


def _wrap_validator(
    validator: Callable[[str], T],
    error_cls: type[argparse.ArgumentTypeError] = argparse.ArgumentTypeError,
) -> Callable[[str], T]:
    """Convert ``ValueError`` from a validator into ``ArgumentTypeError``."""

    def wrapper(text: str) -> T:
        try:
            return validator(text)
        except ValueError as exc:
            raise error_cls(str(exc)) from exc

    return wrapper


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser for the grid tool."""
    parser = argparse.ArgumentParser(
        description=(
            "Lay out images in a row/column grid and export it as PNG, "
            "JPEG, WebP or SVG."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  grid-composer a.jpg b.jpg c.jpg --layout 2x2 --out grid.png\n"
            "  grid-composer *.png --config grid.toml --format svg\n"
            "  grid-composer a.jpg b.jpg --text 'Hello@0.5,0.9' --fit contain"
        ),
    )
    parser.add_argument("images", nargs="+", type=Path,
                        help="Source images in placement order")
    parser.add_argument("--config", type=str, default=None,
                        help="TOML file with [grid], [[overlays]], [output]")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {resolve_project_version()}")

    grid = parser.add_argument_group("grid")
    grid.add_argument("--layout", choices=list(LAYOUT_PRESETS), default=None,
                      help="Rows x cols preset")
    grid.add_argument("--resolution", choices=list(RESOLUTION_PRESETS),
                      default=None, help="Canvas size preset")
    grid.add_argument("--cols", type=_wrap_validator(positive_int),
                      default=None)
    grid.add_argument("--rows", type=_wrap_validator(positive_int),
                      default=None)
    grid.add_argument("--size", type=_wrap_validator(size_2d), default=None,
                      help="Configured canvas size as WxH, e.g., 1080x1080")
    grid.add_argument("--padding", type=_wrap_validator(non_negative_int),
                      default=None)
    grid.add_argument("--background", type=str, default=None,
                      help="Background as #rrggbb or 'transparent'")
    grid.add_argument("--border-width",
                      type=_wrap_validator(non_negative_int), default=None)
    grid.add_argument("--border-color", type=str, default=None)
    grid.add_argument("--corner-radius",
                      type=_wrap_validator(non_negative_int), default=None)
    grid.add_argument("--fit", choices=list(IMAGE_FITS), default=None)

    text = parser.add_argument_group("text")
    text.add_argument(
        "--text",
        action="append",
        type=_wrap_validator(text_position),
        default=[],
        metavar="TEXT@X,Y",
        help="Add a centred label at fractional canvas position X,Y",
    )

    output = parser.add_argument_group("output")
    output.add_argument("--format", choices=list(OUTPUT_FORMATS),
                        default=None)
    output.add_argument("--quality", type=_wrap_validator(positive_int),
                        default=None)
    output.add_argument("--out", type=Path, default=None)
    output.add_argument("--workers", type=_wrap_validator(positive_int),
                        default=None, help="Fit cells in parallel")
    output.add_argument("--preview", action="store_true",
                        help="Render at half size")
    output.add_argument("--verbose", action="store_true")
    return parser


def _grid_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Collect grid fields given on the command line."""
    overrides: dict[str, Any] = {}
    if args.cols is not None or args.rows is not None:
        overrides["layout"] = None
    if args.size is not None:
        overrides["resolution"] = None
        overrides["width"], overrides["height"] = args.size
    simple = {
        "layout": args.layout,
        "resolution": args.resolution,
        "cols": args.cols,
        "rows": args.rows,
        "padding": args.padding,
        "background_color": args.background,
        "border_width": args.border_width,
        "border_color": args.border_color,
        "corner_radius": args.corner_radius,
        "image_fit": args.fit,
    }
    overrides.update({k: v for k, v in simple.items() if v is not None})
    return overrides


def merge_config(
    config: GridComposerConfig,
    args: argparse.Namespace,
) -> GridComposerConfig:
    """Return ``config`` with command-line values taking precedence."""
    grid = GridConfig.model_validate(
        {**config.grid.model_dump(), **_grid_overrides(args)},
    )
    overlays = [
        *config.overlays,
        *(TextOverlayConfig(text=label, x=x, y=y)
          for label, x, y in args.text),
    ]
    output_data = config.output.model_dump()
    if args.format is not None:
        output_data["format"] = args.format
    if args.quality is not None:
        output_data["quality"] = args.quality
    if args.out is not None:
        output_data["path"] = str(args.out)
    if args.workers is not None:
        output_data["max_workers"] = args.workers
    return GridComposerConfig(
        grid=grid,
        overlays=overlays,
        output=OutputConfig.model_validate(output_data),
    )


def build_options(
    config: GridComposerConfig,
    images: Sequence[Path],
    *,
    preview: bool = False,
) -> GridRenderOptions:
    """Map a merged configuration to :class:`GridRenderOptions`."""
    spec = config.grid.to_spec()
    overlays = config.text_overlays()
    if preview:
        spec = spec.scaled_for_preview()
        overlays = [
            overlay.scaled(DEFAULT_PREVIEW_FACTOR) for overlay in overlays
        ]
    out = config.output
    return GridRenderOptions(
        image_paths=list(images),
        spec=spec,
        overlays=overlays,
        output_format=out.format,
        quality=out.quality,
        out_path=Path(out.path) if out.path else None,
        out_dir=Path(out.output),
        max_workers=out.max_workers,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Parse command-line arguments and render the grid."""
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbosity(verbose=args.verbose)

    try:
        config = (
            ConfigLoader.load(args.config)
            if args.config
            else GridComposerConfig.model_validate({})
        )
        options = build_options(
            merge_config(config, args), args.images, preview=args.preview,
        )
        render_grid(options)
    except (GridComposerError, FileNotFoundError, ValidationError) as exc:
        logger.error("Grid generation failed: %s", exc)
        parser.error(str(exc))

    return 0


__all__ = ["build_options", "build_parser", "main", "merge_config"]

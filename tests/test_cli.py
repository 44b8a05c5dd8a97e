"""
Tests for the command-line interface and the request-level API.

These tests verify argument parsing, config precedence, option
validation and end to end rendering through ``main``.
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pytest
from PIL import Image
from pytest_mock import MockerFixture

import grid_composer.compose.api as gc_api
import grid_composer.compose.cli as gc_cli
from grid_composer.config import GridComposerConfig
from grid_composer.errors import ConfigError
from grid_composer.image_grid import GridSpec, SourceImage, TextOverlay

GRID_ARGS = ["--cols", "2", "--rows", "2", "--size", "200x200",
             "--padding", "10"]


def _argv(images: list[Path], *extra: str) -> list[str]:
    return [*(str(p) for p in images), *GRID_ARGS, *extra]


class TestArgumentParsing:
    def test_flags_are_parsed(self) -> None:
        parser = gc_cli.build_parser()
        args = parser.parse_args([
            "a.png", "b.png",
            "--layout", "3x3",
            "--size", "640x480",
            "--fit", "contain",
            "--text", "Hello@0.25,0.75",
            "--text", "Centre",
            "--format", "svg",
            "--workers", "2",
            "--preview",
        ])
        assert args.images == [Path("a.png"), Path("b.png")]
        assert args.layout == "3x3"
        assert args.size == (640, 480)
        assert args.fit == "contain"
        assert args.text == [("Hello", 0.25, 0.75), ("Centre", 0.5, 0.5)]
        assert args.format == "svg"
        assert args.workers == 2  # noqa: PLR2004
        assert args.preview is True

    @pytest.mark.parametrize(
        "bad_args",
        [
            [],
            ["a.png", "--cols", "0"],
            ["a.png", "--padding", "-1"],
            ["a.png", "--size", "100"],
            ["a.png", "--text", "Hi@2,0"],
            ["a.png", "--fit", "stretch"],
        ],
    )
    def test_invalid_arguments_exit(self, bad_args: list[str]) -> None:
        parser = gc_cli.build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(bad_args)

    def test_wrap_validator_converts_value_error(self) -> None:
        wrapped = gc_cli._wrap_validator(gc_api.positive_int)  # noqa: SLF001
        assert wrapped("3") == 3  # noqa: PLR2004
        with pytest.raises(argparse.ArgumentTypeError, match="positive"):
            wrapped("0")


class TestMergeConfig:
    def test_cli_values_take_precedence(self) -> None:
        config = GridComposerConfig.model_validate({
            "grid": {"layout": "3x3", "padding": 30},
            "overlays": [{"text": "From file"}],
            "output": {"format": "jpg", "quality": 70},
        })
        args = gc_cli.build_parser().parse_args([
            "a.png", "--cols", "4", "--quality", "55", "--text", "Extra",
        ])
        merged = gc_cli.merge_config(config, args)
        spec = merged.grid.to_spec()
        assert (spec.cols, spec.rows) == (4, 2)
        assert spec.padding == 30  # noqa: PLR2004
        assert [o.text for o in merged.overlays] == ["From file", "Extra"]
        assert merged.output.format == "jpg"
        assert merged.output.quality == 55  # noqa: PLR2004

    def test_size_clears_resolution_preset(self) -> None:
        config = GridComposerConfig.model_validate(
            {"grid": {"resolution": "1920x1080"}},
        )
        args = gc_cli.build_parser().parse_args(["a.png", "--size", "300x200"])
        spec = gc_cli.merge_config(config, args).grid.to_spec()
        assert (spec.canvas_width, spec.canvas_height) == (300, 200)

    def test_build_options_preview_scales(self, tmp_path: Path) -> None:
        config = GridComposerConfig.model_validate({
            "grid": {"width": 400, "height": 300, "padding": 11},
            "overlays": [{"text": "x", "font_size": 40}],
            "output": {"output": str(tmp_path)},
        })
        options = gc_cli.build_options(config, [Path("a.png")], preview=True)
        assert (options.spec.canvas_width, options.spec.canvas_height) == (
            200, 150,
        )
        assert options.spec.padding == 6  # noqa: PLR2004
        assert options.overlays[0].font_size == 20  # noqa: PLR2004
        assert options.out_path is None
        assert options.out_dir == tmp_path


@pytest.mark.visual
class TestMain:
    def test_forwards_options_to_render(
        self, image_files: list[Path], mocker: MockerFixture,
    ) -> None:
        render = mocker.patch.object(gc_cli, "render_grid")
        gc_cli.main(_argv(image_files, "--format", "webp", "--workers", "3"))
        (options,), _ = render.call_args
        assert options.image_paths == image_files
        assert options.output_format == "webp"
        assert options.max_workers == 3  # noqa: PLR2004
        assert options.spec.capacity == 4  # noqa: PLR2004

    def test_writes_png(self, image_files: list[Path], tmp_path: Path) -> None:
        out = tmp_path / "grid.png"
        assert gc_cli.main(_argv(image_files, "--out", str(out))) == 0
        with Image.open(out) as grid:
            assert grid.size == (200, 200)
            assert grid.convert("RGBA").getpixel((52, 52)) == (255, 0, 0, 255)

    def test_writes_svg_with_text(
        self, image_files: list[Path], tmp_path: Path,
    ) -> None:
        out = tmp_path / "grid.svg"
        gc_cli.main(_argv(
            image_files, "--format", "svg", "--text", "Caption@0.5,0.9",
            "--out", str(out),
        ))
        text = out.read_text(encoding="utf-8")
        assert text.startswith("<svg")
        assert 'width="200"' in text
        assert ">Caption</text>" in text

    def test_default_name_from_config(
        self, image_files: list[Path], tmp_path: Path,
    ) -> None:
        out_dir = tmp_path / "renders"
        config_path = tmp_path / "grid.toml"
        config_path.write_text(
            f"[output]\noutput = '{out_dir.as_posix()}'\nformat = 'jpg'\n",
            encoding="utf-8",
        )
        gc_cli.main(_argv(image_files, "--config", str(config_path)))
        expected = out_dir / "grid_2x2_200x200_3img.jpg"
        with Image.open(expected) as grid:
            assert grid.format == "JPEG"

    def test_preview_halves_canvas(
        self, image_files: list[Path], tmp_path: Path,
    ) -> None:
        out = tmp_path / "preview.png"
        gc_cli.main(_argv(image_files, "--preview", "--out", str(out)))
        with Image.open(out) as grid:
            # 100 px wide, 5 px padding, 42 px cells over two rows
            assert grid.size == (100, 99)

    def test_missing_image_exits(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with pytest.raises(SystemExit) as excinfo:
            gc_cli.main([str(tmp_path / "nope.png")])
        assert excinfo.value.code == 2  # noqa: PLR2004
        assert "Image not found" in caplog.text

    def test_undecodable_image_exits(self, tmp_path: Path) -> None:
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"not an image")
        with pytest.raises(SystemExit):
            gc_cli.main([str(broken), "--out", str(tmp_path / "g.png")])
        assert not (tmp_path / "g.png").exists()

    @pytest.mark.parametrize("fmt", ["png", "svg"])
    def test_bad_overlay_color_exits(
        self,
        image_files: list[Path],
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
        fmt: str,
    ) -> None:
        config_path = tmp_path / "grid.toml"
        config_path.write_text(
            "[[overlays]]\ntext = 'Sale'\ncolor = 'red'\n",
            encoding="utf-8",
        )
        out = tmp_path / f"grid.{fmt}"
        with pytest.raises(SystemExit) as excinfo:
            gc_cli.main(_argv(
                image_files, "--config", str(config_path),
                "--format", fmt, "--out", str(out),
            ))
        assert excinfo.value.code == 2  # noqa: PLR2004
        assert "color must look like" in caplog.text
        assert not out.exists()


class TestApiValidators:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Title@0,1", ("Title", 0.0, 1.0)),
            ("a@b@0.5,0.5", ("a@b", 0.5, 0.5)),
            ("No position", ("No position", 0.5, 0.5)),
        ],
    )
    def test_text_position(
        self, text: str, expected: tuple[str, float, float],
    ) -> None:
        assert gc_api.text_position(text) == expected

    @pytest.mark.parametrize("text", ["x@1", "x@a,b", "x@1.5,0"])
    def test_text_position_rejects(self, text: str) -> None:
        with pytest.raises(ValueError, match="X"):
            gc_api.text_position(text)

    def test_size_2d(self) -> None:
        assert gc_api.size_2d("1920X1080") == (1920, 1080)
        for bad in ("1920", "ax2", "0x10"):
            with pytest.raises(ValueError):
                gc_api.size_2d(bad)

    def test_int_validators(self) -> None:
        assert gc_api.non_negative_int("0") == 0
        with pytest.raises(ValueError, match="negative"):
            gc_api.non_negative_int("-2")
        with pytest.raises(ValueError, match="integer"):
            gc_api.positive_int("two")


class TestApiRendering:
    def test_load_sources_keeps_list_order(
        self, image_files: list[Path],
    ) -> None:
        sources = gc_api.load_sources(list(reversed(image_files)))
        assert [s.order for s in sources] == [0, 1, 2]
        assert sources[0].ref == str(image_files[-1])

    def test_render_grid_requires_images(self, small_spec: GridSpec) -> None:
        options = gc_api.GridRenderOptions(image_paths=[], spec=small_spec)
        with pytest.raises(ConfigError):
            gc_api.render_grid(options)

    def test_render_grid_bytes_svg(
        self,
        small_spec: GridSpec,
        rgb_sources: list[SourceImage],
    ) -> None:
        payload = gc_api.render_grid_bytes(
            rgb_sources, small_spec, [TextOverlay(text="t")], "svg",
        )
        assert payload.startswith(b"<svg")
        assert b"<text" in payload

    def test_render_preview(
        self,
        small_spec: GridSpec,
        rgb_sources: list[SourceImage],
    ) -> None:
        preview = gc_api.render_preview(
            rgb_sources, small_spec, [TextOverlay(text="t", font_size=40)],
        )
        assert preview.data_uri.startswith("data:image/png;base64,")
        assert (preview.width, preview.height) == (100, 99)

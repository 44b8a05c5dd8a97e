"""Tests for colour helpers, rounding, presets and the error types."""

import pytest

from grid_composer import presets, utils
from grid_composer.errors import ConfigError, DecodeError, GridComposerError


class TestColors:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("#ff8000", (255, 128, 0)),
            ("#FFF", (255, 255, 255)),
            ("  #0a0b0c ", (10, 11, 12)),
        ],
    )
    def test_parse_hex_color(
        self, text: str, expected: tuple[int, int, int],
    ) -> None:
        assert utils.parse_hex_color(text) == expected

    @pytest.mark.parametrize("text", ["#12", "#12345", "#gggggg", "red"])
    def test_parse_hex_color_rejects(self, text: str) -> None:
        with pytest.raises(ValueError, match="color"):
            utils.parse_hex_color(text)

    def test_background_rgba(self) -> None:
        assert utils.background_rgba("Transparent") == (0, 0, 0, 0)
        assert utils.background_rgba("#102030") == (16, 32, 48, 255)

    def test_alpha_helpers(self) -> None:
        assert utils.rgba_with_alpha("#000000", 0.5) == (0, 0, 0, 128)
        assert utils.css_rgba("#ff0000", 0.5) == "rgba(255,0,0,0.5)"


def test_round_half_up() -> None:
    assert utils.round_half_up(2.5) == 3  # noqa: PLR2004
    assert utils.round_half_up(3.5) == 4  # noqa: PLR2004
    assert utils.round_half_up(2.49) == 2  # noqa: PLR2004


def test_format_number() -> None:
    assert utils.format_number(12.0) == "12"
    assert utils.format_number(7) == "7"
    assert utils.format_number(11.5) == "11.5"
    assert utils.format_number(1 / 3) == "0.3333"


def test_presets() -> None:
    assert presets.get_preset_dimensions("1080x1920") == (1080, 1920)
    assert presets.get_preset_dimensions("unknown") == (1080, 1080)
    assert presets.get_layout_preset("2x3") == (2, 3)
    assert presets.get_layout_preset("unknown") == (2, 2)


def test_error_taxonomy() -> None:
    assert issubclass(ConfigError, ValueError)
    assert issubclass(ConfigError, GridComposerError)
    err = DecodeError("cat.webp", "truncated")
    assert isinstance(err, GridComposerError)
    assert str(err) == "Could not decode image 'cat.webp': truncated"
    assert str(DecodeError("x.png")) == "Could not decode image 'x.png'"

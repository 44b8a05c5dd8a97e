"""Tests for cell decoding, fitting and framing primitives."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest
from PIL import Image

from grid_composer.errors import ConfigError, DecodeError
from grid_composer.image_grid import core

pytestmark = pytest.mark.visual

CELL = (300, 300)


@pytest.fixture
def wide_red() -> Image.Image:
    """An opaque 600x200 red RGBA image."""
    return Image.new("RGBA", (600, 200), (255, 0, 0, 255))


def _alpha(img: Image.Image) -> np.ndarray:
    return np.asarray(img.getchannel("A"))


class TestDecodeImage:
    def test_decodes_to_rgba(self, make_png: Callable[..., bytes]) -> None:
        img = core.decode_image(make_png((20, 10), "blue"), "blue.png")
        assert img.mode == "RGBA"
        assert img.size == (20, 10)

    def test_garbage_raises_with_reference(self) -> None:
        with pytest.raises(DecodeError) as excinfo:
            core.decode_image(b"definitely not an image", "broken.png")
        assert excinfo.value.ref == "broken.png"
        assert "broken.png" in str(excinfo.value)

    def test_empty_buffer_raises(self) -> None:
        with pytest.raises(DecodeError, match="empty buffer"):
            core.decode_image(b"", "empty.png")


class TestFitCell:
    def test_cover_fills_cell_without_transparency(
        self, wide_red: Image.Image,
    ) -> None:
        cell = core.fit_cell(wide_red, CELL, "cover")
        assert cell.size == CELL
        assert _alpha(cell).min() == 255  # noqa: PLR2004

    def test_contain_letterboxes_on_transparent_cell(
        self, wide_red: Image.Image,
    ) -> None:
        cell = core.fit_cell(wide_red, CELL, "contain")
        alpha = _alpha(cell)
        assert cell.size == CELL
        assert alpha[:100].max() == 0
        assert alpha[100:200].min() == 255  # noqa: PLR2004
        assert alpha[200:].max() == 0
        assert cell.getpixel((150, 150)) == (255, 0, 0, 255)

    def test_fill_stretches_without_cropping(self) -> None:
        # left half red, right half blue; fill keeps both halves
        src = Image.new("RGBA", (600, 200), (255, 0, 0, 255))
        src.paste((0, 0, 255, 255), (300, 0, 600, 200))
        cell = core.fit_cell(src, CELL, "fill")
        assert cell.size == CELL
        assert _alpha(cell).min() == 255  # noqa: PLR2004
        assert cell.getpixel((5, 150))[:3] == (255, 0, 0)
        assert cell.getpixel((295, 150))[:3] == (0, 0, 255)

    def test_unknown_policy_rejected(self, wide_red: Image.Image) -> None:
        with pytest.raises(ConfigError):
            core.fit_cell(wide_red, CELL, "stretch")  # type: ignore[arg-type]

    def test_fit_contain_returns_child_and_offsets(
        self, wide_red: Image.Image,
    ) -> None:
        child, placement = core.fit_contain(wide_red, CELL)
        assert child.size == (300, 100)
        assert (placement.offset_x, placement.offset_y) == (0, 100)


class TestFrameCell:
    def test_rounded_corners_clear_the_corners(self) -> None:
        cell = Image.new("RGBA", (100, 100), (0, 255, 0, 255))
        framed = core.frame_cell(cell, 20, 0, "#000000")
        assert framed.border is None
        assert framed.image.getpixel((0, 0))[3] == 0
        assert framed.image.getpixel((99, 99))[3] == 0
        assert framed.image.getpixel((50, 50)) == (0, 255, 0, 255)
        assert framed.image.getpixel((50, 0))[3] == 255  # noqa: PLR2004

    def test_zero_radius_keeps_image(self) -> None:
        cell = Image.new("RGBA", (10, 10), (0, 0, 255, 255))
        assert core.frame_cell(cell, 0, 0, "#000000").image is cell

    def test_clipping_keeps_existing_transparency(self) -> None:
        cell = Image.new("RGBA", (40, 40), (0, 0, 0, 0))
        framed = core.frame_cell(cell, 5, 0, "#000000")
        assert _alpha(framed.image).max() == 0

    def test_border_overlay_size_and_stroke(self) -> None:
        cell = Image.new("RGBA", (100, 60), (0, 255, 0, 255))
        framed = core.frame_cell(cell, 0, 4, "#ff0000")
        border = framed.border
        assert border is not None
        assert border.size == (108, 68)
        # stroke band is border_width wide and the middle is empty
        assert border.getpixel((0, 34)) == (255, 0, 0, 255)
        assert border.getpixel((3, 34)) == (255, 0, 0, 255)
        assert border.getpixel((4, 34))[3] == 0
        assert border.getpixel((54, 34))[3] == 0

    def test_rounded_border_leaves_outer_corner_empty(self) -> None:
        cell = Image.new("RGBA", (100, 100), (0, 255, 0, 255))
        border = core.frame_cell(cell, 20, 4, "#0000ff").border
        assert border is not None
        assert border.getpixel((0, 0))[3] == 0
        assert border.getpixel((0, 54)) == (0, 0, 255, 255)


def test_rounded_mask_is_l_mode() -> None:
    mask = core.rounded_mask((30, 20), 6)
    assert mask.mode == "L"
    assert mask.size == (30, 20)
    assert mask.getpixel((15, 10)) == 255  # noqa: PLR2004
    assert mask.getpixel((0, 0)) == 0


class TestMapCells:
    def test_serial_and_threaded_keep_order(self) -> None:
        items = list(range(10))
        assert core.map_cells(lambda v: v * 2, items) == [v * 2 for v in items]
        assert core.map_cells(lambda v: v * 2, items, max_workers=4) == [
            v * 2 for v in items
        ]

    def test_first_failure_propagates(self) -> None:
        def boom(value: int) -> int:
            if value == 3:  # noqa: PLR2004
                raise DecodeError(f"image[{value}]")
            return value

        with pytest.raises(DecodeError, match=r"image\[3\]"):
            core.map_cells(boom, list(range(6)), max_workers=3)

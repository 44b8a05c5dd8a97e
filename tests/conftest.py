"""
Test configuration and shared fixtures for grid_composer.

This module defines reusable pytest fixtures that produce encoded
source images, grid specs and source lists. These fixtures support all
test modules in the test suite.

Note:
    This file is automatically loaded by pytest and should not be
    renamed.

"""
import io
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from grid_composer.image_grid import GridSpec, SourceImage
from grid_composer.logging_utils import logger


def encode_png(
    size: tuple[int, int] = (64, 64),
    color: str | tuple[int, ...] = "red",
    mode: str = "RGB",
) -> bytes:
    """Return PNG bytes of a solid image."""
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    """Factory for solid-colour PNG buffers."""
    return encode_png


@pytest.fixture
def small_spec() -> GridSpec:
    """A 2x2 grid on a 200x200 canvas with 10 px padding (85 px cells)."""
    return GridSpec(cols=2, rows=2, canvas_width=200, canvas_height=200,
                    padding=10)


@pytest.fixture
def rgb_sources() -> list[SourceImage]:
    """Red, green and blue sources in placement order."""
    return [
        SourceImage(data=encode_png((40, 40), color), order=i, ref=color)
        for i, color in enumerate(("red", "lime", "blue"))
    ]


@pytest.fixture
def image_files(tmp_path: Path) -> list[Path]:
    """Write three solid PNG files and return their paths."""
    paths = []
    for i, color in enumerate(("red", "lime", "blue")):
        path = tmp_path / f"img_{i}.png"
        path.write_bytes(encode_png((48, 32), color))
        paths.append(path)
    return paths


@pytest.fixture(autouse=True)
def enable_logger_propagation(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable propagation for the composer logger to allow caplog to work."""
    monkeypatch.setattr(logger, "propagate", True)

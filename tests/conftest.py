"""Pytest configuration and fixtures."""

from __future__ import annotations

import io
import re
from typing import Callable, List, Tuple

import numpy as np
import pytest
from PIL import Image

from pngn_config import GlyphlineConfig, reload_config

_CELL = re.compile(r"\x1b\[48;2;(\d+);(\d+);(\d+);38;2;(\d+);(\d+);(\d+)m▄")


def encode(image: Image.Image, fmt: str = "PNG") -> bytes:
    """Encode a Pillow image to bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def parse_cells(row: str) -> List[Tuple[Tuple[int, int, int], Tuple[int, int, int]]]:
    """Extract (top, bottom) colors for every half-block cell in a row."""
    return [
        (tuple(map(int, m.groups()[:3])), tuple(map(int, m.groups()[3:])))
        for m in _CELL.finditer(row)
    ]


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts and ends with the default configuration."""
    reload_config(GlyphlineConfig())
    yield
    reload_config(GlyphlineConfig())


@pytest.fixture
def solid_png() -> Callable[..., bytes]:
    """Factory for single-color PNG images."""

    def make(width: int, height: int, color=(255, 0, 0), mode: str = "RGB") -> bytes:
        return encode(Image.new(mode, (width, height), color))

    return make


@pytest.fixture
def noise_png() -> bytes:
    """64x64 random RGB image; compresses poorly, useful for truncation."""
    rng = np.random.default_rng(1234)
    pixels = rng.integers(0, 256, size=(64, 64, 3), dtype=np.uint8)
    return encode(Image.fromarray(pixels))


@pytest.fixture
def jpeg_bytes() -> bytes:
    """Small JPEG gradient."""
    gradient = np.tile(np.arange(0, 256, 4, dtype=np.uint8), (48, 1))
    rgb = np.stack([gradient, gradient[:, ::-1], np.full_like(gradient, 128)], axis=-1)
    return encode(Image.fromarray(rgb), "JPEG")

#!/usr/bin/env python3
"""
🐧 PNGN Glyphline - Image Block Module
======================================
Copyright (c) 2025 PNGN-Tec LLC

Half-Block Image Rendering
==========================
Turns encoded image bytes into rows of colored half-block glyphs. Each
terminal cell shows two stacked pixels: the top pixel as the background
color and the bottom pixel as the foreground color of "▄".

Core Features:
- PNG, JPEG and any other still format Pillow can decode
- Aspect-preserving fit into a cell box with even pixel height
- Smooth resampling (bicubic by default) to avoid aliasing
- 16-bit sources reduced to 8 bits per channel
- Transparency composited over black

Technical Implementation:
- ScalingContext computes the destination size from source and bounds
- Pillow decodes and resizes; numpy holds the resampled pixel buffer
- Any decode problem surfaces as DecodeError, never as partial output

Module Interface:
- render_image_block(): (text, line_count) for raw image bytes
- render_block_image(): BlockImage with destination geometry
- BlockImageRenderer: Renderer bound to a configuration
- photo_cell_box(): Cell bounds for a chat viewport
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from pngn_config import (
    HALF_BLOCK, RESET,
    GlyphlineConfig, RGBColors, ScalingAlgorithm, get_config,
)

# Configure logging
logger = logging.getLogger('pngn_blocks')

# PIL algorithm mapping
ALGORITHM_MAP = {
    ScalingAlgorithm.BILINEAR: Image.Resampling.BILINEAR,
    ScalingAlgorithm.BICUBIC: Image.Resampling.BICUBIC,
    ScalingAlgorithm.LANCZOS: Image.Resampling.LANCZOS,
}

# Integer modes that may carry more than 8 bits per sample
_WIDE_MODES = ('I', 'I;16', 'I;16B', 'I;16L', 'I;16N')


class DecodeError(Exception):
    """Image bytes could not be turned into a block image."""


@dataclass(frozen=True)
class BlockImage:
    """Rendered half-block rows and their destination pixel geometry"""
    text: str
    line_count: int
    width: int
    height: int


@dataclass
class ScalingContext:
    """
    Context for fitting an image into a cell box.

    Each cell holds two vertical pixels, so the pixel height budget is
    twice the cell height.
    """
    # Source dimensions
    source_width: int
    source_height: int

    # Cell box
    max_width_cells: int
    max_height_cells: int

    algorithm: ScalingAlgorithm = ScalingAlgorithm.BICUBIC

    @property
    def pixel_height_budget(self) -> int:
        """Maximum destination height in pixels"""
        return self.max_height_cells * 2

    @property
    def target_size(self) -> Tuple[int, int]:
        """
        Destination (width, height) in pixels.

        Scale by width first; if that overflows the height budget scale by
        height instead. Height is rounded up to an even number.
        """
        budget = self.pixel_height_budget

        width = self.max_width_cells
        height = self.source_height * width // self.source_width
        if height > budget:
            height = budget
            width = self.source_width * height // self.source_height

        width = max(1, min(width, self.max_width_cells))
        height = max(1, height)

        if height % 2:
            height += 1

        return width, height

    @property
    def resample(self):
        """Pillow resampling filter for the configured algorithm"""
        if self.algorithm not in ALGORITHM_MAP:
            raise ValueError(f"Unsupported scaling algorithm: {self.algorithm.value}")
        return ALGORITHM_MAP[self.algorithm]


# ============================================================================
# DECODING
# ============================================================================

def decode_image(data: bytes) -> Image.Image:
    """
    Decode image bytes with Pillow.

    Raises:
        DecodeError: Unrecognized, corrupt, truncated or zero-area image
    """
    if not data:
        raise DecodeError("empty image data")

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError,
            OSError, ValueError, SyntaxError) as e:
        raise DecodeError(f"cannot decode image: {e}") from e

    width, height = image.size
    if width == 0 or height == 0:
        raise DecodeError("empty image")

    return image


def to_rgb(image: Image.Image) -> Image.Image:
    """
    Reduce any decoded image to 8-bit RGB.

    Wide integer samples keep their top 8 bits; alpha is composited over
    black.
    """
    if image.mode in _WIDE_MODES:
        samples = np.asarray(image).astype(np.uint32) >> 8
        image = Image.fromarray(np.clip(samples, 0, 255).astype(np.uint8))
    elif image.mode == 'F':
        samples = np.asarray(image)
        image = Image.fromarray(np.clip(samples, 0, 255).astype(np.uint8))

    if image.mode == 'RGB':
        return image

    rgba = image.convert('RGBA')
    backdrop = Image.new('RGBA', rgba.size, (0, 0, 0, 255))
    return Image.alpha_composite(backdrop, rgba).convert('RGB')


# ============================================================================
# RENDERER
# ============================================================================

class BlockImageRenderer:
    """
    Half-block image renderer bound to one configuration.

    Stateless between calls; safe to share across threads.

    Raises:
        ValueError: If the image configuration does not validate
    """

    def __init__(self, config: Optional[GlyphlineConfig] = None):
        self.config = config or get_config()
        self.config.image.validate()

    def render(self, data: bytes, max_width_cells: int, max_height_cells: int) -> BlockImage:
        """
        Render image bytes into half-block rows.

        Args:
            data: Encoded image (PNG, JPEG, ...)
            max_width_cells: Maximum columns
            max_height_cells: Maximum rows

        Returns:
            BlockImage with text, line count and destination size

        Raises:
            DecodeError: If the bytes are not a usable image or the bounds
                are not positive
        """
        if max_width_cells < 1 or max_height_cells < 1:
            raise DecodeError(f"invalid cell bounds {max_width_cells}x{max_height_cells}")

        source = decode_image(data)
        context = ScalingContext(
            source_width=source.width,
            source_height=source.height,
            max_width_cells=max_width_cells,
            max_height_cells=max_height_cells,
            algorithm=self.config.image.scaling,
        )
        width, height = context.target_size

        logger.debug(f"Scaling {source.width}x{source.height} {source.mode} "
                     f"to {width}x{height} with {context.algorithm.value}")

        scaled = to_rgb(source).resize((width, height), context.resample)
        pixels = np.asarray(scaled, dtype=np.uint8)

        return BlockImage(text=self._emit_rows(pixels),
                          line_count=height // 2,
                          width=width,
                          height=height)

    @staticmethod
    def _emit_rows(pixels: np.ndarray) -> str:
        """One text row per pixel-row pair, rows joined by newlines."""
        rows = []
        for row in range(0, pixels.shape[0], 2):
            top = pixels[row].tolist()
            bottom = pixels[row + 1].tolist()
            cells = [
                RGBColors.sgr([RGBColors.bg(upper), RGBColors.fg(lower)]) + HALF_BLOCK
                for upper, lower in zip(top, bottom)
            ]
            rows.append(''.join(cells) + RESET)
        return '\n'.join(rows)


# ============================================================================
# PUBLIC API FUNCTIONS
# ============================================================================

def render_block_image(data: bytes, max_width_cells: int, max_height_cells: int,
                       config: Optional[GlyphlineConfig] = None) -> BlockImage:
    """Render image bytes, returning the full BlockImage."""
    return BlockImageRenderer(config).render(data, max_width_cells, max_height_cells)


def render_image_block(data: bytes, max_width_cells: int, max_height_cells: int,
                       config: Optional[GlyphlineConfig] = None) -> Tuple[str, int]:
    """
    Render image bytes as half-block rows.

    Returns:
        (text, line_count)

    Raises:
        DecodeError: If the bytes are not a usable image
    """
    block = render_block_image(data, max_width_cells, max_height_cells, config)
    return block.text, block.line_count


def photo_cell_box(viewport_width: int, message_area_height: int,
                   config: Optional[GlyphlineConfig] = None) -> Tuple[int, int]:
    """
    Cell bounds for a photo shown inside a message viewport.

    Width leaves a margin for indentation, height takes half of the
    message area; both are clamped to the configured range.
    """
    image_config = (config or get_config()).image

    width = viewport_width - image_config.margin
    width = max(image_config.min_width_cells, min(width, image_config.max_width_cells))

    height = message_area_height // 2
    height = max(image_config.min_height_cells, min(height, image_config.max_height_cells))

    return width, height

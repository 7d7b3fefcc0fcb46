#!/usr/bin/env python3
"""
🐧 PNGN Glyphline - Configuration Module
========================================
Copyright (c) 2025 PNGN-Tec LLC

Centralized Configuration System
=================================
Complete configuration for rich-text and image-block rendering including:
- Entity style colors (code, pre, links, mentions, tags, quotes)
- SGR attribute codes and truecolor parameter builders
- Word-wrap defaults for multiline rendering
- Image block bounds and resampling algorithm
- Environment overrides applied through a singleton manager

Color System
============
Style colors are fixed RGB tuples. They are compiled into SGR parameter
strings on demand by RGBColors and are never reconfigured at runtime.
"""

import threading
import logging
import os
from typing import Tuple, Optional
from dataclasses import dataclass, field
from enum import Enum

# Configure logging
logger = logging.getLogger('pngn_config')

# Type alias for RGB colors
RGBColor = Tuple[int, int, int]

# ============================================================================
# SGR SEQUENCES
# ============================================================================

ESC = "\x1b"
CSI = ESC + "["
RESET = CSI + "0m"

SGR_BOLD = "1"
SGR_ITALIC = "3"
SGR_UNDERLINE = "4"
SGR_REVERSE = "7"
SGR_STRIKETHROUGH = "9"

# Lower half block: top pixel is the cell background, bottom pixel the foreground
HALF_BLOCK = "▄"

# ============================================================================
# STYLE PALETTE
# ============================================================================

CODE_FG: RGBColor = (255, 158, 100)      # Orange
CODE_BG: RGBColor = (26, 27, 38)         # Night
PRE_FG: RGBColor = (169, 177, 214)       # Storm
LINK_FG: RGBColor = (122, 162, 247)      # Blue
LINK_SUFFIX_FG: RGBColor = (86, 95, 137)  # Comment gray
MENTION_FG: RGBColor = (187, 154, 247)   # Magenta
TAG_FG: RGBColor = (125, 207, 255)       # Cyan
PHONE_FG: RGBColor = (122, 162, 247)     # Blue
BLOCKQUOTE_FG: RGBColor = (169, 177, 214)  # Storm

# ============================================================================
# CONFIGURATION ENUMS
# ============================================================================

class ScalingAlgorithm(Enum):
    """Image resampling algorithms"""
    NEAREST = "nearest"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"
    LANCZOS = "lanczos"


# ============================================================================
# TEXT STYLE CONFIGURATION
# ============================================================================

@dataclass
class TextStyleConfig:
    """
    Rich-text rendering options.

    Attributes:
        link_suffix_enabled: Append " (target)" after text links
        newline_replacement: Replacement for newlines in single-line mode
    """

    link_suffix_enabled: bool = True
    newline_replacement: str = " "

    def validate(self) -> bool:
        """Validate text style configuration"""
        if "\n" in self.newline_replacement:
            raise ValueError("Newline replacement must not contain newlines")
        return True


# ============================================================================
# WRAP CONFIGURATION
# ============================================================================

@dataclass
class WrapConfig:
    """Word-wrap defaults for multiline rendering"""

    # 0 disables wrapping
    default_width: int = 0
    break_long_words: bool = True

    def validate(self) -> bool:
        """Validate wrap configuration"""
        if self.default_width < 0:
            raise ValueError("Wrap width must not be negative")
        return True


# ============================================================================
# IMAGE CONFIGURATION
# ============================================================================

@dataclass
class ImageConfig:
    """
    Image block bounds and resampling.

    The photo box is derived from the viewport: width is the viewport
    width less a margin, height is half of the message area, each clamped
    to [min, max].
    """

    scaling: ScalingAlgorithm = ScalingAlgorithm.BICUBIC

    # Photo cell box
    margin: int = 8
    min_width_cells: int = 10
    max_width_cells: int = 40
    min_height_cells: int = 5
    max_height_cells: int = 15

    def validate(self) -> bool:
        """Validate image configuration"""
        if self.scaling == ScalingAlgorithm.NEAREST:
            raise ValueError("Image blocks require a smoothing filter, not nearest")
        if self.min_width_cells <= 0 or self.min_height_cells <= 0:
            raise ValueError("Cell bounds must be positive")
        if self.max_width_cells < self.min_width_cells:
            raise ValueError("Max width must not be below min width")
        if self.max_height_cells < self.min_height_cells:
            raise ValueError("Max height must not be below min height")
        if self.margin < 0:
            raise ValueError("Margin must not be negative")
        return True


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

@dataclass
class GlyphlineConfig:
    """Complete system configuration"""

    # Sub-configurations
    text: TextStyleConfig = field(default_factory=TextStyleConfig)
    wrap: WrapConfig = field(default_factory=WrapConfig)
    image: ImageConfig = field(default_factory=ImageConfig)

    # System-wide settings
    debug_mode: bool = False
    log_level: str = "WARNING"

    def validate(self) -> bool:
        """Validate entire configuration"""
        self.text.validate()
        self.wrap.validate()
        self.image.validate()
        return True


# ============================================================================
# CONFIGURATION MANAGER (SINGLETON)
# ============================================================================

class ConfigurationManager:
    """
    Singleton configuration manager with runtime reloading.
    Thread-safe management of global configuration.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config = GlyphlineConfig()
        self._config_lock = threading.RLock()
        self._load_environment_overrides(self._config)

        try:
            self._config.validate()
        except ValueError as e:
            logger.error(f"Invalid environment configuration, using defaults: {e}")
            self._config = GlyphlineConfig()

        self._initialized = True
        logger.info("Configuration manager initialized")

    @staticmethod
    def _load_environment_overrides(config: GlyphlineConfig):
        """Load configuration overrides from environment variables"""

        # Wrap settings
        if 'PNGN_WRAP_WIDTH' in os.environ:
            config.wrap.default_width = int(os.environ['PNGN_WRAP_WIDTH'])

        # Image settings
        if 'PNGN_IMAGE_MAX_WIDTH' in os.environ:
            config.image.max_width_cells = int(os.environ['PNGN_IMAGE_MAX_WIDTH'])
        if 'PNGN_IMAGE_MAX_HEIGHT' in os.environ:
            config.image.max_height_cells = int(os.environ['PNGN_IMAGE_MAX_HEIGHT'])
        if 'PNGN_IMAGE_SCALING' in os.environ:
            config.image.scaling = ScalingAlgorithm(os.environ['PNGN_IMAGE_SCALING'].lower())

        # Logging
        if 'PNGN_LOG_LEVEL' in os.environ:
            config.log_level = os.environ['PNGN_LOG_LEVEL'].upper()

        # Debug mode
        if 'PNGN_DEBUG' in os.environ:
            config.debug_mode = os.environ['PNGN_DEBUG'].lower() in ('true', '1', 'yes')
            if config.debug_mode:
                config.log_level = "DEBUG"

    @property
    def config(self) -> GlyphlineConfig:
        """Get current configuration"""
        with self._config_lock:
            return self._config

    def reload(self, new_config: Optional[GlyphlineConfig] = None) -> bool:
        """
        Reload configuration.

        Args:
            new_config: New configuration to apply (rebuilt from env if None)

        Returns:
            True if reload successful
        """
        with self._config_lock:
            old_config = self._config

            try:
                if new_config is None:
                    new_config = GlyphlineConfig()
                    self._load_environment_overrides(new_config)
                new_config.validate()
                self._config = new_config

                logger.info("Configuration reloaded successfully")
                return True

            except ValueError as e:
                logger.error(f"Configuration reload failed: {e}")
                self._config = old_config
                return False


# ============================================================================
# PUBLIC API FUNCTIONS
# ============================================================================

_manager = ConfigurationManager()

def get_config() -> GlyphlineConfig:
    """Get current system configuration"""
    return _manager.config

def reload_config(new_config: Optional[GlyphlineConfig] = None) -> bool:
    """Reload system configuration"""
    return _manager.reload(new_config)

def get_image_config() -> ImageConfig:
    """Get image configuration"""
    return _manager.config.image

def get_wrap_config() -> WrapConfig:
    """Get wrap configuration"""
    return _manager.config.wrap


# ============================================================================
# RGB COLOR UTILITIES
# ============================================================================

class RGBColors:
    """
    Truecolor SGR helpers.

    Builders return bare SGR parameters ("38;2;R;G;B") so several of them
    can be joined into one escape sequence.
    """

    @staticmethod
    def fg(rgb: RGBColor) -> str:
        """Foreground truecolor parameter"""
        r, g, b = rgb
        return f"38;2;{r};{g};{b}"

    @staticmethod
    def bg(rgb: RGBColor) -> str:
        """Background truecolor parameter"""
        r, g, b = rgb
        return f"48;2;{r};{g};{b}"

    @staticmethod
    def sgr(codes) -> str:
        """Join SGR parameters into a single escape sequence"""
        return f"{CSI}{';'.join(codes)}m"

    @staticmethod
    def rgb_to_ansi(rgb: RGBColor) -> str:
        """Convert RGB tuple to a foreground escape sequence"""
        return RGBColors.sgr([RGBColors.fg(rgb)])

#!/usr/bin/env python3
"""
🐧 PNGN Glyphline - Width Calculation Module
============================================
Copyright (c) 2025 PNGN-Tec LLC

Visual Width Calculation System
================================
Accurate text width measurement for terminal rendering, providing the
foundation for wrapping styled output without corrupting escape sequences.

Core Features
=============
- Unicode-aware width calculation (CJK, emoji, combining marks)
- Control character handling with proper exclusion
- Escape sequences measured as zero columns
- Static codepoint table for common characters

Technical Implementation
========================
- Uses the wcwidth library for accurate measurements
- Handles non-BMP characters (emoji, supplementary planes)
- No result caching: every call is independent of previous calls

Module Interface
================
- WidthCalculator: Main class
- get_width(): Simple function for single strings
- get_widths(): Batch processing for multiple strings
- strip_ansi(): Remove escape sequences from a string

Example Usage
=============
```python
from pngn_width import get_width

get_width("Hello, World!")             # 13
get_width("\\x1b[1mHello\\x1b[0m")     # 5
get_width("你好")                       # 4
```
"""

import re
import logging
from typing import Dict, List

from wcwidth import wcwidth, wcswidth

# Configure logging
logger = logging.getLogger('pngn_width')

# CSI sequences (SGR and friends) plus two-byte escapes
ANSI_ESCAPE = re.compile(r'\x1b(?:\[[0-?]*[ -/]*[@-~]|[@-Z\\-_])')


def strip_ansi(text: str) -> str:
    """Remove escape sequences, leaving only visible text."""
    return ANSI_ESCAPE.sub('', text)


def _build_codepoint_table() -> Dict[int, int]:
    """
    Build widths for common codepoints.

    Returns:
        Dictionary mapping codepoint to width
    """
    table = {}

    # ASCII printable characters
    for code in range(32, 127):
        table[code] = 1

    # Common zero-width characters
    zero_width_ranges = [
        (0x0300, 0x036F),  # Combining diacritical marks
        (0x1AB0, 0x1AFF),  # Combining diacritical marks extended
        (0x1DC0, 0x1DFF),  # Combining diacritical marks supplement
        (0x20D0, 0x20FF),  # Combining diacritical marks for symbols
        (0xFE20, 0xFE2F),  # Combining half marks
    ]

    for start, end in zero_width_ranges:
        for code in range(start, end + 1):
            table[code] = 0

    # Control characters
    for code in range(0, 32):
        table[code] = 0
    for code in range(0x7F, 0xA0):
        table[code] = 0

    return table


# Built once at import and never modified
CODEPOINT_WIDTHS = _build_codepoint_table()


class WidthCalculator:
    """
    Text width calculator for terminal columns.

    Escape sequences are stripped before measuring. Control characters
    and zero-width marks contribute nothing; wide characters count two.
    The calculator holds no mutable state and is safe to share between
    threads.
    """

    def get_width(self, text: str) -> int:
        """
        Get visual width of text in terminal columns.

        Args:
            text: Text to measure, may contain escape sequences

        Returns:
            Visual width in columns (0 for empty/control-only text)
        """
        if not text:
            return 0

        if '\x1b' in text:
            text = strip_ansi(text)
            if not text:
                return 0

        # Fast path for plain ASCII
        if text.isascii() and text.isprintable():
            return len(text)

        width = wcswidth(text)
        if width >= 0:
            return width

        # Contains control characters - calculate char by char
        return self._calculate_width_with_control(text)

    def get_widths(self, texts: List[str]) -> List[int]:
        """Get widths for multiple strings."""
        return [self.get_width(text) for text in texts]

    def char_width(self, char: str) -> int:
        """Width of a single character, never negative."""
        code = ord(char)
        if code in CODEPOINT_WIDTHS:
            return CODEPOINT_WIDTHS[code]

        width = wcwidth(char)
        if width < 0:
            return 0
        return width

    def _calculate_width_with_control(self, text: str) -> int:
        """
        Calculate width for text containing control characters.

        Args:
            text: Text possibly containing control characters

        Returns:
            Visual width excluding control characters
        """
        return sum(self.char_width(char) for char in text)


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

_default_calculator = WidthCalculator()

def get_width(text: str) -> int:
    """
    Get visual width of text using the default calculator.

    Example:
        >>> get_width("Hello")
        5
        >>> get_width("你好")
        4
    """
    return _default_calculator.get_width(text)


def get_widths(texts: List[str]) -> List[int]:
    """
    Get widths for multiple strings using the default calculator.

    Example:
        >>> get_widths(["A", "你"])
        [1, 2]
    """
    return _default_calculator.get_widths(texts)


def char_width(char: str) -> int:
    """Width of a single character using the default calculator."""
    return _default_calculator.char_width(char)

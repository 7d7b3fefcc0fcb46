#!/usr/bin/env python3
"""
🐧 PNGN Glyphline - Styled Text Wrapping Module
===============================================
Copyright (c) 2025 PNGN-Tec LLC

ANSI-Aware Word Wrapping
========================
Wraps composed terminal text to a column budget while treating escape
sequences as zero-width and indivisible.

Behavior
========
- Width is measured with pngn_width (wide characters count two)
- Breaks happen at spaces; spaces at an inserted break are dropped
- Indentation that leaves no room for the first word is dropped
- Words wider than the budget are broken between characters
- An open SGR style is reset before an inserted break and reopened after
- Existing newlines pass through and restart the column count
- Text that already fits is returned unchanged
"""

import re
import logging
from typing import List, Optional

from pngn_config import CSI, RESET
from pngn_width import get_width, char_width

# Configure logging
logger = logging.getLogger('pngn_wrap')

_ESCAPE = r'\x1b\[[0-?]*[ -/]*[@-~]'

# Newlines, runs of spaces, escapes ahead of a word, and words carrying
# any escapes that follow their first visible character
_TOKEN = re.compile(
    r'(?P<newline>\n)'
    r'|(?P<space> +)'
    r'|(?P<escape>' + _ESCAPE + r')'
    r'|(?P<word>[^ \n](?:' + _ESCAPE + r'|[^ \n\x1b]|\x1b)*)'
)

_SGR = re.compile(r'\x1b\[[0-9;]*m')
_PIECES = re.compile(_ESCAPE + r'|.', re.DOTALL)


def _apply_sgr(active: Optional[str], chunk: str) -> Optional[str]:
    """Track the style left open after writing chunk."""
    for sequence in _SGR.findall(chunk):
        if sequence in (RESET, CSI + "m"):
            active = None
        else:
            active = sequence
    return active


class AnsiWrapper:
    """
    Single-use word wrapper for escape-laden text.

    Output is built up in a list; spaces and zero-width chunks between
    words stay pending until the next word decides whether a break is
    needed.
    """

    def __init__(self, width: int, break_long_words: bool = True):
        self.width = width
        self.break_long_words = break_long_words

        self._out: List[str] = []
        self._line_width = 0
        self._active: Optional[str] = None
        self._pending: List[str] = []
        self._pending_width = 0
        self._after_break = False

    def wrap(self, text: str) -> str:
        """Wrap text and return the result."""
        for match in _TOKEN.finditer(text):
            kind = match.lastgroup
            chunk = match.group()

            if kind == 'newline':
                self._flush_pending()
                self._out.append(chunk)
                self._line_width = 0
                self._after_break = False
            elif kind == 'space':
                if not self._after_break:
                    self._pending.append(chunk)
                    self._pending_width += len(chunk)
            elif kind == 'escape':
                if self._after_break:
                    self._commit(chunk, 0)
                else:
                    self._pending.append(chunk)
            else:
                self._add_word(chunk)

        self._flush_pending()
        return ''.join(self._out)

    def _add_word(self, chunk: str):
        width = get_width(chunk)

        if self._line_width + self._pending_width + width > self.width:
            if self._line_width > 0:
                self._break()
            else:
                self._drop_pending_spaces()

        self._flush_pending()
        if width <= self.width or not self.break_long_words:
            self._commit(chunk, width)
        else:
            self._hard_break(chunk)
        self._after_break = False

    def _drop_pending_spaces(self):
        """Drop indentation that leaves no room for the next word."""
        for chunk in self._pending:
            if chunk.startswith('\x1b'):
                self._commit(chunk, 0)
        self._pending.clear()
        self._pending_width = 0

    def _hard_break(self, chunk: str):
        """Split an over-long word between characters."""
        for piece in _PIECES.findall(chunk):
            if piece.startswith('\x1b') and len(piece) > 1:
                self._commit(piece, 0)
                continue

            piece_width = char_width(piece)
            if self._line_width > 0 and self._line_width + piece_width > self.width:
                self._break()
            self._commit(piece, piece_width)

    def _commit(self, chunk: str, width: int):
        self._out.append(chunk)
        self._line_width += width
        self._active = _apply_sgr(self._active, chunk)

    def _flush_pending(self):
        for chunk in self._pending:
            self._commit(chunk, get_width(chunk))
        self._pending.clear()
        self._pending_width = 0

    def _break(self):
        """Insert a line break, closing and reopening the open style."""
        if self._active:
            self._out.append(RESET)
        self._out.append('\n')
        self._line_width = 0

        # Spaces at the break are dropped; escapes still take effect
        state = self._active
        for chunk in self._pending:
            state = _apply_sgr(state, chunk)
        self._pending.clear()
        self._pending_width = 0

        self._active = state
        if state:
            self._out.append(state)
        self._after_break = True


def wrap_ansi(text: str, width: int, break_long_words: bool = True) -> str:
    """
    Word-wrap styled text to a visible column width.

    Args:
        text: Text that may contain SGR escape sequences
        width: Maximum visible columns per line (0 or less disables wrapping)
        break_long_words: Split words wider than the line

    Returns:
        Wrapped text with escape sequences intact

    Example:
        >>> wrap_ansi("aaa bbb", 3)
        'aaa\\nbbb'
    """
    if width <= 0 or not text:
        return text
    return AnsiWrapper(width, break_long_words).wrap(text)

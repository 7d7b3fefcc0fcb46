#!/usr/bin/env python3
"""
🐧 PNGN Glyphline - Rich Text Compositor
========================================
Copyright (c) 2025 PNGN-Tec LLC

Entity-Styled Terminal Text
===========================
Overlays chat entities (bold, code, links, mentions, quotes, ...) onto a
message and emits truecolor SGR output ready to print.

Core Features
=============
- Overlapping and nested entities resolved per segment
- One combined escape sequence per contiguous run, never per character
- Exact UTF-16 entity offsets, including surrogate pairs
- Link targets appended once after each text link
- Single-line mode (newlines become spaces) and multiline mode with
  ANSI-aware word wrapping

Technical Implementation
========================
- Entities are normalized to byte ranges by pngn_spans
- Cut points partition the text; at each point ending spans leave the
  active list before starting spans join it
- The active list is resolved through STYLE_CODES in activation order
- Everything is local to one call, so rendering is deterministic and
  thread-safe

Module Interface
================
- RichTextCompositor: Renderer bound to a configuration
- render_styled_text(): Main entry point
- render_styled_text_line(): Single-line shorthand
- render_styled_text_multiline(): Multiline shorthand with wrap width
- resolve_codes(): Active spans to SGR parameters

Example Usage
=============
```python
from pngn_richtext import render_styled_text
from pngn_spans import Annotation, StyleKind

line = render_styled_text(
    "Hello World",
    [Annotation(StyleKind.BOLD, 0, 5)],
)
# '\\x1b[1mHello\\x1b[0m World'
```
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pngn_config import (
    RESET,
    SGR_BOLD, SGR_ITALIC, SGR_UNDERLINE, SGR_REVERSE, SGR_STRIKETHROUGH,
    CODE_FG, CODE_BG, PRE_FG, LINK_FG, LINK_SUFFIX_FG,
    MENTION_FG, TAG_FG, PHONE_FG, BLOCKQUOTE_FG,
    GlyphlineConfig, RGBColors, get_config,
)
from pngn_spans import (
    UTF8_ERRORS,
    Annotation, NormalizedSpan, StyleKind,
    build_offset_map, cut_points, normalize_spans, schedule_boundaries,
)
from pngn_wrap import wrap_ansi

# Configure logging
logger = logging.getLogger('pngn_richtext')

# ============================================================================
# STYLE TABLE
# ============================================================================

_LINK = (SGR_UNDERLINE, RGBColors.fg(LINK_FG))

STYLE_CODES: Dict[StyleKind, Tuple[str, ...]] = {
    StyleKind.BOLD: (SGR_BOLD,),
    StyleKind.ITALIC: (SGR_ITALIC,),
    StyleKind.UNDERLINE: (SGR_UNDERLINE,),
    StyleKind.STRIKETHROUGH: (SGR_STRIKETHROUGH,),
    StyleKind.SPOILER: (SGR_REVERSE,),
    StyleKind.CODE: (RGBColors.fg(CODE_FG), RGBColors.bg(CODE_BG)),
    StyleKind.PRE: (RGBColors.fg(PRE_FG), RGBColors.bg(CODE_BG)),
    StyleKind.URL: _LINK,
    StyleKind.TEXT_LINK: _LINK,
    StyleKind.EMAIL: _LINK,
    StyleKind.MENTION: (RGBColors.fg(MENTION_FG),),
    StyleKind.MENTION_NAME: (RGBColors.fg(MENTION_FG),),
    StyleKind.HASHTAG: (RGBColors.fg(TAG_FG),),
    StyleKind.BOT_COMMAND: (RGBColors.fg(TAG_FG),),
    StyleKind.CASHTAG: (RGBColors.fg(TAG_FG),),
    StyleKind.PHONE: (RGBColors.fg(PHONE_FG),),
    # Applied last, see resolve_codes
    StyleKind.BLOCKQUOTE: (),
    StyleKind.UNKNOWN: (),
}

BLOCKQUOTE_CODES = (RGBColors.fg(BLOCKQUOTE_FG),)
LINK_SUFFIX_CODES = (RGBColors.fg(LINK_SUFFIX_FG),)


def resolve_codes(active: Iterable[NormalizedSpan]) -> List[str]:
    """
    Resolve active spans to SGR parameters.

    Codes accumulate in activation order. Duplicates are left in place.
    Blockquote color goes after everything else and at most once.

    Args:
        active: Spans open at the current segment, oldest first

    Returns:
        SGR parameters, empty if nothing styles the segment
    """
    codes = []
    quoted = False

    for span in active:
        if span.kind == StyleKind.BLOCKQUOTE:
            quoted = True
        codes.extend(STYLE_CODES.get(span.kind, ()))

    if quoted:
        codes.extend(BLOCKQUOTE_CODES)

    return codes


def ansi_wrap(text: str, codes: Sequence[str]) -> str:
    """Wrap text in one combined SGR sequence and a reset."""
    if not codes:
        return text
    return RGBColors.sgr(codes) + text + RESET


# ============================================================================
# COMPOSITOR
# ============================================================================

class RichTextCompositor:
    """
    Entity compositor bound to one configuration.

    Holds no per-message state: every render() call builds its spans,
    boundaries and active list locally and discards them on return.
    """

    def __init__(self, config: Optional[GlyphlineConfig] = None):
        self.config = config or get_config()

    def render(self, text: str, annotations: Iterable[Annotation],
               preserve_newlines: bool = False,
               wrap_width: Optional[int] = None) -> str:
        """
        Render text with entity styling.

        Args:
            text: Message text
            annotations: Entities in UTF-16 coordinates
            preserve_newlines: Keep newlines (multiline mode)
            wrap_width: Visible columns for multiline wrapping, 0 disables,
                None uses the configured default

        Returns:
            Printable string with SGR sequences
        """
        composed = self._compose(text, annotations, preserve_newlines)

        if not preserve_newlines:
            return composed

        if wrap_width is None:
            wrap_width = self.config.wrap.default_width
        if wrap_width > 0:
            composed = wrap_ansi(composed, wrap_width, self.config.wrap.break_long_words)
        return composed

    def _adjust_newlines(self, segment: str, preserve_newlines: bool) -> str:
        if preserve_newlines:
            return segment
        return segment.replace('\n', self.config.text.newline_replacement)

    def _compose(self, text: str, annotations: Iterable[Annotation],
                 preserve_newlines: bool) -> str:
        offset_map = build_offset_map(text)
        spans = normalize_spans(text, annotations, offset_map)
        if not spans:
            return self._adjust_newlines(text, preserve_newlines)

        text_bytes = text.encode('utf-8', UTF8_ERRORS)
        boundaries = schedule_boundaries(spans)

        starts = defaultdict(list)
        ends = defaultdict(list)
        for boundary in boundaries:
            if boundary.is_start:
                starts[boundary.byte_pos].append(boundary.span)
            else:
                ends[boundary.byte_pos].append(boundary.span)

        points = cut_points(boundaries, len(text_bytes))
        logger.debug(f"Composing {len(spans)} spans over {len(points) - 1} segments")

        result = []
        active: List[NormalizedSpan] = []

        for pos, next_pos in zip(points, points[1:]):
            for span in ends.get(pos, ()):
                active.remove(span)
            active.extend(starts.get(pos, ()))

            segment = text_bytes[pos:next_pos].decode('utf-8', UTF8_ERRORS)
            segment = self._adjust_newlines(segment, preserve_newlines)

            if not active:
                result.append(segment)
                continue

            result.append(ansi_wrap(segment, resolve_codes(active)))
            result.extend(self._link_suffixes(active, next_pos))

        return ''.join(result)

    def _link_suffixes(self, active: List[NormalizedSpan], next_pos: int) -> List[str]:
        """
        Link target for the innermost text link if it closes at next_pos.

        Only the innermost active link is considered; an enclosing link
        that closes at the same position gets no suffix of its own.
        """
        if not self.config.text.link_suffix_enabled:
            return []

        links = [span for span in active if span.kind == StyleKind.TEXT_LINK]
        if not links:
            return []

        innermost = links[-1]
        if not innermost.payload or innermost.byte_end != next_pos:
            return []
        return [ansi_wrap(f" ({innermost.payload})", LINK_SUFFIX_CODES)]


# ============================================================================
# PUBLIC API FUNCTIONS
# ============================================================================

def render_styled_text(text: str, annotations: Iterable[Annotation],
                       preserve_newlines: bool = False,
                       wrap_width: Optional[int] = None,
                       config: Optional[GlyphlineConfig] = None) -> str:
    """
    Apply entity styling to text for terminal display.

    With preserve_newlines=False every newline becomes a space so the
    message occupies one visual line. With preserve_newlines=True
    newlines are kept and the result is word-wrapped to wrap_width.
    """
    return RichTextCompositor(config).render(text, annotations, preserve_newlines, wrap_width)


def render_styled_text_line(text: str, annotations: Iterable[Annotation]) -> str:
    """Single-line rendering: newlines become spaces, no wrapping."""
    return render_styled_text(text, annotations, preserve_newlines=False)


def render_styled_text_multiline(text: str, annotations: Iterable[Annotation],
                                 width: int) -> str:
    """Multiline rendering wrapped to width visible columns (0 disables)."""
    return render_styled_text(text, annotations, preserve_newlines=True, wrap_width=width)

#!/usr/bin/env python3
"""
🐧 PNGN Glyphline - Entity Span Module
======================================
Copyright (c) 2025 PNGN-Tec LLC

Entity Offset Translation
=========================
Chat protocols address rich-text entities in UTF-16 code units while the
renderer slices UTF-8 bytes. This module converts one to the other and
prepares the boundary schedule walked by the compositor.

Pipeline
========
1. build_offset_map(): UTF-16 unit index -> UTF-8 byte offset
2. normalize_spans(): clamp, translate and drop degenerate annotations
3. schedule_boundaries(): ordered start/end boundaries, ends first on ties
4. cut_points(): distinct byte positions partitioning the text

Malformed annotations never raise. Anything outside the text is clamped
and anything empty after clamping is dropped.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional

# Configure logging
logger = logging.getLogger('pngn_spans')

# Lone surrogates can appear in strings decoded from JSON
UTF8_ERRORS = 'surrogatepass'


# ============================================================================
# ENTITY KINDS
# ============================================================================

class StyleKind(Enum):
    """Closed set of rich-text entity kinds"""
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    CODE = "code"
    PRE = "pre"
    URL = "url"
    TEXT_LINK = "text_link"
    EMAIL = "email"
    MENTION = "mention"
    MENTION_NAME = "mention_name"
    HASHTAG = "hashtag"
    BOT_COMMAND = "bot_command"
    CASHTAG = "cashtag"
    SPOILER = "spoiler"
    BLOCKQUOTE = "blockquote"
    PHONE = "phone"
    UNKNOWN = "unknown"

    @classmethod
    def from_wire(cls, name: Optional[str]) -> 'StyleKind':
        """
        Resolve a protocol entity type name.

        Accepts Bot API names ("text_link") and MTProto constructor names
        ("messageEntityTextUrl"). Anything unrecognized is UNKNOWN.
        """
        if not name:
            return cls.UNKNOWN
        return _WIRE_NAMES.get(name, _WIRE_NAMES.get(name.lower(), cls.UNKNOWN))


_WIRE_NAMES = {kind.value: kind for kind in StyleKind}
_WIRE_NAMES.update({
    # Bot API aliases
    "phone_number": StyleKind.PHONE,
    "text_mention": StyleKind.MENTION_NAME,
    "expandable_blockquote": StyleKind.BLOCKQUOTE,
    # MTProto constructors
    "messageEntityBold": StyleKind.BOLD,
    "messageEntityItalic": StyleKind.ITALIC,
    "messageEntityUnderline": StyleKind.UNDERLINE,
    "messageEntityStrike": StyleKind.STRIKETHROUGH,
    "messageEntityCode": StyleKind.CODE,
    "messageEntityPre": StyleKind.PRE,
    "messageEntityUrl": StyleKind.URL,
    "messageEntityTextUrl": StyleKind.TEXT_LINK,
    "messageEntityEmail": StyleKind.EMAIL,
    "messageEntityMention": StyleKind.MENTION,
    "messageEntityMentionName": StyleKind.MENTION_NAME,
    "inputMessageEntityMentionName": StyleKind.MENTION_NAME,
    "messageEntityHashtag": StyleKind.HASHTAG,
    "messageEntityBotCommand": StyleKind.BOT_COMMAND,
    "messageEntityCashtag": StyleKind.CASHTAG,
    "messageEntitySpoiler": StyleKind.SPOILER,
    "messageEntityBlockquote": StyleKind.BLOCKQUOTE,
    "messageEntityPhone": StyleKind.PHONE,
})


# ============================================================================
# DATA MODEL
# ============================================================================

@dataclass(frozen=True)
class Annotation:
    """
    A styled range over message text.

    Offset and length are UTF-16 code units, as sent by the chat protocol.
    The payload carries kind-specific data such as a text link target.
    """
    kind: StyleKind
    offset: int
    length: int
    payload: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Annotation':
        """
        Build an annotation from a protocol entity dictionary.

        Args:
            data: Bot API ({"type": ...}) or MTProto ({"_": ...}) entity

        Returns:
            Annotation with the kind resolved (UNKNOWN if unrecognized)

        Raises:
            KeyError: If offset or length is missing
            TypeError, ValueError: If offset or length is not an integer
        """
        kind = StyleKind.from_wire(data.get("type") or data.get("_"))
        payload = data.get("url")
        if payload is not None:
            payload = str(payload)
        return cls(kind=kind,
                   offset=int(data["offset"]),
                   length=int(data["length"]),
                   payload=payload)


def annotations_from_dicts(entities: Iterable[Mapping[str, Any]]) -> List[Annotation]:
    """
    Convert protocol entity dictionaries, skipping unusable entries.

    Entries lacking an integer offset or length are logged and dropped,
    matching the clamp-and-drop policy of the renderer.
    """
    annotations = []
    for index, entity in enumerate(entities):
        try:
            annotations.append(Annotation.from_dict(entity))
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Skipping entity {index}: {e!r}")
    return annotations


@dataclass(frozen=True)
class NormalizedSpan:
    """Annotation translated to a non-empty UTF-8 byte range"""
    kind: StyleKind
    byte_start: int
    byte_end: int
    payload: Optional[str] = None
    order: int = 0


@dataclass(frozen=True)
class Boundary:
    """Point where a span opens or closes"""
    byte_pos: int
    is_start: bool
    span: NormalizedSpan

    @property
    def sort_key(self):
        # Ends sort before starts at the same position
        return (self.byte_pos, self.is_start)


# ============================================================================
# OFFSET MAPPER
# ============================================================================

def utf16_length(text: str) -> int:
    """Number of UTF-16 code units needed to encode text."""
    return len(text) + sum(1 for char in text if ord(char) > 0xFFFF)


def build_offset_map(text: str) -> List[int]:
    """
    Map every UTF-16 code unit index to a UTF-8 byte offset.

    The result has utf16_length(text) + 1 entries and never decreases.
    For a surrogate pair the high unit maps to the start of the UTF-8
    sequence and the low unit to the byte after it, so no offset can land
    inside a multi-byte sequence.

    Example:
        >>> build_offset_map("aя😀")
        [0, 1, 3, 7, 7]
    """
    mapping = []
    byte_offset = 0

    for char in text:
        mapping.append(byte_offset)
        byte_offset += len(char.encode('utf-8', UTF8_ERRORS))
        if ord(char) > 0xFFFF:
            mapping.append(byte_offset)

    mapping.append(byte_offset)
    return mapping


# ============================================================================
# SPAN NORMALIZER
# ============================================================================

def normalize_spans(text: str, annotations: Iterable[Annotation],
                    offset_map: Optional[List[int]] = None) -> List[NormalizedSpan]:
    """
    Clamp annotations to the text and convert them to byte ranges.

    Args:
        text: Message text
        annotations: Entities in UTF-16 coordinates
        offset_map: Precomputed build_offset_map(text), built if None

    Returns:
        Non-empty spans in input order
    """
    if offset_map is None:
        offset_map = build_offset_map(text)
    total_units = len(offset_map) - 1

    spans = []
    for order, annotation in enumerate(annotations):
        start = max(annotation.offset, 0)
        end = min(annotation.offset + annotation.length, total_units)

        if start >= end:
            logger.debug(f"Dropping empty {annotation.kind.value} span "
                         f"at {annotation.offset}+{annotation.length}")
            continue

        byte_start = offset_map[start]
        byte_end = offset_map[end]
        if byte_start >= byte_end:
            continue

        spans.append(NormalizedSpan(kind=annotation.kind,
                                    byte_start=byte_start,
                                    byte_end=byte_end,
                                    payload=annotation.payload,
                                    order=order))

    return spans


# ============================================================================
# BOUNDARY SCHEDULER
# ============================================================================

def schedule_boundaries(spans: Iterable[NormalizedSpan]) -> List[Boundary]:
    """
    Two boundaries per span, sorted by position with ends before starts.

    The sort is stable, so spans starting together activate in input order.
    """
    boundaries = []
    for span in spans:
        boundaries.append(Boundary(span.byte_start, True, span))
        boundaries.append(Boundary(span.byte_end, False, span))

    boundaries.sort(key=lambda b: b.sort_key)
    return boundaries


def cut_points(boundaries: Iterable[Boundary], byte_length: int) -> List[int]:
    """
    Distinct sorted byte positions, always including 0 and byte_length.

    Consecutive points delimit the segments emitted by the compositor.
    """
    points = {0, byte_length}
    points.update(boundary.byte_pos for boundary in boundaries)
    return sorted(points)

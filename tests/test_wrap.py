"""Tests for ANSI-aware word wrapping."""

from __future__ import annotations

import re

import pytest

from pngn_width import get_width
from pngn_wrap import wrap_ansi

RESET = "\x1b[0m"
_COMPLETE_SEQUENCE = re.compile(r"\x1b\[[0-9;]*m")


def test_text_that_fits_is_unchanged() -> None:
    text = f"\x1b[1mshort{RESET} line"

    assert wrap_ansi(text, 40) == text


def test_zero_width_disables_wrapping() -> None:
    assert wrap_ansi("aaa bbb ccc", 0) == "aaa bbb ccc"


def test_breaks_at_spaces() -> None:
    assert wrap_ansi("aaa bbb ccc", 7) == "aaa bbb\nccc"


def test_long_word_is_hard_broken() -> None:
    assert wrap_ansi("abcdefghij", 4) == "abcd\nefgh\nij"


def test_long_word_kept_when_breaking_disabled() -> None:
    assert wrap_ansi("ab abcdefghij", 4, break_long_words=False) == "ab\nabcdefghij"


def test_wide_characters_count_two_columns() -> None:
    assert wrap_ansi("你好世界", 4) == "你好\n世界"


def test_existing_newlines_and_indentation_survive() -> None:
    text = "  ab\ncd"

    assert wrap_ansi(text, 10) == text


def test_newline_restarts_column_count() -> None:
    assert wrap_ansi("abc\nde fg", 5) == "abc\nde fg"


def test_indentation_wider_than_room_is_dropped() -> None:
    assert wrap_ansi("    abcd efgh", 5) == "abcd\nefgh"
    assert wrap_ansi("ab\n    cdef", 5) == "ab\ncdef"


def test_styled_indentation_keeps_its_escape() -> None:
    assert wrap_ansi(f"\x1b[1m    abcd{RESET}", 5) == f"\x1b[1mabcd{RESET}"


@pytest.mark.parametrize("text", ["    abcd efgh", "   x  abcdefgh", "\n      wxyz  ab"])
def test_indented_lines_fit_the_width(text: str) -> None:
    for line in wrap_ansi(text, 5).split("\n"):
        assert get_width(line) <= 5


def test_escape_sequences_have_no_width() -> None:
    """Styled words wrap by their visible width only."""
    text = f"\x1b[1maaa{RESET} \x1b[3mbbb{RESET}"

    assert wrap_ansi(text, 7) == text
    assert wrap_ansi(text, 5) == f"\x1b[1maaa{RESET}\n\x1b[3mbbb{RESET}"


def test_style_spanning_break_is_reopened() -> None:
    result = wrap_ansi(f"\x1b[1mone two{RESET}", 3)

    assert result == f"\x1b[1mone{RESET}\n\x1b[1mtwo{RESET}"


def test_style_reset_between_words_is_not_reopened() -> None:
    """A reset pending at the break leaves the next line plain."""
    result = wrap_ansi(f"\x1b[1mone {RESET}two", 3)

    assert result == f"\x1b[1mone{RESET}\ntwo"


@pytest.mark.parametrize("width", [1, 3, 6, 10, 17])
def test_escape_sequences_never_split(width: int) -> None:
    """Every line keeps complete escape sequences and fits the width."""
    text = " ".join(
        f"\x1b[{code}mword{index}{RESET}" for index, code in enumerate(["1", "3", "4;38;2;1;2;3", "7"] * 3)
    ) + " unstyledtailthatislong"

    for line in wrap_ansi(text, width).split("\n"):
        assert "\x1b" not in _COMPLETE_SEQUENCE.sub("", line)
        assert get_width(line) <= width

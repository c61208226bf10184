"""Delimiter model: character classes, flanking rules and marker runs.

Everything here is a pure function of the text and an offset. Offsets outside
the text count as whitespace, the way CommonMark treats the start and end of a
line when classifying delimiter runs.
"""

from __future__ import annotations

import unicodedata

from .constants import (
    DELIMITER_CHARS,
    LINE_PREFIX_PATTERN,
    STRIKETHROUGH_CHAR,
    STRIKETHROUGH_LENGTH,
)
from .models import DelimiterRun


def is_whitespace(char: str) -> bool:
    """Return True for Unicode whitespace and for the empty string (text edge)."""
    return not char or char.isspace()


def is_punctuation(char: str) -> bool:
    """Return True for Unicode punctuation and symbol characters.

    Examples:
        is_punctuation("*")  # True
        is_punctuation("a")  # False
    """
    if not char:
        return False
    return unicodedata.category(char)[0] in ("P", "S")


def is_word_char(char: str) -> bool:
    """Return True for characters that are neither whitespace nor punctuation."""
    return not is_whitespace(char) and not is_punctuation(char)


def char_before(text: str, pos: int) -> str:
    return text[pos - 1] if pos > 0 else ""


def char_at(text: str, pos: int) -> str:
    return text[pos] if 0 <= pos < len(text) else ""


def run_length(text: str, pos: int) -> int:
    """Count how many times ``text[pos]`` repeats starting at `pos`."""
    if pos >= len(text):
        return 0
    char = text[pos]
    end = pos
    while end < len(text) and text[end] == char:
        end += 1
    return end - pos


def is_left_flanking(before: str, after: str) -> bool:
    """Left-flanking: not followed by whitespace, and not followed by
    punctuation unless preceded by whitespace or punctuation."""
    if is_whitespace(after):
        return False
    if is_punctuation(after):
        return is_whitespace(before) or is_punctuation(before)
    return True


def is_right_flanking(before: str, after: str) -> bool:
    """Mirror image of `is_left_flanking`."""
    if is_whitespace(before):
        return False
    if is_punctuation(before):
        return is_whitespace(after) or is_punctuation(after)
    return True


def is_word_internal_underscore(text: str, start: int, length: int) -> bool:
    """Return True when an underscore run sits between two word characters.

    Such runs (``snake_case``) are literal text and never marker candidates.

    Examples:
        is_word_internal_underscore("hello_world", 5, 1)  # True
        is_word_internal_underscore("_italic", 0, 1)  # False
    """
    if text[start : start + length] != "_" * length:
        return False
    return is_word_char(char_before(text, start)) and is_word_char(char_at(text, start + length))


def is_line_start(text: str, pos: int) -> bool:
    """Return True when only indentation or blockquote markers precede `pos` on its line."""
    line_start = text.rfind("\n", 0, pos) + 1
    prefix = LINE_PREFIX_PATTERN.match(text, line_start)
    return prefix is not None and prefix.end() >= pos


def scan_delimiter_run(text: str, pos: int) -> DelimiterRun:
    """Classify the marker run starting at `pos`.

    ``*`` runs open when left-flanking and preceded by the start of the text,
    whitespace or punctuation, and close when right-flanking. ``_`` runs follow
    the same opening rule and close when right-flanking and not also
    left-flanking (unless followed by punctuation). ``~`` runs take part only
    when exactly two characters long.

    Args:
        text: Text containing the run.
        pos: Offset of the first marker character.

    Returns:
        DelimiterRun: The classified run.

    Raises:
        ValueError: If `pos` does not point at a marker character.

    Examples:
        scan_delimiter_run("**bold", 0).can_open  # True
        scan_delimiter_run("bold**", 4).can_close  # True
    """
    char = char_at(text, pos)
    if char not in DELIMITER_CHARS:
        raise ValueError(f"No delimiter character at offset {pos}")

    length = run_length(text, pos)
    before = char_before(text, pos)
    after = char_at(text, pos + length)
    left = is_left_flanking(before, after)
    right = is_right_flanking(before, after)
    opens_after = is_whitespace(before) or is_punctuation(before)

    if char == "_" and is_word_internal_underscore(text, pos, length):
        can_open = can_close = False
    elif char == STRIKETHROUGH_CHAR:
        paired = length == STRIKETHROUGH_LENGTH
        can_open = paired and left and opens_after
        can_close = paired and right
    elif char == "_":
        can_open = left and opens_after
        can_close = right and (not left or is_punctuation(after))
    else:
        can_open = left and opens_after
        can_close = right

    return DelimiterRun(
        char=char,
        length=length,
        start=pos,
        left_flanking=left,
        right_flanking=right,
        can_open=can_open,
        can_close=can_close,
    )

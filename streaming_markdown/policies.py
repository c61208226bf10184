"""Policy predicates for the ambiguous cases of incomplete Markdown.

Each special case of the completer is decided here rather than inside the
scanning loop: whether an HTML container stays raw, whether a dollar sign is
currency, whether an opener has anything to close yet, and which ``<`` starts
an autolink.
"""

from __future__ import annotations

from .constants import AUTOLINK_SCHEME_PATTERN, DOLLAR
from .delimiters import char_at, char_before, is_line_start, is_whitespace


def should_leave_html_raw(policy: str, has_blank_line: bool) -> bool:
    """Decide whether an unterminated HTML container is left untouched.

    Closing a container whose content already spans blank lines could turn
    Markdown nested inside the HTML into raw text, so the default policy only
    closes single-paragraph containers.

    Args:
        policy: One of ``"always"``, ``"blank-lines"`` or ``"never"``.
        has_blank_line: Whether the container content contains a blank line.

    Returns:
        bool: True to leave the container raw, False to append its closing tag.

    Examples:
        should_leave_html_raw("blank-lines", True)  # True
        should_leave_html_raw("blank-lines", False)  # False
    """
    if policy == "always":
        return True
    if policy == "never":
        return False
    return has_blank_line


def is_currency_dollar(text: str, pos: int) -> bool:
    """Return True when a single ``$`` reads as a currency sign.

    A dollar sign followed by a digit, whitespace or nothing at all, or glued
    to a preceding letter or digit (``US$``), is never a math opener.

    Examples:
        is_currency_dollar("$5", 0)  # True
        is_currency_dollar("$x^2", 0)  # False
    """
    after = char_at(text, pos + 1)
    if is_whitespace(after) or after.isdigit() or after == DOLLAR:
        return True
    return char_before(text, pos).isalnum()


def is_inline_math_opener(text: str, pos: int, single_dollar_math: bool) -> bool:
    """Return True when the single ``$`` at `pos` may open inline math."""
    return single_dollar_math and not is_currency_dollar(text, pos)


def is_inline_math_closer(text: str, pos: int) -> bool:
    """A single ``$`` closes inline math when it does not follow whitespace
    and is not followed by a digit."""
    return not is_whitespace(char_before(text, pos)) and not char_at(text, pos + 1).isdigit()


def has_pending_content(opener_start: int, insert_at: int) -> bool:
    """Return True when something other than whitespace or bare markers
    follows an opener.

    `insert_at` is where closers would go: just past the last character that
    is neither whitespace nor an unresolved marker. An opener at or beyond it
    has nothing to close yet (``**`` or a lone backtick at the end of the
    text) and stays literal.

    Examples:
        has_pending_content(0, 4)  # True, "`abc" closes after "abc"
        has_pending_content(0, 0)  # False, "`" alone stays literal
    """
    return opener_start < insert_at


def match_autolink_scheme(text: str, pos: int, schemes: tuple[str, ...]) -> int | None:
    """Recognize ``<scheme:`` at `pos`.

    Args:
        text: Text being scanned.
        pos: Offset of the ``<``.
        schemes: Lowercase schemes accepted as autolinks.

    Returns:
        int | None: Offset just past the ``:`` when the scheme is recognized,
            otherwise None.

    Examples:
        match_autolink_scheme("<https://x", 0, ("https",))  # 7
        match_autolink_scheme("<div>", 0, ("https",))  # None
    """
    scheme_match = AUTOLINK_SCHEME_PATTERN.match(text, pos)
    if scheme_match is None:
        return None
    if scheme_match.group("scheme").lower() not in schemes:
        return None
    return scheme_match.end()


def is_list_marker(text: str, start: int, length: int) -> bool:
    """Return True when a lone ``*`` at the start of a line is a bullet.

    A bullet is followed by whitespace or the end of the line; anything else is
    a possible emphasis opener.

    Examples:
        is_list_marker("* item", 0, 1)  # True
        is_list_marker("*item", 0, 1)  # False
    """
    if length != 1 or char_at(text, start) != "*":
        return False
    if not is_line_start(text, start):
        return False
    return is_whitespace(char_at(text, start + 1))

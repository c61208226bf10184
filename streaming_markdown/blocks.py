"""Line-level scanning of multi-line block constructs.

Fenced code, ``$$`` display math and block-level HTML containers swallow blank
lines and everything that looks like markup. Both the segmenter and the
completer walk lines through one `ParserContext` with the transitions below.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from functools import lru_cache

from .constants import (
    CLOSING_FENCE_MAX_INDENT,
    CODE_FENCE_PATTERN,
    HTML_CONTAINER_TAGS,
    HTML_OPEN_LINE_PATTERN,
    HTML_TAG_TEMPLATE,
    LINE_PATTERN,
    MATH_BLOCK_DELIMITER,
    MATH_BLOCK_PATTERN,
)
from .models import ParserContext, ParserState


def iter_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(offset, line)`` pairs, each line keeping its ``\\n``.

    Only ``\\n`` splits lines, so joining the lines always gives back `text`.

    Examples:
        list(iter_lines("a\\nb"))  # [(0, "a\\n"), (2, "b")]
    """
    for match in LINE_PATTERN.finditer(text):
        yield match.start(), match.group()


def is_blank(line: str) -> bool:
    return not line.strip()


def leading_whitespace_columns(line: str) -> int:
    """Compute the column width of leading whitespace.

    Tabs advance to the next multiple of four columns to match Markdown
    indentation rules.

    Examples:
        leading_whitespace_columns("    text")  # 4
        leading_whitespace_columns("\\ttext")  # 4
    """
    columns = 0
    for character in line:
        if character == " ":
            columns += 1
            continue
        if character == "\t":
            columns += 4 - (columns % 4)
            continue
        break
    return columns


def try_open_fence(ctx: ParserContext, line: str) -> bool:
    """Detect the start of a fenced code block.

    Backtick fences whose info string contains a backtick are inline code, not
    fences.

    Args:
        ctx: Scanner context to update when a fence opens.
        line: Current line being scanned.

    Returns:
        bool: True when the line begins a fence and the context is updated.

    Examples:
        try_open_fence(ParserContext(), "```python\\n")  # True
    """
    if ctx.state is not ParserState.NORMAL:
        return False

    fence_match = CODE_FENCE_PATTERN.match(line)
    if not fence_match:
        return False

    indent_columns = leading_whitespace_columns(fence_match.group("indent"))
    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    fence_sequence = fence_match.group("fence")
    if fence_sequence[0] == "`" and "`" in fence_match.group("info"):
        return False

    ctx.state = ParserState.IN_FENCED_CODE
    ctx.fence_char = fence_sequence[0]
    ctx.fence_length = len(fence_sequence)
    ctx.fence_indent_columns = indent_columns
    return True


def try_close_fence(ctx: ParserContext, line: str) -> bool:
    """Attempt to close the active fenced code block.

    The closer must use the opener's character, be at least as long, carry
    nothing but trailing whitespace and be indented at most three columns.

    Examples:
        ctx = ParserContext(state=ParserState.IN_FENCED_CODE, fence_char="`", fence_length=3)
        try_close_fence(ctx, "```\\n")  # True
    """
    if ctx.state is not ParserState.IN_FENCED_CODE or ctx.fence_char is None:
        return False

    indent_columns = leading_whitespace_columns(line)
    stripped_line = line.lstrip(" \t")
    if not stripped_line or stripped_line[0] != ctx.fence_char:
        return False

    fence_run_length = len(stripped_line) - len(stripped_line.lstrip(ctx.fence_char))
    if fence_run_length < ctx.fence_length:
        return False

    if stripped_line[fence_run_length:].strip():
        return False

    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    ctx.state = ParserState.NORMAL
    ctx.fence_char = None
    ctx.fence_length = 0
    ctx.fence_indent_columns = 0
    return True


def try_open_math_block(ctx: ParserContext, line: str) -> bool:
    """Detect a ``$$`` display math block that does not close on its own line.

    Examples:
        try_open_math_block(ParserContext(), "$$\\n")  # True
        try_open_math_block(ParserContext(), "$$x$$\\n")  # False
    """
    if ctx.state is not ParserState.NORMAL:
        return False
    if not MATH_BLOCK_PATTERN.match(line):
        return False
    if line.count(MATH_BLOCK_DELIMITER) % 2 == 0:
        return False

    ctx.state = ParserState.IN_MATH_BLOCK
    return True


def try_close_math_block(ctx: ParserContext, line: str) -> bool:
    if ctx.state is not ParserState.IN_MATH_BLOCK:
        return False
    if line.count(MATH_BLOCK_DELIMITER) % 2 == 0:
        return False

    ctx.state = ParserState.NORMAL
    return True


@lru_cache(maxsize=64)
def _tag_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(HTML_TAG_TEMPLATE.format(tag=re.escape(tag)), re.IGNORECASE)


def html_tag_balance(line: str, tag: str) -> int:
    """Count opening minus closing `tag` elements on a line.

    Self-closing tags do not count.

    Examples:
        html_tag_balance("<div><div>x</div>", "div")  # 1
    """
    balance = 0
    for match in _tag_pattern(tag).finditer(line):
        if match.group("closing"):
            balance -= 1
        elif not match.group("self"):
            balance += 1
    return balance


def try_open_html_block(ctx: ParserContext, line: str) -> bool:
    """Detect a block-level HTML container left open at the end of the line.

    Examples:
        try_open_html_block(ParserContext(), "<details>\\n")  # True
        try_open_html_block(ParserContext(), "<div>done</div>\\n")  # False
    """
    if ctx.state is not ParserState.NORMAL:
        return False

    tag_match = HTML_OPEN_LINE_PATTERN.match(line)
    if not tag_match:
        return False

    tag = tag_match.group("tag").lower()
    if tag not in HTML_CONTAINER_TAGS:
        return False

    depth = html_tag_balance(line, tag)
    if depth <= 0:
        return False

    ctx.state = ParserState.IN_HTML_BLOCK
    ctx.html_tag = tag
    ctx.html_depth = depth
    ctx.html_blank_line = False
    return True


def try_close_html_block(ctx: ParserContext, line: str) -> bool:
    """Track nesting inside the open HTML container; True once it closes."""
    if ctx.state is not ParserState.IN_HTML_BLOCK or ctx.html_tag is None:
        return False

    if is_blank(line):
        ctx.html_blank_line = True
        return False

    ctx.html_depth += html_tag_balance(line, ctx.html_tag)
    if ctx.html_depth > 0:
        return False

    ctx.state = ParserState.NORMAL
    ctx.html_tag = None
    ctx.html_depth = 0
    ctx.html_blank_line = False
    return True


def try_open_region(ctx: ParserContext, line: str) -> bool:
    """Open a fence, math block or HTML container on `line`, in that order."""
    return (
        try_open_fence(ctx, line)
        or try_open_math_block(ctx, line)
        or try_open_html_block(ctx, line)
    )


def try_advance_region(ctx: ParserContext, line: str) -> bool:
    """Feed `line` to the open region, if any.

    Returns:
        bool: True when the line belonged to an open region (whether or not it
            closed it); False when the scanner was in the normal state.
    """
    if ctx.state is ParserState.IN_FENCED_CODE:
        try_close_fence(ctx, line)
        return True
    if ctx.state is ParserState.IN_MATH_BLOCK:
        try_close_math_block(ctx, line)
        return True
    if ctx.state is ParserState.IN_HTML_BLOCK:
        try_close_html_block(ctx, line)
        return True
    return False

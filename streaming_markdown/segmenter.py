"""Split accumulated Markdown into stable top-level blocks."""

from __future__ import annotations

import logging

from ._logging import resolve_logger
from .blocks import (
    is_blank,
    iter_lines,
    leading_whitespace_columns,
    try_advance_region,
    try_open_region,
)
from .constants import (
    INDENTED_CODE_COLUMNS,
    LIST_CONTINUATION_COLUMNS,
    LIST_ITEM_PATTERN,
    PARTIAL_LIST_ITEM_PATTERN,
)
from .models import Block, ParserContext, ParserState


class _BlockShape:
    """Containers of the current block that may continue past a blank line."""

    def __init__(self) -> None:
        self.in_list = False
        self.indented_code = False

    def start(self, line: str) -> None:
        self.in_list = False
        self.indented_code = leading_whitespace_columns(line) >= INDENTED_CODE_COLUMNS
        self.observe(line)

    def observe(self, line: str) -> None:
        if LIST_ITEM_PATTERN.match(line):
            self.in_list = True
            self.indented_code = False

    def continues(self, line: str, partial: bool) -> bool:
        """Decide whether `line`, following a blank line, stays in this block.

        A partial last line that could still grow into a list item is kept in
        the block so earlier blocks never change when more text arrives.
        """
        columns = leading_whitespace_columns(line)
        if self.indented_code and columns >= INDENTED_CODE_COLUMNS:
            return True
        if not self.in_list:
            return False
        if columns >= LIST_CONTINUATION_COLUMNS or LIST_ITEM_PATTERN.match(line):
            return True
        return partial and PARTIAL_LIST_ITEM_PATTERN.match(line) is not None


def segment_markdown(
    text: str, *, logger: logging.Logger | None = None, log: bool = False
) -> list[str]:
    """Split Markdown text into top-level blocks.

    Boundaries fall on blank lines between block-level constructs. Blank lines
    inside fenced code, ``$$`` math or an open HTML container are content, and
    so are blank lines inside a list or an indented code block that the next
    line continues. An unterminated construct absorbs the rest of the text.
    Blank lines stay with the block they follow; leading blank lines belong to
    the first block.

    Args:
        text: Full text accumulated so far; may end mid-construct.
        logger: Optional logger receiving debug output.
        log: Enable debug logging on the package logger when no `logger` is given.

    Returns:
        list[str]: Non-empty blocks in document order. Joining them gives back
            `text` exactly.

    Examples:
        segment_markdown("# Title\\n\\nBody")  # ["# Title\\n\\n", "Body"]
        segment_markdown("```js\\n\\ncode")  # ["```js\\n\\ncode"]
    """
    lg = resolve_logger(logger=logger, enabled=log, name=__name__)
    if not text:
        return []

    blocks: list[str] = []
    current: list[str] = []
    has_content = False
    after_blank = False
    shape = _BlockShape()
    ctx = ParserContext()

    for _, line in iter_lines(text):
        if try_advance_region(ctx, line):
            current.append(line)
            continue

        if is_blank(line):
            current.append(line)
            after_blank = has_content
            continue

        partial = not line.endswith("\n")
        if after_blank and not shape.continues(line, partial):
            blocks.append("".join(current))
            current = []
            shape.start(line)
        elif not has_content:
            shape.start(line)
        else:
            shape.observe(line)

        current.append(line)
        has_content = True
        after_blank = False
        try_open_region(ctx, line)

    if current:
        blocks.append("".join(current))

    if ctx.state is not ParserState.NORMAL:
        lg.debug("last block ends inside %s", ctx.state.name)
    lg.debug("segmented %d characters into %d blocks", len(text), len(blocks))
    return blocks


def split_blocks(text: str) -> list[Block]:
    """Segment `text` into `Block` records carrying their document position.

    Examples:
        split_blocks("a\\n\\nb")  # [Block(0, "a\\n\\n"), Block(1, "b")]
    """
    return [
        Block(index=index, content=content)
        for index, content in enumerate(segment_markdown(text))
    ]

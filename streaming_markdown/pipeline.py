"""Per-update helpers for applications rendering a growing Markdown stream."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ._logging import resolve_logger
from .completer import complete_markdown
from .config import CompletionConfig
from .segmenter import segment_markdown


def prepare_blocks(
    text: str,
    parse_incomplete: bool = True,
    *,
    config: CompletionConfig | None = None,
    logger: logging.Logger | None = None,
    log: bool = False,
) -> list[str]:
    """Segment `text` and complete each block for rendering.

    Surrounding whitespace is stripped from every block before completion, so
    each entry is what a view renders for that block on this update.

    Args:
        text: Full text accumulated so far.
        parse_incomplete: Complete unterminated constructs when True; only
            segment when False.
        config: Completion policy switches.
        logger: Optional logger receiving debug output.
        log: Enable debug logging on the package logger when no `logger` is given.

    Returns:
        list[str]: One rendered source string per block, in document order.

    Examples:
        prepare_blocks("# Title\\n\\n**bold")  # ["# Title", "**bold**"]
    """
    lg = resolve_logger(logger=logger, enabled=log, name=__name__)
    blocks = segment_markdown(text, logger=logger, log=log)
    prepared = [
        complete_markdown(
            block.strip(), parse_incomplete, config=config, logger=logger, log=log
        )
        for block in blocks
    ]
    lg.debug("prepared %d blocks", len(prepared))
    return prepared


def diff_blocks(previous: Sequence[str], current: Sequence[str]) -> list[int]:
    """Return the indices of `current` that need rendering again.

    A block is stale when it is new or its content differs by value from the
    block at the same index in `previous`.

    Examples:
        diff_blocks(["a", "b"], ["a", "bc", "d"])  # [1, 2]
    """
    return [
        index
        for index, block in enumerate(current)
        if index >= len(previous) or previous[index] != block
    ]

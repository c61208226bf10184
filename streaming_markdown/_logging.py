"""
Opt-in debug logging for the segmenter, the completer and the pipeline.

`segment_markdown`, `complete_markdown` and `prepare_blocks` all accept
`logger=` and `log=`. They run on every update of a stream, so they stay
silent unless the caller asks otherwise:

    complete_markdown("**bold", log=True)          # "streaming_markdown.completer"
    complete_markdown("**bold", logger=my_logger)  # caller's logger

The CLI turns this on with `--verbose`.
"""

from __future__ import annotations

import logging

PACKAGE_LOGGER = "streaming_markdown"


class NoopLogger:
    """Stands in for a logger when logging was not requested."""

    def debug(self, *args, **kwargs):  # type: ignore[no-untyped-def]
        pass

    info = warning = error = exception = critical = debug


def resolve_logger(
    logger: logging.Logger | None = None,
    *,
    enabled: bool = False,
    name: str | None = None,
    level: int = logging.DEBUG,
) -> logging.Logger | NoopLogger:
    """Pick the logger an engine entry point writes to.

    Args:
        logger: Logger supplied by the caller; always wins.
        enabled: Whether to log on a package logger when `logger` is None.
        name: Module name of the entry point, normally `__name__`.
        level: Level set on the package logger when enabled.

    Returns:
        The caller's logger, a logger under ``streaming_markdown``, or a
        `NoopLogger`.
    """
    if logger is not None:
        return logger
    if not enabled:
        return NoopLogger()

    if not name or not name.startswith(PACKAGE_LOGGER):
        name = PACKAGE_LOGGER
    package_logger = logging.getLogger(name)
    package_logger.setLevel(level)
    package_logger.propagate = True
    return package_logger

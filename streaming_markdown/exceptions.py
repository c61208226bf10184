"""Package-specific exception types."""

from __future__ import annotations


class CompletionError(ValueError):
    """Base class for completion bookkeeping errors.

    These never reach callers of the engine: the affected construct or block
    is left as literal text instead.
    """


class UnmatchedDelimiterError(CompletionError):
    """Raised when a closing delimiter run finds no opener on the stack.

    Args:
        char: Marker character of the closing run.
        position: Zero-based offset of the closing run.
    """

    def __init__(self, char: str, position: int):
        self.char = char
        self.position = position
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return f"No open {self.char!r} delimiter to close at offset {self.position}"


class UnstableCompletionError(CompletionError):
    """Raised when a completed block would still change on a second pass.

    Args:
        pending: Number of insertions the second pass still wanted.
    """

    def __init__(self, pending: int):
        self.pending = pending
        super().__init__(f"Completion is not stable ({pending} pending insertions)")

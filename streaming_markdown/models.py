"""Data models for streaming-markdown."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ParserState(Enum):
    """Line-level scanner states.

    Attributes:
        NORMAL: Default state for regular text.
        IN_FENCED_CODE: Inside a fenced code block.
        IN_MATH_BLOCK: Inside a ``$$`` display math block.
        IN_HTML_BLOCK: Inside an open block-level HTML container.
    """

    NORMAL = auto()
    IN_FENCED_CODE = auto()
    IN_MATH_BLOCK = auto()
    IN_HTML_BLOCK = auto()


@dataclass
class ParserContext:
    """Encapsulate scanner state while walking Markdown lines.

    Attributes:
        state: Current scanner state.
        fence_char: Fence character that opened a fenced code block, if any.
        fence_length: Number of fence characters that opened the block.
        fence_indent_columns: Indentation width preceding the opening fence.
        html_tag: Lowercased tag name of the open HTML container, if any.
        html_depth: Nesting depth of ``html_tag`` inside the container.
        html_blank_line: Whether a blank line was seen inside the container.
    """

    state: ParserState = ParserState.NORMAL
    fence_char: str | None = None
    fence_length: int = 0
    fence_indent_columns: int = 0
    html_tag: str | None = None
    html_depth: int = 0
    html_blank_line: bool = False


class ConstructKind(Enum):
    """Kinds of inline constructs the completer can leave open."""

    EMPHASIS = auto()
    STRIKETHROUGH = auto()
    CODE_SPAN = auto()
    INLINE_MATH = auto()
    LINK_DESTINATION = auto()
    AUTOLINK = auto()
    CODE_FENCE = auto()
    MATH_BLOCK = auto()
    HTML_BLOCK = auto()


@dataclass(frozen=True)
class Block:
    """A top-level unit of Markdown source produced by the segmenter.

    Attributes:
        index: Position of the block in document order.
        content: Exact source text of the block, separators included.
    """

    index: int
    content: str


@dataclass(frozen=True)
class DelimiterRun:
    """A maximal run of one emphasis or strikethrough marker character.

    Attributes:
        char: Marker character (``*``, ``_`` or ``~``).
        length: Number of characters in the run.
        start: Offset of the first character of the run.
        left_flanking: Whether the run is left-flanking.
        right_flanking: Whether the run is right-flanking.
        can_open: Whether the run may open emphasis or strikethrough.
        can_close: Whether the run may close emphasis or strikethrough.
    """

    char: str
    length: int
    start: int
    left_flanking: bool
    right_flanking: bool
    can_open: bool
    can_close: bool

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class FenceDescriptor:
    """A fenced code block found by the line-level scanner.

    Attributes:
        char: Fence character (backtick or tilde).
        length: Length of the opening fence run.
        indent: Indentation columns before the opening fence.
        start: Offset where the fenced content begins.
    """

    char: str
    length: int
    indent: int
    start: int


@dataclass
class BracketSpan:
    """A link or image candidate.

    Attributes:
        start: Offset of ``[`` or ``![``.
        is_image: Whether the bracket is preceded by ``!``.
        paren: Offset of the ``(`` opening a link destination, if found.
        stack_depth: Emphasis stack height when the bracket was opened.
    """

    start: int
    is_image: bool = False
    paren: int | None = None
    stack_depth: int = 0


@dataclass(frozen=True)
class MathDelimiter:
    """A ``$`` or ``$$`` run considered as a math delimiter.

    Attributes:
        start: Offset of the first dollar sign.
        length: 1 for inline ``$`` math, 2 for ``$$``.
        confirmed: Whether the run was resolved as math rather than currency.
    """

    start: int
    length: int
    confirmed: bool


@dataclass(frozen=True)
class OpenConstruct:
    """An opener still waiting for its closer at the end of a block.

    Attributes:
        kind: Construct family the opener belongs to.
        start: Offset of the opener.
        end: Offset just past the opener.
        closer: Text that closes the construct.
        droppable: Whether the opener stays literal when nothing follows it.
    """

    kind: ConstructKind
    start: int
    end: int
    closer: str
    droppable: bool = True

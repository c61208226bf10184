"""Close the constructs a partial Markdown block leaves open.

The completer works in two passes over one block. A line-level pass tracks
fenced code, ``$$`` math and HTML containers and finds where the last
paragraph-level segment starts. If the block ends inside one of those regions
its closing line is appended. Otherwise a single left-to-right inline pass
over the last segment tracks emphasis and strikethrough on one delimiter
stack, with separate scanners for code spans, math, links and autolinks.

Closers go right after the last character of real content, innermost first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ._logging import resolve_logger
from .blocks import iter_lines, try_advance_region, try_open_region
from .config import CompletionConfig
from .constants import (
    ATX_HEADING_PATTERN,
    BACKSLASH,
    BACKTICK,
    DELIMITER_CHARS,
    DOLLAR,
    LINE_PREFIX_PATTERN,
    LIST_ITEM_PATTERN,
    MATH_BLOCK_DELIMITER,
    STRIKETHROUGH_CHAR,
    TABLE_ROW_PATTERN,
    THEMATIC_BREAK_PATTERN,
)
from .delimiters import char_at, char_before, run_length, scan_delimiter_run
from .exceptions import UnmatchedDelimiterError, UnstableCompletionError
from .models import (
    BracketSpan,
    ConstructKind,
    DelimiterRun,
    FenceDescriptor,
    MathDelimiter,
    OpenConstruct,
    ParserContext,
    ParserState,
)
from .policies import (
    has_pending_content,
    is_inline_math_closer,
    is_inline_math_opener,
    is_list_marker,
    match_autolink_scheme,
    should_leave_html_raw,
)


def complete_markdown(
    text: str,
    enabled: bool = True,
    *,
    config: CompletionConfig | None = None,
    logger: logging.Logger | None = None,
    log: bool = False,
) -> str:
    """Close every construct left open at the end of a Markdown block.

    Unterminated fences and ``$$`` blocks get their closing line; emphasis,
    strikethrough, code spans, inline math, link destinations and autolinks
    get their closers. Openers with nothing after them yet (``**`` or a lone
    backtick), link text without a destination and currency dollars stay
    literal. Text that is already complete is returned unchanged, and so is
    the output of a previous call.

    Args:
        text: Block text, possibly cut mid-construct.
        enabled: When False, `text` is returned as is.
        config: Policy switches; defaults to `CompletionConfig()`.
        logger: Optional logger receiving debug output.
        log: Enable debug logging on the package logger when no `logger` is given.

    Returns:
        str: The completed block.

    Examples:
        complete_markdown("**bold")  # "**bold**"
        complete_markdown("[click](http://x")  # "[click](http://x)"
        complete_markdown("$5")  # "$5"
    """
    lg = resolve_logger(logger=logger, enabled=log, name=__name__)
    if not enabled or not text:
        return text

    config = config or CompletionConfig()
    plan = plan_completion(text, config)
    if not plan.closers:
        return text

    completed = plan.apply(text)
    try:
        _ensure_stable(completed, config)
    except UnstableCompletionError as error:
        lg.debug("leaving block unchanged: %s", error)
        return text

    lg.debug(
        "closed %s at offset %d",
        ", ".join(construct.kind.name for construct in plan.constructs),
        plan.insert_at,
    )
    return completed


@dataclass(frozen=True)
class CompletionPlan:
    """Closers to insert into a block, all at one offset.

    Attributes:
        insert_at: Offset where the closers go.
        constructs: Open constructs being closed, innermost first.
        closers: Closer text for each construct, in insertion order.
    """

    insert_at: int
    constructs: tuple[OpenConstruct, ...] = ()
    closers: tuple[str, ...] = ()

    def apply(self, text: str) -> str:
        return text[: self.insert_at] + "".join(self.closers) + text[self.insert_at :]


def plan_completion(text: str, config: CompletionConfig | None = None) -> CompletionPlan:
    """Work out which closers `text` needs without applying them.

    Examples:
        plan_completion("*a").closers  # ("*",)
        plan_completion("done").closers  # ()
    """
    config = config or CompletionConfig()
    structure = _scan_structure(text)
    if structure.ctx.state is not ParserState.NORMAL:
        return _plan_region(text, structure, config)

    scanner = _InlineScanner(text, structure.segment_start, config)
    scanner.scan()
    return scanner.plan()


def _ensure_stable(completed: str, config: CompletionConfig) -> None:
    pending = plan_completion(completed, config).closers
    if pending:
        raise UnstableCompletionError(len(pending))


@dataclass
class _BlockStructure:
    """Result of the line-level pass.

    Attributes:
        ctx: Scanner state after the last line.
        segment_start: Offset of the last inline segment.
        region_start: Offset of the line that opened the current region.
        fence: The fence left open after the last line, if any.
    """

    ctx: ParserContext = field(default_factory=ParserContext)
    segment_start: int = 0
    region_start: int = 0
    fence: FenceDescriptor | None = None


def _is_paragraph_break(line: str) -> bool:
    """Blank lines and bare blockquote markers end a paragraph."""
    return LINE_PREFIX_PATTERN.fullmatch(line.rstrip("\r\n")) is not None


def _scan_structure(text: str) -> _BlockStructure:
    structure = _BlockStructure()
    ctx = structure.ctx
    single_line = False

    for offset, line in iter_lines(text):
        line_end = offset + len(line)
        if try_advance_region(ctx, line):
            if ctx.state is ParserState.NORMAL:
                structure.fence = None
                structure.segment_start = line_end
            continue

        if try_open_region(ctx, line):
            structure.region_start = offset
            if ctx.state is ParserState.IN_FENCED_CODE:
                structure.fence = FenceDescriptor(
                    char=ctx.fence_char,
                    length=ctx.fence_length,
                    indent=ctx.fence_indent_columns,
                    start=line_end,
                )
            continue

        if single_line:
            structure.segment_start = offset
            single_line = False

        content = line.rstrip("\r\n")
        if _is_paragraph_break(line) or THEMATIC_BREAK_PATTERN.match(content):
            structure.segment_start = line_end
        elif ATX_HEADING_PATTERN.match(content) or TABLE_ROW_PATTERN.match(content):
            structure.segment_start = offset
            single_line = True
        elif LIST_ITEM_PATTERN.match(content):
            structure.segment_start = offset

    return structure


def _plan_region(
    text: str, structure: _BlockStructure, config: CompletionConfig
) -> CompletionPlan:
    ctx = structure.ctx
    separator = "" if text.endswith("\n") else "\n"

    if structure.fence is not None:
        fence = structure.fence
        kind = ConstructKind.CODE_FENCE
        closer = " " * fence.indent + fence.char * fence.length
        opener_end = fence.start
    elif ctx.state is ParserState.IN_MATH_BLOCK:
        kind = ConstructKind.MATH_BLOCK
        closer = MATH_BLOCK_DELIMITER
        opener_end = structure.region_start + len(MATH_BLOCK_DELIMITER)
    else:
        if should_leave_html_raw(config.html_raw_policy, ctx.html_blank_line):
            return CompletionPlan(insert_at=len(text))
        kind = ConstructKind.HTML_BLOCK
        closer = f"</{ctx.html_tag}>" * ctx.html_depth
        opener_end = structure.region_start

    construct = OpenConstruct(
        kind=kind,
        start=structure.region_start,
        end=opener_end,
        closer=closer,
        droppable=False,
    )
    return CompletionPlan(
        insert_at=len(text), constructs=(construct,), closers=(separator + closer,)
    )


@dataclass
class _StackEntry:
    """An emphasis or strikethrough opener waiting on the delimiter stack."""

    char: str
    start: int
    end: int
    remaining: int


class _InlineScanner:
    """Single left-to-right pass over the last inline segment of a block.

    Code spans, math, link destinations and autolinks that run to the end of
    the text end the scan; nothing after their opener is markup.
    """

    def __init__(self, text: str, start: int, config: CompletionConfig) -> None:
        self.text = text
        self.start = start
        self.config = config
        self.stack: list[_StackEntry] = []
        self.brackets: list[BracketSpan] = []
        self.constructs: list[OpenConstruct] = []
        # Literal spans skipped when looking for the end of the content
        self.inert: list[tuple[int, int]] = []

    def scan(self) -> None:
        text = self.text
        pos = self.start
        while pos < len(text):
            char = text[pos]
            if char == BACKSLASH:
                pos = self._scan_escape(pos)
            elif char == BACKTICK:
                pos = self._scan_code_span(pos)
            elif char == DOLLAR:
                pos = self._scan_math(pos)
            elif char == "<":
                pos = self._scan_autolink(pos)
            elif char == "[" or (char == "!" and char_at(text, pos + 1) == "["):
                pos = self._open_bracket(pos)
            elif char == "]":
                pos = self._close_bracket(pos)
            elif char in DELIMITER_CHARS:
                pos = self._scan_delimiters(pos)
            else:
                pos += 1

    def plan(self) -> CompletionPlan:
        constructs = list(self.constructs)
        for entry in self.stack:
            kind = (
                ConstructKind.STRIKETHROUGH
                if entry.char == STRIKETHROUGH_CHAR
                else ConstructKind.EMPHASIS
            )
            constructs.append(
                OpenConstruct(
                    kind=kind,
                    start=entry.start,
                    end=entry.end,
                    closer=entry.char * entry.remaining,
                )
            )
        for bracket in self.brackets:
            self.inert.append((bracket.start, bracket.start + (2 if bracket.is_image else 1)))

        insert_at = self._insertion_point(constructs)
        pending = sorted(
            (
                construct
                for construct in constructs
                if not construct.droppable or has_pending_content(construct.start, insert_at)
            ),
            key=lambda construct: construct.start,
            reverse=True,
        )
        closers = tuple(self._closer_text(construct, insert_at) for construct in pending)
        return CompletionPlan(insert_at=insert_at, constructs=tuple(pending), closers=closers)

    def _insertion_point(self, constructs: list[OpenConstruct]) -> int:
        """Walk back over trailing whitespace and literal spans."""
        starts: dict[int, int] = {}
        spans = self.inert + [(c.start, c.end) for c in constructs if c.droppable]
        for start, end in spans:
            starts[end] = min(start, starts.get(end, start))

        pos = len(self.text)
        while pos > self.start:
            if self.text[pos - 1].isspace():
                pos -= 1
            elif pos in starts and starts[pos] < pos:
                pos = starts[pos]
            else:
                break
        return max(pos, self.start)

    def _closer_text(self, construct: OpenConstruct, insert_at: int) -> str:
        before = char_before(self.text, insert_at)
        if construct.kind is ConstructKind.CODE_SPAN and before == BACKTICK:
            return " " + construct.closer
        if construct.closer == MATH_BLOCK_DELIMITER and before == DOLLAR:
            return " " + construct.closer
        return construct.closer

    def _scan_escape(self, pos: int) -> int:
        if pos + 1 >= len(self.text):
            self.inert.append((pos, pos + 1))
        return pos + 2

    def _scan_code_span(self, pos: int) -> int:
        text = self.text
        length = run_length(text, pos)
        search = pos + length
        while search < len(text):
            if text[search] == BACKTICK:
                closing_length = run_length(text, search)
                if closing_length == length:
                    return search + length
                search += closing_length
            else:
                search += 1

        self.constructs.append(
            OpenConstruct(
                kind=ConstructKind.CODE_SPAN,
                start=pos,
                end=pos + length,
                closer=BACKTICK * length,
            )
        )
        return len(text)

    def _classify_dollar(self, pos: int) -> MathDelimiter:
        length = run_length(self.text, pos)
        if length == 2:
            return MathDelimiter(start=pos, length=2, confirmed=True)
        if length > 2:
            return MathDelimiter(start=pos, length=length, confirmed=False)
        confirmed = is_inline_math_opener(self.text, pos, self.config.single_dollar_math)
        return MathDelimiter(start=pos, length=1, confirmed=confirmed)

    def _scan_math(self, pos: int) -> int:
        text = self.text
        delimiter = self._classify_dollar(pos)
        opener_end = pos + delimiter.length
        if not delimiter.confirmed:
            return opener_end

        closed_at = self._find_math_closer(delimiter)
        if closed_at is not None:
            return closed_at
        # A single dollar pairs only on its own line; earlier lines are done
        if delimiter.length == 1 and "\n" in text[opener_end:]:
            return opener_end

        self.constructs.append(
            OpenConstruct(
                kind=ConstructKind.INLINE_MATH,
                start=pos,
                end=opener_end,
                closer=DOLLAR * delimiter.length,
            )
        )
        return len(text)

    def _find_math_closer(self, delimiter: MathDelimiter) -> int | None:
        text = self.text
        search = delimiter.start + delimiter.length
        while search < len(text):
            char = text[search]
            if char == BACKSLASH:
                if search + 1 >= len(text):
                    self.inert.append((search, search + 1))
                search += 2
                continue
            if delimiter.length == 1:
                if char == "\n":
                    return None
                if char == DOLLAR and is_inline_math_closer(text, search):
                    return search + 1
            elif text.startswith(MATH_BLOCK_DELIMITER, search):
                return search + 2
            search += 1
        return None

    def _scan_autolink(self, pos: int) -> int:
        text = self.text
        scheme_end = match_autolink_scheme(text, pos, self.config.autolink_schemes)
        if scheme_end is None:
            return pos + 1

        for search in range(scheme_end, len(text)):
            char = text[search]
            if char == ">":
                return search + 1
            if char == "<" or char.isspace():
                return pos + 1

        self.constructs.append(
            OpenConstruct(
                kind=ConstructKind.AUTOLINK,
                start=pos,
                end=scheme_end,
                closer=">",
                droppable=False,
            )
        )
        return len(text)

    def _open_bracket(self, pos: int) -> int:
        is_image = self.text[pos] == "!"
        self.brackets.append(
            BracketSpan(start=pos, is_image=is_image, stack_depth=len(self.stack))
        )
        return pos + (2 if is_image else 1)

    def _close_bracket(self, pos: int) -> int:
        if not self.brackets:
            return pos + 1

        bracket = self.brackets.pop()
        if char_at(self.text, pos + 1) != "(":
            return pos + 1

        bracket.paren = pos + 1
        next_pos = self._scan_destination(bracket)
        if next_pos is None:
            bracket.paren = None
            return pos + 1

        # Emphasis opened inside the link text cannot close outside it
        del self.stack[bracket.stack_depth :]
        if not bracket.is_image:
            self.brackets = [span for span in self.brackets if span.is_image]
        return next_pos

    def _scan_destination(self, bracket: BracketSpan) -> int | None:
        """Scan ``(destination "title")`` after a closed bracket.

        Returns the offset after ``)``, the end of the text when the
        destination is still open, or None when it cannot be a destination.
        """
        text = self.text
        paren = bracket.paren
        search = paren + 1
        depth = 1
        in_angle = char_at(text, search) == "<"
        if in_angle:
            search += 1
        title_quote = ""

        while search < len(text):
            char = text[search]
            if char == BACKSLASH:
                if search + 1 >= len(text):
                    self.inert.append((search, search + 1))
                search += 2
                continue
            if title_quote:
                if char == title_quote:
                    title_quote = ""
            elif in_angle:
                if char == ">":
                    in_angle = False
                elif char in "<\n":
                    return None
            elif char in "\"'" and char_before(text, search).isspace():
                title_quote = char
            elif char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return search + 1
            search += 1

        closer = title_quote + (">" if in_angle else "") + ")" * depth
        self.constructs.append(
            OpenConstruct(
                kind=ConstructKind.LINK_DESTINATION,
                start=paren,
                end=paren + 1,
                closer=closer,
                droppable=False,
            )
        )
        return len(text)

    def _scan_delimiters(self, pos: int) -> int:
        run = scan_delimiter_run(self.text, pos)
        if is_list_marker(self.text, pos, run.length):
            self.inert.append((run.start, run.end))
            return run.end

        remaining = run.length
        if run.can_close:
            try:
                remaining = self._close_run(run)
            except UnmatchedDelimiterError:
                remaining = run.length

        if remaining and run.can_open:
            self.stack.append(
                _StackEntry(
                    char=run.char,
                    start=run.end - remaining,
                    end=run.end,
                    remaining=remaining,
                )
            )
        elif remaining:
            self.inert.append((run.end - remaining, run.end))
        return run.end

    def _close_run(self, run: DelimiterRun) -> int:
        """Match a closing run against the stack; return its unused length.

        Raises:
            UnmatchedDelimiterError: If no opener of the same character is open.
        """
        remaining = run.length
        while remaining:
            index = self._find_opener(run.char)
            if index is None:
                if remaining == run.length:
                    raise UnmatchedDelimiterError(run.char, run.start)
                break

            opener = self.stack[index]
            del self.stack[index + 1 :]
            matched = min(opener.remaining, remaining)
            opener.remaining -= matched
            remaining -= matched
            if not opener.remaining:
                self.stack.pop()
        return remaining

    def _find_opener(self, char: str) -> int | None:
        for index in range(len(self.stack) - 1, -1, -1):
            if self.stack[index].char == char:
                return index
        return None

from streaming_markdown.blocks import (
    html_tag_balance,
    iter_lines,
    leading_whitespace_columns,
    try_advance_region,
    try_close_fence,
    try_close_html_block,
    try_close_math_block,
    try_open_fence,
    try_open_html_block,
    try_open_math_block,
    try_open_region,
)
from streaming_markdown.models import ParserContext, ParserState


def test_iter_lines_keeps_newlines_and_offsets():
    assert list(iter_lines("a\nbc\n\nd")) == [(0, "a\n"), (2, "bc\n"), (5, "\n"), (6, "d")]
    assert list(iter_lines("")) == []


def test_iter_lines_keeps_carriage_returns():
    assert [line for _, line in iter_lines("a\r\nb")] == ["a\r\n", "b"]


def test_leading_whitespace_columns_expands_tabs():
    assert leading_whitespace_columns("    text") == 4
    assert leading_whitespace_columns("\ttext") == 4
    assert leading_whitespace_columns("  \ttext") == 4
    assert leading_whitespace_columns("text") == 0


def test_try_open_fence_sets_context_fields():
    ctx = ParserContext()

    opened = try_open_fence(ctx, "   ```python\n")

    assert opened is True
    assert ctx.state is ParserState.IN_FENCED_CODE
    assert ctx.fence_char == "`"
    assert ctx.fence_length == 3
    assert ctx.fence_indent_columns == 3


def test_try_open_fence_ignored_when_already_in_code():
    ctx = ParserContext(state=ParserState.IN_FENCED_CODE, fence_char="~", fence_length=3)

    assert try_open_fence(ctx, "```") is False
    assert ctx.fence_char == "~"
    assert ctx.fence_length == 3


def test_backtick_fence_info_cannot_contain_backticks():
    ctx = ParserContext()

    assert try_open_fence(ctx, "```a`b```\n") is False
    assert ctx.state is ParserState.NORMAL


def test_tilde_fence_info_may_contain_backticks():
    assert try_open_fence(ParserContext(), "~~~ a`b\n") is True


def test_try_close_fence_respects_indent_limit():
    ctx = ParserContext(
        state=ParserState.IN_FENCED_CODE,
        fence_char="`",
        fence_length=3,
        fence_indent_columns=0,
    )

    assert try_close_fence(ctx, "    ```\n") is False

    assert try_close_fence(ctx, "```") is True
    assert ctx.state is ParserState.NORMAL
    assert ctx.fence_char is None
    assert ctx.fence_length == 0
    assert ctx.fence_indent_columns == 0


def test_try_close_fence_requires_same_char_and_length():
    ctx = ParserContext(state=ParserState.IN_FENCED_CODE, fence_char="`", fence_length=4)

    assert try_close_fence(ctx, "```\n") is False
    assert try_close_fence(ctx, "~~~~\n") is False
    assert try_close_fence(ctx, "```` trailing\n") is False
    assert try_close_fence(ctx, "`````\n") is True


def test_math_block_opens_on_unbalanced_delimiter_line():
    ctx = ParserContext()

    assert try_open_math_block(ctx, "$$x$$\n") is False
    assert try_open_math_block(ctx, "$$\n") is True
    assert ctx.state is ParserState.IN_MATH_BLOCK

    assert try_close_math_block(ctx, "x = 1\n") is False
    assert try_close_math_block(ctx, "$$\n") is True
    assert ctx.state is ParserState.NORMAL


def test_html_tag_balance_counts_nesting():
    assert html_tag_balance("<div><div>x</div>", "div") == 1
    assert html_tag_balance("<div/>", "div") == 0
    assert html_tag_balance("</DIV>", "div") == -1
    assert html_tag_balance("<divider>", "div") == 0


def test_html_container_tracks_depth_and_blank_lines():
    ctx = ParserContext()

    assert try_open_html_block(ctx, "<details>\n") is True
    assert ctx.html_tag == "details"
    assert ctx.html_depth == 1

    assert try_close_html_block(ctx, "\n") is False
    assert ctx.html_blank_line is True

    assert try_close_html_block(ctx, "<details>inner\n") is False
    assert ctx.html_depth == 2
    assert try_close_html_block(ctx, "</details></details>\n") is True
    assert ctx.state is ParserState.NORMAL
    assert ctx.html_blank_line is False


def test_inline_html_does_not_open_a_container():
    assert try_open_html_block(ParserContext(), "<span>text\n") is False
    assert try_open_html_block(ParserContext(), "<div>done</div>\n") is False


def test_try_open_region_prefers_fences():
    ctx = ParserContext()

    assert try_open_region(ctx, "```\n") is True
    assert ctx.state is ParserState.IN_FENCED_CODE


def test_try_advance_region_reports_region_lines():
    ctx = ParserContext()

    assert try_advance_region(ctx, "text\n") is False

    try_open_region(ctx, "$$\n")
    assert try_advance_region(ctx, "\n") is True
    assert ctx.state is ParserState.IN_MATH_BLOCK
    assert try_advance_region(ctx, "$$\n") is True
    assert ctx.state is ParserState.NORMAL

"""Completed blocks must parse into the intended structure downstream."""

from __future__ import annotations

import pytest

from streaming_markdown.completer import complete_markdown
from streaming_markdown.config import CompletionConfig

markdown_it = pytest.importorskip("markdown_it")
dollarmath = pytest.importorskip("mdit_py_plugins.dollarmath")


@pytest.fixture(scope="module")
def parser():
    md = markdown_it.MarkdownIt("commonmark").enable(["table", "strikethrough"])
    return md.use(dollarmath.dollarmath_plugin)


def _tokens(parser, text):
    flat = []
    for token in parser.parse(text):
        flat.append(token)
        flat.extend(token.children or [])
    return flat


def _types(parser, text):
    return [token.type for token in _tokens(parser, text)]


@pytest.mark.parametrize(
    ("partial", "expected_type"),
    [
        ("**bold", "strong_open"),
        ("_italic text", "em_open"),
        ("~~strike", "s_open"),
        ("`abc", "code_inline"),
    ],
)
def test_inline_constructs_parse(parser, partial, expected_type):
    assert expected_type in _types(parser, complete_markdown(partial))


def test_nested_emphasis_parses(parser):
    types = _types(parser, complete_markdown("*a **b"))

    assert types.count("em_open") == 1
    assert types.count("strong_open") == 1


def test_link_destination_parses(parser):
    links = [
        token
        for token in _tokens(parser, complete_markdown("[click](http://x"))
        if token.type == "link_open"
    ]

    assert [token.attrGet("href") for token in links] == ["http://x"]


def test_autolink_parses(parser):
    links = [
        token
        for token in _tokens(parser, complete_markdown("<https://example.com/pa"))
        if token.type == "link_open"
    ]

    assert [token.attrGet("href") for token in links] == ["https://example.com/pa"]


def test_dangling_link_text_stays_text(parser):
    assert "link_open" not in _types(parser, complete_markdown("[click"))


def test_currency_is_not_math(parser):
    assert "math_inline" not in _types(parser, complete_markdown("It costs $5"))


def test_single_dollar_math_parses_when_enabled(parser):
    config = CompletionConfig(single_dollar_math=True)

    assert "math_inline" in _types(parser, complete_markdown("$x^2", config=config))


def test_single_dollar_stays_text_by_default(parser):
    assert "math_inline" not in _types(parser, complete_markdown("text $x"))


def test_unterminated_fence_parses_as_code(parser):
    tokens = _tokens(parser, complete_markdown("```js\nconst a = 1;"))
    fences = [token for token in tokens if token.type == "fence"]

    assert len(fences) == 1
    assert fences[0].info == "js"
    assert fences[0].content == "const a = 1;\n"


def test_matrix_math_block_parses(parser):
    partial = "$$\n\\begin{bmatrix}\n1 & 2 \\\\\n3 & 4"

    tokens = _tokens(parser, complete_markdown(partial))
    blocks = [token for token in tokens if token.type == "math_block"]

    assert len(blocks) == 1
    assert "\\begin{bmatrix}" in blocks[0].content
    assert "paragraph_open" not in [token.type for token in tokens]


def test_closed_html_container_parses_as_html(parser):
    tokens = _tokens(parser, complete_markdown("<div>\nhello"))

    assert [token.type for token in tokens] == ["html_block"]
    assert tokens[0].content.rstrip("\n").endswith("</div>")

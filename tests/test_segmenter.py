import logging
import textwrap

import pytest

from streaming_markdown.models import Block
from streaming_markdown.segmenter import segment_markdown, split_blocks


def test_empty_input_has_no_blocks():
    assert segment_markdown("") == []


def test_single_line_is_one_block():
    assert segment_markdown("Just text") == ["Just text"]


def test_blank_line_separates_blocks():
    assert segment_markdown("# Title\n\nBody") == ["# Title\n\n", "Body"]


def test_blank_lines_stay_with_the_preceding_block():
    assert segment_markdown("a\n\n\nb\n") == ["a\n\n\n", "b\n"]


def test_leading_blank_lines_belong_to_the_first_block():
    assert segment_markdown("\n\nfirst\n\nsecond") == ["\n\nfirst\n\n", "second"]


def test_only_blank_lines_is_one_block():
    assert segment_markdown("\n\n") == ["\n\n"]


def test_fenced_code_with_blank_lines_is_one_block():
    text = "```python\ndef f():\n\n    return 1\n```\n\nAfter"

    assert segment_markdown(text) == ["```python\ndef f():\n\n    return 1\n```\n\n", "After"]


def test_unterminated_fence_absorbs_the_rest():
    text = "Intro\n\n```js\n\nconst a = 1;\n\n# not a heading"

    assert segment_markdown(text) == ["Intro\n\n", "```js\n\nconst a = 1;\n\n# not a heading"]


def test_shorter_fence_does_not_close():
    text = "````\n```\n\ninside\n````\n\nout"

    assert segment_markdown(text) == ["````\n```\n\ninside\n````\n\n", "out"]


def test_math_block_is_kept_together():
    text = "$$\n\\begin{bmatrix}\n\n1 & 2\n\\end{bmatrix}\n$$\n\nText"

    blocks = segment_markdown(text)

    assert len(blocks) == 2
    assert blocks[1] == "Text"


def test_open_html_container_is_kept_together():
    text = "<details>\n<summary>More</summary>\n\nHidden *text*\n\n</details>\n\nAfter"

    blocks = segment_markdown(text)

    assert blocks == [
        "<details>\n<summary>More</summary>\n\nHidden *text*\n\n</details>\n\n",
        "After",
    ]


def test_table_is_one_block():
    text = "| a | b |\n|---|---|\n| 1 | 2 |\n\nAfter"

    assert segment_markdown(text) == ["| a | b |\n|---|---|\n| 1 | 2 |\n\n", "After"]


def test_loose_list_is_one_block():
    text = textwrap.dedent(
        """\
        - one

        - two

          continued

        Paragraph
        """
    )

    assert segment_markdown(text) == [
        "- one\n\n- two\n\n  continued\n\n",
        "Paragraph\n",
    ]


def test_indented_code_with_blank_lines_is_one_block():
    text = "    line one\n\n    line two\n\nText"

    assert segment_markdown(text) == ["    line one\n\n    line two\n\n", "Text"]


def test_partial_list_marker_stays_in_the_list_block():
    assert segment_markdown("- one\n\n-") == ["- one\n\n-"]
    assert segment_markdown("1. one\n\n2") == ["1. one\n\n2"]


def test_complete_non_list_line_after_list_starts_a_block():
    assert segment_markdown("- one\n\nText\n") == ["- one\n\n", "Text\n"]


def test_crlf_line_endings_are_preserved():
    text = "a\r\n\r\nb"

    blocks = segment_markdown(text)

    assert blocks == ["a\r\n\r\n", "b"]
    assert "".join(blocks) == text


@pytest.mark.parametrize(
    "text",
    [
        "# A\n\npara *one*\n\n```\ncode\n```\n\n> quote\n\n| t |\n\n$$\nx\n$$\n",
        "no markdown at all",
        "\n\n\n",
        "```\nunterminated\n\n\n",
    ],
)
def test_blocks_reconstruct_the_input(text):
    assert "".join(segment_markdown(text)) == text


def test_streaming_prefix_keeps_earlier_blocks():
    text = "# Title\n\nFirst paragraph.\n\n```py\nprint(1)\n```\n\n- a\n- b\n\nEnd."

    for cut in range(len(text) + 1):
        before = segment_markdown(text[:cut])
        after = segment_markdown(text)
        assert after[: max(len(before) - 1, 0)] == before[:-1]


def test_split_blocks_numbers_blocks():
    assert split_blocks("a\n\nb") == [Block(index=0, content="a\n\n"), Block(index=1, content="b")]


def test_segment_logs_when_enabled(caplog):
    with caplog.at_level(logging.DEBUG, logger="streaming_markdown"):
        segment_markdown("```\ncode", log=True)

    assert "IN_FENCED_CODE" in caplog.text

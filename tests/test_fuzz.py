from __future__ import annotations

import os

import pytest
from streaming_markdown.completer import complete_markdown
from streaming_markdown.segmenter import segment_markdown

atheris = pytest.importorskip("atheris")


def test_complete_markdown_with_fuzzed_input():
    data = os.urandom(4096)
    provider = atheris.FuzzedDataProvider(data)
    checked = 0

    for _ in range(128):
        if provider.remaining_bytes() == 0:
            break
        text = provider.ConsumeUnicodeNoSurrogates(64)
        once = complete_markdown(text)
        assert complete_markdown(once) == once
        checked += 1

    assert checked  # ensure we exercised the loop


def test_segment_markdown_with_fuzzed_stream():
    data = os.urandom(4096)
    provider = atheris.FuzzedDataProvider(data)
    text = ""

    while provider.remaining_bytes() > 0 and len(text) < 2048:
        chunk = provider.ConsumeUnicodeNoSurrogates(16)
        before = segment_markdown(text)
        text += chunk
        after = segment_markdown(text)
        assert after[: len(before) - 1] == before[:-1]

    assert "".join(segment_markdown(text)) == text

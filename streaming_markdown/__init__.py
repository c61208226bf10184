"""
streaming-markdown: render-ready Markdown from a growing text stream.

This package can be used both as a library and as a CLI inspection tool.

CLI Usage:
    streaming-markdown notes.md --replay 16

Library Usage:
    from streaming_markdown import complete_markdown, diff_blocks, segment_markdown

    previous = []
    for text in updates:  # each update extends the previous one
        blocks = [complete_markdown(block) for block in segment_markdown(text)]
        for index in diff_blocks(previous, blocks):
            render(index, blocks[index])
        previous = blocks
"""

from .completer import complete_markdown
from .config import CompletionConfig, ConfigError
from .models import Block, DelimiterRun
from .pipeline import diff_blocks, prepare_blocks
from .segmenter import segment_markdown, split_blocks

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "segment_markdown",
    "split_blocks",
    "complete_markdown",
    # Caller helpers
    "prepare_blocks",
    "diff_blocks",
    # Configuration
    "CompletionConfig",
    "ConfigError",
    # Data models
    "Block",
    "DelimiterRun",
    # Version
    "__version__",
]

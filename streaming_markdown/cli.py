"""
Inspects how a Markdown document is segmented and completed while it streams.
By default the completed document is printed; `--show-blocks` and `--replay`
expose the individual blocks and the per-update changes.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .config import ConfigError, build_config
from .constants import HTML_RAW_POLICIES
from .filesystem import get_max_file_size, read_markdown
from .pipeline import diff_blocks, prepare_blocks

__all__ = ["cli"]


@click.command()
@click.version_option()
@click.option("--no-complete", is_flag=True, help="Segment only, do not complete blocks")
@click.option("--show-blocks", is_flag=True, help="Print each block with its index")
@click.option(
    "--replay",
    type=click.IntRange(min=1),
    metavar="N",
    help="Feed the file N characters at a time and print changed blocks",
)
@click.option(
    "--single-dollar-math/--no-single-dollar-math",
    default=None,
    help="Whether a single $ may open inline math",
)
@click.option(
    "--html-raw-policy",
    type=click.Choice(HTML_RAW_POLICIES),
    help="How unterminated HTML containers are handled",
)
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def cli(
    filepath: Path,
    no_complete: bool = False,
    show_blocks: bool = False,
    replay: int | None = None,
    single_dollar_math: bool | None = None,
    html_raw_policy: str | None = None,
    verbose: bool = False,
):
    """
    Segment and complete a Markdown file the way a streaming view would.

    Args:
        filepath: Path to the Markdown file to process.
        no_complete: Print segmented blocks without completing them.
        show_blocks: Print a header before each block.
        replay: Chunk size in characters for a simulated stream.
        single_dollar_math: Override for inline single-dollar math.
        html_raw_policy: Override for unterminated HTML container handling.
        verbose: Enable debug logging on stderr.

    Returns:
        None.

    Raises:
        click.BadParameter: If configuration values are invalid.
        click.ClickException: If the file cannot be read.

    Examples:
        streaming-markdown notes.md --replay 16
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        config = build_config(
            filepath.resolve().parent,
            single_dollar_math=single_dollar_math,
            html_raw_policy=html_raw_policy,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        text = read_markdown(filepath, get_max_file_size())
    except (IOError, ValueError) as error:
        raise click.ClickException(str(error)) from error

    complete = not no_complete
    if replay is not None:
        _replay(text, replay, complete, config, verbose)
        return

    blocks = prepare_blocks(text, complete, config=config, log=verbose)
    if show_blocks:
        for index, block in enumerate(blocks):
            _echo_block(index, block)
    else:
        click.echo("\n\n".join(blocks))


def _replay(text, chunk_size, complete, config, verbose):
    previous: list[str] = []
    for update, end in enumerate(range(chunk_size, len(text) + chunk_size, chunk_size), 1):
        current = prepare_blocks(text[:end], complete, config=config, log=verbose)
        changed = diff_blocks(previous, current)
        click.echo(f"# update {update}: blocks {', '.join(map(str, changed)) or '-'}")
        for index in changed:
            _echo_block(index, current[index])
        previous = current


def _echo_block(index, block):
    click.echo(f"--- block {index} ---")
    click.echo(block)


if __name__ == "__main__":
    cli()

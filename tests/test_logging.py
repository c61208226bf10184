import logging

from streaming_markdown._logging import PACKAGE_LOGGER, NoopLogger, resolve_logger
from streaming_markdown.pipeline import prepare_blocks


def test_disabled_logging_returns_noop_logger():
    lg = resolve_logger(name="streaming_markdown.completer")

    assert isinstance(lg, NoopLogger)
    lg.debug("ignored %s", 1)


def test_caller_logger_wins():
    mine = logging.getLogger("host.app")

    assert resolve_logger(logger=mine, enabled=True, name=__name__) is mine


def test_enabled_logging_uses_module_logger():
    lg = resolve_logger(enabled=True, name="streaming_markdown.segmenter")

    assert lg.name == "streaming_markdown.segmenter"
    assert lg.propagate


def test_foreign_names_fall_back_to_package_logger():
    assert resolve_logger(enabled=True, name="other.module").name == PACKAGE_LOGGER
    assert resolve_logger(enabled=True).name == PACKAGE_LOGGER


def test_pipeline_logs_through_package_logger(caplog):
    with caplog.at_level(logging.DEBUG, logger=PACKAGE_LOGGER):
        prepare_blocks("a\n\n**b", log=True)

    assert "prepared 2 blocks" in caplog.text

"""Tests for logging configuration."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from taskman.logging_setup import LOG_FILE_NAME, setup_logging


@pytest.fixture(autouse=True)
def reset_taskman_logger():
    yield
    logger = logging.getLogger("taskman")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_console_and_file_handlers(tmp_path):
    setup_logging(level="info", log_dir=tmp_path / "logs")
    logger = logging.getLogger("taskman")

    stream, rotating = logger.handlers
    assert stream.level == logging.INFO
    assert isinstance(rotating, RotatingFileHandler)
    assert rotating.level == logging.DEBUG

    logging.getLogger("taskman.core.store").debug("hello from the store")
    rotating.flush()
    assert "hello from the store" in (tmp_path / "logs" / LOG_FILE_NAME).read_text(encoding="utf-8")


def test_setup_twice_replaces_handlers(tmp_path):
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)
    assert len(logging.getLogger("taskman").handlers) == 2


def test_unusable_log_dir_keeps_console_logging(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    setup_logging(log_dir=blocker / "logs")
    handlers = logging.getLogger("taskman").handlers
    assert len(handlers) == 1
    assert not isinstance(handlers[0], RotatingFileHandler)

"""Tests for the application logger utility."""

from __future__ import annotations

import logging
import logging.handlers

import pytest

from taskhub_cli.models.config_models import LoggingConfig
from taskhub_cli.utils.logger import (
    LOGGER_NAME,
    configure_logging,
    get_logger,
    log_file_path,
)


@pytest.fixture(autouse=True)
def reset_logger():
    """Detach handlers from the application logger between tests."""

    def _clear():
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    _clear()
    yield
    _clear()


def _flush():
    for handler in logging.getLogger(LOGGER_NAME).handlers:
        handler.flush()


def test_get_logger_creates_log_file():
    logger = get_logger()

    assert log_file_path().exists()
    assert log_file_path().name == "taskhub.log"
    assert logger.propagate is False
    assert logger.level == logging.INFO


def test_get_logger_does_not_stack_handlers():
    get_logger()
    get_logger()

    assert len(logging.getLogger(LOGGER_NAME).handlers) == 1


def test_configure_logging_applies_config_settings():
    logger = configure_logging(
        LoggingConfig(level="debug", max_bytes=2048, backup_count=1)
    )

    (handler,) = logger.handlers
    assert isinstance(handler, logging.handlers.RotatingFileHandler)
    assert handler.maxBytes == 2048
    assert handler.backupCount == 1
    assert logger.level == logging.DEBUG


def test_reconfiguring_replaces_the_handler():
    first = configure_logging().handlers[0]
    second = configure_logging(LoggingConfig(level="WARNING")).handlers[0]

    assert first is not second
    assert logging.getLogger(LOGGER_NAME).handlers == [second]


def test_module_loggers_write_to_the_app_log():
    configure_logging()

    logging.getLogger("taskhub_cli.services.series_service").info("successor created")
    _flush()

    assert "successor created" in log_file_path().read_text()


def test_messages_below_the_configured_level_are_dropped():
    configure_logging(LoggingConfig(level="ERROR"))

    logging.getLogger("taskhub_cli.adapters").info("routine detail")
    _flush()

    assert "routine detail" not in log_file_path().read_text()

"""Application log for TaskHub.

Everything logged under the ``taskhub_cli`` logger lands in one rotating file
in the platform log directory. The ``logging`` section of the config decides
the level and the rotation size; the terminal is left to command output.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

from taskhub_cli.models.config_models import LoggingConfig

LOGGER_NAME = "taskhub_cli"
LOG_FILE_NAME = "taskhub.log"

_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def log_file_path() -> Path:
    """Location of the active log file."""
    return Path(user_log_dir(LOGGER_NAME)) / LOG_FILE_NAME


def _file_handler(settings: LoggingConfig) -> logging.Handler:
    path = log_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=settings.max_bytes,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def configure_logging(settings: LoggingConfig | None = None) -> logging.Logger:
    """Install the rotating file handler described by ``settings``.

    Safe to call more than once: the previous handler is closed and replaced,
    so the CLI can reconfigure after the user's config has been loaded.
    Module loggers (``logging.getLogger(__name__)``) inherit the result.
    """
    settings = settings or LoggingConfig()
    logger = logging.getLogger(LOGGER_NAME)

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    logger.addHandler(_file_handler(settings))
    logger.setLevel(settings.level)
    logger.propagate = False
    return logger


def get_logger() -> logging.Logger:
    """Return the application logger, configuring defaults on first use."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        configure_logging()
    return logger

"""Tests for the top-level taskhub application."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import MagicMock, PropertyMock, patch

from typer.testing import CliRunner

from taskhub_cli import __version__
from taskhub_cli.main import app
from taskhub_cli.models import AppConfig, ConfigurationError
from taskhub_cli.models.config_models import LoggingConfig, OutputConfig
from taskhub_cli.utils.logger import LOGGER_NAME
from taskhub_cli.utils.ui.console import apply_color_setting, get_console

runner = CliRunner()


def test_version(mock_config_service):
    with patch("taskhub_cli.main.get_config_service", return_value=mock_config_service):
        result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_commands(mock_config_service):
    with patch("taskhub_cli.main.get_config_service", return_value=mock_config_service):
        result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("add", "complete", "list", "show", "repeat", "config"):
        assert command in result.output


def test_complete_through_main_app(cli_env, mock_config_service):
    task = asyncio.run(cli_env.add_task("Buy milk"))

    with patch("taskhub_cli.main.get_config_service", return_value=mock_config_service):
        result = runner.invoke(app, ["complete", task.id, "-o", "pretty"])

    assert result.exit_code == 0, result.output
    assert "Completed: Buy milk" in result.output


def test_broken_config_file_exits_with_validation_code():
    broken = MagicMock()
    type(broken).config = PropertyMock(
        side_effect=ConfigurationError("Invalid config file /tmp/config.json")
    )

    with patch("taskhub_cli.main.get_config_service", return_value=broken):
        result = runner.invoke(app, ["version"])

    assert result.exit_code == 2
    assert "Invalid config file" in result.output


def test_color_setting_reaches_the_console(mock_config_service):
    mock_config_service.config = AppConfig(output=OutputConfig(color=False))

    try:
        with patch(
            "taskhub_cli.main.get_config_service", return_value=mock_config_service
        ):
            result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert get_console().no_color is True
        assert get_console(highlight=False).no_color is True
    finally:
        apply_color_setting(True)


def test_log_level_from_config_is_applied(mock_config_service):
    mock_config_service.config = AppConfig(logging=LoggingConfig(level="WARNING"))

    with patch("taskhub_cli.main.get_config_service", return_value=mock_config_service):
        result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert logging.getLogger(LOGGER_NAME).level == logging.WARNING

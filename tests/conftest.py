"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from the real config, data and log
directories.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from taskhub_cli.adapters.sqlite.connection import create_memory_connection
from taskhub_cli.adapters.sqlite.task_repository import SqliteTaskRepository
from taskhub_cli.models import AppConfig


@pytest.fixture(autouse=True)
def isolate_log_dir(tmp_path, monkeypatch):
    """Keep the rotating log file out of the real user log directory."""
    monkeypatch.setattr(
        "taskhub_cli.utils.logger.user_log_dir", lambda *_args: str(tmp_path / "logs")
    )


# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path, monkeypatch):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from taskhub_cli.services.config_service import ConfigService, get_config_service

    monkeypatch.delenv("TASKHUB_DB", raising=False)
    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    with patch("taskhub_cli.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("taskhub_cli.services.config_service.user_data_dir", return_value=tmpdir):
            yield ConfigService()
    get_config_service.cache_clear()


@pytest.fixture()
def mock_config_service():
    """A MagicMock standing in for get_config_service() with default config."""
    config = AppConfig()
    svc = MagicMock()
    svc.load_config.return_value = config
    svc.config = config
    return svc


# ---------------------------------------------------------------------------
# Task store
# ---------------------------------------------------------------------------


@pytest.fixture()
def memory_connection():
    connection = create_memory_connection()
    yield connection
    connection.close()


@pytest.fixture()
def sqlite_repo(memory_connection):
    """SqliteTaskRepository on a migrated in-memory database."""
    return SqliteTaskRepository(connection=memory_connection)


# ---------------------------------------------------------------------------
# Command wiring
# ---------------------------------------------------------------------------


@pytest.fixture()
def task_service(sqlite_repo):
    """Real TaskService over the in-memory store."""
    from taskhub_cli.services.task_service import TaskService

    return TaskService(sqlite_repo)


@pytest.fixture()
def cli_env(task_service, mock_config_service):
    """Point every command at the in-memory TaskService and default config."""
    targets = [
        "taskhub_cli.commands.add_command.get_task_service",
        "taskhub_cli.commands.complete_command.get_task_service",
        "taskhub_cli.commands.list_command.get_task_service",
        "taskhub_cli.commands.show_command.get_task_service",
        "taskhub_cli.commands.recurrence_command.get_task_service",
    ]
    patches = [patch(target, return_value=task_service) for target in targets]
    patches.append(
        patch(
            "taskhub_cli.utils.task_helpers.get_config_service",
            return_value=mock_config_service,
        )
    )
    for p in patches:
        p.start()
    yield task_service
    for p in reversed(patches):
        p.stop()

"""Storage bootstrap for TaskHub CLI.

Key Functions:
- get_task_repository(): the SQLite task store for the configured database
- get_task_service(): TaskService sharing one lifecycle manager per process

Usage Pattern:
    from taskhub_cli.services.context_manager import get_task_service

    task_service = get_task_service()
    result = await task_service.complete_recurring_task(task_id)
"""

from __future__ import annotations

from functools import lru_cache

from taskhub_cli.adapters.sqlite.task_repository import SqliteTaskRepository
from taskhub_cli.repositories import TaskRepository
from taskhub_cli.services.config_service import get_config_service
from taskhub_cli.services.task_service import TaskService


@lru_cache(maxsize=1)
def get_task_repository() -> TaskRepository:
    """Get the cached task repository for the configured database path."""
    config_service = get_config_service()
    return SqliteTaskRepository(db_path=config_service.get_database_path())


@lru_cache(maxsize=1)
def get_task_service() -> TaskService:
    """Get the cached TaskService.

    The service is cached so every completion in this process goes through
    the same SeriesLifecycleManager and its per-task locks.
    """
    return TaskService(get_task_repository())

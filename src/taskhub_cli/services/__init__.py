"""Services module for TaskHub CLI - Business logic layer."""

from .config_service import ConfigService, get_config_service
from .series_service import SeriesLifecycleManager
from .task_service import TaskService

__all__ = [
    "TaskService",
    "SeriesLifecycleManager",
    "ConfigService",
    "get_config_service",
]

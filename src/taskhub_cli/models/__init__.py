"""TaskHub domain models.

This package contains Pydantic models that represent the core domain entities
of TaskHub: tasks, recurrence rules and completion outcomes.
"""

from .completion import CompletionResult, NextInstanceCreated, SeriesEnded
from .config_models import AppConfig
from .core import (
    STATUS_DONE,
    STATUS_TODO,
    SeriesEnd,
    Task,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
)
from .exceptions import (
    ConfigurationError,
    InvalidStateError,
    PersistenceError,
    RecurrenceValidationError,
    TaskHubError,
    TaskNotFoundError,
)
from .recurrence import Frequency, RecurrenceRule, validate_rule

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskFilters",
    "SeriesEnd",
    "STATUS_TODO",
    "STATUS_DONE",
    # Recurrence
    "Frequency",
    "RecurrenceRule",
    "validate_rule",
    # Completion outcomes
    "CompletionResult",
    "NextInstanceCreated",
    "SeriesEnded",
    # Errors
    "TaskHubError",
    "RecurrenceValidationError",
    "InvalidStateError",
    "PersistenceError",
    "TaskNotFoundError",
    "ConfigurationError",
    # Config models
    "AppConfig",
]

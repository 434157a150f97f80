"""Custom exceptions for TaskHub."""


class TaskHubError(Exception):
    """Base exception for all TaskHub errors."""


class RecurrenceValidationError(TaskHubError):
    """Raised when a recurrence rule is malformed.

    Attributes:
        problems: Human-readable descriptions of every violated constraint
    """

    def __init__(self, problems: list[str] | str):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("Invalid recurrence rule: " + "; ".join(self.problems))


class InvalidStateError(TaskHubError):
    """Raised when a task is not in a state that allows the requested transition."""


class PersistenceError(TaskHubError):
    """Raised when the task store fails to read or write. Safe to retry."""


class TaskNotFoundError(TaskHubError):
    """Raised when a task id (or id prefix) does not resolve to exactly one task."""


class ConfigurationError(TaskHubError):
    """Raised when the configuration file or one of its values is unusable."""

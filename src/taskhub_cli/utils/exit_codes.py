"""
Exit codes for TaskHub CLI.

Semantic exit codes let scripts tell a rejected rule from a missing task or a
store failure that is worth retrying.
"""

from taskhub_cli.models import (
    ConfigurationError,
    InvalidStateError,
    PersistenceError,
    RecurrenceValidationError,
    TaskNotFoundError,
)

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Resource not found
ERROR_NOT_FOUND = 5

# Task is not in a state that allows the operation
ERROR_INVALID_STATE = 7

# Task store failure (safe to retry)
ERROR_PERSISTENCE = 8


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_INVALID_STATE: "ERROR_INVALID_STATE",
        ERROR_PERSISTENCE: "ERROR_PERSISTENCE",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def exit_code_for(error: BaseException) -> int:
    """Map an exception to its semantic exit code."""
    if isinstance(error, (RecurrenceValidationError, ConfigurationError)):
        return ERROR_INVALID_ARGS
    if isinstance(error, TaskNotFoundError):
        return ERROR_NOT_FOUND
    if isinstance(error, InvalidStateError):
        return ERROR_INVALID_STATE
    if isinstance(error, PersistenceError):
        return ERROR_PERSISTENCE
    return ERROR_GENERAL

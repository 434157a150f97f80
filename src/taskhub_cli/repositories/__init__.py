"""Repository interfaces for TaskHub.

This package contains the abstract base class that defines the contract for
task persistence. It is the "Port" in the Hexagonal Architecture; the SQLite
adapter lives in taskhub_cli.adapters.sqlite.
"""

from .repository import TaskRepository

__all__ = [
    "TaskRepository",
]

"""Repository abstraction layer for TaskHub.

This module defines the abstract base class (interface) for task persistence,
following the hexagonal architecture (Ports & Adapters) pattern.

The recurring-task engine only talks to this port. Besides plain CRUD it
requires three primitives from every store:

- ``claim_completion``: a compare-and-swap that sets ``completed_at`` only if
  it is still unset, so concurrent completions have exactly one winner
- ``transaction``: an all-or-nothing unit of work
- series bookkeeping (``find_successor``, ``end_series``, ``get_series_end``)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime

from taskhub_cli.models import SeriesEnd, Task, TaskCreate, TaskFilters, TaskUpdate


class TaskRepository(ABC):
    """Abstract base class for task persistence operations.

    Implementations raise ``TaskNotFoundError`` for unknown ids and wrap
    driver failures in ``PersistenceError``.
    """

    @abstractmethod
    async def list_all(self, filters: TaskFilters) -> list[Task]:
        """List tasks with optional filtering.

        Args:
            filters: TaskFilters object specifying filter criteria

        Returns:
            List of Task objects matching the filters
        """
        raise NotImplementedError(
            "TaskRepository.list_all() must be implemented by adapter"
        )

    @abstractmethod
    async def get(self, task_id: str) -> Task:
        """Get a specific task by ID.

        Raises:
            TaskNotFoundError: If task does not exist
        """
        raise NotImplementedError("TaskRepository.get() must be implemented by adapter")

    @abstractmethod
    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task.

        A recurring task created without a ``series_id`` starts its own
        series (``series_id`` = its own id).

        Returns:
            Created Task object with generated ID and timestamps
        """
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        """Update an existing task with the fields explicitly set on ``updates``.

        Raises:
            TaskNotFoundError: If task does not exist
        """
        raise NotImplementedError(
            "TaskRepository.update() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        """Delete a task.

        Returns:
            True if deletion was successful
        """
        raise NotImplementedError(
            "TaskRepository.delete() must be implemented by adapter"
        )

    @abstractmethod
    async def complete(self, task_id: str) -> Task:
        """Mark a task as completed (plain, non-recurring path).

        Returns:
            Updated Task object with completed_at set
        """
        raise NotImplementedError(
            "TaskRepository.complete() must be implemented by adapter"
        )

    @abstractmethod
    async def claim_completion(self, task_id: str, completed_at: datetime) -> bool:
        """Set ``completed_at`` only if it is currently unset.

        Args:
            task_id: Task to complete
            completed_at: Completion timestamp to store

        Returns:
            True if this call performed the transition, False if the task
            was already completed
        """
        raise NotImplementedError(
            "TaskRepository.claim_completion() must be implemented by adapter"
        )

    @abstractmethod
    async def archive(self, task_id: str, archived_at: datetime) -> Task:
        """Archive a task."""
        raise NotImplementedError(
            "TaskRepository.archive() must be implemented by adapter"
        )

    @abstractmethod
    async def find_successor(self, task_id: str) -> Task | None:
        """Return the task whose ``previous_instance_id`` is ``task_id``, if any."""
        raise NotImplementedError(
            "TaskRepository.find_successor() must be implemented by adapter"
        )

    @abstractmethod
    async def end_series(
        self, series_id: str, task_id: str, ended_at: datetime
    ) -> SeriesEnd:
        """Record that ``series_id`` ended with ``task_id``.

        Raises:
            PersistenceError: If the series already has an end marker
        """
        raise NotImplementedError(
            "TaskRepository.end_series() must be implemented by adapter"
        )

    @abstractmethod
    async def get_series_end(self, series_id: str) -> SeriesEnd | None:
        """Return the end marker of a series, or None if it is still running."""
        raise NotImplementedError(
            "TaskRepository.get_series_end() must be implemented by adapter"
        )

    @abstractmethod
    async def list_series(self, series_id: str) -> list[Task]:
        """List every instance of a series, oldest first (archived included)."""
        raise NotImplementedError(
            "TaskRepository.list_series() must be implemented by adapter"
        )

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Return an async context manager wrapping an all-or-nothing unit of work.

        Writes made inside the block are committed when it exits normally and
        rolled back when it raises.
        """
        raise NotImplementedError(
            "TaskRepository.transaction() must be implemented by adapter"
        )

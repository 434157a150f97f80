"""Task service - Business logic for task operations.

This service layer sits between commands and repositories, providing
a clean API for task-related business logic. Completion of recurring tasks
is delegated to the SeriesLifecycleManager.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from taskhub_cli.models import (
    CompletionResult,
    InvalidStateError,
    RecurrenceRule,
    Task,
    TaskCreate,
    TaskFilters,
    TaskNotFoundError,
    TaskUpdate,
    validate_rule,
)
from taskhub_cli.repositories import TaskRepository
from taskhub_cli.services.series_service import SeriesLifecycleManager


def _parse_due_date(due_date: str | datetime | None) -> datetime | None:
    if due_date is None or isinstance(due_date, datetime):
        return due_date
    return datetime.fromisoformat(due_date)


def _coerce_rule(
    recurrence: RecurrenceRule | Mapping[str, Any] | None,
) -> RecurrenceRule | None:
    if recurrence is None:
        return None
    return validate_rule(recurrence)


class TaskService:
    """Service for task business logic.

    This service encapsulates business rules and orchestrates task operations
    using the task repository.
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        lifecycle: SeriesLifecycleManager | None = None,
    ):
        """Initialize the task service.

        Args:
            task_repository: TaskRepository implementation for data access
            lifecycle: Lifecycle manager for recurring completions (built from
                the repository when omitted)
        """
        self.repository = task_repository
        self.lifecycle = lifecycle or SeriesLifecycleManager(task_repository)

    async def list_tasks(
        self,
        *,
        status: str | None = None,
        series_id: str | None = None,
        is_recurring: bool | None = None,
        tags: list[str] | None = None,
        search: str | None = None,
        include_archived: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Task]:
        """List tasks with filtering and pagination."""
        filters = TaskFilters(
            status=status,
            series_id=series_id,
            is_recurring=is_recurring,
            tags=tags,
            search=search,
            include_archived=include_archived,
            limit=limit,
            offset=offset,
        )
        return await self.repository.list_all(filters)

    async def get_task(self, task_id: str) -> Task:
        """Get a specific task by ID."""
        return await self.repository.get(task_id)

    async def resolve_task_id(self, id_or_prefix: str) -> str:
        """Resolve a full task id or a unique prefix of one.

        Raises:
            TaskNotFoundError: If nothing or more than one task matches
        """
        matches = await self.repository.list_all(
            TaskFilters(id_prefix=id_or_prefix, status="all", include_archived=True)
        )
        exact = [task for task in matches if task.id == id_or_prefix]
        if exact:
            return exact[0].id
        if len(matches) == 1:
            return matches[0].id
        if not matches:
            raise TaskNotFoundError(f"Task not found: {id_or_prefix}")
        raise TaskNotFoundError(
            f"Task id prefix '{id_or_prefix}' is ambiguous ({len(matches)} matches)"
        )

    async def add_task(
        self,
        title: str,
        *,
        description: str | None = None,
        project_id: str | None = None,
        due_date: str | datetime | None = None,
        priority: int = 4,
        assignees: list[str] | None = None,
        tags: list[str] | None = None,
        recurrence: RecurrenceRule | Mapping[str, Any] | None = None,
    ) -> Task:
        """Create a new task.

        A task created with a recurrence rule becomes the origin of a new
        series.

        Raises:
            RecurrenceValidationError: If the rule is malformed
        """
        task_data = TaskCreate(
            title=title,
            description=description,
            project_id=project_id,
            due_date=_parse_due_date(due_date),
            priority=priority,
            assignees=assignees or [],
            tags=tags or [],
            recurrence=_coerce_rule(recurrence),
        )
        return await self.repository.add(task_data)

    async def update_task(
        self,
        task_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        due_date: str | datetime | None = None,
        priority: int | None = None,
        assignees: list[str] | None = None,
        tags: list[str] | None = None,
    ) -> Task:
        """Update plain task fields (recurrence has its own operations)."""
        fields: dict[str, Any] = {
            "title": title,
            "description": description,
            "due_date": _parse_due_date(due_date),
            "priority": priority,
            "assignees": assignees,
            "tags": tags,
        }
        updates = TaskUpdate(**{k: v for k, v in fields.items() if v is not None})
        return await self.repository.update(task_id, updates)

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task together with its rule."""
        return await self.repository.delete(task_id)

    async def complete_task(self, task_id: str) -> Task:
        """Mark a non-recurring task as completed.

        Raises:
            InvalidStateError: If the task is recurring
        """
        task = await self.repository.get(task_id)
        if task.is_recurring:
            raise InvalidStateError(
                f"Task {task_id} is recurring; use complete_recurring_task()"
            )
        return await self.repository.complete(task_id)

    async def complete_recurring_task(
        self, task_id: str, *, completed_at: datetime | None = None
    ) -> CompletionResult:
        """Complete a recurring task, creating its successor or ending the series."""
        return await self.lifecycle.complete_recurring_task(
            task_id, completed_at=completed_at
        )

    async def set_recurrence(
        self, task_id: str, recurrence: RecurrenceRule | Mapping[str, Any]
    ) -> Task:
        """Attach or replace the recurrence rule of an open task.

        A task that is not yet part of a series becomes the origin of one.

        Raises:
            RecurrenceValidationError: If the rule is malformed
            InvalidStateError: If the task is already completed
        """
        rule = validate_rule(recurrence)
        task = await self.repository.get(task_id)
        if task.is_completed:
            raise InvalidStateError(f"Task {task_id} is completed; its rule is final")

        updates = TaskUpdate(recurrence=rule)
        if task.series_id is None:
            updates = TaskUpdate(recurrence=rule, series_id=task.id)
        return await self.repository.update(task_id, updates)

    async def stop_recurrence(self, task_id: str) -> Task:
        """Turn recurrence off, forking the task out of its series.

        The task keeps its data (including the link to the instance it
        superseded) but becomes a single non-recurring task; earlier
        instances of the series are left untouched.
        """
        task = await self.repository.get(task_id)
        if not task.is_recurring:
            return task
        return await self.repository.update(
            task_id,
            TaskUpdate(recurrence=None, series_id=None),
        )

    async def get_series(self, task_id: str) -> list[Task]:
        """List every instance in the series ``task_id`` belongs to."""
        task = await self.repository.get(task_id)
        if task.series_id is None:
            return [task]
        return await self.repository.list_series(task.series_id)

"""Series lifecycle - turns "complete this recurring task" into an outcome.

Completing a recurring task ends in exactly one of two ways: a successor
instance carrying the next due date is created, or the rule's end date has
been reached and the series is closed. This module is the only place that
makes that decision; callers render the returned result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from taskhub_cli.models import (
    STATUS_TODO,
    CompletionResult,
    InvalidStateError,
    NextInstanceCreated,
    SeriesEnded,
    Task,
    TaskCreate,
)
from taskhub_cli.repositories import TaskRepository
from taskhub_cli.utils.recurrence import compute_next_occurrence

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class _CompletionLost(Exception):
    """Another caller completed the task first; nothing was written."""


class SeriesLifecycleManager:
    """Orchestrates completion of recurring tasks.

    Completions are serialized per task id inside this process; across
    processes the store's ``claim_completion`` compare-and-swap decides the
    single winner. Losers, duplicate clicks and retries all receive the
    outcome the winner produced.
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the lifecycle manager.

        Args:
            task_repository: TaskRepository implementation for data access
            clock: Source of "now", used only when a task has no due date and
                no explicit completion time is given
        """
        self.repository = task_repository
        self.clock = clock
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiting: dict[str, int] = {}

    async def complete_recurring_task(
        self,
        task_id: str,
        *,
        completed_at: datetime | None = None,
    ) -> CompletionResult:
        """Complete a recurring task and continue or end its series.

        Args:
            task_id: The instance being completed
            completed_at: Explicit completion time (for replay and tests)

        Returns:
            NextInstanceCreated with the successor, or SeriesEnded

        Raises:
            TaskNotFoundError: If the task does not exist
            InvalidStateError: If the task is not recurring, or its series
                has already ended
            RecurrenceValidationError: If the stored rule is malformed
            PersistenceError: If the store fails; nothing is left half-written
                and the call can be retried
        """
        lock = self._locks.setdefault(task_id, asyncio.Lock())
        self._waiting[task_id] = self._waiting.get(task_id, 0) + 1
        try:
            async with lock:
                return await self._complete(task_id, completed_at)
        finally:
            self._waiting[task_id] -= 1
            if self._waiting[task_id] == 0:
                del self._waiting[task_id]
                del self._locks[task_id]

    async def _complete(
        self, task_id: str, completed_at: datetime | None
    ) -> CompletionResult:
        task = await self.repository.get(task_id)

        if not task.is_recurring or task.recurrence is None:
            raise InvalidStateError(
                f"Task {task.id} is not recurring; complete it through the regular path"
            )

        if task.is_completed:
            return await self._replay(task)

        series_id = task.series_id or task.id
        series_end = await self.repository.get_series_end(series_id)
        if series_end is not None:
            raise InvalidStateError(
                f"Series {series_id} already ended on {series_end.ended_at:%Y-%m-%d}"
            )

        completed_at = completed_at or self.clock()
        anchor = task.due_date or completed_at
        next_due = compute_next_occurrence(anchor, task.recurrence)

        try:
            async with self.repository.transaction():
                if not await self.repository.claim_completion(task.id, completed_at):
                    raise _CompletionLost

                if next_due is None:
                    result = await self._end_series(task, series_id, completed_at)
                else:
                    result = await self._spawn_successor(task, series_id, next_due)
        except _CompletionLost:
            logger.debug("completion of %s lost the race, replaying outcome", task.id)
            return await self._replay(await self.repository.get(task.id))

        return result

    async def _end_series(
        self, task: Task, series_id: str, completed_at: datetime
    ) -> SeriesEnded:
        await self.repository.archive(task.id, completed_at)
        series_end = await self.repository.end_series(series_id, task.id, completed_at)
        logger.info("series %s ended with task %s", series_id, task.id)
        return SeriesEnded(
            completed_task_id=task.id,
            series_id=series_id,
            ended_at=series_end.ended_at,
        )

    async def _spawn_successor(
        self, task: Task, series_id: str, next_due: datetime
    ) -> NextInstanceCreated:
        successor = await self.repository.add(
            TaskCreate(
                title=task.title,
                description=task.description,
                project_id=task.project_id,
                status=STATUS_TODO,
                priority=task.priority,
                assignees=list(task.assignees),
                tags=list(task.tags),
                due_date=next_due,
                recurrence=task.recurrence,
                series_id=series_id,
                previous_instance_id=task.id,
                recurrence_index=task.recurrence_index + 1,
            )
        )
        logger.info(
            "task %s completed, successor %s due %s",
            task.id,
            successor.id,
            next_due.isoformat(),
        )
        return NextInstanceCreated(completed_task_id=task.id, next_task=successor)

    async def _replay(self, task: Task) -> CompletionResult:
        """Return the outcome a previous completion of ``task`` produced."""
        successor = await self.repository.find_successor(task.id)
        if successor is not None:
            logger.info("task %s already completed, returning successor", task.id)
            return NextInstanceCreated(
                completed_task_id=task.id, next_task=successor, replayed=True
            )

        series_id = task.series_id or task.id
        series_end = await self.repository.get_series_end(series_id)
        if series_end is not None and series_end.ended_by_task_id == task.id:
            logger.info("task %s already completed, series %s ended", task.id, series_id)
            return SeriesEnded(
                completed_task_id=task.id,
                series_id=series_id,
                ended_at=series_end.ended_at,
                replayed=True,
            )

        raise InvalidStateError(
            f"Task {task.id} is completed but has neither a successor nor a series end"
        )

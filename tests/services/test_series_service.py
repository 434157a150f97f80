"""Tests for SeriesLifecycleManager.

Most tests run against the real SQLite repository on an in-memory database,
so the transaction and compare-and-swap behaviour is exercised end to end.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, patch

import pytest

from taskhub_cli.models import (
    STATUS_DONE,
    STATUS_TODO,
    Frequency,
    InvalidStateError,
    NextInstanceCreated,
    PersistenceError,
    RecurrenceRule,
    SeriesEnded,
    TaskCreate,
    TaskFilters,
    TaskNotFoundError,
)
from taskhub_cli.services.series_service import SeriesLifecycleManager

NOW = datetime(2024, 1, 5, 18, 0, tzinfo=UTC)
MON_WED_FRI = RecurrenceRule(frequency=Frequency.WEEKLY, days_of_week=(1, 3, 5))


@pytest.fixture()
def manager(sqlite_repo):
    return SeriesLifecycleManager(sqlite_repo, clock=lambda: NOW)


async def _add_recurring(repo, rule=MON_WED_FRI, due=datetime(2024, 1, 1, 9, 0), **kwargs):
    return await repo.add(
        TaskCreate(title="Standup", due_date=due, recurrence=rule, **kwargs)
    )


# ---------------------------------------------------------------------------
# Successor creation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_completion_spawns_successor_with_next_due_date(manager, sqlite_repo):
    task = await _add_recurring(
        sqlite_repo, priority=1, tags=["team"], assignees=["ana"], description="Sync"
    )

    result = await manager.complete_recurring_task(task.id)

    assert isinstance(result, NextInstanceCreated)
    assert result.replayed is False
    successor = result.next_task
    assert successor.due_date == datetime(2024, 1, 3, 9, 0)
    assert successor.title == "Standup"
    assert successor.description == "Sync"
    assert successor.priority == 1
    assert successor.tags == ["team"]
    assert successor.assignees == ["ana"]
    assert successor.status == STATUS_TODO
    assert successor.completed_at is None
    assert successor.recurrence == task.recurrence
    assert successor.series_id == task.series_id
    assert successor.previous_instance_id == task.id
    assert successor.recurrence_index == 1

    completed = await sqlite_repo.get(task.id)
    assert completed.completed_at == NOW
    assert completed.status == STATUS_DONE
    assert completed.archived_at is None


@pytest.mark.asyncio
async def test_successive_completions_walk_the_series(manager, sqlite_repo):
    task = await _add_recurring(sqlite_repo)

    first = await manager.complete_recurring_task(task.id)
    second = await manager.complete_recurring_task(first.next_task.id)
    third = await manager.complete_recurring_task(second.next_task.id)

    assert third.next_task.due_date == datetime(2024, 1, 8, 9, 0)
    assert third.next_task.recurrence_index == 3
    series = await sqlite_repo.list_series(task.series_id)
    assert [t.recurrence_index for t in series] == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_task_without_due_date_anchors_on_completion_time(manager, sqlite_repo):
    rule = RecurrenceRule(frequency=Frequency.DAILY, interval=2)
    task = await _add_recurring(sqlite_repo, rule=rule, due=None)

    result = await manager.complete_recurring_task(task.id)

    assert result.next_task.due_date == datetime(2024, 1, 7, 18, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_explicit_completion_time_is_recorded(manager, sqlite_repo):
    task = await _add_recurring(sqlite_repo)
    at = datetime(2024, 1, 1, 10, 30, tzinfo=UTC)

    await manager.complete_recurring_task(task.id, completed_at=at)

    assert (await sqlite_repo.get(task.id)).completed_at == at


# ---------------------------------------------------------------------------
# Series end
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_end_date_reached_ends_the_series(manager, sqlite_repo):
    rule = RecurrenceRule(frequency=Frequency.WEEKLY, end_date=date(2024, 1, 10))
    task = await _add_recurring(sqlite_repo, rule=rule, due=datetime(2024, 1, 5))

    result = await manager.complete_recurring_task(task.id)

    assert isinstance(result, SeriesEnded)
    assert result.series_ended is True
    assert result.series_id == task.series_id
    assert result.completed_task_id == task.id

    final = await sqlite_repo.get(task.id)
    assert final.completed_at == NOW
    assert final.archived_at == NOW
    assert await sqlite_repo.find_successor(task.id) is None
    assert (await sqlite_repo.get_series_end(task.series_id)).ended_by_task_id == task.id


@pytest.mark.asyncio
async def test_ended_series_accepts_no_further_completions(manager, sqlite_repo):
    rule = RecurrenceRule(frequency=Frequency.DAILY, end_date=date(2024, 1, 5))
    task = await _add_recurring(sqlite_repo, rule=rule, due=datetime(2024, 1, 5))
    await manager.complete_recurring_task(task.id)

    # A stray open instance of the same series cannot continue it
    stray = await _add_recurring(
        sqlite_repo, rule=rule, due=datetime(2024, 1, 4), series_id=task.series_id
    )

    with pytest.raises(InvalidStateError):
        await manager.complete_recurring_task(stray.id)


# ---------------------------------------------------------------------------
# Idempotence
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_repeated_completion_returns_same_successor(manager, sqlite_repo):
    task = await _add_recurring(sqlite_repo)

    first = await manager.complete_recurring_task(task.id)
    second = await manager.complete_recurring_task(task.id)

    assert second.replayed is True
    assert second.next_task.id == first.next_task.id
    open_tasks = await sqlite_repo.list_all(TaskFilters(status="active"))
    assert len(open_tasks) == 1


@pytest.mark.asyncio
async def test_repeated_completion_of_final_instance_replays_series_end(
    manager, sqlite_repo
):
    rule = RecurrenceRule(frequency=Frequency.DAILY, end_date=date(2024, 1, 5))
    task = await _add_recurring(sqlite_repo, rule=rule, due=datetime(2024, 1, 5))

    first = await manager.complete_recurring_task(task.id)
    second = await manager.complete_recurring_task(task.id)

    assert isinstance(second, SeriesEnded)
    assert second.replayed is True
    assert second.ended_at == first.ended_at


@pytest.mark.asyncio
async def test_concurrent_completions_create_one_successor(manager, sqlite_repo):
    task = await _add_recurring(sqlite_repo)

    results = await asyncio.gather(
        *(manager.complete_recurring_task(task.id) for _ in range(5))
    )

    successor_ids = {r.next_task.id for r in results}
    assert len(successor_ids) == 1
    assert sum(not r.replayed for r in results) == 1
    series = await sqlite_repo.list_series(task.series_id)
    assert len(series) == 2
    assert manager._locks == {}


@pytest.mark.asyncio
async def test_independent_managers_share_one_outcome(sqlite_repo):
    task = await _add_recurring(sqlite_repo)
    first = SeriesLifecycleManager(sqlite_repo, clock=lambda: NOW)
    second = SeriesLifecycleManager(sqlite_repo, clock=lambda: NOW)

    a, b = await asyncio.gather(
        first.complete_recurring_task(task.id),
        second.complete_recurring_task(task.id),
    )

    assert a.next_task.id == b.next_task.id


@pytest.mark.asyncio
async def test_losing_the_claim_replays_the_winner(manager, sqlite_repo, monkeypatch):
    task = await _add_recurring(sqlite_repo)
    winner = await SeriesLifecycleManager(sqlite_repo).complete_recurring_task(task.id)

    # This caller read the task before the winner committed
    real_get = sqlite_repo.get
    calls = []

    async def stale_then_real(task_id):
        calls.append(task_id)
        if len(calls) == 1:
            return task
        return await real_get(task_id)

    monkeypatch.setattr(sqlite_repo, "get", stale_then_real)

    result = await manager.complete_recurring_task(task.id)

    assert result.replayed is True
    assert result.next_task.id == winner.next_task.id
    assert len(await sqlite_repo.list_series(task.series_id)) == 2


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_non_recurring_task_is_rejected(manager, sqlite_repo):
    task = await sqlite_repo.add(TaskCreate(title="One-off"))

    with pytest.raises(InvalidStateError):
        await manager.complete_recurring_task(task.id)

    assert (await sqlite_repo.get(task.id)).completed_at is None


@pytest.mark.asyncio
async def test_unknown_task_is_not_found(manager):
    with pytest.raises(TaskNotFoundError):
        await manager.complete_recurring_task("missing")


@pytest.mark.asyncio
async def test_store_failure_leaves_nothing_half_written(manager, sqlite_repo):
    task = await _add_recurring(sqlite_repo)
    failing_add = AsyncMock(side_effect=PersistenceError("disk full"))

    with patch.object(sqlite_repo, "add", failing_add):
        with pytest.raises(PersistenceError):
            await manager.complete_recurring_task(task.id)

    assert (await sqlite_repo.get(task.id)).completed_at is None

    # Retrying once the store recovers completes normally
    result = await manager.complete_recurring_task(task.id)
    assert isinstance(result, NextInstanceCreated)
    assert result.replayed is False


@pytest.mark.asyncio
async def test_completed_task_without_outcome_is_invalid(manager, sqlite_repo):
    task = await _add_recurring(sqlite_repo)
    await sqlite_repo.claim_completion(task.id, NOW)

    with pytest.raises(InvalidStateError):
        await manager.complete_recurring_task(task.id)

"""SQLite implementation of TaskRepository."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from taskhub_cli.adapters.sqlite.connection import get_connection
from taskhub_cli.adapters.sqlite.utils import (
    dump_list,
    generate_uuid,
    load_list,
    now_iso,
    row_to_dict,
    to_iso,
)
from taskhub_cli.models import (
    STATUS_DONE,
    PersistenceError,
    SeriesEnd,
    Task,
    TaskCreate,
    TaskFilters,
    TaskNotFoundError,
    TaskUpdate,
)
from taskhub_cli.repositories import TaskRepository
from taskhub_cli.utils.recurrence import (
    RECURRENCE_COLUMNS,
    recurrence_to_row,
    row_to_recurrence,
)

logger = logging.getLogger(__name__)


class SqliteTaskRepository(TaskRepository):
    """SQLite implementation of task repository."""

    def __init__(
        self,
        db_path: str | None = None,
        connection: sqlite3.Connection | None = None,
    ):
        """Initialize SQLite task repository.

        Args:
            db_path: Optional database file path. If None, uses default location.
            connection: Optional pre-configured connection (takes precedence)
        """
        self.db_path = db_path
        self._connection = connection
        self._in_transaction = False

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    def _execute(self, query: str, params: tuple | list = ()) -> sqlite3.Cursor:
        try:
            return self.connection.execute(query, params)
        except sqlite3.Error as e:
            logger.error("sqlite error: %s", e)
            raise PersistenceError(f"Task store error: {e}") from e

    def _commit(self) -> None:
        """Commit unless an explicit transaction() block owns the commit."""
        if self._in_transaction:
            return
        try:
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise PersistenceError(f"Task store commit failed: {e}") from e

    def _row_to_task(self, row: Any) -> Task:
        task_dict = row_to_dict(row)
        task_dict["recurrence"] = row_to_recurrence(task_dict)
        for column in RECURRENCE_COLUMNS:
            task_dict.pop(column, None)
        task_dict.pop("deleted_at", None)
        task_dict["assignees"] = load_list(task_dict.get("assignees"))
        task_dict["tags"] = load_list(task_dict.get("tags"))
        return Task(**task_dict)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """All-or-nothing unit of work.

        ``BEGIN IMMEDIATE`` takes the write lock up front, so a competing
        completion waits here and then sees the first writer's result.
        """
        if self._in_transaction:
            raise PersistenceError("Nested transactions are not supported")

        self._execute("BEGIN IMMEDIATE")
        self._in_transaction = True
        try:
            yield
        except BaseException:
            self.connection.rollback()
            raise
        else:
            try:
                self.connection.commit()
            except sqlite3.Error as e:
                self.connection.rollback()
                raise PersistenceError(f"Task store commit failed: {e}") from e
        finally:
            self._in_transaction = False

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def list_all(self, filters: TaskFilters) -> list[Task]:
        """List all tasks with filtering."""
        query = "SELECT t.* FROM tasks t WHERE t.deleted_at IS NULL"
        params: list[Any] = []

        if filters.id_prefix:
            query += " AND t.id LIKE ?"
            params.append(f"{filters.id_prefix}%")

        if filters.status == "active":
            query += " AND t.completed_at IS NULL"
        elif filters.status == "completed":
            query += " AND t.completed_at IS NOT NULL"
        # "all" means no filter on completion

        if not filters.include_archived:
            query += " AND t.archived_at IS NULL"

        if filters.series_id:
            query += " AND t.series_id = ?"
            params.append(filters.series_id)

        if filters.is_recurring is not None:
            query += " AND t.is_recurring = ?"
            params.append(1 if filters.is_recurring else 0)

        if filters.tags:
            clauses = " OR ".join("t.tags LIKE ?" for _ in filters.tags)
            query += f" AND ({clauses})"
            params.extend(f'%"{tag}"%' for tag in filters.tags)

        if filters.search:
            query += " AND (t.title LIKE ? OR t.description LIKE ?)"
            search_term = f"%{filters.search}%"
            params.extend([search_term, search_term])

        query += " ORDER BY t.due_date IS NULL, t.due_date ASC, t.created_at ASC"

        if filters.limit is not None:
            query += " LIMIT ?"
            params.append(filters.limit)
            if filters.offset is not None:
                query += " OFFSET ?"
                params.append(filters.offset)

        rows = self._execute(query, params).fetchall()
        return [self._row_to_task(row) for row in rows]

    async def get(self, task_id: str) -> Task:
        """Get a specific task by ID."""
        row = self._execute(
            "SELECT * FROM tasks WHERE id = ? AND deleted_at IS NULL", (task_id,)
        ).fetchone()

        if not row:
            raise TaskNotFoundError(f"Task not found: {task_id}")

        return self._row_to_task(row)

    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task."""
        task_id = generate_uuid()
        now = now_iso()

        series_id = task_data.series_id
        if series_id is None and task_data.is_recurring:
            series_id = task_id

        columns: dict[str, Any] = {
            "id": task_id,
            "title": task_data.title,
            "description": task_data.description,
            "project_id": task_data.project_id,
            "status": task_data.status,
            "priority": task_data.priority,
            "assignees": dump_list(task_data.assignees),
            "tags": dump_list(task_data.tags),
            "due_date": to_iso(task_data.due_date),
            "is_recurring": task_data.is_recurring,
            "series_id": series_id,
            "previous_instance_id": task_data.previous_instance_id,
            "recurrence_index": task_data.recurrence_index,
            "created_at": now,
            "updated_at": now,
            "version": 1,
            **recurrence_to_row(task_data.recurrence),
        }

        placeholders = ", ".join("?" for _ in columns)
        self._execute(
            f"INSERT INTO tasks ({', '.join(columns)}) VALUES ({placeholders})",
            list(columns.values()),
        )
        self._commit()

        return await self.get(task_id)

    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        """Update an existing task."""
        update_dict = updates.model_dump(exclude_unset=True)
        # Ensure the task exists (and is not deleted) before writing
        await self.get(task_id)

        if not update_dict:
            return await self.get(task_id)

        if "recurrence" in update_dict:
            rule = updates.recurrence
            update_dict.pop("recurrence")
            update_dict.update(recurrence_to_row(rule))
            update_dict["is_recurring"] = rule is not None
        if "due_date" in update_dict:
            update_dict["due_date"] = to_iso(updates.due_date)
        for list_field in ("assignees", "tags"):
            if list_field in update_dict:
                update_dict[list_field] = dump_list(update_dict[list_field])

        set_parts = [f"{key} = ?" for key in update_dict]
        params = list(update_dict.values())

        # Always update updated_at and increment version
        set_parts.append("updated_at = ?")
        set_parts.append("version = version + 1")
        params.append(now_iso())

        query = f"UPDATE tasks SET {', '.join(set_parts)} WHERE id = ?"
        params.append(task_id)

        self._execute(query, params)
        self._commit()

        return await self.get(task_id)

    async def delete(self, task_id: str) -> bool:
        """Delete a task (soft delete)."""
        cursor = self._execute(
            "UPDATE tasks SET deleted_at = ? WHERE id = ? AND deleted_at IS NULL",
            (now_iso(), task_id),
        )
        self._commit()

        if cursor.rowcount == 0:
            raise TaskNotFoundError(f"Task not found: {task_id}")
        return True

    async def complete(self, task_id: str) -> Task:
        """Mark a task as completed."""
        now = now_iso()

        self._execute(
            """UPDATE tasks
               SET completed_at = COALESCE(completed_at, ?), status = ?,
                   updated_at = ?, version = version + 1
               WHERE id = ? AND deleted_at IS NULL""",
            (now, STATUS_DONE, now, task_id),
        )
        self._commit()

        return await self.get(task_id)

    # ------------------------------------------------------------------
    # Recurring series primitives
    # ------------------------------------------------------------------

    async def claim_completion(self, task_id: str, completed_at: datetime) -> bool:
        """Compare-and-swap completed_at from NULL to ``completed_at``."""
        cursor = self._execute(
            """UPDATE tasks
               SET completed_at = ?, status = ?, updated_at = ?, version = version + 1
               WHERE id = ? AND completed_at IS NULL AND deleted_at IS NULL""",
            (completed_at.isoformat(), STATUS_DONE, now_iso(), task_id),
        )
        self._commit()

        if cursor.rowcount == 1:
            return True

        # Distinguish "already completed" from "no such task"
        await self.get(task_id)
        return False

    async def archive(self, task_id: str, archived_at: datetime) -> Task:
        """Archive a task."""
        cursor = self._execute(
            """UPDATE tasks
               SET archived_at = ?, updated_at = ?, version = version + 1
               WHERE id = ? AND deleted_at IS NULL""",
            (archived_at.isoformat(), now_iso(), task_id),
        )
        self._commit()

        if cursor.rowcount == 0:
            raise TaskNotFoundError(f"Task not found: {task_id}")
        return await self.get(task_id)

    async def find_successor(self, task_id: str) -> Task | None:
        """Return the instance created when ``task_id`` was completed."""
        row = self._execute(
            "SELECT * FROM tasks WHERE previous_instance_id = ? AND deleted_at IS NULL",
            (task_id,),
        ).fetchone()
        return self._row_to_task(row) if row else None

    async def end_series(
        self, series_id: str, task_id: str, ended_at: datetime
    ) -> SeriesEnd:
        """Record the end marker of a series."""
        self._execute(
            "INSERT INTO series_ends (series_id, ended_by_task_id, ended_at) VALUES (?, ?, ?)",
            (series_id, task_id, ended_at.isoformat()),
        )
        self._commit()

        return SeriesEnd(series_id=series_id, ended_by_task_id=task_id, ended_at=ended_at)

    async def get_series_end(self, series_id: str) -> SeriesEnd | None:
        """Return the end marker of a series, if it ended."""
        row = self._execute(
            "SELECT * FROM series_ends WHERE series_id = ?", (series_id,)
        ).fetchone()
        return SeriesEnd(**row_to_dict(row)) if row else None

    async def list_series(self, series_id: str) -> list[Task]:
        """List every instance of a series, oldest first."""
        rows = self._execute(
            """SELECT * FROM tasks
               WHERE series_id = ? AND deleted_at IS NULL
               ORDER BY recurrence_index ASC, created_at ASC""",
            (series_id,),
        ).fetchall()
        return [self._row_to_task(row) for row in rows]

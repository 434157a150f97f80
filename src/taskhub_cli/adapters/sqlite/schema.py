"""Database schema definitions for the local SQLite task store.

Recurrence rules are stored flattened into ``recurrence_*`` columns, the same
layout the hosted backend uses, so rows can be exchanged without conversion.
"""

from __future__ import annotations

# Schema version tracking
SCHEMA_VERSION = 1

# Tasks table - main task entity
CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    project_id TEXT,
    status TEXT NOT NULL DEFAULT 'todo',
    priority INTEGER DEFAULT 4,
    assignees TEXT NOT NULL DEFAULT '[]',
    tags TEXT NOT NULL DEFAULT '[]',
    due_date DATETIME,

    -- Recurring tasks
    is_recurring BOOLEAN NOT NULL DEFAULT 0,
    recurrence_frequency TEXT,
    recurrence_interval INTEGER,
    recurrence_end_date DATE,
    recurrence_days_of_week TEXT,
    recurrence_day_of_month INTEGER,
    series_id TEXT,
    previous_instance_id TEXT,
    recurrence_index INTEGER NOT NULL DEFAULT 0,

    completed_at DATETIME,
    archived_at DATETIME,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    deleted_at DATETIME,
    version INTEGER DEFAULT 1,

    FOREIGN KEY (previous_instance_id) REFERENCES tasks(id) ON DELETE SET NULL
)
"""

# One row per terminated series
CREATE_SERIES_ENDS_TABLE = """
CREATE TABLE IF NOT EXISTS series_ends (
    series_id TEXT PRIMARY KEY,
    ended_by_task_id TEXT NOT NULL,
    ended_at DATETIME NOT NULL,
    FOREIGN KEY (ended_by_task_id) REFERENCES tasks(id) ON DELETE CASCADE
)
"""

# Indexes for performance
CREATE_TASK_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_due_date ON tasks(due_date)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed_at, deleted_at)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_series ON tasks(series_id, recurrence_index)",
    # A task can be superseded at most once
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_tasks_previous_instance "
    "ON tasks(previous_instance_id) WHERE previous_instance_id IS NOT NULL",
]

# All table creation statements in order
ALL_TABLES = [
    CREATE_TASKS_TABLE,
    CREATE_SERIES_ENDS_TABLE,
]

ALL_INDEXES = CREATE_TASK_INDEXES

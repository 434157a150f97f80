"""Task data models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from .recurrence import RecurrenceRule

STATUS_TODO = "todo"
STATUS_DONE = "done"


class Task(BaseModel):
    """Task model representing a complete task entity.

    Attributes:
        id: Unique identifier for the task
        title: Main task text
        description: Optional detailed description
        project_id: Optional reference to parent project
        status: Workflow status ("todo" for fresh instances, "done" when completed)
        priority: Priority level (4=lowest, 1=highest)
        assignees: User IDs the task is assigned to
        tags: Free-form tags
        due_date: Optional due date with timezone
        is_recurring: Whether this task repeats
        recurrence: Repeat rule, present exactly when is_recurring is True
        series_id: Shared by every instance spawned from one recurring task
        previous_instance_id: Task this instance superseded in its series
        recurrence_index: Position in the series (0 = original task)
        completed_at: Completion timestamp
        archived_at: Archive timestamp (set when a series ends)
        created_at: Creation timestamp
        updated_at: Last update timestamp
        version: Version for optimistic locking
    """

    id: str
    title: str
    description: str | None = None
    project_id: str | None = None
    status: str = STATUS_TODO
    priority: int = Field(default=4, ge=1, le=4)
    assignees: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    due_date: datetime | None = None
    is_recurring: bool = False
    recurrence: RecurrenceRule | None = None
    series_id: str | None = None
    previous_instance_id: str | None = None
    recurrence_index: int = Field(default=0, ge=0)
    completed_at: datetime | None = None
    archived_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    version: int = Field(default=1)

    @model_validator(mode="after")
    def check_recurrence_flag(self) -> Task:
        if self.is_recurring != (self.recurrence is not None):
            raise ValueError("is_recurring must be set exactly when recurrence is present")
        return self

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


class TaskCreate(BaseModel):
    """Model for creating a new task.

    Attributes:
        title: Main task text (required)
        description: Optional detailed description
        project_id: Optional reference to parent project
        status: Initial workflow status
        priority: Priority level (4=lowest, 1=highest)
        assignees: User IDs
        tags: Free-form tags
        due_date: Optional due date with timezone
        recurrence: Optional repeat rule; the task is recurring when set
        series_id: Series to join (None starts a new series for recurring tasks)
        previous_instance_id: Task this one supersedes
        recurrence_index: Position in the series
    """

    title: str
    description: str | None = None
    project_id: str | None = None
    status: str = STATUS_TODO
    priority: int = Field(default=4, ge=1, le=4)
    assignees: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    due_date: datetime | None = None
    recurrence: RecurrenceRule | None = None
    series_id: str | None = None
    previous_instance_id: str | None = None
    recurrence_index: int = Field(default=0, ge=0)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None


class TaskUpdate(BaseModel):
    """Model for updating an existing task.

    Only fields explicitly set are written, so passing ``None`` clears a
    column (e.g. ``TaskUpdate(recurrence=None, series_id=None)``).
    """

    title: str | None = None
    description: str | None = None
    project_id: str | None = None
    status: str | None = None
    priority: int | None = Field(default=None, ge=1, le=4)
    assignees: list[str] | None = None
    tags: list[str] | None = None
    due_date: datetime | None = None
    recurrence: RecurrenceRule | None = None
    series_id: str | None = None
    previous_instance_id: str | None = None


class TaskFilters(BaseModel):
    """Filters for querying tasks.

    Attributes:
        id_prefix: Filter by ID prefix (for short ID resolution)
        status: Filter by completion ("active", "completed", "all")
        series_id: Only instances of this series
        is_recurring: Filter to only recurring tasks when True
        tags: Filter by tags (match any)
        search: Text search on title and description
        include_archived: Include archived tasks
        limit: Maximum number of results
        offset: Pagination offset
    """

    id_prefix: str | None = None
    status: str | None = Field(default=None, pattern="^(active|completed|all)$")
    series_id: str | None = None
    is_recurring: bool | None = None
    tags: list[str] | None = None
    search: str | None = None
    include_archived: bool = False
    limit: int | None = Field(default=None, ge=1)
    offset: int | None = Field(default=None, ge=0)


class SeriesEnd(BaseModel):
    """Marker recorded when a recurring series terminates.

    Attributes:
        series_id: The series that ended
        ended_by_task_id: The completed instance that had no successor
        ended_at: When the series ended
    """

    series_id: str
    ended_by_task_id: str
    ended_at: datetime

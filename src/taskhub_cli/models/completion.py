"""Outcomes of completing a recurring task."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from .core import Task


class NextInstanceCreated(BaseModel):
    """The series continues: ``next_task`` is the successor instance.

    Attributes:
        completed_task_id: The instance that was completed
        next_task: The successor carrying the next due date
        replayed: True when the completion had already happened and this
            result was looked up rather than produced
    """

    kind: Literal["next_instance"] = "next_instance"
    completed_task_id: str
    next_task: Task
    replayed: bool = False


class SeriesEnded(BaseModel):
    """The series is over: the rule's end date left no further occurrence.

    Attributes:
        completed_task_id: The final instance, now completed and archived
        series_id: The series that ended
        ended_at: When the series ended
        replayed: True when this result was looked up on a repeated call
    """

    kind: Literal["series_ended"] = "series_ended"
    series_ended: Literal[True] = True
    completed_task_id: str
    series_id: str
    ended_at: datetime
    replayed: bool = False


CompletionResult = Annotated[
    NextInstanceCreated | SeriesEnded, Field(discriminator="kind")
]

"""Utility functions for SQLite adapter."""

from __future__ import annotations

import json
import uuid
from datetime import UTC, date, datetime
from typing import Any


def generate_uuid() -> str:
    """Generate a new UUID as string.

    Returns:
        UUID string (e.g., "123e4567-e89b-12d3-a456-426614174000")
    """
    return str(uuid.uuid4())


def now_iso() -> str:
    """Get current timestamp in ISO format."""
    return datetime.now(UTC).isoformat()


def to_iso(value: date | None) -> str | None:
    """Serialize a date/datetime for storage, passing None through."""
    if value is None:
        return None
    return value.isoformat()


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary."""
    if row is None:
        return {}
    return dict(row)


def dump_list(values: list[str] | None) -> str:
    """Encode a list column as JSON text."""
    return json.dumps(list(values or []))


def load_list(value: str | None) -> list[str]:
    """Decode a JSON text list column."""
    if not value:
        return []
    return list(json.loads(value))

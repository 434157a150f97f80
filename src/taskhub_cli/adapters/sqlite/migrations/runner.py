"""Forward-only schema migrations for the SQLite task store.

Each migration is a numbered list of SQL statements. Applied versions are
recorded in ``schema_version``; a migration and its version row commit
together or not at all.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime

logger = logging.getLogger(__name__)

CREATE_SCHEMA_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    description TEXT NOT NULL,
    applied_at DATETIME NOT NULL
)
"""


@dataclass(frozen=True)
class Migration:
    """A numbered schema change.

    Attributes:
        version: Sequential version number, starting at 1
        description: Human-readable summary
        statements: SQL executed in order
    """

    version: int
    description: str
    statements: tuple[str, ...]


class MigrationRunner:
    """Applies pending migrations to a connection."""

    def __init__(self, connection: sqlite3.Connection):
        self.connection = connection
        self.connection.execute(CREATE_SCHEMA_VERSION_TABLE)
        self.connection.commit()

    def get_current_version(self) -> int:
        """Highest applied version (0 for a fresh database)."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] or 0

    def run_migration(self, migration: Migration) -> None:
        """Apply one migration.

        Raises:
            ValueError: If the migration is not newer than the database
            RuntimeError: If a statement fails; nothing from the migration
                is kept
        """
        current = self.get_current_version()
        if migration.version <= current:
            raise ValueError(
                f"Migration {migration.version} is not newer than schema version {current}"
            )

        self.connection.execute("BEGIN")
        try:
            for statement in migration.statements:
                self.connection.execute(statement)
            self.connection.execute(
                "INSERT INTO schema_version (version, description, applied_at) VALUES (?, ?, ?)",
                (migration.version, migration.description, datetime.now(UTC).isoformat()),
            )
            self.connection.commit()
        except sqlite3.Error as e:
            self.connection.rollback()
            raise RuntimeError(f"Migration {migration.version} failed: {e}") from e

        logger.info("applied migration %03d: %s", migration.version, migration.description)

    def run_migrations(self, migrations: list[Migration]) -> int:
        """Apply every migration newer than the database, in version order.

        Returns:
            Number of migrations applied
        """
        current = self.get_current_version()
        pending = sorted(
            (m for m in migrations if m.version > current), key=lambda m: m.version
        )
        for migration in pending:
            self.run_migration(migration)
        return len(pending)


def run_migrations(connection: sqlite3.Connection, migrations: list[Migration]) -> int:
    """Bring ``connection`` up to date; returns the number of migrations applied."""
    return MigrationRunner(connection).run_migrations(migrations)

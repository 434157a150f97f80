"""Database connection management for the local SQLite task store.

This module provides a singleton connection manager for the local SQLite database,
ensuring proper connection lifecycle, WAL mode, and foreign key enforcement.
"""

from __future__ import annotations

import atexit
import os
import sqlite3
from pathlib import Path

from platformdirs import user_data_dir

from taskhub_cli.adapters.sqlite.migrations import ALL_MIGRATIONS, run_migrations

# Seconds a writer waits for a competing transaction before failing
LOCK_TIMEOUT = 30.0


def configure_connection(connection: sqlite3.Connection) -> sqlite3.Connection:
    """Apply the pragmas and row factory every TaskHub connection uses."""
    connection.row_factory = sqlite3.Row  # Enable dict-like access
    connection.execute("PRAGMA foreign_keys = ON")
    return connection


class DatabaseConnection:
    """Singleton connection manager for the local SQLite database.

    Provides:
    - Single connection per process (connection reuse)
    - WAL mode so readers never block the completing writer
    - Foreign key constraint enforcement
    - Automatic directory creation and owner-only file permissions
    - Graceful cleanup on exit
    """

    _instance: DatabaseConnection | None = None
    _connection: sqlite3.Connection | None = None
    _db_path: Path | None = None

    def __new__(cls) -> DatabaseConnection:
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_connection(cls, db_path: str | Path | None = None) -> sqlite3.Connection:
        """Get or create database connection.

        Args:
            db_path: Path to database file. If None, uses default location.

        Returns:
            sqlite3.Connection with the schema migrated to the latest version
        """
        instance = cls()

        if db_path is None:
            db_path = Path(user_data_dir("taskhub_cli")) / "taskhub.db"
        else:
            db_path = Path(db_path)

        if instance._connection is not None and instance._db_path == db_path:
            return instance._connection

        if instance._connection is not None:
            instance._connection.close()

        db_path.parent.mkdir(parents=True, exist_ok=True)
        is_new_database = not db_path.exists()

        connection = sqlite3.connect(
            str(db_path),
            check_same_thread=False,
            timeout=LOCK_TIMEOUT,
        )
        configure_connection(connection)
        connection.execute("PRAGMA journal_mode = WAL")

        if is_new_database:
            os.chmod(db_path, 0o600)

        run_migrations(connection, ALL_MIGRATIONS)

        instance._connection = connection
        instance._db_path = db_path

        atexit.register(cls.close_connection)

        return connection

    @classmethod
    def close_connection(cls) -> None:
        """Close database connection gracefully."""
        instance = cls()
        if instance._connection is not None:
            try:
                instance._connection.close()
            finally:
                instance._connection = None
                instance._db_path = None

    @classmethod
    def get_db_path(cls) -> Path | None:
        """Get current database path."""
        return cls()._db_path


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Helper function to get database connection."""
    return DatabaseConnection.get_connection(db_path)


def create_memory_connection() -> sqlite3.Connection:
    """Create a migrated in-memory database (used by tests and dry runs)."""
    connection = configure_connection(
        sqlite3.connect(":memory:", check_same_thread=False)
    )
    run_migrations(connection, ALL_MIGRATIONS)
    return connection

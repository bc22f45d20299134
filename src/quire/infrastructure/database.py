"""SQLite connection and transaction management."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from quire.config import Settings

from .schema import ensure_schema

logger = logging.getLogger(__name__)


class Database:
    """Owns the application's single SQLite connection.

    This class handles:
    - Opening the connection once and sharing it across request threads
    - Serializing access with a lock so each store call is atomic
    - Wrapping multi-statement writes in one transaction
    """

    def __init__(self, settings: Settings):
        self.path = settings.database_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def initialize(self) -> None:
        """Open the connection and ensure the schema.

        Called once at application startup.
        """
        if self._conn is not None:
            return

        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Opening SQLite database at {self.path}")
        conn = sqlite3.connect(self.path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        if self.path != ":memory:":
            conn.execute("PRAGMA journal_mode=WAL")
        ensure_schema(conn)
        self._conn = conn

        version = conn.execute("SELECT sqlite_version()").fetchone()[0]
        logger.info(f"Connected to SQLite {version}")

    def close(self) -> None:
        """Close the connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info("Database connection closed")

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the open connection."""
        if self._conn is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._conn

    @contextmanager
    def acquire(self) -> Iterator[sqlite3.Connection]:
        """Hold the lock for a read.

        Usage:
            with db.acquire() as conn:
                conn.execute("SELECT * FROM content")
        """
        with self._lock:
            yield self.connection

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Hold the lock and commit on success, roll back on error."""
        with self._lock:
            conn = self.connection
            with conn:
                yield conn

    def ping(self) -> bool:
        """Check that the database answers queries."""
        try:
            with self.acquire() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except (sqlite3.Error, RuntimeError):
            return False

"""SQLite persistence for model predictions and accuracy statistics."""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence

from marketlens.config import get_settings
from marketlens.database.models import ALL_TABLES

MEMORY_PATH = ":memory:"


class Database:
    """Connection shared by the repositories.

    The analyzer writes from worker threads (``asyncio.to_thread``), so one
    connection is opened with ``check_same_thread=False`` and every statement
    runs under a lock. Writes go through :meth:`transaction`, which rolls back
    on error so a failed insert never leaves a half-open transaction behind
    for the next caller.
    """

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database.

        Args:
            db_path: Path to SQLite database file, or ":memory:". If None,
                uses config value.
        """
        self.db_path = db_path or get_settings().database_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def conn(self) -> sqlite3.Connection:
        """Get database connection, opening it on first use."""
        with self._lock:
            if self._conn is None:
                if self.db_path != MEMORY_PATH:
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
                self._conn.row_factory = sqlite3.Row
            return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Run statements atomically, committing on success.

        Yields:
            Cursor bound to the shared connection

        Raises:
            Exception: Whatever the block raised, after rolling back
        """
        with self._lock:
            conn = self.conn
            cursor = conn.cursor()
            try:
                yield cursor
            except Exception:
                conn.rollback()
                raise
            conn.commit()

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self._lock:
            return self.conn.execute(sql, params).fetchall()

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            return self.conn.execute(sql, params).fetchone()

    def initialize_schema(self) -> None:
        """Create all tables and indexes if they don't exist."""
        with self.transaction() as cursor:
            for sql in ALL_TABLES:
                cursor.execute(sql)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


_db: Optional[Database] = None


def get_db() -> Database:
    """Get the shared database, creating its schema on first use."""
    global _db
    if _db is None:
        _db = Database()
        _db.initialize_schema()
    return _db


def close_db() -> None:
    global _db
    if _db is not None:
        _db.close()
        _db = None

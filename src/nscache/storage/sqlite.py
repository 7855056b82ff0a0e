"""
SQLite Storage
Text-only persistent key/value store
"""

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Optional, Union

from .base import StorageBackend

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class SQLiteStorage(StorageBackend):
    """
    String key/value store on SQLite.

    Backed by a database file for local storage (shared with other processes
    that open the same file) or by an in-memory database that lives as long as
    the process for session storage. Only string payloads are accepted.
    """

    text_only = True

    def __init__(
        self,
        path: Union[str, Path] = MEMORY_DATABASE,
        timeout: float = 5.0,
    ):
        """
        Open (and create if needed) the store.

        Args:
            path: Database file, or ``":memory:"`` for a session-scoped store
            timeout: Seconds to wait on a database locked by another process
        """
        self.path = str(path)
        if self.path != MEMORY_DATABASE:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.RLock()
        # One connection shared with the sweep thread, serialized by _lock
        self._conn: Optional[sqlite3.Connection] = sqlite3.connect(
            self.path,
            timeout=timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        self._init_db()
        logger.debug(f"SQLite storage opened: {self.path}")

    @property
    def persistent(self) -> bool:
        """Whether data outlives the process"""
        return self.path != MEMORY_DATABASE

    def _init_db(self) -> None:
        with self._lock:
            self._connection.execute(
                """
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    @property
    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError(f"Storage closed: {self.path}")
        return self._conn

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            row = self._connection.execute(
                "SELECT value FROM storage WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row is not None else None

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Text storage accepts str values, got {type(value).__name__}")

        with self._lock:
            self._connection.execute(
                "INSERT OR REPLACE INTO storage (key, value) VALUES (?, ?)",
                (key, value),
            )

    def remove(self, key: str) -> None:
        with self._lock:
            self._connection.execute("DELETE FROM storage WHERE key = ?", (key,))

    def keys(self) -> list[str]:
        with self._lock:
            rows = self._connection.execute("SELECT key FROM storage").fetchall()
        return [row[0] for row in rows]

    def clear(self) -> None:
        with self._lock:
            self._connection.execute("DELETE FROM storage")

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.debug(f"SQLite storage closed: {self.path}")

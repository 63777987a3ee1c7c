"""Key-value stores backing the run history.

``SQLiteKeyValueStore`` keeps one row per key:
  - ``value`` holds the whole serialized document; writers replace it in full.
  - ``updated_at`` is maintained by SQLite for inspection only.
"""

from __future__ import annotations

import sqlite3
import threading
from typing import Protocol

_DDL = """
PRAGMA journal_mode = WAL;
PRAGMA synchronous  = NORMAL;

CREATE TABLE IF NOT EXISTS kv (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL
               DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_SELECT = "SELECT value FROM kv WHERE key = ?"

_UPSERT = """
INSERT INTO kv (key, value) VALUES (?, ?)
ON CONFLICT (key) DO UPDATE
    SET value      = excluded.value,
        updated_at = strftime('%Y-%m-%dT%H:%M:%SZ', 'now')
"""

_DELETE = "DELETE FROM kv WHERE key = ?"


class HistoryStoreError(Exception):
    """Raised when the store cannot be read or written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class SQLiteKeyValueStore:
    """String key-value store in a SQLite file.

    One connection is shared across threads and serialized with a lock, so
    the store can be used from web worker threads and the run timer alike.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  Pass ``":memory:"`` for in-process testing.
    """

    def __init__(self, db_path: str = "run_scout.db") -> None:
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            for stmt in _DDL.strip().split(";"):
                stmt = stmt.strip()
                if stmt:
                    self._conn.execute(stmt)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise HistoryStoreError(f"cannot open {db_path!r}: {exc}") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or None."""
        with self._lock:
            try:
                row = self._conn.execute(_SELECT, (key,)).fetchone()
            except sqlite3.Error as exc:
                raise HistoryStoreError(f"read failed for {key!r}: {exc}") from exc
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Replace the value stored under *key*."""
        with self._lock:
            try:
                self._conn.execute(_UPSERT, (key, value))
                self._conn.commit()
            except sqlite3.Error as exc:
                raise HistoryStoreError(f"write failed for {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        with self._lock:
            try:
                self._conn.execute(_DELETE, (key,))
                self._conn.commit()
            except sqlite3.Error as exc:
                raise HistoryStoreError(f"delete failed for {key!r}: {exc}") from exc

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()


class MemoryKeyValueStore:
    """Dict-backed store; records writes for test assertions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes: int = 0

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes += 1

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def close(self) -> None:
        """No-op."""

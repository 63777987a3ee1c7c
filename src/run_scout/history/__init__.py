"""Run history persistence.

Public API
----------
RunHistoryEntry       - one persisted run
RunHistoryRecorder    - save()/load() over a key-value store
SQLiteKeyValueStore   - SQLite-backed key-value store
MemoryKeyValueStore   - dict-backed store for tests
HistoryStoreError     - raised by stores on I/O failure
"""

from run_scout.history.models import RunHistoryEntry
from run_scout.history.recorder import FREE_RUN, HISTORY_KEY, RunHistoryRecorder
from run_scout.history.store import (
    HistoryStoreError,
    KeyValueStore,
    MemoryKeyValueStore,
    SQLiteKeyValueStore,
)

__all__ = [
    "FREE_RUN",
    "HISTORY_KEY",
    "HistoryStoreError",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RunHistoryEntry",
    "RunHistoryRecorder",
    "SQLiteKeyValueStore",
]

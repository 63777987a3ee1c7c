"""RunHistoryRecorder — saves finished runs and lists them newest first."""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone

from run_scout.history.models import RunHistoryEntry, to_iso8601
from run_scout.history.store import HistoryStoreError, KeyValueStore
from run_scout.tracking.models import RunMetrics

_logger = logging.getLogger(__name__)

HISTORY_KEY = "runHistory"
FREE_RUN = "Free Run"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first_key(entry: RunHistoryEntry) -> tuple[datetime, int]:
    # Saves in the same millisecond share a date; their ids still increase.
    return entry.saved_at, int(entry.id) if entry.id.isdigit() else 0


class RunHistoryRecorder:
    """Persists :class:`RunHistoryEntry` records as one JSON array in a key-value store.

    Every save rewrites the whole collection (read-modify-write).  Store and
    parse failures are logged and swallowed here so that they never reach
    the session-stop flow.

    Args:
        store: Object with ``get(key)`` / ``set(key, value)``.
        key: Store key holding the serialized array.
        clock: Returns the current aware ``datetime``; injected in tests.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = HISTORY_KEY,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._key = key
        self._clock = clock
        self._lock = threading.Lock()
        self._last_id = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def save(self, metrics: RunMetrics, place_name: str | None = None) -> RunHistoryEntry | None:
        """Append a finished run to the history.

        Returns the new entry, or None when the run is empty (no distance
        and no time) or the store could not be read or written.
        """
        if not metrics.has_progress():
            _logger.debug("Skipping save of empty run")
            return None

        with self._lock:
            try:
                history = self._read_raw()
                now = self._clock()
                entry = RunHistoryEntry(
                    id=self._next_id(now, history),
                    date=to_iso8601(now),
                    place_name=place_name or FREE_RUN,
                    metrics=metrics.snapshot(),
                )
                history.append(entry.to_dict())
                self._store.set(self._key, json.dumps(history))
            except (HistoryStoreError, ValueError, TypeError) as exc:
                _logger.warning("Could not save run to history: %s", exc)
                return None

        _logger.info(
            "Saved run %s (%s, %.2f km)", entry.id, entry.place_name, metrics.distance_km
        )
        return entry

    def load(self) -> list[RunHistoryEntry]:
        """Return all saved runs, most recent ``date`` first.

        Returns an empty list if the store is empty, unreadable or corrupt.
        Individual malformed records are skipped.
        """
        try:
            raw = self._store.get(self._key)
        except HistoryStoreError as exc:
            _logger.warning("Could not read run history: %s", exc)
            return []
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except ValueError as exc:
            _logger.warning("Run history is corrupt: %s", exc)
            return []
        if not isinstance(data, list):
            _logger.warning("Run history is corrupt: expected a JSON array")
            return []

        entries: list[RunHistoryEntry] = []
        for item in data:
            try:
                entries.append(RunHistoryEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                _logger.warning("Skipping malformed history record: %r", exc)

        entries.sort(key=_newest_first_key, reverse=True)
        return entries

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_raw(self) -> list:
        """Return the stored array as plain dicts; raises ``ValueError`` if corrupt."""
        raw = self._store.get(self._key)
        if not raw:
            return []
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("stored run history is not a JSON array")
        return data

    def _next_id(self, now: datetime, history: list) -> str:
        """Millisecond timestamp, bumped past every id already issued or stored."""
        stored = [
            int(item["id"])
            for item in history
            if isinstance(item, dict) and str(item.get("id", "")).isdigit()
        ]
        candidate = int(now.timestamp() * 1000)
        floor = max([self._last_id, *stored])
        if candidate <= floor:
            candidate = floor + 1
        self._last_id = candidate
        return str(candidate)

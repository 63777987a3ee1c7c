"""Tickers that drive a session's elapsed-time counter."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

_logger = logging.getLogger(__name__)


class RepeatingTimer:
    """Calls a callback every *interval* seconds on a daemon thread.

    Ticks are scheduled against a fixed grid (``start + n * interval``) so a
    slow callback does not make the timer drift.

    Parameters
    ----------
    interval:
        Seconds between ticks.
    """

    def __init__(self, interval: float = 1.0) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._thread is not None

    def start(self, callback: Callable[[], None]) -> None:
        """Start ticking.  Raises ``RuntimeError`` if already running."""
        if self._thread is not None:
            raise RuntimeError("timer already running")
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, args=(callback,), daemon=True, name="RunTimer"
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the ticking thread to stop and join it."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _run(self, callback: Callable[[], None]) -> None:
        ticks = 0
        origin = time.monotonic()
        while True:
            ticks += 1
            wait = origin + ticks * self._interval - time.monotonic()
            if self._stop_event.wait(max(0.0, wait)):
                return
            try:
                callback()
            except Exception:
                _logger.exception("Timer callback failed")


class ManualTicker:
    """Ticker driven by explicit :meth:`fire` calls; for tests and replays."""

    def __init__(self) -> None:
        self._callback: Callable[[], None] | None = None
        self.starts: int = 0
        self.stops: int = 0

    @property
    def is_running(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        if self._callback is not None:
            raise RuntimeError("timer already running")
        self._callback = callback
        self.starts += 1

    def stop(self) -> None:
        if self._callback is not None:
            self.stops += 1
        self._callback = None

    def fire(self, times: int = 1) -> None:
        """Deliver *times* ticks.  No-op when stopped."""
        for _ in range(times):
            if self._callback is None:
                return
            self._callback()

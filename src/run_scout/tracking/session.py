"""RunSessionTracker — turns a stream of position fixes and timer ticks into run metrics."""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from run_scout.geo.calculations import calculate_distance, calculate_pace
from run_scout.geo.models import Coordinate
from run_scout.tracking.models import RunMetrics
from run_scout.tracking.position import PositionError, PositionSource
from run_scout.tracking.timer import RepeatingTimer

if TYPE_CHECKING:
    from run_scout.history.models import RunHistoryEntry
    from run_scout.history.recorder import RunHistoryRecorder

_logger = logging.getLogger(__name__)

NOISE_THRESHOLD_KM = 0.005
"""Moves of 5 m or less between fixes are treated as GPS jitter."""

MetricsListener = Callable[[RunMetrics], None]
PositionListener = Callable[[Coordinate], None]


class RunSessionTracker:
    """Owns the lifecycle of one run at a time: ``Idle`` → ``Tracking`` → ``Idle``.

    While tracking, a ticker advances elapsed time once per tick and a
    position subscription feeds fixes through the noise filter into the
    cumulative distance and path.  Both resources are acquired in
    :meth:`start` and released in :meth:`stop` (and :meth:`close`, which also
    backs the context-manager protocol).

    Fixes and ticks may arrive on any thread; all state changes happen under
    one lock.  Listeners and the history recorder are called outside it.

    Parameters
    ----------
    position_source:
        Object implementing
        :class:`~run_scout.tracking.position.PositionSource`.
    recorder:
        Optional :class:`~run_scout.history.recorder.RunHistoryRecorder`; a
        session that made progress is saved to it on :meth:`stop`.
    ticker:
        Object with ``start(callback)`` / ``stop()``.  Defaults to a 1 s
        :class:`~run_scout.tracking.timer.RepeatingTimer`.
    noise_threshold_km:
        Minimum distance between accepted fixes.
    """

    def __init__(
        self,
        position_source: PositionSource,
        recorder: RunHistoryRecorder | None = None,
        ticker=None,
        noise_threshold_km: float = NOISE_THRESHOLD_KM,
    ) -> None:
        self._source = position_source
        self._recorder = recorder
        self._ticker = ticker if ticker is not None else RepeatingTimer(1.0)
        self._threshold_km = noise_threshold_km

        self._lock = threading.RLock()
        self._metrics = RunMetrics()
        self._session = 0
        self._subscription: int | None = None
        self._place_name: str | None = None
        self._last_position: Coordinate | None = None
        self._current_position: Coordinate | None = None
        self._last_error: PositionError | None = None
        self._last_entry: RunHistoryEntry | None = None

        self._update_listeners: list[MetricsListener] = []
        self._position_listeners: list[PositionListener] = []
        self._finish_listeners: list[MetricsListener] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_tracking(self) -> bool:
        return self._metrics.is_tracking

    @property
    def metrics(self) -> RunMetrics:
        """A snapshot of the current metrics."""
        with self._lock:
            return self._metrics.snapshot()

    @property
    def place_name(self) -> str | None:
        """Destination chosen for the current (or last) session."""
        return self._place_name

    @property
    def current_position(self) -> Coordinate | None:
        """Latest raw fix, whether or not it passed the noise filter."""
        return self._current_position

    @current_position.setter
    def current_position(self, fix: Coordinate | None) -> None:
        self._current_position = fix

    @property
    def last_error(self) -> PositionError | None:
        """Most recent error reported by the position source."""
        return self._last_error

    @property
    def last_entry(self) -> RunHistoryEntry | None:
        """History entry saved by the most recent :meth:`stop`, if any."""
        return self._last_entry

    def on_update(self, listener: MetricsListener) -> None:
        """Register *listener(snapshot)*, called after every tick and accepted fix."""
        self._update_listeners.append(listener)

    def on_position(self, listener: PositionListener) -> None:
        """Register *listener(fix)*, called for every raw fix received while tracking."""
        self._position_listeners.append(listener)

    def on_finish(self, listener: MetricsListener) -> None:
        """Register *listener(snapshot)*, called once per stopped session that made progress."""
        self._finish_listeners.append(listener)

    def start(self, place_name: str | None = None) -> bool:
        """Begin a new session.

        Returns
        -------
        bool
            True if a session was started; False if one is already running
            (the running session is left untouched).

        Raises
        ------
        PositionError
            If the position source refuses the subscription.  The tracker
            stays idle and holds no resources.
        """
        with self._lock:
            if self._metrics.is_tracking:
                _logger.warning("start() ignored: a session is already tracking")
                return False

            self._session += 1
            session = self._session
            self._place_name = place_name
            self._last_error = None
            self._last_entry = None
            self._last_position = self._current_position
            self._metrics = RunMetrics(
                path=[self._current_position] if self._current_position is not None else [],
                is_tracking=True,
            )

            try:
                self._subscription = self._source.subscribe(
                    functools.partial(self._handle_fix, session),
                    functools.partial(self._handle_error, session),
                )
            except Exception as exc:
                self._metrics.is_tracking = False
                self._subscription = None
                if isinstance(exc, PositionError):
                    self._last_error = exc
                _logger.warning("Cannot start run: %s", exc)
                raise

            try:
                self._ticker.start(functools.partial(self._handle_tick, session))
            except Exception:
                self._metrics.is_tracking = False
                self._source.unsubscribe(self._subscription)
                self._subscription = None
                raise
            snapshot = self._metrics.snapshot()

        _logger.info("Run started (destination=%s)", place_name or "-")
        self._notify(self._update_listeners, snapshot)
        return True

    def stop(self) -> RunMetrics | None:
        """End the current session and release the timer and subscription.

        Saves the final snapshot through the recorder when any distance or
        time was recorded.

        Returns
        -------
        RunMetrics | None
            The final snapshot, or None if no session was running.
        """
        with self._lock:
            if not self._metrics.is_tracking:
                return None
            self._metrics.is_tracking = False
            self._session += 1  # late ticks/fixes from the old session are ignored
            subscription, self._subscription = self._subscription, None
            final = self._metrics.snapshot()
            place_name = self._place_name

        self._release(subscription)
        _logger.info(
            "Run stopped: %.3f km in %d s (pace %s)",
            final.distance_km,
            final.elapsed_time_seconds,
            final.current_pace,
        )

        if final.has_progress():
            if self._recorder is not None:
                self._last_entry = self._recorder.save(final, place_name)
            self._notify(self._finish_listeners, final)
        self._notify(self._update_listeners, final)
        return final

    def close(self) -> None:
        """Stop any running session.  Safe to call repeatedly."""
        self.stop()

    def __enter__(self) -> RunSessionTracker:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _handle_tick(self, session: int) -> None:
        with self._lock:
            if session != self._session:
                return
            m = self._metrics
            m.elapsed_time_seconds += 1
            m.current_pace = calculate_pace(m.distance_km, m.elapsed_time_seconds)
            snapshot = m.snapshot()
        self._notify(self._update_listeners, snapshot)

    def _handle_fix(self, session: int, fix: Coordinate) -> None:
        with self._lock:
            if session != self._session:
                return
            self._current_position = fix
            snapshot = self._apply_fix(fix)
        self._notify(self._position_listeners, fix)
        if snapshot is not None:
            self._notify(self._update_listeners, snapshot)

    def _handle_error(self, session: int, error: PositionError) -> None:
        if session != self._session:
            return
        self._last_error = error
        _logger.warning("Position error while tracking (%s): %s", error.reason.value, error)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply_fix(self, fix: Coordinate) -> RunMetrics | None:
        """Feed *fix* through the noise filter.  Returns a snapshot if accepted."""
        m = self._metrics
        last = self._last_position
        if last is None:
            self._last_position = fix
            m.path.append(fix)
            return m.snapshot()

        delta_km = calculate_distance(
            last.latitude, last.longitude, fix.latitude, fix.longitude
        )
        if not delta_km > self._threshold_km:
            _logger.debug("Discarded fix %.1f m from last position", delta_km * 1000)
            return None

        m.distance_km += delta_km
        m.path.append(fix)
        self._last_position = fix
        return m.snapshot()

    def _release(self, subscription: int | None) -> None:
        try:
            self._ticker.stop()
        finally:
            if subscription is not None:
                self._source.unsubscribe(subscription)

    def _notify(self, listeners: list, payload) -> None:
        for listener in listeners:
            try:
                listener(payload)
            except Exception:
                _logger.exception("Run listener failed")

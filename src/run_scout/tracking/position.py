"""Position sources — subscribe/unsubscribe contract plus in-process implementations."""

from __future__ import annotations

import enum
import itertools
import threading
from collections.abc import Callable
from typing import Protocol

from run_scout.geo.models import Coordinate

FixCallback = Callable[[Coordinate], None]
ErrorCallback = Callable[["PositionError"], None]


class PositionErrorReason(enum.Enum):
    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"


class PositionError(Exception):
    """Raised or reported when a position cannot be obtained."""

    def __init__(
        self,
        reason: PositionErrorReason = PositionErrorReason.UNAVAILABLE,
        message: str = "",
    ) -> None:
        super().__init__(message or reason.value)
        self.reason = reason

    @property
    def is_permission_denied(self) -> bool:
        return self.reason is PositionErrorReason.PERMISSION_DENIED


class PositionSource(Protocol):
    """A platform service emitting position fixes."""

    def subscribe(self, on_fix: FixCallback, on_error: ErrorCallback) -> int:
        """Start delivering fixes; may raise :class:`PositionError` if access is denied."""
        ...

    def unsubscribe(self, handle: int) -> None:
        ...

    def get_current_position(
        self, on_success: FixCallback, on_error: ErrorCallback
    ) -> None:
        ...


class PushPositionSource:
    """Position source fed from outside, e.g. fixes posted by a device over HTTP.

    Every call to :meth:`push` is fanned out to all current subscribers on the
    caller's thread.

    Parameters
    ----------
    denied:
        When True, :meth:`subscribe` and :meth:`get_current_position` fail with
        ``PERMISSION_DENIED`` until :meth:`set_denied` clears it.
    """

    def __init__(self, denied: bool = False) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[int, tuple[FixCallback, ErrorCallback]] = {}
        self._handles = itertools.count(1)
        self._last_fix: Coordinate | None = None
        self._denied = denied

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def subscriber_count(self) -> int:
        """Number of live subscriptions."""
        with self._lock:
            return len(self._subscribers)

    @property
    def last_fix(self) -> Coordinate | None:
        return self._last_fix

    def set_denied(self, denied: bool) -> None:
        """Grant or revoke location permission for new requests."""
        self._denied = denied

    def subscribe(self, on_fix: FixCallback, on_error: ErrorCallback) -> int:
        if self._denied:
            raise PositionError(
                PositionErrorReason.PERMISSION_DENIED, "location permission denied"
            )
        with self._lock:
            handle = next(self._handles)
            self._subscribers[handle] = (on_fix, on_error)
        return handle

    def unsubscribe(self, handle: int) -> None:
        with self._lock:
            self._subscribers.pop(handle, None)

    def get_current_position(
        self, on_success: FixCallback, on_error: ErrorCallback
    ) -> None:
        if self._denied:
            on_error(PositionError(PositionErrorReason.PERMISSION_DENIED))
        elif self._last_fix is None:
            on_error(PositionError(PositionErrorReason.UNAVAILABLE, "no fix received yet"))
        else:
            on_success(self._last_fix)

    def push(self, fix: Coordinate) -> int:
        """Deliver *fix* to every subscriber.  Returns the number notified."""
        self._last_fix = fix
        callbacks = self._callbacks()
        for on_fix, _ in callbacks:
            on_fix(fix)
        return len(callbacks)

    def push_error(self, error: PositionError) -> int:
        """Deliver *error* to every subscriber.  Returns the number notified."""
        callbacks = self._callbacks()
        for _, on_error in callbacks:
            on_error(error)
        return len(callbacks)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _callbacks(self) -> list[tuple[FixCallback, ErrorCallback]]:
        with self._lock:
            return list(self._subscribers.values())


def request_current_position(
    source: PositionSource, timeout: float = 5.0
) -> Coordinate:
    """Block until *source* answers a one-shot position request.

    Raises
    ------
    PositionError
        If the source reports an error, or ``TIMEOUT`` if it stays silent
        for *timeout* seconds.
    """
    done = threading.Event()
    result: dict[str, object] = {}

    def _ok(fix: Coordinate) -> None:
        result["fix"] = fix
        done.set()

    def _fail(error: PositionError) -> None:
        result["error"] = error
        done.set()

    source.get_current_position(_ok, _fail)
    if not done.wait(timeout):
        raise PositionError(PositionErrorReason.TIMEOUT, "no position within timeout")
    if "error" in result:
        raise result["error"]  # type: ignore[misc]
    return result["fix"]  # type: ignore[return-value]

"""Live run tracking.

Public API
----------
RunMetrics          - running totals for one session
RunSessionTracker   - start/stop session state machine
PositionSource      - subscribe/unsubscribe contract for fixes
PositionError       - raised/reported when a position is unavailable
PushPositionSource  - position source fed by explicit push() calls
RepeatingTimer      - 1 Hz daemon-thread ticker
ManualTicker        - ticker driven by fire(), for tests and replays
"""

from run_scout.tracking.models import RunMetrics
from run_scout.tracking.position import (
    PositionError,
    PositionErrorReason,
    PositionSource,
    PushPositionSource,
    request_current_position,
)
from run_scout.tracking.session import NOISE_THRESHOLD_KM, RunSessionTracker
from run_scout.tracking.timer import ManualTicker, RepeatingTimer

__all__ = [
    "NOISE_THRESHOLD_KM",
    "ManualTicker",
    "PositionError",
    "PositionErrorReason",
    "PositionSource",
    "PushPositionSource",
    "RepeatingTimer",
    "RunMetrics",
    "RunSessionTracker",
    "request_current_position",
]

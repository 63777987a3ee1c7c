"""Live run metrics."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from run_scout.geo.calculations import NO_PACE
from run_scout.geo.models import Coordinate


@dataclass
class RunMetrics:
    """Running totals for one session.

    Mutated in place by its owning
    :class:`~run_scout.tracking.session.RunSessionTracker` only; everyone
    else works with copies from :meth:`snapshot`.
    """

    distance_km: float = 0.0
    """Cumulative accepted distance. Never decreases while tracking."""

    elapsed_time_seconds: int = 0
    """Whole seconds elapsed, one per timer tick."""

    current_pace: str = NO_PACE
    """``"MM:SS"`` per km, or ``"--:--"`` while distance is zero."""

    path: list[Coordinate] = field(default_factory=list)
    """Accepted fixes in arrival order."""

    is_tracking: bool = False

    def snapshot(self) -> RunMetrics:
        """Return an independent copy (the path list is copied too)."""
        return replace(self, path=list(self.path))

    def has_progress(self) -> bool:
        """True if any distance or time was recorded."""
        return self.distance_km > 0 or self.elapsed_time_seconds > 0

    def to_dict(self) -> dict:
        """Return the persisted camelCase mapping."""
        return {
            "distanceKm": self.distance_km,
            "elapsedTimeSeconds": self.elapsed_time_seconds,
            "currentPace": self.current_pace,
            "path": [c.to_dict() for c in self.path],
            "isTracking": self.is_tracking,
        }

    @classmethod
    def from_dict(cls, d: dict) -> RunMetrics:
        """Create :class:`RunMetrics` from its persisted camelCase mapping."""
        return cls(
            distance_km=float(d["distanceKm"]),
            elapsed_time_seconds=int(d["elapsedTimeSeconds"]),
            current_pace=str(d["currentPace"]),
            path=[Coordinate.from_dict(p) for p in d.get("path", [])],
            is_tracking=bool(d.get("isTracking", False)),
        )

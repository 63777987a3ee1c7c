"""Persisted run history records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from run_scout.tracking.models import RunMetrics


def to_iso8601(moment: datetime) -> str:
    """Format *moment* as UTC ISO-8601 with millisecond precision, e.g. ``2026-02-25T10:00:00.000Z``."""
    utc = moment.astimezone(timezone.utc) if moment.tzinfo else moment
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_iso8601(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class RunHistoryEntry:
    """One completed run as stored in the history collection."""

    id: str
    """Millisecond timestamp string; unique and increasing on one device."""

    date: str
    """ISO-8601 time the run was saved."""

    place_name: str
    """Destination at save time, or ``"Free Run"``."""

    metrics: RunMetrics
    """Final metrics snapshot."""

    @property
    def saved_at(self) -> datetime:
        return parse_iso8601(self.date)

    def to_dict(self) -> dict:
        """Return the persisted camelCase mapping."""
        return {
            "id": self.id,
            "date": self.date,
            "placeName": self.place_name,
            "metrics": self.metrics.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> RunHistoryEntry:
        """Create an entry from its persisted mapping.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` on malformed input.
        """
        date = str(d["date"])
        parse_iso8601(date)
        return cls(
            id=str(d["id"]),
            date=date,
            place_name=str(d["placeName"]),
            metrics=RunMetrics.from_dict(d["metrics"]),
        )

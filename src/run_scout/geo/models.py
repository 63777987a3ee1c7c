"""Geographic value types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinate:
    """A position in decimal degrees.

    No range validation is performed; callers are trusted.
    """

    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        """Return the persisted ``{"latitude", "longitude"}`` mapping."""
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, d: dict) -> Coordinate:
        """Create a :class:`Coordinate` from a ``{"latitude", "longitude"}`` dict."""
        return cls(latitude=float(d["latitude"]), longitude=float(d["longitude"]))

"""Route suggestion data models."""

from __future__ import annotations

from dataclasses import dataclass, field

from run_scout.geo.calculations import calculate_distance
from run_scout.geo.models import Coordinate


@dataclass
class Place:
    """A suggested running spot.

    Args:
        name: Display name.
        lat: Latitude in decimal degrees.
        lng: Longitude in decimal degrees.
        summary: Short description (approximate length, surface).
        difficulty: Free-text level, e.g. ``"Beginner"``.
    """

    name: str
    lat: float
    lng: float
    summary: str = ""
    difficulty: str = ""

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)

    def distance_from(self, origin: Coordinate) -> float:
        """Great-circle distance in km from *origin* to this place."""
        return calculate_distance(origin.latitude, origin.longitude, self.lat, self.lng)


@dataclass
class RouteSuggestions:
    """Provider answer: raw text, the places extracted from it and cited web sources."""

    text: str
    places: list[Place] = field(default_factory=list)
    sources: list[dict] = field(default_factory=list)

"""Geodesic helpers for run tracking.

Public API
----------
Coordinate          - immutable (latitude, longitude) pair
calculate_distance  - haversine great-circle distance in km
calculate_pace      - "mm:ss" per km pace string
format_time         - "mm:ss" elapsed-time string
"""

from run_scout.geo.calculations import (
    EARTH_RADIUS_KM,
    NO_PACE,
    calculate_distance,
    calculate_pace,
    format_time,
)
from run_scout.geo.models import Coordinate

__all__ = [
    "EARTH_RADIUS_KM",
    "NO_PACE",
    "Coordinate",
    "calculate_distance",
    "calculate_pace",
    "format_time",
]

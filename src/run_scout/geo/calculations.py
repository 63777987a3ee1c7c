"""Distance, pace and time formatting for live run metrics.

All functions are pure and never raise for numeric input.
"""

from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0
"""Mean Earth radius used by the spherical haversine model."""

NO_PACE = "--:--"
"""Pace shown while no distance has been covered."""


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Return the great-circle distance in kilometres between two points.

    Uses the haversine formula on a sphere of radius :data:`EARTH_RADIUS_KM`.
    Returns ``nan`` if any input is not finite.
    """
    if not all(math.isfinite(v) for v in (lat1, lng1, lat2, lng2)):
        return math.nan

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push a marginally outside [0, 1] for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def calculate_pace(distance_km: float, elapsed_seconds: float) -> str:
    """Return pace as ``"MM:SS"`` per kilometre.

    Seconds are truncated, not rounded.  Returns :data:`NO_PACE` when no
    distance has been covered yet.
    """
    if not distance_km > 0:
        return NO_PACE

    seconds_per_km = elapsed_seconds / distance_km
    if not math.isfinite(seconds_per_km):
        return NO_PACE

    minutes = int(seconds_per_km // 60)
    seconds = int(seconds_per_km % 60)
    return f"{minutes:02d}:{seconds:02d}"


def format_time(total_seconds: int) -> str:
    """Format *total_seconds* as ``"MM:SS"``; minutes may exceed 59."""
    total = max(0, int(total_seconds))
    minutes, seconds = divmod(total, 60)
    return f"{minutes:02d}:{seconds:02d}"

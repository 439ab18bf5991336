"""
tool_usage/distance_tool.py
---------------------------
Great-circle distance and straight-line travel estimates.
No external HTTP calls are made.

Config knob (config.py):
  WALKING_METERS_PER_MIN -- speed used for travel-time estimates (default: 75)
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from tripcore import config
from tripcore.schemas.itinerary import Coordinates

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

EARTH_RADIUS_M = 6_371_000.0

_UNKNOWN_TRAVEL_MIN    = 10   # one endpoint has no coordinates
_COINCIDENT_TRAVEL_MIN = 5    # same spot, still need to move between venues
_MAX_TRAVEL_MIN        = 90


def haversine_meters(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points (Haversine formula) in metres."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lam = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(max(0.0, 1 - h)))


def distance_meters_lng_lat(a: Any, b: Any) -> Optional[float]:
    """Distance between two [lng, lat] pairs; None if either pair is unusable."""
    ca, cb = Coordinates.from_lng_lat(a), Coordinates.from_lng_lat(b)
    if ca is None or cb is None:
        return None
    return haversine_meters(ca, cb)


def estimate_travel_minutes(
    origin: Optional[Coordinates],
    dest: Optional[Coordinates],
    meters_per_minute: float = config.WALKING_METERS_PER_MIN,
) -> int:
    """Straight-line travel minutes, bounded to [0, 90]."""
    if origin is None or dest is None:
        return _UNKNOWN_TRAVEL_MIN
    meters = haversine_meters(origin, dest)
    if not math.isfinite(meters) or meters <= 0:
        return _COINCIDENT_TRAVEL_MIN
    return max(0, min(_MAX_TRAVEL_MIN, math.ceil(meters / max(1.0, meters_per_minute))))


# ---------------------------------------------------------------------------
# DistanceTool
# ---------------------------------------------------------------------------


class DistanceTool:
    """
    Computes distances and travel estimates between coordinates using the
    Haversine formula plus a configurable speed (config.WALKING_METERS_PER_MIN).
    """

    def __init__(self, meters_per_minute: float | None = None) -> None:
        speed = meters_per_minute if meters_per_minute is not None else config.WALKING_METERS_PER_MIN
        self.meters_per_minute: float = max(1.0, float(speed))

    def travel_time_minutes(
        self,
        origin: Optional[Coordinates],
        dest: Optional[Coordinates],
    ) -> int:
        """Return estimated travel minutes between two points."""
        minutes = estimate_travel_minutes(origin, dest, self.meters_per_minute)
        logger.debug("travel_time_minutes: %s -> %s = %d", origin, dest, minutes)
        return minutes

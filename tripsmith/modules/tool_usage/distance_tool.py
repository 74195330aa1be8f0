"""
modules/tool_usage/distance_tool.py
-------------------------------------
Great-circle distance and travel-leg estimates between coordinates.
No external HTTP calls are made.

Speed tiers (by straight-line distance):
  < 1 km   walking     3 km/h   free
  1–5 km   motorbike  10 km/h   5,000 VND / km
  ≥ 5 km   car        20 km/h  15,000 VND / km

Each leg also carries a buffer of max(15, ceil(km × 10)) minutes for
parking, waiting and finding the entrance.
"""

from __future__ import annotations
import math
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from tripsmith.schemas.itinerary import Coordinate

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

_EARTH_RADIUS_KM = 6371.0

_WALK_LIMIT_KM:  float = 1.0
_MOTO_LIMIT_KM:  float = 5.0
_MIN_BUFFER_MIN: int   = 15
_BUFFER_MIN_PER_KM: int = 10

# (speed km/h, mode, VND per km)
_TIER_WALK = (3.0, "walking", 0)
_TIER_MOTO = (10.0, "motorbike", 5000)
_TIER_CAR  = (20.0, "car", 15000)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    r = _EARTH_RADIUS_KM
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * r * math.asin(math.sqrt(min(1.0, a)))


def coordinate_distance(a: Optional[Coordinate], b: Optional[Coordinate]) -> float:
    """Distance in km between two coordinates; a missing point counts as (0, 0)."""
    a = a or Coordinate()
    b = b or Coordinate()
    return haversine_km(a.lat, a.lon, b.lat, b.lon)


def path_length_km(points: Iterable[Optional[Coordinate]]) -> float:
    """Sum of consecutive distances along an open path."""
    total = 0.0
    prev: Optional[Coordinate] = None
    first = True
    for point in points:
        if not first:
            total += coordinate_distance(prev, point)
        prev, first = point, False
    return total


def midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    """Arithmetic midpoint; adequate at city scale."""
    return Coordinate.from_raw((a.lat + b.lat) / 2, (a.lon + b.lon) / 2)


def _tier(km: float) -> tuple[float, str, int]:
    if km < _WALK_LIMIT_KM:
        return _TIER_WALK
    if km < _MOTO_LIMIT_KM:
        return _TIER_MOTO
    return _TIER_CAR


def _km_to_minutes(km: float, speed_kmh: float) -> float:
    """Straight-line km to minutes at a given speed."""
    return (km / speed_kmh) * 60.0


# ---------------------------------------------------------------------------
# DistanceTool
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TravelLeg:
    distance_km: float
    minutes: int        # moving time + buffer
    mode: str           # walking | motorbike | car
    cost: int           # VND, whole group


class DistanceTool:
    """Distances and tiered travel estimates between Coordinates."""

    def distance(self, a: Optional[Coordinate], b: Optional[Coordinate]) -> float:
        return coordinate_distance(a, b)

    def path_length(self, points: Iterable[Optional[Coordinate]]) -> float:
        return path_length_km(points)

    def travel_leg(self, a: Optional[Coordinate], b: Optional[Coordinate]) -> TravelLeg:
        """Estimate moving time, buffer, mode and fare between two points."""
        km = coordinate_distance(a, b)
        speed, mode, per_km = _tier(km)
        moving = math.ceil(_km_to_minutes(km, speed))
        buffer = max(_MIN_BUFFER_MIN, math.ceil(km * _BUFFER_MIN_PER_KM))
        return TravelLeg(
            distance_km=km,
            minutes=moving + buffer,
            mode=mode,
            cost=math.ceil(km * per_km),
        )

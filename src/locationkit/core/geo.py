from __future__ import annotations
from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt

"""
Geospatial helpers.

A tiny geometry layer so ranking code can compute great-circle distances
without pulling in heavier GIS dependencies. Spherical Earth, not ellipsoidal.
"""

EARTH_RADIUS_KM = 6371


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees (not range-checked)."""

    latitude: float
    longitude: float


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Compute great-circle (haversine) distance in kilometers between two points."""
    lat1 = radians(a.latitude)
    lon1 = radians(a.longitude)
    lat2 = radians(b.latitude)
    lon2 = radians(b.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(h), sqrt(1 - h))

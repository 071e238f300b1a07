"""
Proximity ranking of addresses against a reference coordinate.

Rankings are positional lists: two addresses with identical fields stay two entries.
"""

from __future__ import annotations

from typing import Sequence

from locationkit.core.geo import Coordinate, distance_km
from locationkit.domain.models import AddressComponent, RankedAddress
from locationkit.location.position import Position


def reference_coordinate(position: Position, *, legacy_longitude: bool = False) -> Coordinate:
    """Reference point for ranking.

    `legacy_longitude` reads the longitude from the position's latitude field,
    matching rankings produced by the legacy mobile client.
    """
    longitude = position.latitude if legacy_longitude else position.longitude
    return Coordinate(latitude=position.latitude, longitude=longitude)


def rank_by_distance(addresses: Sequence[AddressComponent], reference: Coordinate) -> list[RankedAddress]:
    """Return `addresses` with distances in km, nearest first (stable on ties)."""
    ranked = [
        RankedAddress(address=address, distance_km=distance_km(address.coordinate, reference))
        for address in addresses
    ]
    return sorted(ranked, key=lambda r: r.distance_km)


class ProximityRanker:
    def __init__(self, *, legacy_reference_longitude: bool = False):
        self._legacy_reference_longitude = legacy_reference_longitude

    def rank(self, addresses: Sequence[AddressComponent], position: Position) -> list[RankedAddress]:
        reference = reference_coordinate(position, legacy_longitude=self._legacy_reference_longitude)
        return rank_by_distance(addresses, reference)

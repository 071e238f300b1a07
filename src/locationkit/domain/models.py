"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- the geocoded address snapshot (`AddressComponent`)
- the outcome of permission-gated lookups (`AddressLookup`)
- proximity ranking output (`RankedAddress`)

Keeping these models in one place gives consistent JSON output across library, CLI and API.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from locationkit.core.geo import Coordinate


class AddressComponent(BaseModel):
    """A reverse/forward-geocoded address plus the coordinate that produced it.

    Every field is required but may be empty. `latitude`/`longitude` are the
    decimal-degree strings of the source coordinate, not of the placemark.
    """

    model_config = ConfigDict(frozen=True)

    address1: str
    address2: str
    country: str
    state: str
    city: str
    postal_code: str
    latitude: str
    longitude: str
    country_code: str

    @property
    def coordinate(self) -> Coordinate:
        """Parse the stored coordinate strings back to floats."""
        return Coordinate(latitude=float(self.latitude), longitude=float(self.longitude))


class AddressLookup(BaseModel):
    """Result of a permission-gated lookup.

    A denied permission is a normal outcome, tagged explicitly rather than
    encoded as a bare `None`.
    """

    model_config = ConfigDict(frozen=True)

    status: Literal["found", "permission_denied"]
    address: AddressComponent | None = None

    @classmethod
    def found(cls, address: AddressComponent) -> "AddressLookup":
        return cls(status="found", address=address)

    @classmethod
    def permission_denied(cls) -> "AddressLookup":
        return cls(status="permission_denied")

    @property
    def is_permission_denied(self) -> bool:
        return self.status == "permission_denied"


class RankedAddress(BaseModel):
    """One entry of a proximity ranking: an address and its distance in km."""

    model_config = ConfigDict(frozen=True)

    address: AddressComponent
    distance_km: float

"""
Address resolution: positions <-> `AddressComponent`.

Geocoders may return several candidates; the first one is authoritative.
Errors from the geocoder propagate unmodified (no retry, no partial result).
"""

from __future__ import annotations

from locationkit.domain.errors import NoLocationFound, NoPlacemarkFound
from locationkit.domain.models import AddressComponent
from locationkit.location.geocoding import Geocoder, Placemark
from locationkit.location.position import Position, position_from_coordinates


def build_address_component(position: Position, placemark: Placemark) -> AddressComponent:
    """Combine a placemark with the coordinate that produced it."""
    return AddressComponent(
        address1=placemark.street or "",
        address2=placemark.thoroughfare or "",
        state=placemark.administrative_area or "",
        country=placemark.country or "",
        city=placemark.locality or "",
        postal_code=placemark.postal_code or "",
        latitude=str(position.latitude),
        longitude=str(position.longitude),
        country_code=placemark.iso_country_code or "",
    )


class AddressResolver:
    def __init__(self, geocoder: Geocoder):
        self._geocoder = geocoder

    async def resolve_from_position(self, position: Position) -> AddressComponent:
        """Reverse-geocode `position` into an address.

        Raises:
            NoPlacemarkFound: If the geocoder has no placemark for the coordinate.
        """
        placemarks = await self._geocoder.reverse_geocode(position.latitude, position.longitude)
        if not placemarks:
            raise NoPlacemarkFound(position.latitude, position.longitude)
        return build_address_component(position, placemarks[0])

    async def resolve_from_address_string(self, text: str) -> AddressComponent:
        """Forward-geocode `text`, then reverse-geocode the hit for placemark detail.

        Raises:
            NoLocationFound: If the geocoder has no candidate for `text`.
            NoPlacemarkFound: If the candidate's coordinate has no placemark.
        """
        candidates = await self._geocoder.forward_geocode(text)
        if not candidates:
            raise NoLocationFound(text)
        first = candidates[0]
        return await self.resolve_from_position(position_from_coordinates(first.latitude, first.longitude))

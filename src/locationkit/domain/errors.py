"""
Location error hierarchy.

Permission denial is deliberately absent: it is a normal outcome
(`AddressLookup.permission_denied()`), not an exception.
"""

from __future__ import annotations


class LocationError(Exception):
    """Base class for all failures raised by the location core."""


class UnsupportedPlatform(LocationError):
    """The current platform has no location accuracy profile."""

    def __init__(self, platform: str):
        super().__init__(f"Location for platform '{platform}' is unimplemented")
        self.platform = platform


class NoPlacemarkFound(LocationError):
    """Reverse geocoding returned zero placemarks."""

    def __init__(self, latitude: float, longitude: float):
        super().__init__(f"No placemark found for {latitude},{longitude}")
        self.latitude = latitude
        self.longitude = longitude


class NoLocationFound(LocationError):
    """Forward geocoding returned zero candidates."""

    def __init__(self, address: str):
        super().__init__(f"No location found for address {address!r}")
        self.address = address


class CollaboratorFailure(LocationError):
    """An underlying subsystem failed; the original exception is chained as `__cause__`."""

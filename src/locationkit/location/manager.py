"""
Location facade.

`LocationManager` exposes the four public operations:
- `get_address_from_gps()`: permission-gated, current position -> address
- `get_address_from_coordinates(lat, long)`: permission-gated, explicit coordinate -> address
- `decode_address(text)`: forward geocoding, no permission needed
- `get_address_with_distance(addresses)`: rank addresses nearest-first from the current position

The manager is stateless beyond its collaborators; build one per process with
`build_location_manager(settings)` and share it.
"""

from __future__ import annotations

import logging
from typing import Sequence

from locationkit.config.settings import Settings
from locationkit.core.cache import FileCache
from locationkit.core.env import resolve_project_path
from locationkit.core.tasks import fire_and_forget
from locationkit.domain.errors import CollaboratorFailure
from locationkit.domain.models import AddressLookup, AddressComponent, RankedAddress
from locationkit.location.geocoding import Geocoder, NominatimGeocoder
from locationkit.location.permissions import (
    ConsolePermissionService,
    LoggingNotifier,
    Notifier,
    NullNotifier,
    PermissionGate,
    PermissionService,
    PermissionState,
    StaticPermissionService,
)
from locationkit.location.position import (
    FixedLocationHardware,
    IpApiLocationHardware,
    LocationHardware,
    PositionProvider,
)
from locationkit.location.ranking import ProximityRanker
from locationkit.location.resolver import AddressResolver

logger = logging.getLogger(__name__)


class LocationManager:
    def __init__(
        self,
        *,
        gate: PermissionGate,
        positions: PositionProvider,
        resolver: AddressResolver,
        ranker: ProximityRanker,
    ):
        self._gate = gate
        self._positions = positions
        self._resolver = resolver
        self._ranker = ranker

    def _request_permission_in_background(self) -> None:
        # Outcome intentionally discarded; the caller already gets `permission_denied`.
        fire_and_forget(self._gate.permissions.request(), name="location-permission-rerequest")

    async def get_address_from_gps(self) -> AddressLookup:
        """Resolve the address of the current device position.

        Raises:
            CollaboratorFailure: Wrapping any position or geocoding failure.
        """
        try:
            if not await self._gate.ensure_location_permission():
                self._request_permission_in_background()
                return AddressLookup.permission_denied()

            position = await self._positions.current_position()
            address = await self._resolver.resolve_from_position(position)
        except Exception as exc:
            raise CollaboratorFailure(str(exc)) from exc
        return AddressLookup.found(address)

    async def get_address_from_coordinates(self, lat: float, long: float) -> AddressLookup:
        """Resolve the address of an explicit coordinate (permission-gated).

        Raises:
            CollaboratorFailure: Wrapping any geocoding failure.
        """
        try:
            if not await self._gate.ensure_location_permission():
                self._request_permission_in_background()
                return AddressLookup.permission_denied()

            position = self._positions.position_from_coordinates(lat, long)
            address = await self._resolver.resolve_from_position(position)
        except Exception as exc:
            raise CollaboratorFailure(str(exc)) from exc
        return AddressLookup.found(address)

    async def decode_address(self, text: str) -> AddressComponent:
        """Forward-geocode a free-text address; failures propagate as-is."""
        return await self._resolver.resolve_from_address_string(text)

    async def get_address_with_distance(self, addresses: Sequence[AddressComponent]) -> list[RankedAddress]:
        """Rank `addresses` nearest-first from a freshly obtained current position."""
        position = await self._positions.current_position()
        ranked = self._ranker.rank(addresses, position)
        logger.debug("Ranked %d addresses from %.6f,%.6f", len(ranked), position.latitude, position.longitude)
        return ranked


def build_cache(settings: Settings) -> FileCache:
    return FileCache(
        resolve_project_path(settings.cache.dir),
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )


def build_permission_service(settings: Settings) -> PermissionService:
    if settings.permissions.provider == "console":
        return ConsolePermissionService(app_name=settings.app.name)
    return StaticPermissionService(
        PermissionState(settings.permissions.state),
        settings_url=settings.permissions.settings_url,
    )


def build_location_hardware(settings: Settings) -> LocationHardware:
    if settings.location.hardware == "fixed":
        fixed = settings.location.fixed_position
        return FixedLocationHardware(fixed.latitude, fixed.longitude)
    return IpApiLocationHardware(
        settings.location.ip_lookup_url,
        timeout_seconds=settings.app.http_timeout_seconds,
    )


def build_location_manager(
    settings: Settings,
    *,
    permissions: PermissionService | None = None,
    hardware: LocationHardware | None = None,
    geocoder: Geocoder | None = None,
    notifier: Notifier | None = None,
) -> LocationManager:
    """Composition root: wire collaborators from settings (explicit ones win)."""
    if notifier is None:
        notifier = LoggingNotifier() if settings.notifications.enabled else NullNotifier()
    return LocationManager(
        gate=PermissionGate(permissions or build_permission_service(settings), notifier),
        positions=PositionProvider(
            hardware or build_location_hardware(settings),
            platform=settings.location.platform,
        ),
        resolver=AddressResolver(geocoder or NominatimGeocoder(settings, build_cache(settings))),
        ranker=ProximityRanker(legacy_reference_longitude=settings.ranking.legacy_reference_longitude),
    )

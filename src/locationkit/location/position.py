"""
Device position.

`PositionProvider.current_position()` picks the accuracy profile for the running
platform and delegates to a `LocationHardware` collaborator; failures from the
hardware propagate unchanged (no retry, no local timeout).

Shipped hardware backends:
- `IpApiLocationHardware`: IP geolocation over HTTP (coarse, but available on any host)
- `FixedLocationHardware`: a configured coordinate (kiosks, tests, demos)
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol

from locationkit.core.geo import Coordinate
from locationkit.core.http import get_json
from locationkit.domain.errors import UnsupportedPlatform

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = ("android", "ios")


class LocationAccuracy(str, Enum):
    LOWEST = "lowest"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    BEST = "best"


@dataclass(frozen=True)
class AccuracyConfig:
    """Platform-specific request settings handed to the location hardware."""

    platform: str
    accuracy: LocationAccuracy = LocationAccuracy.BEST


@dataclass(frozen=True)
class Position:
    """A fix (or synthesized fix) with the metadata location hardware reports."""

    latitude: float
    longitude: float
    timestamp: datetime
    accuracy: float = 0.0
    altitude: float = 0.0
    altitude_accuracy: float = 0.0
    heading: float = 0.0
    heading_accuracy: float = 0.0
    speed: float = 0.0
    speed_accuracy: float = 0.0

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class LocationHardware(Protocol):
    async def get_current_position(self, config: AccuracyConfig) -> Position: ...


def detect_platform(configured: str = "auto") -> str:
    """Return the platform name to select an accuracy profile for."""
    if configured and configured != "auto":
        return configured.strip().lower()
    return sys.platform


def accuracy_config_for(platform: str) -> AccuracyConfig:
    """Best-accuracy settings for the supported mobile platforms."""
    if platform not in SUPPORTED_PLATFORMS:
        raise UnsupportedPlatform(platform)
    return AccuracyConfig(platform=platform, accuracy=LocationAccuracy.BEST)


def position_from_coordinates(lat: float, long: float) -> Position:
    """Wrap explicit coordinates as a position with zeroed metadata."""
    return Position(latitude=lat, longitude=long, timestamp=datetime.now(timezone.utc))


class PositionProvider:
    def __init__(self, hardware: LocationHardware, *, platform: str = "auto"):
        self._hardware = hardware
        self._platform = platform

    async def current_position(self) -> Position:
        """Obtain the current device position at best accuracy.

        Raises:
            UnsupportedPlatform: If the platform is neither android nor ios.
        """
        config = accuracy_config_for(detect_platform(self._platform))
        logger.debug("Requesting position (platform=%s accuracy=%s)", config.platform, config.accuracy.value)
        return await self._hardware.get_current_position(config)

    def position_from_coordinates(self, lat: float, long: float) -> Position:
        return position_from_coordinates(lat, long)


class FixedLocationHardware:
    """Always reports the same coordinate."""

    def __init__(self, latitude: float, longitude: float):
        self._latitude = latitude
        self._longitude = longitude

    async def get_current_position(self, config: AccuracyConfig) -> Position:
        return position_from_coordinates(self._latitude, self._longitude)


class IpApiLocationHardware:
    """Locate the host by its public IP (ip-api.com JSON schema).

    Accuracy is city-level at best regardless of the requested profile.
    """

    def __init__(self, url: str, *, timeout_seconds: float = 15):
        self._url = url
        self._timeout_seconds = timeout_seconds

    async def get_current_position(self, config: AccuracyConfig) -> Position:
        payload = await get_json(
            self._url,
            params={"fields": "status,message,lat,lon"},
            timeout_seconds=self._timeout_seconds,
        )
        if not isinstance(payload, dict) or payload.get("status") != "success":
            message = payload.get("message") if isinstance(payload, dict) else None
            raise ValueError(f"IP geolocation failed: {message or 'unexpected payload'}")

        logger.info("Located host via IP lookup (requested accuracy=%s)", config.accuracy.value)
        return Position(
            latitude=float(payload["lat"]),
            longitude=float(payload["lon"]),
            timestamp=datetime.now(timezone.utc),
        )

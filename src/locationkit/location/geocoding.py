"""
Geocoding client (Nominatim / OpenStreetMap).

This module is responsible only for:
- calling the reverse (`/reverse`) and forward (`/search`) endpoints,
- caching raw payloads on disk and spacing requests per the service usage policy,
- parsing payloads into small typed dataclasses (`Placemark`, `LocationCandidate`).

An empty list is a legitimate "not found" answer; turning it into an error is the
resolver's job (see `locationkit.location.resolver`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from locationkit.config.settings import Settings
from locationkit.core.cache import FileCache
from locationkit.core.http import get_json
from locationkit.core.rate_limit import TokenBucketRateLimiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placemark:
    """Structured address for a coordinate; any field may be absent."""

    name: str | None = None
    street: str | None = None
    thoroughfare: str | None = None
    sub_locality: str | None = None
    locality: str | None = None
    administrative_area: str | None = None
    postal_code: str | None = None
    country: str | None = None
    iso_country_code: str | None = None


@dataclass(frozen=True)
class LocationCandidate:
    """One forward-geocoding hit."""

    latitude: float
    longitude: float
    timestamp: datetime


class Geocoder(Protocol):
    async def reverse_geocode(self, lat: float, long: float) -> list[Placemark]: ...

    async def forward_geocode(self, text: str) -> list[LocationCandidate]: ...


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_placemark(payload: dict[str, Any]) -> Placemark:
    """Map a Nominatim `jsonv2` reverse payload onto a `Placemark`."""
    address = payload.get("address") or {}
    house_number = _clean(address.get("house_number"))
    road = _clean(address.get("road"))
    street = " ".join(p for p in (house_number, road) if p) or None
    locality = next(
        (
            _clean(address.get(k))
            for k in ("city", "town", "village", "hamlet", "municipality")
            if _clean(address.get(k))
        ),
        None,
    )
    sub_locality = _clean(address.get("suburb")) or _clean(address.get("neighbourhood"))
    country_code = _clean(address.get("country_code"))

    return Placemark(
        name=_clean(payload.get("name")),
        street=street,
        thoroughfare=road,
        sub_locality=sub_locality,
        locality=locality,
        administrative_area=_clean(address.get("state")),
        postal_code=_clean(address.get("postcode")),
        country=_clean(address.get("country")),
        iso_country_code=country_code.upper() if country_code else None,
    )


def parse_reverse_payload(payload: Any) -> list[Placemark]:
    """Nominatim answers a miss with `{"error": ...}`; that maps to an empty list."""
    if not isinstance(payload, dict) or "error" in payload:
        return []
    return [parse_placemark(payload)]


def parse_search_payload(payload: Any) -> list[LocationCandidate]:
    if not isinstance(payload, list):
        return []
    now = datetime.now(timezone.utc)
    out: list[LocationCandidate] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            out.append(LocationCandidate(latitude=float(item["lat"]), longitude=float(item["lon"]), timestamp=now))
        except (KeyError, TypeError, ValueError):
            logger.debug("Skipping malformed search hit: %r", item)
            continue
    return out


class NominatimGeocoder:
    """Fetches and caches Nominatim data, then parses it into placemarks/candidates."""

    def __init__(
        self,
        settings: Settings,
        cache: FileCache,
        rate_limiter: TokenBucketRateLimiter | None = None,
    ):
        self._settings = settings
        self._cache = cache
        self._rate_limiter = rate_limiter or TokenBucketRateLimiter(
            max_per_minute=settings.geocoding.max_requests_per_minute
        )

    def _common_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "format": "jsonv2",
            "accept-language": self._settings.geocoding.language,
        }
        if self._settings.geocoding.contact_email:
            params["email"] = self._settings.geocoding.contact_email
        return params

    async def _fetch(self, path: str, params: dict[str, Any]) -> Any:
        await self._rate_limiter.acquire()
        url = self._settings.geocoding.base_url.rstrip("/") + path
        return await get_json(
            url,
            params={**self._common_params(), **params},
            timeout_seconds=self._settings.app.http_timeout_seconds,
        )

    async def reverse_geocode(self, lat: float, long: float) -> list[Placemark]:
        cache_key = f"reverse:{lat:.6f}:{long:.6f}:{self._settings.geocoding.language}"

        async def builder() -> Any:
            logger.info("Reverse geocoding lat=%.6f lon=%.6f", lat, long)
            return await self._fetch("/reverse", {"lat": lat, "lon": long, "addressdetails": 1})

        payload = await self._cache.get_or_set(
            "geocode",
            cache_key,
            builder,
            ttl_seconds=self._settings.geocoding.cache_ttl_seconds,
            stale_if_error=True,
        )
        return parse_reverse_payload(payload)

    async def forward_geocode(self, text: str) -> list[LocationCandidate]:
        limit = self._settings.geocoding.max_candidates
        cache_key = f"search:{text.strip()}:{self._settings.geocoding.language}:{limit}"

        async def builder() -> Any:
            logger.info("Forward geocoding %r", text)
            return await self._fetch("/search", {"q": text, "limit": limit})

        payload = await self._cache.get_or_set(
            "geocode",
            cache_key,
            builder,
            ttl_seconds=self._settings.geocoding.cache_ttl_seconds,
            stale_if_error=True,
        )
        return parse_search_payload(payload)

import asyncio

import httpx
import pytest

from locationkit.config.settings import Settings
from locationkit.core.cache import FileCache
from locationkit.core.rate_limit import TokenBucketRateLimiter
from locationkit.location.geocoding import NominatimGeocoder


REVERSE_PAYLOAD = {
    "name": "Googleplex",
    "display_name": "1600, Amphitheatre Parkway, Mountain View, Santa Clara County, California, 94043, United States",
    "address": {
        "house_number": "1600",
        "road": "Amphitheatre Parkway",
        "suburb": "Shoreline",
        "city": "Mountain View",
        "state": "California",
        "postcode": "94043",
        "country": "United States",
        "country_code": "us",
    },
}

SEARCH_PAYLOAD = [
    {"lat": "37.4224857", "lon": "-122.0855846", "display_name": "Google Building 41"},
    {"lat": "not-a-number", "lon": "0"},
    {"lat": "37.42", "lon": "-122.08"},
]


def _geocoder(tmp_path, *, cache_enabled=False, email=None):
    settings = Settings.model_validate(
        {"geocoding": {"base_url": "https://geo.example.test/", "contact_email": email}}
    )
    return NominatimGeocoder(
        settings,
        FileCache(tmp_path, enabled=cache_enabled),
        rate_limiter=TokenBucketRateLimiter(max_per_minute=60_000, burst=100),
    )


def test_reverse_geocode_maps_nominatim_address(monkeypatch, tmp_path):
    calls = []

    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        calls.append((url, params))
        return REVERSE_PAYLOAD

    monkeypatch.setattr("locationkit.location.geocoding.get_json", fake_get_json)
    placemarks = asyncio.run(_geocoder(tmp_path, email="ops@example.test").reverse_geocode(37.422, -122.0841))

    assert len(placemarks) == 1
    pm = placemarks[0]
    assert pm.street == "1600 Amphitheatre Parkway"
    assert pm.thoroughfare == "Amphitheatre Parkway"
    assert pm.locality == "Mountain View"
    assert pm.sub_locality == "Shoreline"
    assert pm.administrative_area == "California"
    assert pm.iso_country_code == "US"

    url, params = calls[0]
    assert url == "https://geo.example.test/reverse"
    assert params["lat"] == 37.422 and params["lon"] == -122.0841
    assert params["format"] == "jsonv2"
    assert params["email"] == "ops@example.test"


def test_reverse_geocode_error_payload_is_empty(monkeypatch, tmp_path):
    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        return {"error": "Unable to geocode"}

    monkeypatch.setattr("locationkit.location.geocoding.get_json", fake_get_json)
    assert asyncio.run(_geocoder(tmp_path).reverse_geocode(0.0, 0.0)) == []


def test_reverse_geocode_town_fallback_and_missing_road(monkeypatch, tmp_path):
    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        return {"address": {"town": "Hallstatt", "country": "Österreich", "country_code": "at"}}

    monkeypatch.setattr("locationkit.location.geocoding.get_json", fake_get_json)
    pm = asyncio.run(_geocoder(tmp_path).reverse_geocode(47.56, 13.64))[0]

    assert pm.locality == "Hallstatt"
    assert pm.street is None
    assert pm.thoroughfare is None


def test_forward_geocode_skips_malformed_hits(monkeypatch, tmp_path):
    seen = {}

    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        seen["url"] = url
        seen["params"] = params
        return SEARCH_PAYLOAD

    monkeypatch.setattr("locationkit.location.geocoding.get_json", fake_get_json)
    hits = asyncio.run(_geocoder(tmp_path).forward_geocode("1600 Amphitheatre Parkway"))

    assert [(h.latitude, h.longitude) for h in hits] == [(37.4224857, -122.0855846), (37.42, -122.08)]
    assert seen["url"] == "https://geo.example.test/search"
    assert seen["params"]["q"] == "1600 Amphitheatre Parkway"
    assert seen["params"]["limit"] == 5


def test_forward_geocode_served_from_cache(monkeypatch, tmp_path):
    calls = []

    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        calls.append(url)
        return SEARCH_PAYLOAD

    monkeypatch.setattr("locationkit.location.geocoding.get_json", fake_get_json)
    geocoder = _geocoder(tmp_path, cache_enabled=True)

    async def run():
        await geocoder.forward_geocode("Mountain View")
        return await geocoder.forward_geocode("Mountain View")

    hits = asyncio.run(run())
    assert len(hits) == 2
    assert len(calls) == 1


def test_http_errors_propagate_without_cached_value(monkeypatch, tmp_path):
    async def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        request = httpx.Request("GET", url)
        response = httpx.Response(503, request=request)
        raise httpx.HTTPStatusError("503", request=request, response=response)

    monkeypatch.setattr("locationkit.location.geocoding.get_json", fake_get_json)
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(_geocoder(tmp_path, cache_enabled=True).forward_geocode("anywhere"))


def test_expired_cache_entry_served_when_upstream_fails(monkeypatch, tmp_path):
    async def fresh_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        return REVERSE_PAYLOAD

    async def failing_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        raise httpx.ConnectError("nominatim unreachable")

    geocoder = _geocoder(tmp_path, cache_enabled=True)

    monkeypatch.setattr("locationkit.core.cache.time.time", lambda: 0)
    monkeypatch.setattr("locationkit.location.geocoding.get_json", fresh_get_json)
    asyncio.run(geocoder.reverse_geocode(37.422, -122.0841))

    # A week and a day later the entry is past its TTL and the service is down.
    monkeypatch.setattr("locationkit.core.cache.time.time", lambda: 8 * 86400)
    monkeypatch.setattr("locationkit.location.geocoding.get_json", failing_get_json)
    placemarks = asyncio.run(geocoder.reverse_geocode(37.422, -122.0841))

    assert [pm.locality for pm in placemarks] == ["Mountain View"]


def test_upstream_failure_surfaces_with_cache_disabled(monkeypatch, tmp_path):
    async def failing_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        raise httpx.ConnectError("nominatim unreachable")

    monkeypatch.setattr("locationkit.location.geocoding.get_json", failing_get_json)
    with pytest.raises(httpx.ConnectError):
        asyncio.run(_geocoder(tmp_path, cache_enabled=False).reverse_geocode(37.422, -122.0841))

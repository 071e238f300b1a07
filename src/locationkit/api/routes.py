"""
API routes.

Endpoints:
- POST `/api/address/gps`: address of the current device position.
- POST `/api/address/coordinates`: address of an explicit coordinate.
- POST `/api/address/decode`: forward geocoding of a free-text address.
- POST `/api/address/ranking`: addresses ranked nearest-first from the current position.
- GET  `/api/settings`: public settings (no contact email).
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from locationkit.config.settings import get_settings
from locationkit.domain.errors import (
    CollaboratorFailure,
    LocationError,
    NoLocationFound,
    NoPlacemarkFound,
    UnsupportedPlatform,
)
from locationkit.domain.models import AddressComponent, AddressLookup, RankedAddress
from locationkit.location.manager import LocationManager, build_location_manager

router = APIRouter()


class CoordinatesRequest(BaseModel):
    latitude: float
    longitude: float


class DecodeRequest(BaseModel):
    address: str


class RankingRequest(BaseModel):
    addresses: list[AddressComponent]


@lru_cache
def _manager() -> LocationManager:
    return build_location_manager(get_settings())


def _error_response(exc: LocationError) -> HTTPException:
    cause = exc.__cause__ if isinstance(exc, CollaboratorFailure) else exc
    if isinstance(cause, (NoPlacemarkFound, NoLocationFound)):
        return HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": str(cause)})
    if isinstance(cause, UnsupportedPlatform):
        return HTTPException(status_code=501, detail={"code": "UNSUPPORTED_PLATFORM", "message": str(cause)})
    return HTTPException(status_code=502, detail={"code": "UPSTREAM_ERROR", "message": str(exc)})


def _found_or_403(lookup: AddressLookup) -> AddressComponent:
    if lookup.is_permission_denied or lookup.address is None:
        raise HTTPException(
            status_code=403,
            detail={"code": "PERMISSION_DENIED", "message": "Location permission denied"},
        )
    return lookup.address


@router.post("/api/address/gps", response_model=AddressComponent)
async def post_address_from_gps() -> AddressComponent:
    try:
        lookup = await _manager().get_address_from_gps()
    except LocationError as e:
        raise _error_response(e) from e
    return _found_or_403(lookup)


@router.post("/api/address/coordinates", response_model=AddressComponent)
async def post_address_from_coordinates(body: CoordinatesRequest) -> AddressComponent:
    try:
        lookup = await _manager().get_address_from_coordinates(body.latitude, body.longitude)
    except LocationError as e:
        raise _error_response(e) from e
    return _found_or_403(lookup)


@router.post("/api/address/decode", response_model=AddressComponent)
async def post_decode_address(body: DecodeRequest) -> AddressComponent:
    if not body.address.strip():
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": "address is empty"})
    try:
        return await _manager().decode_address(body.address)
    except LocationError as e:
        raise _error_response(e) from e
    except Exception as e:
        raise HTTPException(status_code=502, detail={"code": "UPSTREAM_ERROR", "message": str(e)}) from e


@router.post("/api/address/ranking", response_model=list[RankedAddress])
async def post_address_ranking(body: RankingRequest) -> list[RankedAddress]:
    try:
        return await _manager().get_address_with_distance(body.addresses)
    except LocationError as e:
        raise _error_response(e) from e
    except Exception as e:
        raise HTTPException(status_code=502, detail={"code": "UPSTREAM_ERROR", "message": str(e)}) from e


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return settings safe to show to clients."""
    settings = get_settings()
    payload = settings.model_dump(mode="json")
    payload.get("geocoding", {}).pop("contact_email", None)
    return payload

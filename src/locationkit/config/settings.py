# src/locationkit/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/locationkit/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `LOCATIONKIT_CONFIG_PATH` (replaces the packaged defaults)
- a small whitelist of environment variables (see `_apply_env_overrides`)

Design rule:
- Service endpoints, platform selection and permission policy live in YAML, not in code.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal
from locationkit.core.env import load_dotenv_if_present

import yaml
from pydantic import BaseModel, Field


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `locationkit.config`."""
    text = resources.files("locationkit.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "locationkit"
    http_timeout_seconds: float = 15
    log_level: str = "INFO"


class CacheSettings(BaseModel):
    enabled: bool = True
    dir: str = ".cache/locationkit"
    default_ttl_seconds: int = 60 * 60 * 24


class FixedPositionSettings(BaseModel):
    latitude: float = 0.0
    longitude: float = 0.0


class LocationSettings(BaseModel):
    # `auto` resolves from `sys.platform`; only android/ios have an accuracy profile.
    platform: str = "auto"
    hardware: Literal["ip", "fixed"] = "ip"
    ip_lookup_url: str = "http://ip-api.com/json/"
    fixed_position: FixedPositionSettings = Field(default_factory=FixedPositionSettings)


class PermissionSettings(BaseModel):
    provider: Literal["static", "console"] = "static"
    state: Literal["granted", "denied", "permanently_denied"] = "granted"
    settings_url: str | None = None


class NotificationSettings(BaseModel):
    enabled: bool = True


class GeocodingSettings(BaseModel):
    base_url: str = "https://nominatim.openstreetmap.org"
    language: str = "en"
    max_candidates: int = Field(5, ge=1, le=50)
    max_requests_per_minute: float = Field(60, gt=0)
    cache_ttl_seconds: int = 60 * 60 * 24 * 7
    contact_email: str | None = None


class RankingSettings(BaseModel):
    # When true, the reference point's longitude is read from the current
    # position's latitude (compatible with rankings from the legacy mobile client).
    legacy_reference_longitude: bool = False


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    location: LocationSettings = Field(default_factory=LocationSettings)
    permissions: PermissionSettings = Field(default_factory=PermissionSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)
    ranking: RankingSettings = Field(default_factory=RankingSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    cache_dir = os.getenv("LOCATIONKIT_CACHE_DIR")
    if cache_dir:
        data.setdefault("cache", {})["dir"] = cache_dir

    log_level = os.getenv("LOCATIONKIT_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    platform = os.getenv("LOCATIONKIT_PLATFORM")
    if platform:
        data.setdefault("location", {})["platform"] = platform

    permission = os.getenv("LOCATIONKIT_PERMISSION")
    if permission:
        data.setdefault("permissions", {})["state"] = permission

    geocoder_url = os.getenv("LOCATIONKIT_GEOCODER_URL")
    if geocoder_url:
        data.setdefault("geocoding", {})["base_url"] = geocoder_url

    contact_email = os.getenv("LOCATIONKIT_GEOCODER_EMAIL")
    if contact_email:
        data.setdefault("geocoding", {})["contact_email"] = contact_email

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("LOCATIONKIT_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")

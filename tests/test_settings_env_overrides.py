import pytest

from locationkit.config.settings import get_settings


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()


def test_packaged_defaults_load(fresh_settings, monkeypatch):
    for name in ("LOCATIONKIT_CONFIG_PATH", "LOCATIONKIT_PLATFORM", "LOCATIONKIT_PERMISSION"):
        monkeypatch.delenv(name, raising=False)
    settings = fresh_settings()

    assert settings.geocoding.base_url.startswith("https://")
    assert settings.geocoding.max_requests_per_minute == 60
    assert settings.ranking.legacy_reference_longitude is False


def test_env_overrides_apply(fresh_settings, monkeypatch):
    monkeypatch.setenv("LOCATIONKIT_PLATFORM", "ios")
    monkeypatch.setenv("LOCATIONKIT_PERMISSION", "permanently_denied")
    monkeypatch.setenv("LOCATIONKIT_GEOCODER_URL", "https://geo.example.test")
    settings = fresh_settings()

    assert settings.location.platform == "ios"
    assert settings.permissions.state == "permanently_denied"
    assert settings.geocoding.base_url == "https://geo.example.test"


def test_external_config_file_replaces_defaults(fresh_settings, monkeypatch, tmp_path):
    path = tmp_path / "locationkit.yaml"
    path.write_text("ranking:\n  legacy_reference_longitude: true\n", encoding="utf-8")
    monkeypatch.setenv("LOCATIONKIT_CONFIG_PATH", str(path))
    settings = fresh_settings()

    assert settings.ranking.legacy_reference_longitude is True
    assert settings.location.hardware == "ip"


def test_invalid_permission_state_is_rejected(fresh_settings, monkeypatch):
    monkeypatch.setenv("LOCATIONKIT_PERMISSION", "maybe")
    with pytest.raises(ValueError):
        fresh_settings()

import asyncio
import threading

import pytest

from locationkit.core.cache import FileCache


def test_file_cache_stale_if_error_returns_expired_value(monkeypatch, tmp_path):
    cache = FileCache(tmp_path, enabled=True, default_ttl_seconds=1)

    monkeypatch.setattr("locationkit.core.cache.time.time", lambda: 0)
    cache.set("geocode", "k", [{"lat": "1", "lon": "2"}], ttl_seconds=1)

    monkeypatch.setattr("locationkit.core.cache.time.time", lambda: 100)

    async def builder():
        raise RuntimeError("upstream down")

    val = asyncio.run(cache.get_or_set("geocode", "k", builder, ttl_seconds=1, stale_if_error=True))
    assert val == [{"lat": "1", "lon": "2"}]


def test_file_cache_without_stale_fallback_raises(monkeypatch, tmp_path):
    cache = FileCache(tmp_path, enabled=True, default_ttl_seconds=1)

    monkeypatch.setattr("locationkit.core.cache.time.time", lambda: 0)
    cache.set("geocode", "k", {"v": 1}, ttl_seconds=1)

    monkeypatch.setattr("locationkit.core.cache.time.time", lambda: 100)

    async def builder():
        raise RuntimeError("upstream down")

    with pytest.raises(RuntimeError):
        asyncio.run(cache.get_or_set("geocode", "k", builder, ttl_seconds=1))


def test_file_cache_stores_builder_result(tmp_path):
    cache = FileCache(tmp_path, enabled=True)
    calls = []

    async def builder():
        calls.append(1)
        return {"error": "Unable to geocode"}

    async def run():
        first = await cache.get_or_set("geocode", "miss", builder)
        second = await cache.get_or_set("geocode", "miss", builder)
        return first, second

    first, second = asyncio.run(run())
    assert first == second == {"error": "Unable to geocode"}
    assert len(calls) == 1


def test_disabled_cache_never_stores(tmp_path):
    cache = FileCache(tmp_path, enabled=False)
    cache.set("geocode", "k", {"v": 1})

    assert cache.get("geocode", "k") is None
    assert not any(tmp_path.iterdir())


def test_get_or_set_reads_and_writes_off_the_event_loop_thread(monkeypatch, tmp_path):
    cache = FileCache(tmp_path, enabled=True)
    disk_threads = []
    real_get, real_set = FileCache.get, FileCache.set

    def recording_get(self, *args, **kwargs):
        disk_threads.append(threading.get_ident())
        return real_get(self, *args, **kwargs)

    def recording_set(self, *args, **kwargs):
        disk_threads.append(threading.get_ident())
        return real_set(self, *args, **kwargs)

    monkeypatch.setattr(FileCache, "get", recording_get)
    monkeypatch.setattr(FileCache, "set", recording_set)

    async def builder():
        return {"v": 1}

    async def run():
        loop_thread = threading.get_ident()
        value = await cache.get_or_set("geocode", "k", builder)
        return loop_thread, value

    loop_thread, value = asyncio.run(run())
    assert value == {"v": 1}
    assert len(disk_threads) == 2
    assert loop_thread not in disk_threads

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path
from typing import Any, Awaitable, Callable

"""
Simple on-disk JSON cache for geocoder responses.

- Values are stored as JSON under `.cache/locationkit/` by default.
- Keys are hashed (SHA-256) to avoid filesystem path issues.
- TTL is enforced on read; expired entries can still serve as a stale fallback
  when the upstream service fails.

Only raw upstream payloads are cached; positions from the location hardware never are.
"""

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Serialized cache envelope stored on disk."""

    created_at_unix: int
    ttl_seconds: int
    value: Any


class FileCache:
    """A filesystem-backed cache keyed by (namespace, key)."""

    def __init__(
        self, base_dir: Path, enabled: bool = True, default_ttl_seconds: int = 86400
    ):
        self._base_dir = base_dir
        self._enabled = enabled
        self._default_ttl_seconds = default_ttl_seconds

    def _key_path(self, namespace: str, key: str) -> Path:
        digest = sha256(f"{namespace}:{key}".encode("utf-8")).hexdigest()
        return self._base_dir / namespace / f"{digest}.json"

    def _read_entry(self, namespace: str, key: str) -> CacheEntry | None:
        path = self._key_path(namespace, key)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(
                created_at_unix=int(raw["created_at_unix"]),
                ttl_seconds=int(raw["ttl_seconds"]),
                value=raw["value"],
            )
        except (OSError, ValueError, KeyError, TypeError):
            logger.debug("Ignoring unreadable cache entry %s", path)
            return None

    def get(
        self, namespace: str, key: str, ttl_seconds: int | None = None
    ) -> Any | None:
        """Read a cached value if present and not expired; otherwise return None."""
        if not self._enabled:
            return None
        entry = self._read_entry(namespace, key)
        if entry is None:
            return None
        effective_ttl = ttl_seconds if ttl_seconds is not None else entry.ttl_seconds
        if int(time.time()) - entry.created_at_unix > effective_ttl:
            return None
        return entry.value

    def get_stale(self, namespace: str, key: str) -> Any | None:
        """Read a cached value even if expired; otherwise return None."""
        if not self._enabled:
            return None
        entry = self._read_entry(namespace, key)
        return entry.value if entry is not None else None

    def set(
        self, namespace: str, key: str, value: Any, ttl_seconds: int | None = None
    ) -> None:
        """Write a JSON-serializable value to disk (temp file + atomic replace)."""
        if not self._enabled:
            return None

        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl_seconds
        path = self._key_path(namespace, key)
        path.parent.mkdir(parents=True, exist_ok=True)

        payload = {
            "created_at_unix": int(time.time()),
            "ttl_seconds": int(ttl),
            "value": value,
        }
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)

    async def get_or_set(
        self,
        namespace: str,
        key: str,
        builder: Callable[[], Awaitable[Any]],
        ttl_seconds: int | None = None,
        *,
        stale_if_error: bool = False,
    ) -> Any:
        """Return cached value, or await `builder()` and store its result.

        Disk reads and writes run in a worker thread, off the event loop.
        With `stale_if_error`, a failing builder falls back to an expired entry
        when one exists on disk; otherwise the builder's exception propagates.
        """
        cached = await asyncio.to_thread(self.get, namespace, key, ttl_seconds)
        if cached is not None:
            return cached
        try:
            value = await builder()
        except Exception:
            if stale_if_error:
                stale = await asyncio.to_thread(self.get_stale, namespace, key)
                if stale is not None:
                    logger.warning("Serving stale %s entry after upstream failure", namespace)
                    return stale
            raise
        await asyncio.to_thread(self.set, namespace, key, value, ttl_seconds)
        return value

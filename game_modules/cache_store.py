"""Key/value stores with per-entry time-to-live used by the Steam client."""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

log = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    expires_at: Optional[float]  # None never expires

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class CacheStore(ABC):
    """A ttl of 0 means "no expiry"; the backend's own eviction still applies."""

    @abstractmethod
    async def get(self, key: str) -> Tuple[Any, bool]:
        """Return (value, found). Expired entries are not found."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """Store value under key for ttl seconds."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Forget key."""

    async def close(self) -> None:
        pass


class MemoryCacheStore(CacheStore):
    """Process-local store, the default when no shared backend is configured.

    Expired entries are dropped when read, and swept from `set` at most once
    every `sweep_interval` seconds so keys that are never read again don't pile up.
    """

    def __init__(self, clock: Callable[[], float] = time.time, sweep_interval: float = 60.0):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    async def get(self, key: str) -> Tuple[Any, bool]:
        entry = self._entries.get(key)
        if entry is None:
            return None, False
        if entry.expired(self._clock()):
            del self._entries[key]
            return None, False
        return entry.value, True

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        now = self._clock()
        if now - self._last_sweep >= self._sweep_interval:
            self.sweep(now)
        expires_at = now + ttl if ttl > 0 else None
        self._entries[key] = CacheEntry(value, expires_at)
        return True

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock() if now is None else now
        expired = [key for key, entry in self._entries.items() if entry.expired(now)]
        for key in expired:
            del self._entries[key]
        self._last_sweep = now
        if expired:
            log.debug("Swept %d expired cache entries", len(expired))
        return len(expired)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class RedisCacheStore(CacheStore):
    """Shared store for running several bot instances against one cache.

    Requires the 'redis' package: pip install redis.
    Values are stored as JSON.
    """

    def __init__(self, redis_url: str):
        try:
            import redis.asyncio as aioredis
            from redis.exceptions import RedisError
        except ImportError as e:
            raise ImportError("redis package required: pip install redis") from e

        self._client = aioredis.from_url(redis_url, decode_responses=True)
        self._errors = RedisError

    async def get(self, key: str) -> Tuple[Any, bool]:
        try:
            data = await self._client.get(key)
        except self._errors as e:
            log.warning("Redis get failed for %s: %s", key, e)
            return None, False
        if data is None:
            return None, False
        try:
            return json.loads(data), True
        except ValueError as e:
            log.warning("Failed to decode cached value %s: %s", key, e)
            return None, False

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        try:
            return bool(await self._client.set(key, json.dumps(value), ex=ttl if ttl > 0 else None))
        except self._errors as e:
            log.warning("Redis set failed for %s: %s", key, e)
            return False

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def close(self) -> None:
        await self._client.aclose()


def create_cache_store(backend: str = "memory", redis_url: Optional[str] = None) -> CacheStore:
    """Instantiate the configured cache backend (CACHE_BACKEND / REDIS_URL)."""
    backend = (backend or "memory").lower()
    if backend == "memory":
        return MemoryCacheStore()
    if backend == "redis":
        if not redis_url:
            raise ValueError("REDIS_URL must be set when CACHE_BACKEND=redis")
        return RedisCacheStore(redis_url)
    raise ValueError(f"Unsupported cache backend: {backend!r}")

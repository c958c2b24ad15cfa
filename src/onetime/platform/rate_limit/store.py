"""
Counter storage for rate limiting.

Counters are plain integers keyed by opaque strings with an expiration
attached when the key is first created. The Redis store is the production
backend; the memory store serves single-process development and tests.
"""

import asyncio
import math
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import structlog
from redis.exceptions import RedisError

from onetime.platform.exceptions import RateLimitStoreError

logger = structlog.get_logger(__name__)

# Redis TTL sentinels
TTL_MISSING = -2
TTL_PERSISTENT = -1


class CounterStore(ABC):
    """Abstract base class for rate limit counter backends."""

    @abstractmethod
    async def incr(self, key: str, ttl: int) -> int:
        """Atomically add one and return the new value.

        ``ttl`` is applied only when the key does not exist yet; later
        increments never extend it.
        """

    @abstractmethod
    async def get(self, key: str) -> int:
        """Current value, 0 when absent."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if key exists."""

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Seconds to expiry, ``TTL_PERSISTENT`` or ``TTL_MISSING``."""

    @abstractmethod
    async def expire(self, key: str, ttl: int) -> bool:
        """Overwrite the key's expiration."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if it existed."""


class RedisCounterStore(CounterStore):
    """Counters kept in Redis.

    ``incr`` runs ``SET key 0 EX ttl NX`` and ``INCR key`` inside one
    MULTI/EXEC transaction. INCR keeps an existing TTL, so the expiration is
    assigned exactly once per key no matter how many callers race.
    """

    def __init__(self, redis: Any):
        self.redis = redis

    async def incr(self, key: str, ttl: int) -> int:
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.set(key, 0, ex=ttl, nx=True)
                pipe.incr(key)
                _, value = await pipe.execute()
        except RedisError as e:
            raise self._store_error("incr", key, e) from e
        return int(value)

    async def get(self, key: str) -> int:
        try:
            value = await self.redis.get(key)
        except RedisError as e:
            raise self._store_error("get", key, e) from e
        return int(value) if value is not None else 0

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self.redis.exists(key))
        except RedisError as e:
            raise self._store_error("exists", key, e) from e

    async def ttl(self, key: str) -> int:
        try:
            return int(await self.redis.ttl(key))
        except RedisError as e:
            raise self._store_error("ttl", key, e) from e

    async def expire(self, key: str, ttl: int) -> bool:
        try:
            return bool(await self.redis.expire(key, ttl))
        except RedisError as e:
            raise self._store_error("expire", key, e) from e

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self.redis.delete(key))
        except RedisError as e:
            raise self._store_error("delete", key, e) from e

    @staticmethod
    def _store_error(operation: str, key: str, error: Exception) -> RateLimitStoreError:
        logger.error("rate_limit.store_error", operation=operation, key=key, error=str(error))
        return RateLimitStoreError(
            f"Rate limit store unavailable ({operation})",
            context={"operation": operation},
        )


class MemoryCounterStore(CounterStore):
    """In-process counters (development and tests only)."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = asyncio.Lock()
        # key -> [value, expires_at or None]
        self._data: dict[str, list[Any]] = {}

    def _live(self, key: str) -> list[Any] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at = entry[1]
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return entry

    async def incr(self, key: str, ttl: int) -> int:
        async with self._lock:
            entry = self._live(key)
            if entry is None:
                entry = self._data[key] = [0, self._clock() + ttl]
            entry[0] += 1
            return entry[0]

    async def get(self, key: str) -> int:
        entry = self._live(key)
        return entry[0] if entry else 0

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def ttl(self, key: str) -> int:
        entry = self._live(key)
        if entry is None:
            return TTL_MISSING
        if entry[1] is None:
            return TTL_PERSISTENT
        return math.ceil(entry[1] - self._clock())

    async def expire(self, key: str, ttl: int) -> bool:
        async with self._lock:
            entry = self._live(key)
            if entry is None:
                return False
            entry[1] = self._clock() + ttl
            return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._data.pop(key, None) is not None

    def clear(self) -> None:
        self._data.clear()


def create_counter_store(settings: Any, redis: Any | None = None) -> CounterStore:
    """Pick the counter backend configured in ``settings.rate_limit``."""
    if settings.rate_limit.uses_memory_store:
        logger.warning("Using in-memory rate limiting - not suitable for production")
        return MemoryCounterStore()
    if redis is None:
        raise RuntimeError("Redis client required for rate limiting storage")
    return RedisCounterStore(redis)

"""Cache stores and the TTL result cache.

Two stores (in-process and Redis) sit behind one interface. ``ResultCache``
wraps a store as a read-through cache so repeated place lookups do not cost
provider quota.

Expiry is lazy: an entry past its TTL is treated as absent on the next read
and recomputed by that reader. There is no background sweeper and no
single-flight de-duplication of concurrent misses for the same key.
"""

import fnmatch
import json
import logging
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

import redis.asyncio as redis

from estate_locator.models import Coordinates
from estate_locator.utils.geo import quantize

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached value with its creation time and time-to-live."""
    key: str
    value: T
    created_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        return now - self.created_at >= self.ttl_seconds


class CacheService(ABC):
    """Interface every cache store implements.

    Stores are keyed by strings and expire entries by TTL. Keys for
    coordinate-based lookups come from ``build_geo_key``.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Value stored under ``key``; None when absent or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """Store ``value`` for ``ttl_seconds`` (the store default when omitted)."""
        pass

    @abstractmethod
    async def invalidate(self, pattern: str) -> int:
        """Drop every key matching a glob such as ``"landmarks:*"``.

        Returns:
            How many keys were dropped.
        """
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @staticmethod
    def build_geo_key(prefix: str, coords: Coordinates, *parts: object) -> str:
        """Generate a cache key for a coordinate-based lookup.

        Coordinates are quantised to 4 decimal places (about 11 m) so that
        near-identical queries share a slot.

        Example:
            >>> CacheService.build_geo_key("landmarks", Coordinates(latitude=6.6051234, longitude=3.35), 5000)
            'landmarks:6.6051:3.3500:5000'
        """
        segments = [prefix, quantize(coords.latitude), quantize(coords.longitude)]
        segments.extend(str(part) for part in parts)
        return ":".join(segments)

class InMemoryCacheService(CacheService):
    """Process-local cache store with lazy TTL expiry and an LRU size bound.

    The store keeps Python objects as-is; nothing is serialised. The clock is
    injectable so tests can move time forward without sleeping.
    """

    def __init__(
        self,
        max_entries: int = 512,
        default_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: OrderedDict[str, CacheEntry[Any]] = OrderedDict()
        self._max_entries = max_entries
        self._default_ttl = default_ttl
        self._clock = clock

    def _live_entry(self, key: str) -> CacheEntry[Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> Any | None:
        entry = self._live_entry(key)
        if entry is None:
            return None
        self._entries.move_to_end(key)
        return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = CacheEntry(key=key, value=value, created_at=self._clock(), ttl_seconds=ttl)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    async def invalidate(self, pattern: str) -> int:
        keys = [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    async def exists(self, key: str) -> bool:
        return self._live_entry(key) is not None

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._entries)


class RedisCacheService(CacheService):
    """Cache store shared across API workers through Redis.

    Values are stored as JSON with a native Redis expiry, so callers must
    hand in JSON-compatible values (see ``ResultCache`` encode/decode).
    The connection is opened on first use.
    """

    def __init__(self, redis_url: str = "redis://localhost:6379", default_ttl: int = 300) -> None:
        self._redis_url = redis_url
        self._default_ttl = default_ttl
        self._client: redis.Redis | None = None

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    def _redis(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(self._redis_url, encoding="utf-8", decode_responses=True)
        return self._client

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, key: str) -> Any | None:
        raw = await self._redis().get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"[CACHE] Dropping non-JSON value at {key}")
            return None

    async def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        # EX is whole seconds
        await self._redis().set(key, json.dumps(value), ex=max(1, int(ttl)))

    async def invalidate(self, pattern: str) -> int:
        client = self._redis()
        keys = [key async for key in client.scan_iter(match=pattern, count=100)]
        if not keys:
            return 0
        return await client.delete(*keys)

    async def exists(self, key: str) -> bool:
        return await self._redis().exists(key) > 0

    async def delete(self, key: str) -> bool:
        return await self._redis().delete(key) > 0


def _is_failed_result(value: Any) -> bool:
    return getattr(value, "ok", True) is False


def _identity(value: Any) -> Any:
    return value


class ResultCache(Generic[T]):
    """Read-through TTL cache for computed results.

    Successful results live for ``positive_ttl`` seconds, failed ones for the
    shorter ``negative_ttl`` so a failing provider is not hammered but is
    retried soon. ``encode``/``decode`` translate values for stores that
    serialise (Redis); the in-memory store needs neither.

    ``None`` is never cached, since stores use it to signal a miss.
    """

    def __init__(
        self,
        store: CacheService,
        positive_ttl: float = 300.0,
        negative_ttl: float = 60.0,
        is_negative: Callable[[T], bool] = _is_failed_result,
        encode: Callable[[T], Any] = _identity,
        decode: Callable[[Any], T] = _identity,
    ) -> None:
        self._store = store
        self._positive_ttl = positive_ttl
        self._negative_ttl = negative_ttl
        self._is_negative = is_negative
        self._encode = encode
        self._decode = decode

    @property
    def store(self) -> CacheService:
        return self._store

    def ttl_for(self, value: T) -> float:
        return self._negative_ttl if self._is_negative(value) else self._positive_ttl

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[T]],
        ttl_seconds: Optional[float] = None,
    ) -> T:
        cached = await self._safe_get(key)
        if cached is not None:
            logger.debug(f"[CACHE] Hit {key}")
            return self._decode(cached)

        logger.debug(f"[CACHE] Miss {key}")
        value = await compute()
        if value is not None:
            ttl = ttl_seconds if ttl_seconds is not None else self.ttl_for(value)
            await self._safe_set(key, self._encode(value), ttl)
        return value

    async def _safe_get(self, key: str) -> Any | None:
        try:
            return await self._store.get(key)
        except Exception as e:
            # A broken shared store degrades to uncached lookups
            logger.warning(f"[CACHE] Read failed for {key}: {e}")
            return None

    async def _safe_set(self, key: str, value: Any, ttl: float) -> None:
        try:
            await self._store.set(key, value, ttl_seconds=ttl)
        except Exception as e:
            logger.warning(f"[CACHE] Write failed for {key}: {e}")

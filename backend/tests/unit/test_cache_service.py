"""Unit tests for the cache stores and the TTL result cache."""

import pytest

from estate_locator.models import Coordinates, ErrorCode, SearchResult
from estate_locator.services.cache import (
    CacheEntry,
    CacheService,
    InMemoryCacheService,
    ResultCache,
)

from tests.helpers import make_place


class TestCacheEntry:
    def test_expired_exactly_at_ttl(self) -> None:
        entry = CacheEntry(key="k", value=1, created_at=100.0, ttl_seconds=10.0)
        assert entry.is_expired(109.9) is False
        assert entry.is_expired(110.0) is True


class TestBuildGeoKey:
    def test_key_format(self) -> None:
        key = CacheService.build_geo_key("landmarks", Coordinates(latitude=6.6051234, longitude=3.35), 5000, 15)
        assert key == "landmarks:6.6051:3.3500:5000:15"

    def test_nearby_points_share_a_key(self) -> None:
        a = CacheService.build_geo_key("x", Coordinates(latitude=6.605012, longitude=3.355011))
        b = CacheService.build_geo_key("x", Coordinates(latitude=6.605014, longitude=3.355013))
        assert a == b


class TestInMemoryCacheService:
    """Tests for InMemoryCacheService."""

    @pytest.mark.asyncio
    async def test_set_get(self, clock) -> None:
        cache = InMemoryCacheService(clock=clock)
        await cache.set("key", "value", ttl_seconds=10)
        assert await cache.get("key") == "value"
        assert await cache.exists("key") is True

    @pytest.mark.asyncio
    async def test_entry_expires(self, clock) -> None:
        cache = InMemoryCacheService(clock=clock)
        await cache.set("key", "value", ttl_seconds=10)
        clock.advance(11)
        assert await cache.get("key") is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_default_ttl_used(self, clock) -> None:
        cache = InMemoryCacheService(default_ttl=5, clock=clock)
        await cache.set("key", "value")
        clock.advance(4)
        assert await cache.get("key") == "value"
        clock.advance(1)
        assert await cache.get("key") is None

    @pytest.mark.asyncio
    async def test_evicts_least_recently_used(self, clock) -> None:
        cache = InMemoryCacheService(max_entries=2, clock=clock)
        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.get("a")
        await cache.set("c", 3)

        assert await cache.get("b") is None
        assert await cache.get("a") == 1
        assert await cache.get("c") == 3

    @pytest.mark.asyncio
    async def test_invalidate_pattern(self, clock) -> None:
        cache = InMemoryCacheService(clock=clock)
        await cache.set("landmarks:1", 1)
        await cache.set("landmarks:2", 2)
        await cache.set("other:1", 3)

        assert await cache.invalidate("landmarks:*") == 2
        assert await cache.exists("other:1") is True

    @pytest.mark.asyncio
    async def test_delete(self, clock) -> None:
        cache = InMemoryCacheService(clock=clock)
        await cache.set("key", 1)
        assert await cache.delete("key") is True
        assert await cache.delete("key") is False


class FailingStore(InMemoryCacheService):
    async def get(self, key):
        raise ConnectionError("store down")

    async def set(self, key, value, ttl_seconds=None):
        raise ConnectionError("store down")


class TestResultCache:
    """Tests for ResultCache.get_or_compute."""

    def setup_method(self) -> None:
        self.calls = 0

    def _compute(self, result: SearchResult):
        async def compute() -> SearchResult:
            self.calls += 1
            return result
        return compute

    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, clock) -> None:
        cache = ResultCache(InMemoryCacheService(clock=clock), positive_ttl=300, negative_ttl=60)
        compute = self._compute(SearchResult.success([make_place("a")]))

        first = await cache.get_or_compute("k", compute)
        clock.advance(299)
        second = await cache.get_or_compute("k", compute)

        assert self.calls == 1
        assert first == second

    @pytest.mark.asyncio
    async def test_recomputes_after_positive_ttl(self, clock) -> None:
        cache = ResultCache(InMemoryCacheService(clock=clock), positive_ttl=300, negative_ttl=60)
        compute = self._compute(SearchResult.success([]))

        await cache.get_or_compute("k", compute)
        clock.advance(300)
        await cache.get_or_compute("k", compute)

        assert self.calls == 2

    @pytest.mark.asyncio
    async def test_failures_use_negative_ttl(self, clock) -> None:
        cache = ResultCache(InMemoryCacheService(clock=clock), positive_ttl=300, negative_ttl=60)
        compute = self._compute(SearchResult.failure(ErrorCode.PROVIDER_UNAVAILABLE))

        await cache.get_or_compute("k", compute)
        clock.advance(59)
        await cache.get_or_compute("k", compute)
        assert self.calls == 1

        clock.advance(1)
        await cache.get_or_compute("k", compute)
        assert self.calls == 2

    def test_ttl_for(self) -> None:
        cache = ResultCache(InMemoryCacheService(), positive_ttl=300, negative_ttl=60)
        assert cache.ttl_for(SearchResult.success([])) == 300
        assert cache.ttl_for(SearchResult.failure(ErrorCode.UNKNOWN)) == 60

    @pytest.mark.asyncio
    async def test_none_is_not_cached(self, clock) -> None:
        store = InMemoryCacheService(clock=clock)
        cache = ResultCache(store)

        async def compute():
            return None

        assert await cache.get_or_compute("k", compute) is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_encode_decode(self, clock) -> None:
        store = InMemoryCacheService(clock=clock)
        cache = ResultCache(
            store,
            encode=lambda r: r.model_dump(mode="json"),
            decode=SearchResult.model_validate,
        )
        compute = self._compute(SearchResult.success([make_place("a", rating=4.5)]))

        await cache.get_or_compute("k", compute)
        assert isinstance(await store.get("k"), dict)

        cached = await cache.get_or_compute("k", compute)
        assert isinstance(cached, SearchResult)
        assert cached.places[0].place_id == "a"
        assert self.calls == 1

    @pytest.mark.asyncio
    async def test_broken_store_degrades_to_compute(self) -> None:
        cache = ResultCache(FailingStore())
        compute = self._compute(SearchResult.success([]))

        result = await cache.get_or_compute("k", compute)
        await cache.get_or_compute("k", compute)

        assert result.ok
        assert self.calls == 2

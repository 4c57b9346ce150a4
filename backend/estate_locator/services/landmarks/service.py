"""Landmark discovery around a point.

Fans a nearby search out over several place types (hospitals, schools,
malls, banks, places of worship, ...), merges the answers into one
deduplicated list ranked by rating, and caches the whole run.

Requests go out in small sequential batches; requests inside a batch run
concurrently. This bounds how hard one discovery can hit the provider's rate
limit. Completion order inside a batch is undefined, so nothing depends on it
before the final sort.
"""

import asyncio
import logging
from dataclasses import dataclass

from estate_locator.models import Coordinates, ErrorCode, PlaceResult, SearchResult
from estate_locator.services.cache import CacheService, ResultCache
from estate_locator.services.places import PlaceSearchClient
from estate_locator.utils.retry import retry_transient

logger = logging.getLogger(__name__)


DEFAULT_LANDMARK_TYPES: tuple[str, ...] = (
    "hospital",
    "school",
    "shopping_mall",
    "bank",
    "restaurant",
    "church",
    "mosque",
)


@dataclass(frozen=True)
class AggregatorConfig:
    landmark_types: tuple[str, ...] = DEFAULT_LANDMARK_TYPES
    batch_size: int = 2
    max_per_type: int = 3
    max_results: int = 15
    # Per-type retries on transient provider errors, before the run is cached
    max_retries: int = 0
    retry_base_delay: float = 0.5

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.max_per_type < 1 or self.max_results < 1:
            raise ValueError("result caps must be at least 1")
        if self.max_retries < 0 or self.retry_base_delay < 0:
            raise ValueError("retry settings must not be negative")


def merge_unique(places: list[PlaceResult]) -> list[PlaceResult]:
    """Drop repeated place_ids, keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for place in places:
        if place.place_id in seen:
            continue
        seen.add(place.place_id)
        unique.append(place)
    return unique


def rank_by_rating(places: list[PlaceResult]) -> list[PlaceResult]:
    """Sort by rating, best first; unrated places count as 0."""
    return sorted(places, key=lambda p: p.rating or 0.0, reverse=True)


class LandmarkAggregator:
    """Batched, capped, deduplicated multi-type nearby search."""

    CACHE_PREFIX = "landmarks"

    def __init__(
        self,
        client: PlaceSearchClient,
        cache: ResultCache[SearchResult],
        config: AggregatorConfig | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._config = config or AggregatorConfig()

    @property
    def config(self) -> AggregatorConfig:
        return self._config

    def cache_key(self, coords: Coordinates, radius_m: int, max_results: int) -> str:
        return CacheService.build_geo_key(self.CACHE_PREFIX, coords, int(radius_m), max_results)

    async def discover_landmarks(
        self,
        coords: Coordinates,
        radius_m: int,
        max_results: int | None = None,
    ) -> SearchResult:
        radius_m = int(radius_m)
        if radius_m <= 0:
            return SearchResult.failure(ErrorCode.INVALID_REQUEST, "radius_m must be at least 1 metre")
        limit = max_results if max_results is not None else self._config.max_results
        if limit <= 0:
            return SearchResult.failure(ErrorCode.INVALID_REQUEST, "max_results must be positive")

        key = self.cache_key(coords, radius_m, limit)
        return await self._cache.get_or_compute(
            key, lambda: self._aggregate(coords, radius_m, limit)
        )

    async def _search_type(self, coords: Coordinates, place_type: str, radius_m: int) -> SearchResult:
        return await retry_transient(
            lambda: self._client.search_nearby(coords, place_type, radius_m),
            max_retries=self._config.max_retries,
            base_delay=self._config.retry_base_delay,
        )

    async def _aggregate(self, coords: Coordinates, radius_m: int, limit: int) -> SearchResult:
        types = list(self._config.landmark_types)
        batch_size = self._config.batch_size
        collected: list[PlaceResult] = []
        failures: list[SearchResult] = []
        succeeded = 0

        logger.info(
            f"[LANDMARKS] Discovering {len(types)} types around "
            f"({coords.latitude:.4f}, {coords.longitude:.4f}) r={radius_m}m"
        )

        for i in range(0, len(types), batch_size):
            batch = types[i:i + batch_size]
            outcomes = await asyncio.gather(
                *[self._search_type(coords, place_type, radius_m) for place_type in batch],
                return_exceptions=True,
            )

            for place_type, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    logger.warning(f"[LANDMARKS] {place_type} search raised: {outcome}")
                    failures.append(SearchResult.failure(ErrorCode.UNKNOWN, str(outcome)))
                    continue
                if not outcome.ok:
                    logger.warning(f"[LANDMARKS] {place_type} search failed: {outcome.error.value}")
                    failures.append(outcome)
                    continue
                succeeded += 1
                collected.extend(outcome.places[: self._config.max_per_type])

        if succeeded == 0 and failures:
            logger.warning(f"[LANDMARKS] All {len(failures)} searches failed")
            return failures[0]

        ranked = rank_by_rating(merge_unique(collected))[:limit]
        logger.info(f"[LANDMARKS] Found {len(ranked)} landmarks ({len(failures)} failed searches)")
        return SearchResult.success(ranked)

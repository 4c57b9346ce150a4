"""Wiring of the engine's services from settings."""

import logging

import httpx

from estate_locator.config import Settings
from estate_locator.models import SearchResult
from estate_locator.services.cache import (
    CacheService,
    InMemoryCacheService,
    RedisCacheService,
    ResultCache,
)
from estate_locator.services.coordinate_validator import CoordinateValidator
from estate_locator.services.landmarks import LandmarkAggregator
from estate_locator.services.location import LocationService
from estate_locator.services.neighborhoods import (
    InMemoryNeighborhoodRepository,
    NeighborhoodMatcher,
    NeighborhoodRepository,
)
from estate_locator.services.places import GooglePlacesSearchClient, PlaceSearchClient
from estate_locator.services.query_variations import QueryVariationGenerator

logger = logging.getLogger(__name__)


def create_cache_store(settings: Settings) -> CacheService:
    """Redis when a URL is configured, otherwise an in-process store."""
    if settings.redis_url:
        logger.info("[CACHE] Using Redis result cache")
        return RedisCacheService(
            redis_url=settings.redis_url,
            default_ttl=int(settings.cache_positive_ttl_s),
        )
    return InMemoryCacheService(
        max_entries=settings.cache_max_entries,
        default_ttl=settings.cache_positive_ttl_s,
    )


def create_result_cache(settings: Settings, store: CacheService) -> ResultCache[SearchResult]:
    if isinstance(store, RedisCacheService):
        # Redis holds JSON, so results go through their pydantic form
        return ResultCache(
            store,
            positive_ttl=settings.cache_positive_ttl_s,
            negative_ttl=settings.cache_negative_ttl_s,
            encode=lambda result: result.model_dump(mode="json"),
            decode=SearchResult.model_validate,
        )
    return ResultCache(
        store,
        positive_ttl=settings.cache_positive_ttl_s,
        negative_ttl=settings.cache_negative_ttl_s,
    )


def create_location_service(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    store: CacheService | None = None,
    repository: NeighborhoodRepository | None = None,
    places: PlaceSearchClient | None = None,
) -> LocationService:
    """Build a LocationService; any collaborator can be supplied instead."""
    validator = CoordinateValidator(settings.region_bounds())
    if repository is None:
        repository = InMemoryNeighborhoodRepository.from_json_file(settings.neighborhoods_file)
    if places is None:
        places = GooglePlacesSearchClient(
            api_key=settings.google_places_api_key.get_secret_value(),
            http_client=http_client,
            base_url=settings.places_base_url,
            timeout=settings.http_timeout_s,
        )
    if not isinstance(places, GooglePlacesSearchClient) or places.has_credentials:
        logger.info("[PLACES] Places provider configured")
    else:
        logger.warning("[PLACES] No Google Places API key; place searches will fail with MISSING_CREDENTIALS")

    if store is None:
        store = create_cache_store(settings)
    cache = create_result_cache(settings, store)
    matcher = NeighborhoodMatcher(repository, validator, settings.matcher_config())
    aggregator = LandmarkAggregator(places, cache, settings.aggregator_config())

    return LocationService(
        validator=validator,
        matcher=matcher,
        repository=repository,
        variations=QueryVariationGenerator(settings.variation_config()),
        places=places,
        landmarks=aggregator,
        text_search=settings.text_search_config(),
        default_landmark_radius_m=settings.landmark_radius_m,
        business_search=settings.business_search_config(),
    )

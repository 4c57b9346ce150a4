"""Estate Locator Services.

Service layer components:
- Coordinate Validator: physical and operating-region checks for GPS input
- Neighborhoods: reference data repository and GPS verification state machine
- Query Variations: alternate phrasings of free-text location queries
- Cache: TTL result cache over in-memory or Redis stores
- Places: Google Places web service client
- Landmarks: batched multi-type nearby discovery
- Location: facade composing all of the above

Wiring from settings lives in ``estate_locator.services.factory``.
"""

from .cache import CacheService, InMemoryCacheService, RedisCacheService, ResultCache
from .coordinate_validator import CoordinateValidator, RegionBounds
from .neighborhoods import (
    InMemoryNeighborhoodRepository,
    MatcherConfig,
    NeighborhoodMatcher,
    NeighborhoodRepository,
)
from .query_variations import QueryVariationGenerator
from .places import GooglePlacesSearchClient, PlaceSearchClient
from .landmarks import AggregatorConfig, LandmarkAggregator
from .location import LocationService

__all__ = [
    # Cache
    "CacheService",
    "InMemoryCacheService",
    "RedisCacheService",
    "ResultCache",
    # Validation and verification
    "CoordinateValidator",
    "RegionBounds",
    "InMemoryNeighborhoodRepository",
    "MatcherConfig",
    "NeighborhoodMatcher",
    "NeighborhoodRepository",
    # Search
    "QueryVariationGenerator",
    "GooglePlacesSearchClient",
    "PlaceSearchClient",
    "AggregatorConfig",
    "LandmarkAggregator",
    # Facade
    "LocationService",
]

"""Location service: the inbound interface screens and API routes call.

Composes the validator, neighborhood matcher, query variation generator,
places client and landmark aggregator. Every expected failure comes back as
a typed result; nothing here raises for a bad location or a failing provider.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from estate_locator.models import (
    Coordinates,
    ErrorCode,
    Neighborhood,
    NeighborhoodMatch,
    PlaceResult,
    Rejected,
    SearchBias,
    SearchResult,
    VerificationResult,
)
from estate_locator.services.coordinate_validator import CoordinateValidator
from estate_locator.services.landmarks import LandmarkAggregator, merge_unique
from estate_locator.services.neighborhoods import NeighborhoodMatcher, NeighborhoodRepository
from estate_locator.services.places import PlaceSearchClient
from estate_locator.services.query_variations import QueryVariationGenerator

logger = logging.getLogger(__name__)

# Lagos, used to bias text searches when the caller has no position
LAGOS_CENTER = Coordinates(latitude=6.5244, longitude=3.3792)

# Keywords searched when a business lookup names no type
DEFAULT_BUSINESS_KEYWORDS: tuple[str, ...] = (
    "Nigerian restaurant",
    "Nigerian food",
    "local business",
    "market",
    "shop",
    "service",
    "repair",
    "tailor",
    "barber",
    "salon",
    "mechanic",
    "electrician",
    "plumber",
)

# Errors after which trying further query variations is pointless
_STOP_VARIATIONS = frozenset({ErrorCode.MISSING_CREDENTIALS, ErrorCode.RATE_LIMITED})


@dataclass(frozen=True)
class TextSearchConfig:
    default_center: Coordinates = field(default_factory=lambda: LAGOS_CENTER)
    radius_m: int = 100_000
    max_results: int = 8
    early_stop: int = 3


@dataclass(frozen=True)
class BusinessSearchConfig:
    keywords: tuple[str, ...] = DEFAULT_BUSINESS_KEYWORDS
    place_type: str = "establishment"
    radius_m: int = 5000
    max_results: int = 15


class LocationService:
    """Facade over the location resolution and place-discovery engine."""

    def __init__(
        self,
        validator: CoordinateValidator,
        matcher: NeighborhoodMatcher,
        repository: NeighborhoodRepository,
        variations: QueryVariationGenerator,
        places: PlaceSearchClient,
        landmarks: LandmarkAggregator,
        text_search: TextSearchConfig | None = None,
        default_landmark_radius_m: int = 5000,
        business_search: BusinessSearchConfig | None = None,
    ) -> None:
        self._validator = validator
        self._matcher = matcher
        self._repository = repository
        self._variations = variations
        self._places = places
        self._landmarks = landmarks
        self._text_search = text_search or TextSearchConfig()
        self._default_landmark_radius_m = default_landmark_radius_m
        self._business_search = business_search or BusinessSearchConfig()

    async def verify_location(
        self,
        user_id: str,
        coords: Coordinates,
        address: Optional[str] = None,
    ) -> VerificationResult:
        """Verify that the user's GPS position lies in a known neighborhood.

        ``address`` is informational only; matching uses the coordinates and
        the address is never logged.
        """
        logger.info(f"[VERIFY] user={user_id} at ({coords.latitude}, {coords.longitude})")
        return await self._matcher.verify(coords)

    async def verify_landmark_location(self, user_id: str, landmark_name: str) -> VerificationResult:
        """Verify a user's neighborhood from a landmark they live near.

        The landmark is resolved through text search; the best hit's position
        is then verified like a GPS fix.
        """
        logger.info(f"[VERIFY] user={user_id} via landmark '{landmark_name}'")
        result = await self.search_places_by_text(landmark_name)
        if not result.ok:
            return Rejected(reason=result.error)
        if not result.places:
            return Rejected(reason=ErrorCode.NO_NEARBY_NEIGHBORHOOD)
        return await self._matcher.verify(result.places[0].location)

    async def find_nearby_neighborhoods(
        self,
        coords: Coordinates,
        radius_km: float = 5.0,
        limit: int = 10,
    ) -> list[NeighborhoodMatch]:
        """Neighborhoods whose center is within ``radius_km``, nearest first."""
        if not self._validator.is_plausible(coords) or radius_km <= 0 or limit <= 0:
            return []
        neighborhoods = await self._repository.find_within(coords, radius_km)
        matches = [self._matcher.score(coords, n) for n in neighborhoods]
        matches.sort(key=lambda m: (m.distance_km, m.neighborhood.id))
        return matches[:limit]

    async def search_neighborhoods(
        self,
        name: str,
        state: Optional[str] = None,
        limit: int = 20,
    ) -> list[Neighborhood]:
        """Neighborhoods by name, optionally narrowed to one state."""
        if not name or not name.strip() or limit <= 0:
            return []
        found = await self._repository.search(name, state=state, limit=limit)
        logger.info(f"[NEIGHBORHOODS] '{name}' (state={state or '*'}): {len(found)} match(es)")
        return found

    async def search_places_by_text(
        self,
        query: str,
        coords: Optional[Coordinates] = None,
        radius_m: Optional[int] = None,
    ) -> SearchResult:
        """Resolve free text to places, trying query variations in order.

        Stops early once a variation yields enough results; merges everything
        seen, deduplicated by place_id. If every variation failed, the first
        failure is returned.
        """
        variations = self._variations.generate(query)
        if not variations:
            return SearchResult.failure(ErrorCode.INVALID_REQUEST, "Empty search query")
        if coords is not None and not self._validator.is_plausible(coords):
            return SearchResult.failure(ErrorCode.INVALID_COORDINATE, "Invalid bias coordinates")
        if radius_m is not None and radius_m <= 0:
            return SearchResult.failure(ErrorCode.INVALID_REQUEST, "radius_m must be positive")

        bias = SearchBias(
            center=coords or self._text_search.default_center,
            radius_m=radius_m or self._text_search.radius_m,
        )

        collected: list[PlaceResult] = []
        failures: list[SearchResult] = []
        succeeded = 0
        for variation in variations:
            result = await self._places.search_by_text(variation, bias)
            if not result.ok:
                failures.append(result)
                if result.error in _STOP_VARIATIONS:
                    break
                continue
            succeeded += 1
            collected.extend(result.places)
            if len(result.places) >= self._text_search.early_stop:
                break

        if succeeded == 0 and failures:
            return failures[0]
        unique = merge_unique(collected)
        logger.info(f"[PLACES] '{query}': {len(unique)} unique results over {succeeded + len(failures)} variation(s)")
        return SearchResult.success(unique[: self._text_search.max_results])

    async def discover_nearby_landmarks(
        self,
        coords: Coordinates,
        radius_m: Optional[int] = None,
        max_results: Optional[int] = None,
    ) -> SearchResult:
        """Rated landmarks of several types around a validated position."""
        outcome = self._validator.validate(coords)
        if not outcome.ok:
            return SearchResult.failure(outcome.reason)
        if radius_m is None:
            radius_m = self._default_landmark_radius_m
        return await self._landmarks.discover_landmarks(coords, radius_m, max_results)

    async def find_businesses(
        self,
        coords: Coordinates,
        business_type: Optional[str] = None,
        radius_m: Optional[int] = None,
    ) -> SearchResult:
        """Local businesses around a validated position.

        Runs one keyword nearby search per keyword (``business_type`` alone
        when given, otherwise the configured keyword list), in order, and
        merges the hits by place_id. A failed keyword is skipped; if every
        keyword failed, the first failure is returned.
        """
        outcome = self._validator.validate(coords)
        if not outcome.ok:
            return SearchResult.failure(outcome.reason)
        if radius_m is None:
            radius_m = self._business_search.radius_m
        radius_m = int(radius_m)
        if radius_m <= 0:
            return SearchResult.failure(ErrorCode.INVALID_REQUEST, "radius_m must be at least 1 metre")

        if business_type is not None and business_type.strip():
            keywords: tuple[str, ...] = (business_type.strip(),)
        else:
            keywords = self._business_search.keywords

        collected: list[PlaceResult] = []
        failures: list[SearchResult] = []
        succeeded = 0
        for keyword in keywords:
            result = await self._places.search_nearby(
                coords, self._business_search.place_type, radius_m, keyword=keyword
            )
            if not result.ok:
                logger.warning(f"[BUSINESSES] '{keyword}' search failed: {result.error.value}")
                failures.append(result)
                if result.error in _STOP_VARIATIONS:
                    break
                continue
            succeeded += 1
            collected.extend(result.places)

        if succeeded == 0 and failures:
            return failures[0]
        unique = merge_unique(collected)
        logger.info(f"[BUSINESSES] {len(unique)} unique businesses over {succeeded + len(failures)} keyword(s)")
        return SearchResult.success(unique[: self._business_search.max_results])

    async def get_place_details(self, place_id: str) -> SearchResult:
        return await self._places.get_place_details(place_id)

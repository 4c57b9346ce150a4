"""Places provider client (Google Places web service).

Wraps nearby search, text search and place details behind one interface and
normalises the provider's status vocabulary into ``SearchResult``:

- ``OK`` -> success with places
- ``ZERO_RESULTS`` -> success with an empty list (not an error)
- anything else -> a typed ``ErrorCode``

Transport failures (timeouts, DNS, connection resets) become
PROVIDER_UNAVAILABLE and never escape as exceptions. The client does not
retry; see ``estate_locator.utils.retry`` for the call-site policy.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from estate_locator.models import (
    Coordinates,
    ErrorCode,
    PlaceResult,
    SearchBias,
    SearchResult,
)

logger = logging.getLogger(__name__)


STATUS_ERRORS: dict[str, ErrorCode] = {
    "REQUEST_DENIED": ErrorCode.MISSING_CREDENTIALS,
    "OVER_QUERY_LIMIT": ErrorCode.RATE_LIMITED,
    "OVER_DAILY_LIMIT": ErrorCode.RATE_LIMITED,
    "INVALID_REQUEST": ErrorCode.INVALID_REQUEST,
    "NOT_FOUND": ErrorCode.INVALID_REQUEST,
    "UNKNOWN_ERROR": ErrorCode.PROVIDER_UNAVAILABLE,
}


def status_to_error(status: str) -> ErrorCode:
    """Map a provider status string to an error code."""
    return STATUS_ERRORS.get(status, ErrorCode.UNKNOWN)


def http_status_to_error(status_code: int) -> ErrorCode:
    if status_code == 429:
        return ErrorCode.RATE_LIMITED
    if status_code in (401, 403):
        return ErrorCode.MISSING_CREDENTIALS
    if 400 <= status_code < 500:
        return ErrorCode.INVALID_REQUEST
    if status_code >= 500:
        return ErrorCode.PROVIDER_UNAVAILABLE
    return ErrorCode.UNKNOWN


def parse_place(raw: dict) -> PlaceResult | None:
    """Parse one provider place payload, or None if it lacks essentials."""
    try:
        location = raw["geometry"]["location"]
        return PlaceResult(
            place_id=raw["place_id"],
            name=raw.get("name") or "",
            formatted_address=raw.get("formatted_address") or raw.get("vicinity") or "",
            location=Coordinates(latitude=location["lat"], longitude=location["lng"]),
            types=tuple(raw.get("types") or ()),
            rating=raw.get("rating"),
        )
    except (KeyError, TypeError, ValidationError) as e:
        logger.info(f"[PLACES] Skipping malformed place {raw.get('place_id', '?') if isinstance(raw, dict) else '?'}: {e}")
        return None


def parse_places(results: list[Any]) -> list[PlaceResult]:
    places = []
    for raw in results or []:
        if not isinstance(raw, dict):
            continue
        place = parse_place(raw)
        if place is not None:
            places.append(place)
    return places


class PlaceSearchClient(ABC):
    """Abstract base class for places providers."""

    @abstractmethod
    async def search_nearby(
        self,
        coords: Coordinates,
        place_type: str,
        radius_m: int,
        keyword: Optional[str] = None,
    ) -> SearchResult:
        """Places of one type within ``radius_m`` metres of ``coords``."""
        pass

    @abstractmethod
    async def search_by_text(self, query: str, bias: Optional[SearchBias] = None) -> SearchResult:
        """Places matching free text, optionally biased to a circle."""
        pass

    @abstractmethod
    async def get_place_details(self, place_id: str) -> SearchResult:
        """A single place by provider id (one-element list on success)."""
        pass

    async def close(self) -> None:
        pass


class GooglePlacesSearchClient(PlaceSearchClient):
    """Google Places web service implementation.

    The HTTP client can be injected (tests, shared pools). When it is not,
    one is created lazily and closed by ``close()``.
    """

    BASE_URL = "https://maps.googleapis.com/maps/api/place"

    DETAILS_FIELDS = (
        "place_id",
        "name",
        "formatted_address",
        "geometry",
        "types",
        "rating",
        "vicinity",
    )

    def __init__(
        self,
        api_key: str | None,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = BASE_URL,
        timeout: float = 10.0,
    ) -> None:
        self._api_key = api_key or ""
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key)

    async def _request(self, endpoint: str, params: dict[str, Any]) -> dict | SearchResult:
        """GET an endpoint and return its JSON body, or a failed SearchResult."""
        if not self.has_credentials:
            return SearchResult.failure(
                ErrorCode.MISSING_CREDENTIALS, "Google Places API key not configured"
            )

        url = f"{self._base_url}/{endpoint}/json"
        try:
            response = await self._get_client().get(url, params={**params, "key": self._api_key})
        except httpx.RequestError as e:
            logger.warning(f"[PLACES] {endpoint} transport error: {type(e).__name__}")
            return SearchResult.failure(ErrorCode.PROVIDER_UNAVAILABLE, f"{type(e).__name__}: {e}")

        if response.status_code != 200:
            error = http_status_to_error(response.status_code)
            logger.warning(f"[PLACES] {endpoint} HTTP {response.status_code}")
            return SearchResult.failure(error, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"[PLACES] {endpoint} returned a non-JSON body")
            return SearchResult.failure(ErrorCode.UNKNOWN, "Provider returned a non-JSON body")

        if not isinstance(data, dict):
            return SearchResult.failure(ErrorCode.UNKNOWN, "Unexpected provider payload")
        return data

    def _normalise(self, endpoint: str, data: dict) -> SearchResult | None:
        """Failed/empty SearchResult for non-OK statuses, None for OK."""
        status = data.get("status", "UNKNOWN")
        if status == "OK":
            return None
        if status == "ZERO_RESULTS":
            return SearchResult.success([])
        error = status_to_error(status)
        message = data.get("error_message") or f"Places API returned status: {status}"
        logger.warning(f"[PLACES] {endpoint} error: {message} (status={status})")
        return SearchResult.failure(error, message)

    async def search_nearby(
        self,
        coords: Coordinates,
        place_type: str,
        radius_m: int,
        keyword: Optional[str] = None,
    ) -> SearchResult:
        params: dict[str, Any] = {
            "location": f"{coords.latitude},{coords.longitude}",
            "radius": int(radius_m),
            "type": place_type,
        }
        if keyword:
            params["keyword"] = keyword

        data = await self._request("nearbysearch", params)
        if isinstance(data, SearchResult):
            return data
        normalised = self._normalise("nearbysearch", data)
        if normalised is not None:
            return normalised

        places = parse_places(data.get("results", []))
        logger.debug(f"[PLACES] nearby {place_type}: {len(places)} results")
        return SearchResult.success(places)

    async def search_by_text(self, query: str, bias: Optional[SearchBias] = None) -> SearchResult:
        if not query or not query.strip():
            return SearchResult.failure(ErrorCode.INVALID_REQUEST, "Empty search query")

        params: dict[str, Any] = {"query": query.strip()}
        if bias is not None:
            params["location"] = f"{bias.center.latitude},{bias.center.longitude}"
            params["radius"] = bias.radius_m

        data = await self._request("textsearch", params)
        if isinstance(data, SearchResult):
            return data
        normalised = self._normalise("textsearch", data)
        if normalised is not None:
            return normalised

        places = parse_places(data.get("results", []))
        logger.info(f"[PLACES] text '{query}': {len(places)} results")
        return SearchResult.success(places)

    async def get_place_details(self, place_id: str) -> SearchResult:
        if not place_id or not place_id.strip():
            return SearchResult.failure(ErrorCode.INVALID_REQUEST, "place_id cannot be empty")

        params = {"place_id": place_id, "fields": ",".join(self.DETAILS_FIELDS)}
        data = await self._request("details", params)
        if isinstance(data, SearchResult):
            return data
        normalised = self._normalise("details", data)
        if normalised is not None:
            # Details has no meaningful "zero results"; a missing place is a bad id
            if normalised.ok:
                return SearchResult.failure(ErrorCode.INVALID_REQUEST, f"Place not found: {place_id}")
            return normalised

        result = data.get("result")
        place = parse_place(result) if isinstance(result, dict) else None
        if place is None:
            return SearchResult.failure(ErrorCode.UNKNOWN, f"Invalid place data: {place_id}")
        return SearchResult.success([place])

    def photo_url(self, photo_reference: str, max_width: int = 400, max_height: int = 400) -> str:
        """URL of a place photo, or an empty string without credentials."""
        if not self.has_credentials or not photo_reference:
            return ""
        query = urlencode({
            "maxwidth": max_width,
            "maxheight": max_height,
            "photo_reference": photo_reference,
            "key": self._api_key,
        })
        return f"{self._base_url}/photo?{query}"

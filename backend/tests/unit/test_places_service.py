"""Unit tests for the Google Places client.

The HTTP layer is replaced with ``httpx.MockTransport`` so every provider
status and transport failure can be produced without a network.
"""

import httpx
import pytest

from estate_locator.models import Coordinates, ErrorCode, SearchBias
from estate_locator.services.places import (
    GooglePlacesSearchClient,
    parse_place,
    parse_places,
    status_to_error,
)

LAGOS = Coordinates(latitude=6.5244, longitude=3.3792)


def _raw_place(place_id: str, rating=None, **extra) -> dict:
    raw = {
        "place_id": place_id,
        "name": f"Place {place_id}",
        "vicinity": "Ikeja",
        "geometry": {"location": {"lat": 6.6, "lng": 3.35}},
        "types": ["hospital"],
    }
    if rating is not None:
        raw["rating"] = rating
    raw.update(extra)
    return raw


def _client(handler, api_key: str = "test-key") -> tuple[GooglePlacesSearchClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    return GooglePlacesSearchClient(api_key=api_key, http_client=http_client), seen


def _json(payload: dict, status_code: int = 200):
    return lambda request: httpx.Response(status_code, json=payload)


class TestStatusMapping:
    @pytest.mark.parametrize(
        "status, expected",
        [
            ("REQUEST_DENIED", ErrorCode.MISSING_CREDENTIALS),
            ("OVER_QUERY_LIMIT", ErrorCode.RATE_LIMITED),
            ("OVER_DAILY_LIMIT", ErrorCode.RATE_LIMITED),
            ("INVALID_REQUEST", ErrorCode.INVALID_REQUEST),
            ("UNKNOWN_ERROR", ErrorCode.PROVIDER_UNAVAILABLE),
            ("SOMETHING_NEW", ErrorCode.UNKNOWN),
        ],
    )
    def test_status_to_error(self, status: str, expected: ErrorCode) -> None:
        assert status_to_error(status) == expected


class TestParsePlace:
    def test_vicinity_used_as_address(self) -> None:
        place = parse_place(_raw_place("a", rating=4.2))
        assert place is not None
        assert place.formatted_address == "Ikeja"
        assert place.rating == 4.2
        assert place.location == Coordinates(latitude=6.6, longitude=3.35)

    def test_missing_geometry_skipped(self) -> None:
        raw = _raw_place("a")
        del raw["geometry"]
        assert parse_place(raw) is None

    def test_parse_places_drops_malformed(self) -> None:
        places = parse_places([_raw_place("a"), {"name": "no id"}, "junk", _raw_place("b")])
        assert [p.place_id for p in places] == ["a", "b"]


class TestSearchNearby:
    """Tests for GooglePlacesSearchClient.search_nearby."""

    @pytest.mark.asyncio
    async def test_ok_returns_places(self) -> None:
        client, seen = _client(_json({"status": "OK", "results": [_raw_place("a"), _raw_place("b")]}))
        result = await client.search_nearby(LAGOS, "hospital", 5000)

        assert result.ok
        assert [p.place_id for p in result.places] == ["a", "b"]
        params = seen[0].url.params
        assert seen[0].url.path.endswith("/nearbysearch/json")
        assert params["location"] == "6.5244,3.3792"
        assert params["radius"] == "5000"
        assert params["type"] == "hospital"
        assert params["key"] == "test-key"
        assert "keyword" not in params

    @pytest.mark.asyncio
    async def test_keyword_sent(self) -> None:
        client, seen = _client(_json({"status": "OK", "results": [_raw_place("t1")]}))
        result = await client.search_nearby(LAGOS, "establishment", 5000, keyword="tailor")

        assert result.ok
        params = seen[0].url.params
        assert params["type"] == "establishment"
        assert params["keyword"] == "tailor"

    @pytest.mark.asyncio
    async def test_zero_results_is_empty_success(self) -> None:
        client, _ = _client(_json({"status": "ZERO_RESULTS", "results": []}))
        result = await client.search_nearby(LAGOS, "mosque", 5000)

        assert result.ok
        assert result.error is None
        assert result.places == ()

    @pytest.mark.asyncio
    async def test_rate_limited_status(self) -> None:
        client, _ = _client(_json({"status": "OVER_QUERY_LIMIT", "error_message": "slow down"}))
        result = await client.search_nearby(LAGOS, "bank", 5000)

        assert result.error == ErrorCode.RATE_LIMITED
        assert result.message == "slow down"
        assert result.places == ()

    @pytest.mark.asyncio
    async def test_transport_error_is_provider_unavailable(self) -> None:
        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        client, _ = _client(boom)
        result = await client.search_nearby(LAGOS, "school", 5000)

        assert result.error == ErrorCode.PROVIDER_UNAVAILABLE

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, expected",
        [
            (429, ErrorCode.RATE_LIMITED),
            (403, ErrorCode.MISSING_CREDENTIALS),
            (400, ErrorCode.INVALID_REQUEST),
            (503, ErrorCode.PROVIDER_UNAVAILABLE),
        ],
    )
    async def test_http_errors(self, status_code: int, expected: ErrorCode) -> None:
        client, _ = _client(_json({}, status_code=status_code))
        result = await client.search_nearby(LAGOS, "school", 5000)
        assert result.error == expected

    @pytest.mark.asyncio
    async def test_non_json_body_is_unknown(self) -> None:
        client, _ = _client(lambda request: httpx.Response(200, text="<html>"))
        result = await client.search_nearby(LAGOS, "school", 5000)
        assert result.error == ErrorCode.UNKNOWN

    @pytest.mark.asyncio
    async def test_missing_key_makes_no_request(self) -> None:
        client, seen = _client(_json({"status": "OK", "results": []}), api_key="")
        result = await client.search_nearby(LAGOS, "school", 5000)

        assert result.error == ErrorCode.MISSING_CREDENTIALS
        assert seen == []


class TestSearchByText:
    @pytest.mark.asyncio
    async def test_bias_sent(self) -> None:
        client, seen = _client(_json({"status": "OK", "results": [_raw_place("a")]}))
        bias = SearchBias(center=LAGOS, radius_m=100000)
        result = await client.search_by_text(" Lekki Estate ", bias)

        assert result.ok
        params = seen[0].url.params
        assert params["query"] == "Lekki Estate"
        assert params["location"] == "6.5244,3.3792"
        assert params["radius"] == "100000"

    @pytest.mark.asyncio
    async def test_empty_query_rejected_without_request(self) -> None:
        client, seen = _client(_json({"status": "OK", "results": []}))
        result = await client.search_by_text("   ")

        assert result.error == ErrorCode.INVALID_REQUEST
        assert seen == []


class TestGetPlaceDetails:
    @pytest.mark.asyncio
    async def test_ok(self) -> None:
        client, seen = _client(_json({"status": "OK", "result": _raw_place("abc", formatted_address="1 Road")}))
        result = await client.get_place_details("abc")

        assert result.ok
        assert len(result.places) == 1
        assert result.places[0].formatted_address == "1 Road"
        assert seen[0].url.params["place_id"] == "abc"

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        client, _ = _client(_json({"status": "NOT_FOUND"}))
        result = await client.get_place_details("missing")
        assert result.error == ErrorCode.INVALID_REQUEST

    @pytest.mark.asyncio
    async def test_zero_results_is_not_found(self) -> None:
        client, _ = _client(_json({"status": "ZERO_RESULTS"}))
        result = await client.get_place_details("missing")
        assert result.error == ErrorCode.INVALID_REQUEST

    @pytest.mark.asyncio
    async def test_empty_id(self) -> None:
        client, seen = _client(_json({"status": "OK"}))
        result = await client.get_place_details("")
        assert result.error == ErrorCode.INVALID_REQUEST
        assert seen == []

    @pytest.mark.asyncio
    async def test_unparsable_result(self) -> None:
        client, _ = _client(_json({"status": "OK", "result": {"name": "no geometry"}}))
        result = await client.get_place_details("abc")
        assert result.error == ErrorCode.UNKNOWN


class TestPhotoUrl:
    def test_with_key(self) -> None:
        client = GooglePlacesSearchClient(api_key="k")
        url = client.photo_url("ref123", max_width=200)
        assert url.startswith("https://maps.googleapis.com/maps/api/place/photo?")
        assert "photo_reference=ref123" in url
        assert "maxwidth=200" in url

    def test_without_key(self) -> None:
        assert GooglePlacesSearchClient(api_key=None).photo_url("ref123") == ""

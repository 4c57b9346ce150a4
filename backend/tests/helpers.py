"""Test helpers: place factories, a scripted places client and a fake clock."""

from typing import Optional

from estate_locator.models import Coordinates, ErrorCode, PlaceResult, SearchBias, SearchResult
from estate_locator.services.places import PlaceSearchClient


def make_place(place_id: str, rating: Optional[float] = None, lat: float = 6.6, lng: float = 3.35) -> PlaceResult:
    return PlaceResult(
        place_id=place_id,
        name=f"Place {place_id}",
        formatted_address="Lagos",
        location=Coordinates(latitude=lat, longitude=lng),
        types=("point_of_interest",),
        rating=rating,
    )


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedPlacesClient(PlaceSearchClient):
    """Places client answering from dicts keyed by place type, keyword or query text.

    A scripted value may be a list of outcomes, answered in order; the last
    one repeats.
    """

    def __init__(
        self,
        nearby: Optional[dict] = None,
        text: Optional[dict] = None,
        details: Optional[dict] = None,
        keywords: Optional[dict] = None,
    ) -> None:
        self.nearby = nearby or {}
        self.text = text or {}
        self.details = details or {}
        self.keywords = keywords or {}
        self.nearby_calls: list[str] = []
        self.keyword_calls: list[Optional[str]] = []
        self.text_calls: list[tuple[str, Optional[SearchBias]]] = []

    async def search_nearby(self, coords, place_type, radius_m, keyword=None) -> SearchResult:
        self.nearby_calls.append(place_type)
        self.keyword_calls.append(keyword)
        if keyword is not None:
            outcome = _next(self.keywords.get(keyword, SearchResult.success([])))
        else:
            outcome = _next(self.nearby.get(place_type, SearchResult.success([])))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def search_by_text(self, query, bias=None) -> SearchResult:
        self.text_calls.append((query, bias))
        return self.text.get(query, SearchResult.success([]))

    async def get_place_details(self, place_id) -> SearchResult:
        return self.details.get(
            place_id, SearchResult.failure(ErrorCode.INVALID_REQUEST, f"Place not found: {place_id}")
        )




def _next(scripted):
    if isinstance(scripted, list):
        return scripted.pop(0) if len(scripted) > 1 else scripted[0]
    return scripted

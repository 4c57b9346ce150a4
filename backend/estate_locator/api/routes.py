"""API routes for Estate Locator.

Thin HTTP layer over ``LocationService``:
- GPS and landmark-based neighborhood verification
- Nearby neighborhoods and name search for manual selection
- Free-text place search (with query variations)
- Place details
- Nearby landmark and local business discovery

Expected failures come back as ``success: false`` with an ``AppError``; the
HTTP status stays 200. Transient provider errors are retried here, at the
call site, except for landmark discovery, which retries each place type
below its result cache.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from estate_locator.config import Settings, get_settings
from estate_locator.models import (
    AppError,
    Coordinates,
    Neighborhood,
    NeighborhoodMatch,
    PlaceResult,
    Rejected,
    SearchResult,
    VerificationResult,
)
from estate_locator.services.location import LocationService
from estate_locator.utils.retry import retry_transient

logger = logging.getLogger(__name__)

router = APIRouter()


def get_location_service(request: Request) -> LocationService:
    """The service built by the application lifespan."""
    return request.app.state.location_service


# Request/Response models
class VerifyLocationRequest(BaseModel):
    """Request model for GPS verification."""
    user_id: str = Field(..., min_length=1)
    latitude: float
    longitude: float
    address: Optional[str] = None


class VerifyLandmarkRequest(BaseModel):
    """Request model for landmark-based verification."""
    user_id: str = Field(..., min_length=1)
    landmark_name: str = Field(..., min_length=1)


class VerificationResponse(BaseModel):
    """Response model for verification endpoints."""
    success: bool
    result: VerificationResult
    error: Optional[AppError] = None


class PlacesResponse(BaseModel):
    """Response model for place search and discovery."""
    success: bool
    places: list[PlaceResult] = Field(default_factory=list)
    error: Optional[AppError] = None


class PlaceDetailsResponse(BaseModel):
    """Response model for place details."""
    success: bool
    place: Optional[PlaceResult] = None
    error: Optional[AppError] = None


class NearbyNeighborhoodsResponse(BaseModel):
    success: bool
    neighborhoods: list[NeighborhoodMatch] = Field(default_factory=list)


class NeighborhoodSearchResponse(BaseModel):
    success: bool
    neighborhoods: list[Neighborhood] = Field(default_factory=list)


def _verification_response(result: VerificationResult) -> VerificationResponse:
    if isinstance(result, Rejected):
        return VerificationResponse(success=False, result=result, error=AppError.from_code(result.reason))
    return VerificationResponse(success=True, result=result)


def _places_response(result: SearchResult) -> PlacesResponse:
    if not result.ok:
        return PlacesResponse(success=False, error=AppError.from_code(result.error, result.message))
    return PlacesResponse(success=True, places=result.places)


@router.post("/location/verify", response_model=VerificationResponse)
async def verify_location(
    request: VerifyLocationRequest,
    service: LocationService = Depends(get_location_service),
) -> VerificationResponse:
    """Verify a user's GPS position against known neighborhoods."""
    coords = Coordinates(latitude=request.latitude, longitude=request.longitude)
    result = await service.verify_location(request.user_id, coords, request.address)
    return _verification_response(result)


@router.post("/location/verify-landmark", response_model=VerificationResponse)
async def verify_landmark_location(
    request: VerifyLandmarkRequest,
    service: LocationService = Depends(get_location_service),
) -> VerificationResponse:
    """Verify a user's neighborhood from a nearby landmark name."""
    result = await service.verify_landmark_location(request.user_id, request.landmark_name)
    return _verification_response(result)


@router.get("/neighborhoods/nearby", response_model=NearbyNeighborhoodsResponse)
async def nearby_neighborhoods(
    lat: float,
    lng: float,
    radius_km: float = Query(5.0, gt=0, le=50),
    limit: int = Query(10, gt=0, le=50),
    service: LocationService = Depends(get_location_service),
) -> NearbyNeighborhoodsResponse:
    matches = await service.find_nearby_neighborhoods(
        Coordinates(latitude=lat, longitude=lng), radius_km=radius_km, limit=limit
    )
    return NearbyNeighborhoodsResponse(success=True, neighborhoods=matches)


@router.get("/neighborhoods/search", response_model=NeighborhoodSearchResponse)
async def search_neighborhoods(
    name: str = Query(..., min_length=1),
    state: Optional[str] = None,
    limit: int = Query(20, gt=0, le=50),
    service: LocationService = Depends(get_location_service),
) -> NeighborhoodSearchResponse:
    """Neighborhoods by name, optionally within one state."""
    found = await service.search_neighborhoods(name, state=state, limit=limit)
    return NeighborhoodSearchResponse(success=True, neighborhoods=found)


@router.get("/places/search", response_model=PlacesResponse)
async def search_places(
    query: str = Query(..., min_length=1),
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius_m: Optional[int] = Query(None, gt=0),
    service: LocationService = Depends(get_location_service),
    settings: Settings = Depends(get_settings),
) -> PlacesResponse:
    """Free-text place search, biased to the caller's position when given."""
    coords = None
    if lat is not None and lng is not None:
        coords = Coordinates(latitude=lat, longitude=lng)

    result = await retry_transient(
        lambda: service.search_places_by_text(query, coords, radius_m),
        max_retries=settings.provider_max_retries,
        base_delay=settings.provider_retry_base_delay_s,
    )
    return _places_response(result)


@router.get("/places/{place_id}", response_model=PlaceDetailsResponse)
async def get_place_details(
    place_id: str,
    service: LocationService = Depends(get_location_service),
    settings: Settings = Depends(get_settings),
) -> PlaceDetailsResponse:
    """Get detailed information for a specific place."""
    result = await retry_transient(
        lambda: service.get_place_details(place_id),
        max_retries=settings.provider_max_retries,
        base_delay=settings.provider_retry_base_delay_s,
    )
    if not result.ok:
        return PlaceDetailsResponse(success=False, error=AppError.from_code(result.error, result.message))
    return PlaceDetailsResponse(success=True, place=result.places[0])


@router.get("/landmarks/nearby", response_model=PlacesResponse)
async def nearby_landmarks(
    lat: float,
    lng: float,
    radius_m: Optional[int] = Query(None, gt=0, le=50_000),
    max_results: Optional[int] = Query(None, gt=0, le=50),
    service: LocationService = Depends(get_location_service),
) -> PlacesResponse:
    """Top-rated landmarks of several kinds around a position."""
    result = await service.discover_nearby_landmarks(
        Coordinates(latitude=lat, longitude=lng), radius_m, max_results
    )
    return _places_response(result)


@router.get("/businesses/nearby", response_model=PlacesResponse)
async def nearby_businesses(
    lat: float,
    lng: float,
    business_type: Optional[str] = Query(None, min_length=1),
    radius_m: Optional[int] = Query(None, gt=0, le=50_000),
    service: LocationService = Depends(get_location_service),
    settings: Settings = Depends(get_settings),
) -> PlacesResponse:
    """Local businesses around a position, optionally of one kind."""
    coords = Coordinates(latitude=lat, longitude=lng)
    result = await retry_transient(
        lambda: service.find_businesses(coords, business_type, radius_m),
        max_retries=settings.provider_max_retries,
        base_delay=settings.provider_retry_base_delay_s,
    )
    return _places_response(result)

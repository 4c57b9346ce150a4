"""Core data models for Estate Locator.

This module contains the Pydantic models used throughout the engine for
representing coordinates, neighborhoods, verification outcomes and places
returned by the places provider.
"""

from enum import Enum
from typing import Annotated, Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from estate_locator.models.errors import ErrorCode, ReferenceDataError


class Coordinates(BaseModel):
    """Geographic coordinates.

    No range checks here: plausibility and operating-region membership are
    decided by the coordinate validator, so that NaN or out-of-range input
    can be reported as a typed rejection instead of a construction error.
    """

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., description="Latitude in degrees")
    longitude: float = Field(..., description="Longitude in degrees")


class NeighborhoodType(str, Enum):
    """Kinds of community units a user can belong to."""

    ESTATE = "estate"
    TRADITIONAL_AREA = "traditional_area"
    ROAD_BASED = "road_based"
    LANDMARK_BASED = "landmark_based"
    TRANSPORT_HUB = "transport_hub"
    MARKET_BASED = "market_based"


class Neighborhood(BaseModel):
    """A geofenced community unit: center point plus radius.

    Reference data, loaded by a repository and never mutated by the engine.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable neighborhood identifier")
    name: str = Field(..., min_length=1, description="Display name")
    type: NeighborhoodType = Field(..., description="Community unit kind")
    center: Coordinates = Field(..., description="Geofence center")
    radius_km: float = Field(..., gt=0, description="Geofence radius in kilometres")
    state_name: Optional[str] = Field(None, description="State the neighborhood belongs to")
    member_count: int = Field(default=0, ge=0, description="Registered members")

    @classmethod
    def from_record(cls, record: dict) -> "Neighborhood":
        """Build a neighborhood from a raw reference-data record.

        Raises:
            ReferenceDataError: If the record is missing fields or holds
                invalid values.
        """
        try:
            return cls.model_validate(record)
        except ValidationError as e:
            record_id = record.get("id", "<unknown>") if isinstance(record, dict) else "<unknown>"
            raise ReferenceDataError(f"Malformed neighborhood {record_id}: {e}") from e


class NeighborhoodMatch(BaseModel):
    """A neighborhood scored against one query point."""

    neighborhood: Neighborhood
    distance_km: float = Field(..., ge=0, description="Distance from the geofence center")
    confidence: float = Field(..., ge=0, le=1, description="How well the point fits the geofence")


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    REJECTED = "rejected"


class Verified(BaseModel):
    """The point lies inside a neighborhood with enough confidence."""

    status: Literal[VerificationStatus.VERIFIED] = VerificationStatus.VERIFIED
    match: NeighborhoodMatch


class Unverified(BaseModel):
    """No confident match, but some neighborhoods are close by."""

    status: Literal[VerificationStatus.UNVERIFIED] = VerificationStatus.UNVERIFIED
    suggestions: list[NeighborhoodMatch] = Field(default_factory=list)


class Rejected(BaseModel):
    """Verification could not proceed or found nothing nearby."""

    status: Literal[VerificationStatus.REJECTED] = VerificationStatus.REJECTED
    reason: ErrorCode


VerificationResult = Annotated[
    Union[Verified, Unverified, Rejected],
    Field(discriminator="status"),
]


class PlaceResult(BaseModel):
    """A place as reported by the places provider.

    ``place_id`` is the provider's identifier and the deduplication key.
    """

    model_config = ConfigDict(frozen=True)

    place_id: str = Field(..., min_length=1, description="Provider place identifier")
    name: str = Field(..., description="Display name of the place")
    formatted_address: str = Field(default="", description="Formatted address or vicinity")
    location: Coordinates = Field(..., description="Geographic location")
    types: tuple[str, ...] = Field(default=(), description="Provider place types")
    rating: Optional[float] = Field(None, description="Average user rating")


class SearchResult(BaseModel):
    """Outcome of a places lookup: a list of places or a typed error.

    Exactly one side is meaningful. A failed result never carries places;
    an explicit "no results" answer is a success with no places. Results are
    frozen: a cached instance is shared by every caller that hits it.
    """

    model_config = ConfigDict(frozen=True)

    places: tuple[PlaceResult, ...] = ()
    error: Optional[ErrorCode] = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def _error_has_no_places(self) -> "SearchResult":
        if self.error is not None and self.places:
            raise ValueError("a failed SearchResult cannot carry places")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, places: Iterable[PlaceResult]) -> "SearchResult":
        return cls(places=tuple(places))

    @classmethod
    def failure(cls, error: ErrorCode, message: str | None = None) -> "SearchResult":
        return cls(error=error, message=message)


class SearchBias(BaseModel):
    """Location bias for a text search."""

    center: Coordinates
    radius_m: int = Field(..., gt=0, description="Bias radius in metres")

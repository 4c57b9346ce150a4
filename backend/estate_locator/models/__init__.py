"""Estate Locator data models."""

from .errors import (
    AppError,
    ErrorCode,
    RecoveryOption,
    ReferenceDataError,
    TRANSIENT_ERRORS,
    USER_MESSAGES,
)
from .core import (
    Coordinates,
    Neighborhood,
    NeighborhoodMatch,
    NeighborhoodType,
    PlaceResult,
    Rejected,
    SearchBias,
    SearchResult,
    Unverified,
    VerificationResult,
    VerificationStatus,
    Verified,
)

__all__ = [
    "AppError",
    "ErrorCode",
    "RecoveryOption",
    "ReferenceDataError",
    "TRANSIENT_ERRORS",
    "USER_MESSAGES",
    "Coordinates",
    "Neighborhood",
    "NeighborhoodMatch",
    "NeighborhoodType",
    "PlaceResult",
    "Rejected",
    "SearchBias",
    "SearchResult",
    "Unverified",
    "VerificationResult",
    "VerificationStatus",
    "Verified",
]

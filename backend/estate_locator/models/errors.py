"""Error taxonomy and API error envelope.

Every expected failure in the engine is one of the ``ErrorCode`` values and is
returned inside a result object. Exceptions are reserved for programmer and
reference-data errors.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Typed outcome codes shared by every component."""

    INVALID_COORDINATE = "INVALID_COORDINATE"
    OUT_OF_REGION = "OUT_OF_REGION"
    NO_NEARBY_NEIGHBORHOOD = "NO_NEARBY_NEIGHBORHOOD"
    MISSING_CREDENTIALS = "MISSING_CREDENTIALS"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_REQUEST = "INVALID_REQUEST"
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    UNKNOWN = "UNKNOWN"
    # Malformed HTTP payloads at the API edge
    VALIDATION_ERROR = "VALIDATION_ERROR"


# Codes worth retrying with backoff. Credentials and request errors never are.
TRANSIENT_ERRORS = frozenset({ErrorCode.RATE_LIMITED, ErrorCode.PROVIDER_UNAVAILABLE})


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_COORDINATE: "We couldn't read your location. Please try again.",
    ErrorCode.OUT_OF_REGION: "Location is outside the supported region.",
    ErrorCode.NO_NEARBY_NEIGHBORHOOD: (
        "No registered neighborhoods found in your area. Try selecting a nearby "
        "landmark or enter your address manually."
    ),
    ErrorCode.MISSING_CREDENTIALS: "Place search is not configured.",
    ErrorCode.RATE_LIMITED: "Too many searches right now. Please try again later.",
    ErrorCode.INVALID_REQUEST: "The search request was invalid.",
    ErrorCode.PROVIDER_UNAVAILABLE: "Place search is temporarily unavailable.",
    ErrorCode.UNKNOWN: "Something went wrong. Please try again.",
    ErrorCode.VALIDATION_ERROR: "Invalid request format. Please check your input.",
}


class ReferenceDataError(ValueError):
    """Raised when neighborhood reference data is malformed."""


class RecoveryOption(BaseModel):
    """An action the client can offer the user after an error."""

    label: str
    action: str


class AppError(BaseModel):
    """Error envelope returned by the HTTP API."""

    code: ErrorCode
    message: str
    user_message: str
    recovery_options: list[RecoveryOption] = Field(default_factory=list)

    @classmethod
    def from_code(cls, code: ErrorCode, message: Optional[str] = None) -> "AppError":
        options = []
        if code in TRANSIENT_ERRORS:
            options.append(RecoveryOption(label="Retry", action="retry"))
        if code in (ErrorCode.NO_NEARBY_NEIGHBORHOOD, ErrorCode.OUT_OF_REGION):
            options.append(RecoveryOption(label="Pick a landmark", action="select_landmark"))
        return cls(
            code=code,
            message=message or code.value,
            user_message=USER_MESSAGES[code],
            recovery_options=options,
        )

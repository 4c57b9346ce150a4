"""Location facade service module."""

from .service import (
    DEFAULT_BUSINESS_KEYWORDS,
    LAGOS_CENTER,
    BusinessSearchConfig,
    LocationService,
    TextSearchConfig,
)

__all__ = [
    "DEFAULT_BUSINESS_KEYWORDS",
    "LAGOS_CENTER",
    "BusinessSearchConfig",
    "LocationService",
    "TextSearchConfig",
]

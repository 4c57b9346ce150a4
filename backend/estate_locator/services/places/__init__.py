"""Places provider service module.

Provides the Google Places web service integration used for text search,
nearby search and place details.
"""

from .service import (
    GooglePlacesSearchClient,
    PlaceSearchClient,
    parse_place,
    parse_places,
    status_to_error,
)

__all__ = [
    "GooglePlacesSearchClient",
    "PlaceSearchClient",
    "parse_place",
    "parse_places",
    "status_to_error",
]

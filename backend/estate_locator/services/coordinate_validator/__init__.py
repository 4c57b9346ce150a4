"""Coordinate validator service module."""

from .service import (
    CoordinateValidator,
    NIGERIA_BOUNDS,
    RegionBounds,
    ValidationOutcome,
)

__all__ = [
    "CoordinateValidator",
    "NIGERIA_BOUNDS",
    "RegionBounds",
    "ValidationOutcome",
]

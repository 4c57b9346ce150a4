"""Coordinate validation against physical bounds and the operating region.

Rejects impossible or out-of-region input before any matching or network
work happens. Pure and synchronous.
"""

import math
from dataclasses import dataclass
from typing import Optional

from estate_locator.models import Coordinates, ErrorCode


@dataclass(frozen=True)
class RegionBounds:
    """Inclusive bounding box of the operating region."""
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    def __post_init__(self) -> None:
        if self.lat_min > self.lat_max or self.lon_min > self.lon_max:
            raise ValueError(f"Empty region bounds: {self}")

    def contains(self, coords: Coordinates) -> bool:
        return (
            self.lat_min <= coords.latitude <= self.lat_max
            and self.lon_min <= coords.longitude <= self.lon_max
        )


# Approximate bounding box of Nigeria
NIGERIA_BOUNDS = RegionBounds(lat_min=4.0, lat_max=14.0, lon_min=2.5, lon_max=15.0)


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of coordinate validation."""
    reason: Optional[ErrorCode] = None

    @property
    def ok(self) -> bool:
        return self.reason is None


class CoordinateValidator:
    """Gate for raw GPS input."""

    def __init__(self, bounds: RegionBounds = NIGERIA_BOUNDS) -> None:
        self._bounds = bounds

    @property
    def bounds(self) -> RegionBounds:
        return self._bounds

    @staticmethod
    def is_plausible(coords: Coordinates) -> bool:
        """True if the coordinates are finite and within the globe's ranges."""
        lat, lon = coords.latitude, coords.longitude
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return False
        return -90 <= lat <= 90 and -180 <= lon <= 180

    def validate(self, coords: Coordinates) -> ValidationOutcome:
        if not self.is_plausible(coords):
            return ValidationOutcome(ErrorCode.INVALID_COORDINATE)
        if not self._bounds.contains(coords):
            return ValidationOutcome(ErrorCode.OUT_OF_REGION)
        return ValidationOutcome()

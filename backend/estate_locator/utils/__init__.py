"""Shared helpers."""

from .geo import EARTH_RADIUS_KM, distance_km, haversine_distance, quantize
from .retry import retry_transient

__all__ = [
    "EARTH_RADIUS_KM",
    "distance_km",
    "haversine_distance",
    "quantize",
    "retry_transient",
]

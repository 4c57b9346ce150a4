"""Geospatial helpers: great-circle distance and coordinate quantisation."""

import math

from estate_locator.models import Coordinates

EARTH_RADIUS_KM = 6371.0

# 4 decimal places is roughly 11 m at the equator
CACHE_KEY_PRECISION = 4


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two lat/lon points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push a marginally above 1 for antipodal points
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in kilometres between two coordinates."""
    return haversine_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def quantize(value: float, places: int = CACHE_KEY_PRECISION) -> str:
    """Format a coordinate component at fixed precision for use in keys.

    Negative zero is normalised so that -0.00001 and 0.00001 share a slot.
    """
    text = f"{round(value, places):.{places}f}"
    if text.startswith("-") and float(text) == 0:
        text = text[1:]
    return text

"""Landmark discovery service module."""

from .service import (
    AggregatorConfig,
    DEFAULT_LANDMARK_TYPES,
    LandmarkAggregator,
    merge_unique,
    rank_by_rating,
)

__all__ = [
    "AggregatorConfig",
    "DEFAULT_LANDMARK_TYPES",
    "LandmarkAggregator",
    "merge_unique",
    "rank_by_rating",
]

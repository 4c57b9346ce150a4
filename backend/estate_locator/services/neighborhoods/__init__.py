"""Neighborhood reference data and verification service module."""

from .service import (
    InMemoryNeighborhoodRepository,
    MatcherConfig,
    NeighborhoodMatcher,
    NeighborhoodRepository,
    VerificationAttempt,
    VerificationState,
    confidence_for,
)

__all__ = [
    "InMemoryNeighborhoodRepository",
    "MatcherConfig",
    "NeighborhoodMatcher",
    "NeighborhoodRepository",
    "VerificationAttempt",
    "VerificationState",
    "confidence_for",
]

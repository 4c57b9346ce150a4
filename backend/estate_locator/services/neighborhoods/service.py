"""Neighborhood reference data and GPS verification.

Neighborhoods use a center-point + radius model, which fits how Nigerian
communities are actually described: gated estates, traditional areas, zones
around a major road, market or landmark. Verification scores a point against
nearby geofences and either confirms one neighborhood or returns ranked
suggestions.

Confidence falls linearly from the center to the geofence edge. Every
threshold lives in ``MatcherConfig`` so it can be tuned against real
acceptance data.
"""

import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from estate_locator.models import (
    Coordinates,
    ErrorCode,
    Neighborhood,
    NeighborhoodMatch,
    ReferenceDataError,
    Rejected,
    Unverified,
    VerificationResult,
    Verified,
)
from estate_locator.services.coordinate_validator import CoordinateValidator
from estate_locator.utils.geo import distance_km

logger = logging.getLogger(__name__)


class NeighborhoodRepository(ABC):
    """Read-only source of neighborhood reference data."""

    @abstractmethod
    async def find_candidates(self, coords: Coordinates, radius_multiplier: float) -> list[Neighborhood]:
        """Neighborhoods whose center lies within ``radius_km * radius_multiplier`` of ``coords``."""
        pass

    @abstractmethod
    async def find_within(self, coords: Coordinates, radius_km: float) -> list[Neighborhood]:
        """Neighborhoods whose center lies within a fixed radius of ``coords``."""
        pass

    @abstractmethod
    async def search(self, name: str, state: Optional[str] = None, limit: int = 20) -> list[Neighborhood]:
        """Neighborhoods whose name contains ``name`` (case-insensitive).

        When ``state`` is given, only neighborhoods whose state name contains
        it are returned.
        """
        pass


class InMemoryNeighborhoodRepository(NeighborhoodRepository):
    """Repository over a fixed list, validated when loaded."""

    def __init__(self, neighborhoods: Iterable[Neighborhood]) -> None:
        self._neighborhoods = list(neighborhoods)
        ids = [n.id for n in self._neighborhoods]
        if len(ids) != len(set(ids)):
            raise ReferenceDataError("Duplicate neighborhood ids in reference data")
        for neighborhood in self._neighborhoods:
            _check_geofence(neighborhood)

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "InMemoryNeighborhoodRepository":
        return cls(Neighborhood.from_record(record) for record in records)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InMemoryNeighborhoodRepository":
        """Load a JSON array of neighborhood records."""
        with open(path, encoding="utf-8") as fh:
            records = json.load(fh)
        if not isinstance(records, list):
            raise ReferenceDataError(f"{path}: expected a JSON array of neighborhoods")
        repo = cls.from_records(records)
        logger.info(f"[NEIGHBORHOODS] Loaded {len(repo)} neighborhoods from {path}")
        return repo

    def __len__(self) -> int:
        return len(self._neighborhoods)

    async def find_candidates(self, coords: Coordinates, radius_multiplier: float) -> list[Neighborhood]:
        return [
            n for n in self._neighborhoods
            if distance_km(coords, n.center) <= n.radius_km * radius_multiplier
        ]

    async def find_within(self, coords: Coordinates, radius_km: float) -> list[Neighborhood]:
        return [n for n in self._neighborhoods if distance_km(coords, n.center) <= radius_km]

    async def search(self, name: str, state: Optional[str] = None, limit: int = 20) -> list[Neighborhood]:
        needle = name.strip().casefold()
        if not needle or limit <= 0:
            return []
        found = [n for n in self._neighborhoods if needle in n.name.casefold()]
        state_needle = (state or "").strip().casefold()
        if state_needle:
            found = [n for n in found if state_needle in (n.state_name or "").casefold()]
        return found[:limit]


def _check_geofence(neighborhood: Neighborhood) -> None:
    center = neighborhood.center
    if not (math.isfinite(center.latitude) and math.isfinite(center.longitude)):
        raise ReferenceDataError(f"Neighborhood {neighborhood.id} has a non-finite center")
    if not (math.isfinite(neighborhood.radius_km) and neighborhood.radius_km > 0):
        raise ReferenceDataError(f"Neighborhood {neighborhood.id} has an invalid radius")


class VerificationState(str, Enum):
    UNVERIFIED = "unverified"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    UNVERIFIED_WITH_SUGGESTIONS = "unverified_with_suggestions"
    REJECTED = "rejected"


TERMINAL_STATES = frozenset({
    VerificationState.VERIFIED,
    VerificationState.UNVERIFIED_WITH_SUGGESTIONS,
    VerificationState.REJECTED,
})

_ALLOWED_TRANSITIONS: dict[VerificationState, frozenset[VerificationState]] = {
    VerificationState.UNVERIFIED: frozenset({VerificationState.VERIFYING, VerificationState.REJECTED}),
    VerificationState.VERIFYING: TERMINAL_STATES,
}


class VerificationAttempt:
    """Tracks one verification run through its states.

    Starts UNVERIFIED, moves to VERIFYING once input is accepted, and ends in
    exactly one terminal state. Leaving a terminal state is a bug.
    """

    def __init__(self, coords: Coordinates) -> None:
        self.coords = coords
        self.state = VerificationState.UNVERIFIED
        self.result: VerificationResult | None = None

    def transition(self, new_state: VerificationState) -> None:
        allowed = _ALLOWED_TRANSITIONS.get(self.state, frozenset())
        if new_state not in allowed:
            raise RuntimeError(f"Illegal verification transition {self.state.value} -> {new_state.value}")
        self.state = new_state

    def finish(self, result: VerificationResult) -> VerificationResult:
        if isinstance(result, Verified):
            self.transition(VerificationState.VERIFIED)
        elif isinstance(result, Unverified):
            self.transition(VerificationState.UNVERIFIED_WITH_SUGGESTIONS)
        else:
            self.transition(VerificationState.REJECTED)
        self.result = result
        return result

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES


@dataclass(frozen=True)
class MatcherConfig:
    """Tunable verification thresholds."""
    verified_threshold: float = 0.5
    candidate_radius_multiplier: float = 2.0
    suggestion_multiplier: float = 2.0
    max_suggestions: int = 3


def confidence_for(distance: float, radius_km: float) -> float:
    """1 at the center, falling linearly to 0 at the geofence edge."""
    return min(1.0, max(0.0, 1.0 - distance / radius_km))


class NeighborhoodMatcher:
    """Verifies a GPS point against neighborhood geofences.

    "No match" is a normal outcome (suggestions or a rejection), never an
    exception. Only malformed reference data raises.
    """

    def __init__(
        self,
        repository: NeighborhoodRepository,
        validator: CoordinateValidator,
        config: MatcherConfig | None = None,
    ) -> None:
        self._repository = repository
        self._validator = validator
        self._config = config or MatcherConfig()

    @property
    def config(self) -> MatcherConfig:
        return self._config

    def score(self, coords: Coordinates, neighborhood: Neighborhood) -> NeighborhoodMatch:
        _check_geofence(neighborhood)
        distance = distance_km(coords, neighborhood.center)
        return NeighborhoodMatch(
            neighborhood=neighborhood,
            distance_km=distance,
            confidence=confidence_for(distance, neighborhood.radius_km),
        )

    async def verify(self, coords: Coordinates) -> VerificationResult:
        return (await self.run(coords)).result  # type: ignore[return-value]

    async def run(self, coords: Coordinates) -> VerificationAttempt:
        """Verify ``coords`` and return the finished attempt with its result."""
        attempt = VerificationAttempt(coords)

        outcome = self._validator.validate(coords)
        if not outcome.ok:
            logger.info(f"[VERIFY] Rejected ({coords.latitude}, {coords.longitude}): {outcome.reason.value}")
            attempt.transition(VerificationState.REJECTED)
            attempt.result = Rejected(reason=outcome.reason)
            return attempt

        attempt.transition(VerificationState.VERIFYING)
        candidates = await self._repository.find_candidates(coords, self._config.candidate_radius_multiplier)
        matches = [self.score(coords, n) for n in candidates]

        best = self._best_verified(matches)
        if best is not None:
            logger.info(
                f"[VERIFY] Verified in {best.neighborhood.name} "
                f"({best.distance_km:.2f}km from center, confidence {best.confidence:.2f})"
            )
            attempt.finish(Verified(match=best))
            return attempt

        suggestions = self._suggestions(matches)
        if suggestions:
            nearest = suggestions[0]
            logger.info(
                f"[VERIFY] Near {nearest.neighborhood.name} ({nearest.distance_km:.1f}km away), "
                f"{len(suggestions)} suggestion(s)"
            )
            attempt.finish(Unverified(suggestions=suggestions))
            return attempt

        logger.info(f"[VERIFY] No neighborhood near ({coords.latitude}, {coords.longitude})")
        attempt.finish(Rejected(reason=ErrorCode.NO_NEARBY_NEIGHBORHOOD))
        return attempt

    def _best_verified(self, matches: list[NeighborhoodMatch]) -> NeighborhoodMatch | None:
        eligible = [
            m for m in matches
            if m.confidence >= self._config.verified_threshold
            and m.distance_km <= m.neighborhood.radius_km
        ]
        if not eligible:
            return None
        # Highest confidence; on a tie the smaller (more specific) geofence wins
        return min(
            eligible,
            key=lambda m: (-m.confidence, m.neighborhood.radius_km, m.neighborhood.id),
        )

    def _suggestions(self, matches: list[NeighborhoodMatch]) -> list[NeighborhoodMatch]:
        nearby = [
            m for m in matches
            if m.distance_km <= m.neighborhood.radius_km * self._config.suggestion_multiplier
        ]
        nearby.sort(key=lambda m: (m.distance_km, m.neighborhood.id))
        return nearby[: self._config.max_suggestions]

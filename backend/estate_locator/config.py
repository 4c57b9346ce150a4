"""Configuration for Estate Locator.

Uses pydantic-settings for environment variable management. Every threshold,
TTL, batch size and cap used by the engine is a named setting here; the
helper methods turn them into the per-component config objects.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from estate_locator.models import Coordinates
from estate_locator.services.coordinate_validator import RegionBounds
from estate_locator.services.landmarks import AggregatorConfig, DEFAULT_LANDMARK_TYPES
from estate_locator.services.location import (
    DEFAULT_BUSINESS_KEYWORDS,
    BusinessSearchConfig,
    TextSearchConfig,
)
from estate_locator.services.neighborhoods import MatcherConfig
from estate_locator.services.query_variations import VariationConfig

DEFAULT_NEIGHBORHOODS_FILE = Path(__file__).parent / "data" / "neighborhoods.json"


class Settings(BaseSettings):
    """Estate Locator configuration (env-friendly).

    Tip: create a .env file and override settings there, e.g.
    ``ESTATE_LOCATOR_GOOGLE_PLACES_API_KEY=...``.
    """

    model_config = SettingsConfigDict(
        env_prefix="ESTATE_LOCATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Estate Locator API"
    version: str = "0.1.0"

    # Google Places
    google_places_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Google Places API key; empty means MISSING_CREDENTIALS",
    )
    places_base_url: str = "https://maps.googleapis.com/maps/api/place"
    http_timeout_s: float = Field(default=10.0, gt=0)

    # Operating region (approximate bounds of Nigeria)
    region_lat_min: float = 4.0
    region_lat_max: float = 14.0
    region_lon_min: float = 2.5
    region_lon_max: float = 15.0

    # Neighborhood verification
    neighborhoods_file: Path = DEFAULT_NEIGHBORHOODS_FILE
    verified_threshold: float = Field(default=0.5, ge=0, le=1)
    candidate_radius_multiplier: float = Field(default=2.0, gt=0)
    suggestion_multiplier: float = Field(default=2.0, gt=0)
    max_suggestions: int = Field(default=3, ge=0)

    # Result cache
    cache_positive_ttl_s: float = Field(default=300.0, gt=0)
    cache_negative_ttl_s: float = Field(default=60.0, gt=0)
    cache_max_entries: int = Field(default=512, ge=1)
    redis_url: Optional[str] = Field(
        default=None,
        description="Share the cache across workers through Redis when set",
    )

    # Landmark discovery
    landmark_types: list[str] = Field(default_factory=lambda: list(DEFAULT_LANDMARK_TYPES))
    landmark_batch_size: int = Field(default=2, ge=1)
    landmark_max_per_type: int = Field(default=3, ge=1)
    landmark_max_results: int = Field(default=15, ge=1)
    landmark_radius_m: int = Field(default=5000, gt=0)

    # Text search
    max_query_variations: int = Field(default=8, ge=1)
    region_query_suffix: str = "Nigeria"
    text_search_center_lat: float = 6.5244
    text_search_center_lng: float = 3.3792
    text_search_radius_m: int = Field(default=100_000, gt=0)
    text_search_max_results: int = Field(default=8, ge=1)
    text_search_early_stop: int = Field(default=3, ge=1)

    # Business discovery
    business_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_BUSINESS_KEYWORDS))
    business_place_type: str = "establishment"
    business_radius_m: int = Field(default=5000, gt=0)
    business_max_results: int = Field(default=15, ge=1)

    # Call-site retry policy for transient provider errors
    provider_max_retries: int = Field(default=2, ge=0, le=10)
    provider_retry_base_delay_s: float = Field(default=0.5, ge=0)

    def region_bounds(self) -> RegionBounds:
        return RegionBounds(
            lat_min=self.region_lat_min,
            lat_max=self.region_lat_max,
            lon_min=self.region_lon_min,
            lon_max=self.region_lon_max,
        )

    def matcher_config(self) -> MatcherConfig:
        return MatcherConfig(
            verified_threshold=self.verified_threshold,
            candidate_radius_multiplier=self.candidate_radius_multiplier,
            suggestion_multiplier=self.suggestion_multiplier,
            max_suggestions=self.max_suggestions,
        )

    def aggregator_config(self) -> AggregatorConfig:
        return AggregatorConfig(
            landmark_types=tuple(self.landmark_types),
            batch_size=self.landmark_batch_size,
            max_per_type=self.landmark_max_per_type,
            max_results=self.landmark_max_results,
            max_retries=self.provider_max_retries,
            retry_base_delay=self.provider_retry_base_delay_s,
        )

    def variation_config(self) -> VariationConfig:
        return VariationConfig(
            max_variations=self.max_query_variations,
            region_suffix=self.region_query_suffix,
        )

    def text_search_config(self) -> TextSearchConfig:
        return TextSearchConfig(
            default_center=Coordinates(
                latitude=self.text_search_center_lat,
                longitude=self.text_search_center_lng,
            ),
            radius_m=self.text_search_radius_m,
            max_results=self.text_search_max_results,
            early_stop=self.text_search_early_stop,
        )

    def business_search_config(self) -> BusinessSearchConfig:
        return BusinessSearchConfig(
            keywords=tuple(self.business_keywords),
            place_type=self.business_place_type,
            radius_m=self.business_radius_m,
            max_results=self.business_max_results,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached configuration instance."""
    return Settings()

"""Cache service module."""

from .service import (
    CacheEntry,
    CacheService,
    InMemoryCacheService,
    RedisCacheService,
    ResultCache,
)

__all__ = [
    "CacheEntry",
    "CacheService",
    "InMemoryCacheService",
    "RedisCacheService",
    "ResultCache",
]

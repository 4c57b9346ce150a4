"""Query variation service module."""

from .service import QueryVariationGenerator, VariationConfig

__all__ = ["QueryVariationGenerator", "VariationConfig"]

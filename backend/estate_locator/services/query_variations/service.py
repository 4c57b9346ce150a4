"""Search-query expansion for fuzzy place lookups.

Users type estates and areas the way they say them ("Lekki Estate",
"Yaba area"). The places provider matches better on some phrasings than
others, so a query is expanded into an ordered list of alternates that the
caller tries in turn.
"""

import re
from dataclasses import dataclass, field

DEFAULT_SUFFIX_EXPANSIONS: dict[str, tuple[str, ...]] = {
    "estate": ("Housing Estate", "Residential Estate"),
    "area": (),
    "district": (),
    "zone": (),
    "community": (),
}

DEFAULT_REGION_TOKENS: tuple[str, ...] = (
    "lagos",
    "abuja",
    "kano",
    "ibadan",
    "port harcourt",
    "nigeria",
)


@dataclass(frozen=True)
class VariationConfig:
    """Knobs for query expansion."""
    max_variations: int = 8
    region_suffix: str = "Nigeria"
    suffix_expansions: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_SUFFIX_EXPANSIONS)
    )
    region_tokens: tuple[str, ...] = DEFAULT_REGION_TOKENS


def _word_pattern(word: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)


def _collapse(text: str) -> str:
    return " ".join(text.split())


class QueryVariationGenerator:
    """Expands a free-text location query into alternate search strings.

    Output order is search order: the trimmed original first, then
    keyword-stripped forms and their canonical suffixes, then the query with
    regional context. Duplicates are dropped case-insensitively, keeping the
    first spelling seen.
    """

    def __init__(self, config: VariationConfig | None = None) -> None:
        self._config = config or VariationConfig()
        if self._config.max_variations < 1:
            raise ValueError("max_variations must be at least 1")
        self._keyword_patterns = {
            keyword: _word_pattern(keyword) for keyword in self._config.suffix_expansions
        }
        self._region_patterns = [_word_pattern(t) for t in self._config.region_tokens]

    def generate(self, query: str) -> list[str]:
        original = _collapse(query or "")
        if not original:
            return []

        candidates = [original]

        for keyword, suffixes in self._config.suffix_expansions.items():
            pattern = self._keyword_patterns[keyword]
            if not pattern.search(original):
                continue
            base = _collapse(pattern.sub(" ", original))
            if not base:
                continue
            candidates.append(base)
            candidates.extend(f"{base} {suffix}" for suffix in suffixes)

        if not any(p.search(original) for p in self._region_patterns):
            candidates.append(f"{original} {self._config.region_suffix}")

        return self._dedupe(candidates)[: self._config.max_variations]

    @staticmethod
    def _dedupe(candidates: list[str]) -> list[str]:
        seen: set[str] = set()
        unique = []
        for candidate in candidates:
            folded = candidate.casefold()
            if folded in seen:
                continue
            seen.add(folded)
            unique.append(candidate)
        return unique

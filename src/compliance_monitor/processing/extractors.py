"""
Stateless field extractors. Each scans the combined article text for one field.
"""
import re
from typing import Iterable, List, Optional, Tuple

from compliance_monitor.core.lexicon import (
    COUNTRY_ALIASES,
    DEFAULT_RESTRICTION,
    EFFECTIVE_DATE_PATTERNS,
    PRODUCT_CATEGORIES,
    RESTRICTION_KEYWORDS,
    SHORT_ALIAS_MAX_LEN,
    TARIFF_RATE_PATTERN,
)

_TARIFF_RATE_RE = re.compile(TARIFF_RATE_PATTERN)
_EFFECTIVE_DATE_RES = [re.compile(p, re.IGNORECASE) for p in EFFECTIVE_DATE_PATTERNS]


def keyword_match(text: str, keywords: Iterable[str]) -> bool:
    text = text.lower()
    return any(k.lower() in text for k in keywords)


def _alias_regex(alias: str) -> str:
    """Short aliases match only as whole, case-exact words."""
    escaped = re.escape(alias)
    if len(alias) <= SHORT_ALIAS_MAX_LEN:
        return rf"\b(?-i:{escaped})\b"
    return escaped


def _alias_pattern(alias: str) -> "re.Pattern[str]":
    return re.compile(_alias_regex(alias), re.IGNORECASE)


_COUNTRY_PATTERNS: List[Tuple[str, "re.Pattern[str]"]] = [
    (country, _alias_pattern(alias))
    for country, aliases in COUNTRY_ALIASES.items()
    for alias in aliases
]


def extract_countries(text: str) -> List[str]:
    """
    Distinct normalized country names ordered by first occurrence in the text.
    """
    first_seen = {}
    for country, pattern in _COUNTRY_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        if country not in first_seen or match.start() < first_seen[country]:
            first_seen[country] = match.start()
    return sorted(first_seen, key=first_seen.get)


def extract_tariff_rate(text: str) -> Optional[str]:
    match = _TARIFF_RATE_RE.search(text)
    return match.group(0) if match else None


def extract_effective_date(text: str) -> Optional[str]:
    """First captured date phrase, trying patterns in priority order."""
    for pattern in _EFFECTIVE_DATE_RES:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return None


def extract_restriction_type(text: str) -> str:
    for category, keywords in RESTRICTION_KEYWORDS.items():
        if keyword_match(text, keywords):
            return category
    return DEFAULT_RESTRICTION


def extract_product(text: str) -> Optional[str]:
    lowered = text.lower()
    for product in PRODUCT_CATEGORIES:
        if product in lowered:
            return product
    return None


def _mentions(text: str, country: str, templates: Iterable[str]) -> bool:
    aliases = COUNTRY_ALIASES.get(country, [country])
    for template in templates:
        before, after = template.split("{name}")
        for alias in aliases:
            cue = re.escape(before) + _alias_regex(alias) + re.escape(after)
            if re.search(cue, text, re.IGNORECASE):
                return True
    return False


def split_directions(countries: List[str], text: str) -> Tuple[List[str], List[str]]:
    """
    Split countries into (origin, destination) using phrase cues.

    Approximate: "from X" / "X export" marks an origin, "to X" / "X import"
    a destination, anything else is treated as an origin. A country that ends
    up on both sides stays a destination only.
    """
    origins: List[str] = []
    destinations: List[str] = []

    for country in countries:
        if _mentions(text, country, ("from {name}", "{name} export")):
            origins.append(country)
        elif _mentions(text, country, ("to {name}", "{name} import")):
            destinations.append(country)
        else:
            origins.append(country)

    origins = [c for c in origins if c not in destinations]
    return origins, destinations

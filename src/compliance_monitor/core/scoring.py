"""
Module to score every synthesized alert
"""
from typing import Dict, Optional, Union

from compliance_monitor.ingestion.base import SourceReliability

ACCEPTANCE_THRESHOLD = 70
MAX_CONFIDENCE = 100

RELIABILITY_BASE: Dict[SourceReliability, int] = {
    SourceReliability.VERY_HIGH: 50,
    SourceReliability.HIGH: 40,
    SourceReliability.MEDIUM: 30,
}
UNKNOWN_RELIABILITY_BASE = 20

TARIFF_RATE_BONUS = 15
EFFECTIVE_DATE_BONUS = 10
COUNTRY_BONUS = 10
PRODUCT_BONUS = 10


def base_score(reliability: Union[SourceReliability, str, None]) -> int:
    """Starting score granted by the source's trust tier."""
    try:
        tier = SourceReliability(reliability)
    except ValueError:
        return UNKNOWN_RELIABILITY_BASE
    return RELIABILITY_BASE.get(tier, UNKNOWN_RELIABILITY_BASE)


def compute_confidence(
    reliability: Union[SourceReliability, str, None],
    *,
    has_tariff_rate: bool,
    has_effective_date: bool,
    has_country: bool,
    has_product: bool,
) -> int:
    """
    Additive 0-100 score: reliability base plus one bonus per extracted field.
    """
    score = base_score(reliability)
    if has_tariff_rate:
        score += TARIFF_RATE_BONUS
    if has_effective_date:
        score += EFFECTIVE_DATE_BONUS
    if has_country:
        score += COUNTRY_BONUS
    if has_product:
        score += PRODUCT_BONUS
    return min(score, MAX_CONFIDENCE)


def passes_threshold(confidence: int, min_confidence: Optional[int] = None) -> bool:
    """
    Determines whether a candidate is confident enough to become an alert.
    """
    threshold = ACCEPTANCE_THRESHOLD if min_confidence is None else min_confidence
    return confidence >= threshold

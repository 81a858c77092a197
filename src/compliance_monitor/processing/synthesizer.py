"""
Turns one raw article into zero or one compliance alert.
"""
import hashlib
import logging
from datetime import timezone
from typing import Optional, Union

from compliance_monitor.core.schemas import ComplianceAlert
from compliance_monitor.core.scoring import compute_confidence, passes_threshold
from compliance_monitor.ingestion.base import RawArticle, SourceReliability
from compliance_monitor.processing.extractors import (
    extract_countries,
    extract_effective_date,
    extract_product,
    extract_restriction_type,
    extract_tariff_rate,
    split_directions,
)

logger = logging.getLogger(__name__)

ID_SUFFIX_LENGTH = 6


def make_alert_id(article: RawArticle) -> str:
    """
    CA-<epoch-millis>-<suffix>. Millis come from the publication time and the
    suffix from a digest of link and title, so the same article always maps
    to the same id.
    """
    published = article.published_at
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    millis = int(published.timestamp() * 1000)
    digest = hashlib.sha1(f"{article.url}|{article.title}".encode("utf-8")).hexdigest()
    return f"CA-{millis}-{digest[:ID_SUFFIX_LENGTH]}"


def build_summary(
    restriction_type: str,
    tariff_rate: Optional[str],
    has_origin: bool,
    product: str,
) -> str:
    parts = ["New", restriction_type]
    if tariff_rate:
        parts.append(f"({tariff_rate})")
    parts.extend(["affecting", "exports" if has_origin else "imports", "of", product])
    return " ".join(parts)


def synthesize(
    article: RawArticle,
    source_reliability: Union[SourceReliability, str, None] = None,
    *,
    min_confidence: Optional[int] = None,
) -> Optional[ComplianceAlert]:
    """
    Extract fields, score them and build an alert.

    Returns None when the article names no monitored product or when the
    confidence falls below the acceptance threshold.
    """
    text = article.text

    product = extract_product(text)
    if product is None:
        return None

    restriction_type = extract_restriction_type(text)
    countries = extract_countries(text)
    from_countries, to_countries = split_directions(countries, text)
    tariff_rate = extract_tariff_rate(text)
    effective_date = extract_effective_date(text)

    reliability = source_reliability if source_reliability is not None else article.source_reliability
    confidence = compute_confidence(
        reliability,
        has_tariff_rate=tariff_rate is not None,
        has_effective_date=effective_date is not None,
        has_country=bool(countries),
        has_product=True,
    )

    if not passes_threshold(confidence, min_confidence):
        logger.debug(f"Discarded low-confidence candidate ({confidence}): {article.title}")
        return None

    return ComplianceAlert(
        alert_id=make_alert_id(article),
        summary=build_summary(restriction_type, tariff_rate, bool(from_countries), product),
        product=product,
        restriction_type=restriction_type,
        from_countries=from_countries,
        to_countries=to_countries,
        tariff_rate=tariff_rate,
        effective_date=effective_date,
        date_published=article.published_at,
        source=article.source_name,
        title=article.title,
        link=article.url,
        confidence=confidence,
    )

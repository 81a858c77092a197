import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List

from compliance_monitor.core.schemas import ComplianceAlert

logger = logging.getLogger(__name__)

TITLE_KEY_LENGTH = 50


def title_key(title: str) -> str:
    """Lowercased, whitespace-collapsed first 50 characters of a title."""
    return re.sub(r"\s+", " ", title.lower()).strip()[:TITLE_KEY_LENGTH]


@dataclass
class DedupResult:
    new: List[ComplianceAlert] = field(default_factory=list)
    already_seen: List[ComplianceAlert] = field(default_factory=list)
    near_duplicates: List[ComplianceAlert] = field(default_factory=list)


def partition_alerts(
    alerts: Iterable[ComplianceAlert],
    processed_ids: Iterable[str],
) -> DedupResult:
    """
    Split a batch into new and already surfaced alerts.

    Ids are checked against the persisted set. Titles are only compared within
    this batch: the first alert for a story wins and later ones with the same
    title key are dropped, whether or not the first was new.
    """
    seen_ids = set(processed_ids)
    seen_titles = set()
    result = DedupResult()

    for alert in alerts:
        key = title_key(alert.title)

        if alert.alert_id in seen_ids:
            result.already_seen.append(alert)
        elif key in seen_titles:
            logger.debug(f"Skipping batch duplicate: {alert.title}")
            result.near_duplicates.append(alert)
        else:
            result.new.append(alert)
            seen_ids.add(alert.alert_id)

        seen_titles.add(key)

    logger.info(
        f"Dedup filter: {len(result.new)} new, {len(result.already_seen)} already seen, "
        f"{len(result.near_duplicates)} batch duplicates"
    )
    return result

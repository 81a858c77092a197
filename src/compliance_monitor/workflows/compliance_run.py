"""
One polling cycle: fetch -> synthesize -> dedupe -> persist -> forward.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from compliance_monitor.core.entities import (
    AlertOutcome,
    DataSource,
    ForwardResult,
    RunResult,
    RunState,
)
from compliance_monitor.core.schemas import ComplianceAlert
from compliance_monitor.delivery.base import ForwardingChannel, ForwardingError
from compliance_monitor.delivery.webhook import WebhookForwarder
from compliance_monitor.ingestion.base import RawArticle, SourceAdapter
from compliance_monitor.processing.deduplicator import partition_alerts
from compliance_monitor.processing.synthesizer import synthesize
from compliance_monitor.services.config import DEFAULT_SEARCH_QUERY
from compliance_monitor.services.state_store import StateStore, StateStoreError

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ComplianceMonitor:
    """
    Owns the processed-id set and alert log through the injected store.
    Only one run executes at a time; a trigger during a run is rejected.
    """

    def __init__(
        self,
        *,
        sources: Sequence[SourceAdapter],
        store: StateStore,
        forwarder: Optional[ForwardingChannel] = None,
        fallback: Optional[SourceAdapter] = None,
        query: str = DEFAULT_SEARCH_QUERY,
        min_confidence: Optional[int] = None,
        fetch_timeout: float = 10.0,
    ):
        self.sources = list(sources)
        self.store = store
        self.forwarder = forwarder
        self.fallback = fallback
        self.query = query
        self.min_confidence = min_confidence
        self.fetch_timeout = fetch_timeout

        self.state = RunState.IDLE
        self.last_result: Optional[RunResult] = None
        self.started_at = _now()
        self._lock = asyncio.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    # ----------------------------
    # Polling cycle
    # ----------------------------
    async def run(self) -> RunResult:
        if self._lock.locked():
            logger.warning("Run requested while another is in progress; skipping")
            return RunResult(
                success=False,
                started_at=_now(),
                completed_at=_now(),
                skipped=True,
                error="Run already in progress",
            )

        async with self._lock:
            result = RunResult(success=False, started_at=_now())
            try:
                await self._run(result)
                result.success = True
            except Exception as e:
                logger.exception(f"Compliance run failed: {e}")
                result.error = str(e)
            finally:
                self.state = RunState.IDLE
                result.completed_at = _now()
                self.last_result = result

            logger.info(
                f"Run finished: success={result.success} source={result.data_source} "
                f"fetched={result.fetched} new={result.processed} forwarded={result.forwarded}"
            )
            return result

    async def _run(self, result: RunResult) -> None:
        self.state = RunState.FETCHING
        articles, provenance = await self._fetch()
        result.data_source = provenance.value
        result.fetched = len(articles)
        logger.info(f"Fetched {len(articles)} articles ({provenance.value})")

        self.state = RunState.SYNTHESIZING
        alerts = self._synthesize(articles, result.results)
        result.synthesized = len(alerts)
        logger.info(f"Synthesized {len(alerts)} alerts from {len(articles)} articles")

        self.state = RunState.DEDUPING
        processed_ids = await self.store.load_processed_ids()
        dedup = partition_alerts(alerts, processed_ids)
        result.duplicates = len(dedup.already_seen) + len(dedup.near_duplicates)
        result.processed = len(dedup.new)
        result.new_alert_ids = [a.alert_id for a in dedup.new]
        logger.info(f"Found {len(dedup.new)} new alerts out of {len(alerts)} total")

        if not dedup.new:
            result.forwarding = ForwardResult(status="skipped", message="No new alerts")
            self._tally(result)
            return

        self.state = RunState.PERSISTING
        logged = await self._persist(dedup.new, processed_ids, result.results)

        self.state = RunState.FORWARDING
        result.forwarding = await self._forward(logged)
        result.forwarded = result.forwarding.forwarded
        self._tally(result)

    @staticmethod
    def _tally(result: RunResult) -> None:
        result.succeeded = sum(1 for r in result.results if r.status == "success")
        result.failed = sum(1 for r in result.results if r.status == "error")

    async def _fetch(self) -> Tuple[List[RawArticle], DataSource]:
        articles: List[RawArticle] = []

        for source in self.sources:
            try:
                fetched = await asyncio.wait_for(
                    source.fetch_articles(self.query), timeout=self.fetch_timeout
                )
                articles.extend(fetched)
                logger.info(f"Source {source.name} returned {len(fetched)} articles")
            except asyncio.TimeoutError:
                logger.warning(f"Source {source.name} timed out after {self.fetch_timeout}s")
            except Exception as e:
                logger.error(f"Source {source.name} failed: {e}")

        usable = [a for a in articles if a.title.strip()]
        if usable or self.fallback is None:
            return usable, DataSource.LIVE

        logger.warning("No usable live articles, using simulated dataset")
        return await self.fallback.fetch_articles(self.query), DataSource.SIMULATED

    def _synthesize(self, articles: Iterable[RawArticle], outcomes: List[AlertOutcome]) -> List[ComplianceAlert]:
        alerts = []
        for article in articles:
            try:
                alert = synthesize(article, article.source_reliability, min_confidence=self.min_confidence)
            except Exception as e:
                logger.error(f"Failed to synthesize alert from '{article.title}': {e}")
                outcomes.append(AlertOutcome(status="error", title=article.title, error=str(e)))
                continue
            if alert is not None:
                alerts.append(alert)
        return alerts

    async def _persist(
        self,
        new_alerts: List[ComplianceAlert],
        processed_ids: List[str],
        outcomes: List[AlertOutcome],
    ) -> List[ComplianceAlert]:
        logged = []
        for alert in new_alerts:
            stamped = alert.model_copy(update={"processed_at": _now()})
            try:
                await self.store.append_alert(stamped)
                logged.append(stamped)
                logger.info(f"Processing alert: {alert.alert_id} - {alert.product}")
                outcomes.append(AlertOutcome(
                    status="success", alert_id=alert.alert_id, product=alert.product, title=alert.title,
                ))
            except StateStoreError as e:
                logger.error(f"Error processing alert {alert.alert_id}: {e}")
                outcomes.append(AlertOutcome(
                    status="error", alert_id=alert.alert_id, product=alert.product,
                    title=alert.title, error=str(e),
                ))

        # Failed log appends are still marked processed to avoid reprocessing.
        await self.store.save_processed_ids(processed_ids + [a.alert_id for a in new_alerts])
        return logged

    async def _forward(self, alerts: List[ComplianceAlert]) -> ForwardResult:
        if not alerts:
            return ForwardResult(status="skipped", message="No alerts to forward")
        if self.forwarder is None or not self.forwarder.configured:
            logger.info("Forwarding not configured; skipping")
            return ForwardResult(status="not_configured", message="No forwarding endpoint configured")

        try:
            return await self.forwarder.forward(alerts=alerts, last_checked=_now())
        except ForwardingError as e:
            logger.error(f"Forwarding failed: {e}")
            return ForwardResult(status="error", status_code=e.status_code, message=str(e))

    # ----------------------------
    # Control operations
    # ----------------------------
    async def list_alerts(self) -> List[ComplianceAlert]:
        return await self.store.list_alerts()

    async def list_processed_ids(self) -> List[str]:
        return await self.store.load_processed_ids()

    def configure_forwarding(self, endpoint: Optional[str], secret: Optional[str] = None) -> None:
        if isinstance(self.forwarder, WebhookForwarder):
            self.forwarder.reconfigure(endpoint, secret)
        else:
            self.forwarder = WebhookForwarder(endpoint, secret)
            logger.info(f"Forwarding endpoint set to {endpoint or '<none>'}")

    @property
    def forwarding_endpoint(self) -> Optional[str]:
        return getattr(self.forwarder, "endpoint", None)

    async def forward_alerts(self, alert_ids: Iterable[str]) -> Tuple[ForwardResult, List[str]]:
        """
        Re-send named alerts from the log. Returns the outcome and the ids not found.
        Does not touch the processed-id set.
        """
        wanted = list(dict.fromkeys(alert_ids))
        by_id = {}
        for alert in await self.store.list_alerts():
            by_id.setdefault(alert.alert_id, alert)

        found = [by_id[i] for i in wanted if i in by_id]
        missing = [i for i in wanted if i not in by_id]
        if not found:
            return ForwardResult(status="skipped", message="No matching alerts in log"), missing

        logger.info(f"Re-forwarding {len(found)} logged alerts")
        return await self._forward(found), missing

    def health(self, next_run: Optional[datetime] = None) -> dict:
        now = _now()
        return {
            "status": "healthy",
            "uptime": (now - self.started_at).total_seconds(),
            "timestamp": now.isoformat(),
            "state": self.state.value,
            "runInProgress": self.in_progress,
            "lastRun": self.last_result.completed_at.isoformat()
            if self.last_result and self.last_result.completed_at else None,
            "lastRunSuccess": self.last_result.success if self.last_result else None,
            "nextRun": next_run.isoformat() if next_run else None,
        }

"""
Monitor Factory - Wires a ComplianceMonitor from configuration.
"""
import logging

from compliance_monitor.delivery.webhook import WebhookForwarder
from compliance_monitor.ingestion.simulated import SimulatedSource
from compliance_monitor.ingestion.source_factory import create_adapters_from_config
from compliance_monitor.services.config import Config
from compliance_monitor.services.database import SqliteStateStore
from compliance_monitor.services.state_store import InMemoryStateStore, JsonFileStateStore, StateStore
from compliance_monitor.workflows.compliance_run import ComplianceMonitor

logger = logging.getLogger(__name__)


def create_state_store(config: Config) -> StateStore:
    """
    Raises:
        ValueError: If STATE_BACKEND is unknown
    """
    backend = config.STATE_BACKEND.lower()

    if backend == "json":
        return JsonFileStateStore(config.DATA_DIR)
    elif backend == "sqlite":
        return SqliteStateStore(config.DATABASE_PATH)
    elif backend == "memory":
        logger.warning("Using in-memory state; processed alerts are lost on restart")
        return InMemoryStateStore()
    else:
        raise ValueError(f"Unknown state backend: {config.STATE_BACKEND}")


def create_monitor_from_config(config: Config) -> ComplianceMonitor:
    forwarder = WebhookForwarder(
        endpoint=config.FORWARD_ENDPOINT,
        secret=config.FORWARD_SECRET,
        secret_header=config.FORWARD_SECRET_HEADER,
        timeout=config.FORWARD_TIMEOUT_SECONDS,
    )
    if not forwarder.configured:
        logger.info("FORWARD_ENDPOINT not set; alerts will only be logged")

    return ComplianceMonitor(
        sources=create_adapters_from_config(config),
        store=create_state_store(config),
        forwarder=forwarder,
        fallback=SimulatedSource(),
        query=config.SEARCH_QUERY,
        min_confidence=config.MIN_CONFIDENCE,
        fetch_timeout=config.FETCH_TIMEOUT_SECONDS,
    )

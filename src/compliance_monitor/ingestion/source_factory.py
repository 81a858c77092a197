"""
Source Factory - Creates ingestion adapters from configuration.
"""
import logging
from typing import List

from compliance_monitor.ingestion.base import SourceAdapter
from compliance_monitor.ingestion.mediastack import MediastackAdapter
from compliance_monitor.ingestion.newsapi import NewsApiAdapter
from compliance_monitor.ingestion.rss import RSSAdapter
from compliance_monitor.ingestion.simulated import SimulatedSource
from compliance_monitor.services.config import Config, SourceConfig, get_enabled_sources

logger = logging.getLogger(__name__)


def create_source_adapter(source_config: SourceConfig, timeout: float = 10.0) -> SourceAdapter:
    """
    Create a source adapter from configuration.

    Args:
        source_config: Configuration for the source
        timeout: HTTP timeout for API-backed sources

    Returns:
        Configured SourceAdapter instance

    Raises:
        ValueError: If source type is unknown or required settings are missing
    """
    source_type = source_config.type.lower()

    if source_type == "newsapi":
        if not source_config.api_key:
            raise ValueError("NewsAPI source requires NEWSAPI_KEY")
        return NewsApiAdapter(
            api_key=source_config.api_key,
            name=source_config.name or "newsapi",
            reliability=source_config.reliability,
            base_url=source_config.base_url,
            timeout=timeout,
        )

    elif source_type == "mediastack":
        if not source_config.api_key:
            raise ValueError("Mediastack source requires MEDIASTACK_KEY")
        return MediastackAdapter(
            api_key=source_config.api_key,
            name=source_config.name or "mediastack",
            reliability=source_config.reliability,
            base_url=source_config.base_url,
            timeout=timeout,
        )

    elif source_type == "rss":
        if not source_config.feeds:
            raise ValueError("RSS source requires 'feeds' field")
        return RSSAdapter(
            feed_urls=source_config.feeds,
            source_name=source_config.name or "rss",
            reliability=source_config.reliability,
        )

    elif source_type == "simulated":
        return SimulatedSource()

    else:
        raise ValueError(f"Unknown source type: {source_type}")


def create_adapters_from_config(config: Config) -> List[SourceAdapter]:
    """
    Create all enabled source adapters. Misconfigured sources are logged and skipped.
    """
    adapters = []

    for source_config in get_enabled_sources(config):
        try:
            adapter = create_source_adapter(source_config, timeout=config.FETCH_TIMEOUT_SECONDS)
            adapters.append(adapter)
            logger.info(f"Created {source_config.type} adapter: {adapter.name}")
        except Exception as e:
            logger.error(f"Failed to create adapter for {source_config.type}: {e}")

    return adapters

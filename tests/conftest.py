import asyncio
from datetime import datetime, timezone
from typing import List, Optional

import pytest

from compliance_monitor.core.schemas import ComplianceAlert
from compliance_monitor.ingestion.base import RawArticle, SourceAdapter, SourceReliability


def make_article(
    title: str = "US Announces New Semiconductor Tariffs on Asian Imports",
    description: Optional[str] = "25% tariff from China and Taiwan effective April 1, 2025",
    url: str = "https://www.example.com/news/123",
    reliability: str = "high",
    published_at: datetime = datetime(2025, 3, 8, 8, 33, 50, tzinfo=timezone.utc),
    source_name: str = "Global Trade Magazine",
) -> RawArticle:
    """Helper to create a RawArticle for tests."""
    return RawArticle(
        title=title,
        description=description,
        published_at=published_at,
        source_name=source_name,
        url=url,
        source_reliability=SourceReliability(reliability),
    )


def make_alert(
    alert_id: str = "CA-1741422830186-abc123",
    title: str = "US Announces New Semiconductor Tariffs on Asian Imports",
    product: str = "semiconductor",
    confidence: int = 85,
) -> ComplianceAlert:
    """Helper to create a ComplianceAlert for tests."""
    return ComplianceAlert(
        alert_id=alert_id,
        summary=f"New tariff (25%) affecting exports of {product}",
        product=product,
        restriction_type="tariff",
        from_countries=["China", "Taiwan"],
        to_countries=["United States"],
        tariff_rate="25%",
        effective_date="April 1, 2025",
        date_published=datetime(2025, 3, 8, 8, 33, 50, tzinfo=timezone.utc),
        source="Global Trade Magazine",
        title=title,
        link="https://www.example.com/news/123",
        confidence=confidence,
    )


class StaticSource(SourceAdapter):
    """Returns the same articles on every call."""

    def __init__(self, articles: List[RawArticle], name: str = "static"):
        self.articles = articles
        self.name = name
        self.calls = 0

    async def fetch_articles(self, query: str) -> List[RawArticle]:
        self.calls += 1
        return list(self.articles)


class FailingSource(SourceAdapter):
    name = "failing"

    async def fetch_articles(self, query: str) -> List[RawArticle]:
        raise RuntimeError("upstream unavailable")


class BlockingSource(SourceAdapter):
    """Waits on an event before returning, to hold a run open."""

    name = "blocking"

    def __init__(self, articles: List[RawArticle]):
        self.articles = articles
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def fetch_articles(self, query: str) -> List[RawArticle]:
        self.entered.set()
        await self.release.wait()
        return list(self.articles)


@pytest.fixture
def scenario_article() -> RawArticle:
    return make_article()


@pytest.fixture
def trade_articles() -> List[RawArticle]:
    return [
        make_article(),
        make_article(
            title="New Export Restrictions on Auto Parts to Russia",
            description="The United States will ban automotive component exports to Russia "
                        "starting March 15, 2025.",
            url="https://www.example.com/news/456",
            reliability="very-high",
            source_name="US CBP News",
        ),
        make_article(
            title="No room left for negotiation with Canada and Mexico on tariffs, says Trump",
            description="A 10% duty on steel imports from Canada and Mexico takes effect next week.",
            url="https://www.example.com/news/789",
            reliability="medium",
            source_name="The Guardian International",
        ),
    ]

"""
Ingestion from RSS sources
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import List

import feedparser

from compliance_monitor.ingestion.base import RawArticle, SourceAdapter, SourceReliability

logger = logging.getLogger(__name__)


class RSSAdapter(SourceAdapter):
    """
    Reads a set of feeds and keeps entries that mention any query term.
    """

    def __init__(
        self,
        feed_urls: List[str],
        source_name: str,
        reliability: SourceReliability = SourceReliability.MEDIUM,
    ):
        self.feed_urls = feed_urls
        self.name = source_name
        self.reliability = reliability

    @staticmethod
    def _query_terms(query: str) -> List[str]:
        terms = query.replace('"', " ").replace("(", " ").replace(")", " ").split()
        return [t.lower() for t in terms if t.upper() not in ("OR", "AND", "NOT")]

    async def fetch_articles(self, query: str) -> List[RawArticle]:
        terms = self._query_terms(query)
        articles: List[RawArticle] = []

        for url in self.feed_urls:
            try:
                feed = await asyncio.to_thread(feedparser.parse, url)

                for entry in feed.entries:
                    title = entry.get("title", "")
                    summary = entry.get("summary", "")
                    if not title:
                        continue
                    text = f"{title} {summary}".lower()
                    if terms and not any(t in text for t in terms):
                        continue

                    published = datetime.now(timezone.utc)
                    parsed = entry.get("published_parsed")
                    if parsed:
                        published = datetime(*parsed[:6], tzinfo=timezone.utc)

                    articles.append(
                        RawArticle(
                            title=title,
                            description=summary,
                            published_at=published,
                            source_name=self.name,
                            url=entry.get("link", ""),
                            source_reliability=self.reliability,
                        )
                    )

            except Exception as e:
                logger.warning(f"[{self.name}] feed {url} failed: {e}")
                continue

        return articles

"""
Ingest articles from NewsAPI
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from compliance_monitor.ingestion.base import RawArticle, SourceAdapter, SourceReliability

logger = logging.getLogger(__name__)


class NewsApiAdapter(SourceAdapter):
    BASE_URL = "https://newsapi.org/v2/everything"

    def __init__(
        self,
        api_key: str,
        name: str = "newsapi",
        reliability: SourceReliability = SourceReliability.HIGH,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        page_size: int = 50,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.name = name
        self.reliability = reliability
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout
        self.page_size = page_size
        self.transport = transport

    def _to_article(self, data: Dict[str, Any]) -> Optional[RawArticle]:
        title = (data.get("title") or "").strip()
        if not title:
            return None
        source = data.get("source") or {}
        try:
            return RawArticle(
                title=title,
                description=data.get("description"),
                body=data.get("content"),
                published_at=data.get("publishedAt") or datetime.now(timezone.utc),
                source_name=source.get("name") or self.name,
                url=data.get("url") or "",
                source_reliability=self.reliability,
            )
        except ValidationError:
            logger.debug(f"Skipping malformed NewsAPI item: {title}")
            return None

    async def fetch_articles(self, query: str) -> List[RawArticle]:
        params = {
            "q": query,
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": self.page_size,
        }
        headers = {"X-Api-Key": self.api_key}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(self.base_url, params=params, headers=headers)
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[{self.name}] fetch failed: {e}")
            return []

        articles = []
        for item in payload.get("articles", []) or []:
            article = self._to_article(item)
            if article is not None:
                articles.append(article)
        return articles

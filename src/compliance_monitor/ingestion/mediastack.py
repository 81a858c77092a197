import logging
from datetime import datetime, timezone
from typing import List, Optional

import httpx
from pydantic import ValidationError

from compliance_monitor.ingestion.base import RawArticle, SourceAdapter, SourceReliability

logger = logging.getLogger(__name__)


class MediastackAdapter(SourceAdapter):
    BASE_URL = "http://api.mediastack.com/v1/news"

    def __init__(
        self,
        api_key: str,
        name: str = "mediastack",
        reliability: SourceReliability = SourceReliability.MEDIUM,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        limit: int = 50,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.name = name
        self.reliability = reliability
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout
        self.limit = limit
        self.transport = transport

    async def fetch_articles(self, query: str) -> List[RawArticle]:
        params = {
            "access_key": self.api_key,
            "keywords": query,
            "languages": "en",
            "sort": "published_desc",
            "limit": self.limit,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(self.base_url, params=params)
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[{self.name}] fetch failed: {e}")
            return []

        # Mediastack reports quota and key problems in-band with a 200.
        if "error" in payload:
            logger.warning(f"[{self.name}] API error: {payload['error']}")
            return []

        articles: List[RawArticle] = []
        for data in payload.get("data", []) or []:
            title = (data.get("title") or "").strip()
            if not title:
                continue
            try:
                articles.append(
                    RawArticle(
                        title=title,
                        description=data.get("description"),
                        published_at=data.get("published_at") or datetime.now(timezone.utc),
                        source_name=data.get("source") or self.name,
                        url=data.get("url") or "",
                        source_reliability=self.reliability,
                    )
                )
            except ValidationError:
                continue

        return articles

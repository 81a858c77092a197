import random
from types import SimpleNamespace
from unittest.mock import patch

import httpx
import pytest

from compliance_monitor.ingestion.base import RawArticle, SourceReliability
from compliance_monitor.ingestion.mediastack import MediastackAdapter
from compliance_monitor.ingestion.newsapi import NewsApiAdapter
from compliance_monitor.ingestion.rss import RSSAdapter
from compliance_monitor.ingestion.simulated import DATASETS, SimulatedSource
from compliance_monitor.ingestion.source_factory import (
    create_adapters_from_config,
    create_source_adapter,
)
from compliance_monitor.processing.synthesizer import synthesize
from compliance_monitor.services.config import Config, SourceConfig

NEWSAPI_PAYLOAD = {
    "status": "ok",
    "totalResults": 2,
    "articles": [
        {
            "source": {"id": None, "name": "Global Trade Magazine"},
            "title": "US Announces New Semiconductor Tariffs on Asian Imports",
            "description": "25% tariff from China and Taiwan effective April 1, 2025",
            "content": "Full text...",
            "publishedAt": "2025-03-08T08:33:50Z",
            "url": "https://www.example.com/news/123",
        },
        {
            "source": {"name": "Removed"},
            "title": "",
            "publishedAt": "2025-03-08T08:33:50Z",
            "url": "https://removed.com",
        },
    ],
}


class TestNewsApiAdapter:
    @pytest.mark.asyncio
    async def test_parses_articles_and_sends_query(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["params"] = dict(request.url.params)
            captured["key"] = request.headers.get("X-Api-Key")
            return httpx.Response(200, json=NEWSAPI_PAYLOAD)

        adapter = NewsApiAdapter("key-123", transport=httpx.MockTransport(handler))
        articles = await adapter.fetch_articles("tariff OR embargo")

        assert captured["params"]["q"] == "tariff OR embargo"
        assert captured["params"]["language"] == "en"
        assert captured["key"] == "key-123"

        assert len(articles) == 1
        article = articles[0]
        assert article.title == "US Announces New Semiconductor Tariffs on Asian Imports"
        assert article.source_name == "Global Trade Magazine"
        assert article.body == "Full text..."
        assert article.source_reliability == SourceReliability.HIGH

    @pytest.mark.asyncio
    async def test_http_error_yields_empty_list(self):
        adapter = NewsApiAdapter(
            "bad-key",
            transport=httpx.MockTransport(lambda request: httpx.Response(401, json={"status": "error"})),
        )
        assert await adapter.fetch_articles("tariff") == []

    @pytest.mark.asyncio
    async def test_invalid_json_yields_empty_list(self):
        adapter = NewsApiAdapter(
            "key",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
        )
        assert await adapter.fetch_articles("tariff") == []


class TestMediastackAdapter:
    @pytest.mark.asyncio
    async def test_parses_data(self):
        payload = {
            "data": [
                {
                    "title": "Steel quota tightened",
                    "description": "Import quota on steel from Japan",
                    "published_at": "2025-03-08T08:33:50+00:00",
                    "source": "Reuters",
                    "url": "https://example.com/steel",
                }
            ]
        }

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["access_key"] == "ms-key"
            assert request.url.params["keywords"] == "quota"
            return httpx.Response(200, json=payload)

        adapter = MediastackAdapter("ms-key", transport=httpx.MockTransport(handler))
        articles = await adapter.fetch_articles("quota")

        assert [a.source_name for a in articles] == ["Reuters"]
        assert articles[0].source_reliability == SourceReliability.MEDIUM

    @pytest.mark.asyncio
    async def test_in_band_error_yields_empty_list(self):
        payload = {"error": {"code": "usage_limit_reached", "message": "quota exceeded"}}
        adapter = MediastackAdapter(
            "ms-key",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
        )
        assert await adapter.fetch_articles("tariff") == []


class TestRSSAdapter:
    @pytest.mark.asyncio
    async def test_filters_entries_by_query_terms(self):
        feed = SimpleNamespace(entries=[
            {
                "title": "EU imposes sanctions on chip exporters",
                "summary": "New measures",
                "link": "https://feed.example.com/1",
                "published_parsed": (2025, 3, 8, 8, 33, 50, 5, 67, 0),
            },
            {
                "title": "Port volumes steady",
                "summary": "Nothing to report",
                "link": "https://feed.example.com/2",
            },
            {"title": "", "summary": "sanctions without a title"},
        ])

        with patch("compliance_monitor.ingestion.rss.feedparser.parse", return_value=feed):
            adapter = RSSAdapter(["https://feed.example.com/rss"], "Trade Feed")
            articles = await adapter.fetch_articles('sanctions OR "export ban"')

        assert len(articles) == 1
        assert articles[0].url == "https://feed.example.com/1"
        assert articles[0].published_at.year == 2025
        assert articles[0].source_name == "Trade Feed"

    @pytest.mark.asyncio
    async def test_broken_feed_is_skipped(self):
        good = SimpleNamespace(entries=[{"title": "Tariff news", "link": "https://ok.example.com"}])

        with patch(
            "compliance_monitor.ingestion.rss.feedparser.parse",
            side_effect=[RuntimeError("bad feed"), good],
        ):
            adapter = RSSAdapter(["https://broken.example.com", "https://ok.example.com/rss"], "Feeds")
            articles = await adapter.fetch_articles("tariff")

        assert [a.title for a in articles] == ["Tariff news"]

    def test_query_terms_drop_operators(self):
        assert RSSAdapter._query_terms('tariff OR "export ban"') == ["tariff", "export", "ban"]


class TestSimulatedSource:
    @pytest.mark.asyncio
    async def test_returns_one_dataset(self):
        source = SimulatedSource(rng=random.Random(7))
        articles = await source.fetch_articles("ignored")

        titles = [a.title for a in articles]
        assert titles in [[item["title"] for item in dataset] for dataset in DATASETS]

    @pytest.mark.parametrize("item", [item for dataset in DATASETS for item in dataset],
                             ids=lambda item: item["url"][-30:])
    def test_every_simulated_article_yields_an_alert(self, item):
        alert = synthesize(RawArticle(**item))

        assert alert is not None
        assert alert.confidence >= 70


class TestSourceFactory:
    def test_creates_configured_adapters(self):
        config = Config(sources=[
            SourceConfig(type="newsapi", api_key="k", reliability="high"),
            SourceConfig(type="rss", name="Feed", feeds=["https://feed.example.com"]),
            SourceConfig(type="mediastack", enabled=False, api_key="k"),
            SourceConfig(type="simulated"),
        ])

        adapters = create_adapters_from_config(config)

        assert [type(a) for a in adapters] == [NewsApiAdapter, RSSAdapter, SimulatedSource]

    def test_misconfigured_sources_are_skipped(self):
        config = Config(sources=[
            SourceConfig(type="newsapi"),
            SourceConfig(type="rss"),
            SourceConfig(type="carrier-pigeon"),
        ])

        assert create_adapters_from_config(config) == []

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            create_source_adapter(SourceConfig(type="telex"))

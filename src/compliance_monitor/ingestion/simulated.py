"""
Built-in article datasets used when no live source yields anything.
"""
import random
from typing import Any, Dict, List, Optional

from compliance_monitor.ingestion.base import RawArticle, SourceAdapter, SourceReliability

DATASETS: List[List[Dict[str, Any]]] = [
    [
        {
            "title": "Oil Set for Weekly Loss Amid U.S. Tariffs, OPEC+ Output Plans",
            "description": "Crude oil prices slipped as a 10% tariff on petroleum imports from Canada "
                           "moves closer, with duties starting next week.",
            "published_at": "2025-03-07T09:08:00Z",
            "source_name": "Yahoo Finance",
            "url": "https://www.wsj.com/finance/commodities-futures/oil-edges-higher-as-traders-assess-divergent-developments-6eed653b",
            "source_reliability": "high",
        },
        {
            "title": "Taiwan Feb exports beat forecasts as chip demand jumps before feared Trump tariffs",
            "description": "Semiconductor exports from Taiwan rose 31.8% ahead of possible US tariffs "
                           "effective April 2, 2025.",
            "published_at": "2025-03-07T09:09:36Z",
            "source_name": "Yahoo Finance",
            "url": "https://finance.yahoo.com/news/taiwan-feb-exports-beat-forecasts-090936765.html",
            "source_reliability": "high",
        },
    ],
    [
        {
            "title": "US Announces New Semiconductor Tariffs on Asian Imports",
            "description": "25% tariff from China and Taiwan effective April 1, 2025",
            "published_at": "2025-03-08T08:33:50.186Z",
            "source_name": "Global Trade Magazine",
            "url": "https://www.example.com/news/123",
            "source_reliability": "high",
        },
        {
            "title": "New Export Restrictions on Auto Parts to Russia",
            "description": "The United States will ban automotive component exports to Russia "
                           "starting March 15, 2025.",
            "published_at": "2025-03-08T08:33:50.186Z",
            "source_name": "US CBP News",
            "url": "https://www.example.com/news/456",
            "source_reliability": "very-high",
        },
        {
            "title": "No room left for negotiation with Canada and Mexico on tariffs, says Trump",
            "description": "A 10% duty on steel imports from Canada and Mexico takes effect next week.",
            "published_at": "2025-03-08T08:33:50.186Z",
            "source_name": "The Guardian International",
            "url": "https://www.example.com/news/789",
            "source_reliability": "medium",
        },
        {
            "title": "Canada-U.S. Oil Trade Resilient Despite Potential Tariffs",
            "description": "Proposed 20% tariffs on crude oil from Canada to U.S. refiners could apply "
                           "starting April 1, 2025.",
            "published_at": "2025-03-08T08:33:50.186Z",
            "source_name": "Global Trade Magazine",
            "url": "https://www.globaltrademag.com/canada-u-s-oil-trade-resilient-despite-potential-tariffs/",
            "source_reliability": "high",
        },
    ],
]


class SimulatedSource(SourceAdapter):
    """
    Returns one of the built-in datasets, chosen at random per call.
    """

    name = "simulated"
    reliability = SourceReliability.HIGH

    def __init__(
        self,
        datasets: Optional[List[List[Dict[str, Any]]]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.datasets = datasets or DATASETS
        self.rng = rng or random.Random()

    async def fetch_articles(self, query: str) -> List[RawArticle]:
        dataset = self.rng.choice(self.datasets)
        return [RawArticle(**item) for item in dataset]

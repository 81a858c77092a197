"""
Base classes for Ingestion
"""
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class SourceReliability(str, Enum):
    """Coarse trust tier of an upstream provider."""
    VERY_HIGH = "very-high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RawArticle(BaseModel):
    """
    Common article shape every source adapter normalizes into.
    """
    title: str
    description: Optional[str] = None
    body: Optional[str] = None
    published_at: datetime
    source_name: str
    url: str
    source_reliability: SourceReliability = SourceReliability.MEDIUM

    @property
    def text(self) -> str:
        """Title, description and body joined for keyword scanning."""
        return " ".join(part for part in (self.title, self.description, self.body) if part)


class SourceAdapter(ABC):
    """
    Base interface for all ingestion sources.
    """

    name: str = "source"
    reliability: SourceReliability = SourceReliability.MEDIUM

    @abstractmethod
    async def fetch_articles(self, query: str) -> List[RawArticle]:
        """
        Fetch articles matching a free-text query.
        Must NEVER raise uncaught exceptions.
        """
        raise NotImplementedError

"""
Pydantic schema for compliance alerts
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from compliance_monitor.core.lexicon import DEFAULT_RESTRICTION, RESTRICTION_TYPES

RestrictionType = Literal[RESTRICTION_TYPES]


class ComplianceAlert(BaseModel):
    """
    Structured trade-restriction record synthesized from one article.
    Serialized with camelCase keys for the downstream consumer.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    alert_id: str = Field(..., pattern=r"^CA-\d+-[0-9a-z]+$")
    summary: str
    product: str
    restriction_type: RestrictionType = DEFAULT_RESTRICTION
    from_countries: List[str] = Field(default_factory=list)
    to_countries: List[str] = Field(default_factory=list)
    tariff_rate: Optional[str] = None
    effective_date: Optional[str] = None
    date_published: datetime
    source: str
    title: str
    link: str
    confidence: int = Field(..., ge=0, le=100)
    processed_at: Optional[datetime] = None

    def to_payload(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class AlertBatch(BaseModel):
    """
    Body posted to the downstream endpoint.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    last_checked: datetime
    alert_count: int
    compliance_alerts: List[ComplianceAlert]

    @classmethod
    def of(cls, alerts: List[ComplianceAlert], last_checked: datetime) -> "AlertBatch":
        return cls(last_checked=last_checked, alert_count=len(alerts), compliance_alerts=list(alerts))

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

"""
Module to contain base class for forwarding channels
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from compliance_monitor.core.entities import ForwardResult
from compliance_monitor.core.schemas import ComplianceAlert


class ForwardingError(Exception):
    """Raised when the downstream consumer cannot be reached or rejects a batch."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ForwardingChannel(ABC):
    """
    Base interface for downstream alert consumers.
    """

    name: str

    @property
    def configured(self) -> bool:
        return True

    @abstractmethod
    async def forward(
        self,
        *,
        alerts: List[ComplianceAlert],
        last_checked: datetime,
    ) -> ForwardResult:
        """
        Submit one batch of alerts.
        Must raise ForwardingError on failure (handled upstream).
        """
        raise NotImplementedError

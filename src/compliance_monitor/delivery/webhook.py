"""
HTTP webhook forwarding channel
"""
import logging
from datetime import datetime
from typing import List, Optional

import httpx

from compliance_monitor.core.entities import ForwardResult
from compliance_monitor.core.schemas import AlertBatch, ComplianceAlert
from compliance_monitor.delivery.base import ForwardingChannel, ForwardingError

logger = logging.getLogger(__name__)


class WebhookForwarder(ForwardingChannel):
    name = "webhook"

    def __init__(
        self,
        endpoint: Optional[str],
        secret: Optional[str] = None,
        secret_header: str = "X-API-Key",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint or None
        self.secret = secret
        self.secret_header = secret_header
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.endpoint)

    def reconfigure(self, endpoint: Optional[str], secret: Optional[str] = None) -> None:
        self.endpoint = endpoint or None
        if secret is not None:
            self.secret = secret
        logger.info(f"Forwarding endpoint set to {self.endpoint or '<none>'}")

    async def forward(
        self,
        *,
        alerts: List[ComplianceAlert],
        last_checked: datetime,
    ) -> ForwardResult:
        if not self.configured:
            return ForwardResult(status="not_configured", message="No forwarding endpoint configured")

        headers = {"Content-Type": "application/json"}
        if self.secret:
            headers[self.secret_header] = self.secret

        payload = AlertBatch.of(alerts, last_checked).to_payload()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(self.endpoint, json=payload, headers=headers)
        # InvalidURL is not an HTTPError subclass.
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ForwardingError(f"Request to {self.endpoint} failed: {e}") from e

        if resp.is_error:
            raise ForwardingError(
                f"Endpoint responded {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        logger.info(f"Forwarded {len(alerts)} alerts to {self.endpoint} ({resp.status_code})")
        return ForwardResult(status="sent", forwarded=len(alerts), status_code=resp.status_code)

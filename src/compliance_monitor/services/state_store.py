"""
Persistence for the processed-id set and the append-only alert log.
Reads degrade to empty state; writes raise StateStoreError.
"""
import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List

import aiofiles
from pydantic import ValidationError

from compliance_monitor.core.schemas import ComplianceAlert

logger = logging.getLogger(__name__)

PROCESSED_IDS_FILE = "processed-alerts.json"
ALERTS_LOG_FILE = "alerts-log.json"


class StateStoreError(Exception):
    """Raised when persisted state cannot be written."""


class StateStore(ABC):
    """
    Storage capability injected into the orchestrator.
    """

    async def initialize(self) -> None:
        """Prepare the backing storage. Optional."""

    @abstractmethod
    async def load_processed_ids(self) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    async def save_processed_ids(self, alert_ids: List[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def append_alert(self, alert: ComplianceAlert) -> None:
        raise NotImplementedError

    @abstractmethod
    async def list_alerts(self) -> List[ComplianceAlert]:
        raise NotImplementedError


class InMemoryStateStore(StateStore):
    def __init__(self) -> None:
        self._processed_ids: List[str] = []
        self._alerts: List[ComplianceAlert] = []

    async def load_processed_ids(self) -> List[str]:
        return list(self._processed_ids)

    async def save_processed_ids(self, alert_ids: List[str]) -> None:
        self._processed_ids = list(alert_ids)

    async def append_alert(self, alert: ComplianceAlert) -> None:
        self._alerts.append(alert)

    async def list_alerts(self) -> List[ComplianceAlert]:
        return list(self._alerts)


def _parse_alerts(records: Any) -> List[ComplianceAlert]:
    alerts = []
    if not isinstance(records, list):
        return alerts
    for record in records:
        try:
            alerts.append(ComplianceAlert.model_validate(record))
        except ValidationError as e:
            logger.warning(f"Skipping unreadable alert record: {e}")
    return alerts


class JsonFileStateStore(StateStore):
    """
    Two whole-document JSON files inside a data directory.
    """

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self.processed_path = self.data_dir / PROCESSED_IDS_FILE
        self.alerts_path = self.data_dir / ALERTS_LOG_FILE
        self._log_lock = asyncio.Lock()

    async def initialize(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StateStoreError(f"Cannot create data directory {self.data_dir}: {e}") from e

    async def _read_json(self, path: Path) -> Any:
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                content = await f.read()
            return json.loads(content)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {path}, treating as empty: {e}")
            return []

    async def _write_json(self, path: Path, data: Any) -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            await self.initialize()
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(data, indent=2))
            os.replace(tmp_path, path)
        except OSError as e:
            raise StateStoreError(f"Failed to write {path}: {e}") from e

    async def load_processed_ids(self) -> List[str]:
        data = await self._read_json(self.processed_path)
        if not isinstance(data, list):
            logger.warning(f"Unexpected content in {self.processed_path}, treating as empty")
            return []
        return [str(alert_id) for alert_id in data]

    async def save_processed_ids(self, alert_ids: List[str]) -> None:
        await self._write_json(self.processed_path, list(alert_ids))

    async def append_alert(self, alert: ComplianceAlert) -> None:
        async with self._log_lock:
            records = await self._read_json(self.alerts_path)
            if not isinstance(records, list):
                records = []
            records.append(alert.to_payload())
            await self._write_json(self.alerts_path, records)

    async def list_alerts(self) -> List[ComplianceAlert]:
        return _parse_alerts(await self._read_json(self.alerts_path))

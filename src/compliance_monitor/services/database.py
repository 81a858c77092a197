import json
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, List

import aiosqlite

from compliance_monitor.core.schemas import ComplianceAlert
from compliance_monitor.services.state_store import StateStore, StateStoreError

logger = logging.getLogger(__name__)


class SqliteStateStore(StateStore):
    """
    StateStore backed by a single SQLite file.
    """

    def __init__(self, path: str):
        self.path = path
        self._initialized = False

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        conn = await aiosqlite.connect(self.path)
        try:
            await conn.execute("PRAGMA journal_mode=WAL;")
            yield conn
        finally:
            await conn.close()

    async def initialize(self) -> None:
        """Initialize database tables for alert tracking."""
        if self._initialized:
            return
        db_dir = os.path.dirname(self.path)
        try:
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
            async with self.connect() as conn:
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS processed_alerts (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        alert_id TEXT NOT NULL UNIQUE
                    )
                """)
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS alert_log (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        alert_id TEXT NOT NULL,
                        payload TEXT NOT NULL,
                        processed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                await conn.execute("""
                    CREATE INDEX IF NOT EXISTS idx_alert_log_alert_id ON alert_log(alert_id)
                """)
                await conn.commit()
        except (OSError, aiosqlite.Error) as e:
            raise StateStoreError(f"Cannot initialize database {self.path}: {e}") from e
        self._initialized = True
        logger.info("Database tables initialized")

    async def load_processed_ids(self) -> List[str]:
        try:
            await self.initialize()
            async with self.connect() as conn:
                cursor = await conn.execute("SELECT alert_id FROM processed_alerts ORDER BY seq")
                rows = await cursor.fetchall()
        except (StateStoreError, aiosqlite.Error) as e:
            logger.warning(f"Could not load processed ids, treating as empty: {e}")
            return []
        return [row[0] for row in rows]

    async def save_processed_ids(self, alert_ids: List[str]) -> None:
        """Insert ids not yet stored; the table only ever grows."""
        await self.initialize()
        try:
            async with self.connect() as conn:
                await conn.executemany(
                    "INSERT OR IGNORE INTO processed_alerts (alert_id) VALUES (?)",
                    [(alert_id,) for alert_id in alert_ids],
                )
                await conn.commit()
        except aiosqlite.Error as e:
            raise StateStoreError(f"Failed to save processed ids: {e}") from e

    async def append_alert(self, alert: ComplianceAlert) -> None:
        await self.initialize()
        try:
            async with self.connect() as conn:
                await conn.execute(
                    "INSERT INTO alert_log (alert_id, payload) VALUES (?, ?)",
                    (alert.alert_id, json.dumps(alert.to_payload())),
                )
                await conn.commit()
        except aiosqlite.Error as e:
            raise StateStoreError(f"Failed to append alert {alert.alert_id}: {e}") from e

    async def list_alerts(self) -> List[ComplianceAlert]:
        try:
            await self.initialize()
            async with self.connect() as conn:
                cursor = await conn.execute("SELECT payload FROM alert_log ORDER BY seq")
                rows = await cursor.fetchall()
        except (StateStoreError, aiosqlite.Error) as e:
            logger.warning(f"Could not read alert log, treating as empty: {e}")
            return []

        alerts = []
        for (payload,) in rows:
            try:
                alerts.append(ComplianceAlert.model_validate_json(payload))
            except ValueError as e:
                logger.warning(f"Skipping unreadable alert record: {e}")
        return alerts

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class RunState(str, Enum):
    """
    Phases of one polling cycle.
    """
    IDLE = "idle"
    FETCHING = "fetching"
    SYNTHESIZING = "synthesizing"
    DEDUPING = "deduping"
    PERSISTING = "persisting"
    FORWARDING = "forwarding"


class DataSource(str, Enum):
    LIVE = "live"
    SIMULATED = "simulated"


@dataclass(frozen=True)
class AlertOutcome:
    """
    Result of handling a single alert (or article) within a run.
    """
    status: str  # success | error
    alert_id: Optional[str] = None
    product: Optional[str] = None
    title: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ForwardResult:
    """
    Outcome of one downstream submission.
    """
    status: str  # sent | not_configured | skipped | error
    forwarded: int = 0
    status_code: Optional[int] = None
    message: Optional[str] = None


@dataclass
class RunResult:
    """
    Summary of a polling cycle, returned to the scheduler or the control surface.
    """
    success: bool
    started_at: datetime
    completed_at: Optional[datetime] = None
    data_source: Optional[str] = None
    fetched: int = 0
    synthesized: int = 0
    duplicates: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    forwarded: int = 0
    forwarding: Optional[ForwardResult] = None
    results: List[AlertOutcome] = field(default_factory=list)
    new_alert_ids: List[str] = field(default_factory=list)
    skipped: bool = False
    error: Optional[str] = None

    @property
    def duration(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat()
        data["completed_at"] = self.completed_at.isoformat() if self.completed_at else None
        data["duration"] = self.duration
        return data

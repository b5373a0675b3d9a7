"""Core data structures shared across modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


UNKNOWN = "unknown"
ALL_PRODUCTS = "all"

SENTIMENTS = ["negative", "neutral", "positive"]
URGENCIES = ["critical", "high", "medium", "low"]


@dataclass
class FeedbackSubmission:
    """Raw intake payload before validation."""

    message: Optional[str] = None
    source: Optional[str] = None
    product: Optional[str] = None


@dataclass(frozen=True)
class ValidatedSubmission:
    """Submission that passed validation, with defaults applied."""

    message: str
    source: str = UNKNOWN
    product: str = UNKNOWN


@dataclass(frozen=True)
class FeedbackRecord:
    """Enriched feedback persisted into SQLite. Write-once."""

    id: str
    message: str
    source: str
    product: str
    summary: str
    created_at: datetime

    def created_at_iso(self) -> str:
        """Return the creation time in ISO-8601 format."""
        return self.created_at.isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "message": self.message,
            "source": self.source,
            "product": self.product,
            "summary": self.summary,
            "created_at": self.created_at_iso(),
        }


@dataclass
class DashboardFeedbackItem:
    """Classified feedback item shown on the dashboard (seed/demo data)."""

    id: str
    source: str
    product: str
    content: str
    sentiment: str = "neutral"
    urgency: str = "medium"
    theme: str = UNKNOWN
    region: str = UNKNOWN
    timestamp: Optional[datetime] = None

    def timestamp_iso(self) -> Optional[str]:
        if self.timestamp is None:
            return None
        return self.timestamp.isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "product": self.product,
            "content": self.content,
            "sentiment": self.sentiment,
            "urgency": self.urgency,
            "theme": self.theme,
            "region": self.region,
            "timestamp": self.timestamp_iso(),
        }


@dataclass
class ChatTurn:
    """One message in a caller-held chat session."""

    role: str
    content: str


class RunStatus(str, Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    ENRICHING = "enriching"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = {RunStatus.COMPLETED, RunStatus.FAILED}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RunHandle:
    """Identifier returned to the caller as soon as a run is accepted."""

    run_id: str


@dataclass
class RunState:
    """Progress of one asynchronous pipeline run."""

    run_id: str
    status: RunStatus = RunStatus.PENDING
    attempts: int = 0
    failed_stage: Optional[str] = None
    reason: Optional[str] = None
    record_id: Optional[str] = None
    submitted_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def finished(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def advance(self, status: RunStatus) -> None:
        self.status = status
        self.updated_at = _utcnow()

    def complete(self, record_id: str) -> None:
        self.record_id = record_id
        self.failed_stage = None
        self.reason = None
        self.advance(RunStatus.COMPLETED)

    def fail(self, stage: str, reason: str) -> None:
        self.failed_stage = stage
        self.reason = reason
        self.advance(RunStatus.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runId": self.run_id,
            "status": self.status.value,
            "attempts": self.attempts,
            "failedStage": self.failed_stage,
            "reason": self.reason,
            "recordId": self.record_id,
            "submittedAt": self.submitted_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

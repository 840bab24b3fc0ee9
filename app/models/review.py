"""
Review Queue Models
Queue lifecycle enums and the verdict request/response shapes
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class QueueStatus(str, Enum):
    pending = "pending"
    resolved = "resolved"


class Verdict(str, Enum):
    """Human reviewer's final judgment on a queued email."""
    allow = "allow"
    block = "block"


class DecisionCode(str, Enum):
    """Machine decision recorded by the inference pipeline."""
    ALLOW = "ALLOW"
    QUARANTINE = "QUARANTINE"
    IT_REVIEW = "IT_REVIEW"


# Machine decision that a human verdict confirms; IT_REVIEW makes no prediction
AGREEING_VERDICT = {
    DecisionCode.ALLOW.value: Verdict.allow.value,
    DecisionCode.QUARANTINE.value: Verdict.block.value,
}


class VerdictRequest(BaseModel):
    """
    Request body for POST /api/hitl/{id}/verdict

    verdict is validated by the resolver, not here, so a bad token fails with
    the resolver's message before any store is touched.
    """
    verdict: Optional[str] = None
    actor: Optional[str] = None
    notes: Optional[str] = None


class LogLocation(BaseModel):
    bucket: str
    key: str


class ResolutionResult(BaseModel):
    """
    Outcome of applying a verdict.

    The queue update is authoritative: once it commits the result reports
    success, and the best-effort log patch and feedback write are reported
    through log_updated / feedback_recorded.
    """
    success: bool = True
    id: str
    status: QueueStatus = QueueStatus.resolved.value
    verdict: Verdict
    actor: str
    notes: str = ""
    resolved_ts: str
    log_updated: bool = Field(default=False, alias="s3Updated")
    log_location: Optional[LogLocation] = Field(default=None, alias="s3Location")
    feedback_recorded: bool = Field(default=False, alias="feedbackRecorded")
    partial_failures: List[str] = Field(default_factory=list, alias="partialFailures")

    class Config:
        populate_by_name = True
        use_enum_values = True


class QueueStats(BaseModel):
    """Review queue health as shown on the reviewer dashboard."""
    pending: int = 0
    reviewed_today: int = Field(default=0, alias="reviewedToday")
    accuracy: float = 0.0
    avg_time_seconds: float = Field(default=0.0, alias="avgTimeSeconds")
    resolved: int = 0
    scored: int = 0

    class Config:
        populate_by_name = True

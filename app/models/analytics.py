"""
Decision Log Analytics Models
Rolled-up metrics and flattened history rows built from decision log partitions
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class TrendPoint(BaseModel):
    date: str  # YYYY-MM-DD, UTC partition day
    count: int = 0


class MetricsSummary(BaseModel):
    """
    Counts, distributions and averages over a lookback window.

    trend carries one entry per day of the window, oldest first, including
    days whose partition held no records.
    """
    window_days: int = Field(alias="windowDays")
    total: int = 0
    allow: int = 0
    quarantined: int = 0
    it_review: int = 0
    errors: int = 0
    disagreements: int = 0
    phi_detected: int = Field(default=0, alias="phiDetected")
    avg_elapsed: float = Field(default=0.0, alias="avgElapsed")
    classification_dist: Dict[str, int] = Field(default_factory=dict, alias="classificationDist")
    trend: List[TrendPoint] = Field(default_factory=list)
    skipped: int = 0

    class Config:
        populate_by_name = True


class HistoryRow(BaseModel):
    """One decision record flattened for the activity log table."""
    id: str
    timestamp: str
    sender: str
    recipient: str
    subject: str
    classification: str
    confidence: Optional[float] = None
    ai_decision: str = Field(alias="aiDecision")
    it_decision: str = Field(alias="itDecision")
    latency: str
    decision_code: Optional[str] = Field(default=None, alias="decisionCode")
    hitl_status: str = "none"
    hitl_verdict: Optional[str] = None
    risk: float = 0
    phi_entities: float = 0
    log_bucket: str = Field(alias="s3_bucket")
    log_key: str = Field(alias="s3_key")
    body_preview: Optional[str] = None
    reasoning: Optional[str] = None

    class Config:
        populate_by_name = True


class HistoryResult(BaseModel):
    history: List[HistoryRow] = Field(default_factory=list)
    skipped: int = 0

    @property
    def count(self) -> int:
        return len(self.history)

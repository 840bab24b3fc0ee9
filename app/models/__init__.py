"""
API and Record Models
"""

from app.models.review import (
    AGREEING_VERDICT,
    DecisionCode,
    LogLocation,
    QueueStats,
    QueueStatus,
    ResolutionResult,
    Verdict,
    VerdictRequest,
)
from app.models.analytics import HistoryResult, HistoryRow, MetricsSummary, TrendPoint
from app.models.feedback import FeedbackEntry, sender_domain
from app.models.inference import AnalyzeFullRequest, AnalyzeRequest

__all__ = [
    "AGREEING_VERDICT",
    "DecisionCode",
    "LogLocation",
    "QueueStats",
    "QueueStatus",
    "ResolutionResult",
    "Verdict",
    "VerdictRequest",
    "HistoryResult",
    "HistoryRow",
    "MetricsSummary",
    "TrendPoint",
    "FeedbackEntry",
    "sender_domain",
    "AnalyzeFullRequest",
    "AnalyzeRequest",
]

"""
Review Queue Statistics
Single-pass scan of the whole review queue for the reviewer dashboard
"""

import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import structlog

from app.models.review import AGREEING_VERDICT, QueueStats, QueueStatus
from app.services.storage.review_queue import ReviewQueueStore
from app.services.timestamps import parse_timestamp, utc_now

logger = structlog.get_logger(__name__)


def machine_decision(item: Dict[str, Any]) -> Optional[str]:
    decision = item.get("decision") or item.get("ai_decision")
    if isinstance(decision, str):
        return decision.strip().upper()
    return None


class QueueStatsService:
    """
    pending, reviewedToday, accuracy and avgTimeSeconds in one pass.

    Accuracy only scores resolved items whose machine decision was a
    prediction (ALLOW or QUARANTINE); IT_REVIEW and unknown decisions are
    left out of both numerator and denominator.
    """

    def __init__(self, queue_store: ReviewQueueStore, clock: Callable[[], datetime] = utc_now):
        self.queue_store = queue_store
        self.clock = clock

    def compute(self, cancel_event: Optional[threading.Event] = None) -> QueueStats:
        today = self.clock().date()

        pending = 0
        resolved = 0
        reviewed_today = 0
        scored = 0
        agreed = 0
        duration_sum = 0.0
        duration_count = 0

        for page in self.queue_store.iter_pages(cancel_event=cancel_event):
            for item in page.items:
                status = item.get("status")
                if status == QueueStatus.pending.value:
                    pending += 1
                    continue
                if status != QueueStatus.resolved.value:
                    continue

                resolved += 1
                resolved_at = parse_timestamp(item.get("resolved_ts"))
                created_at = parse_timestamp(item.get("created_ts"))

                if resolved_at is not None and resolved_at.date() == today:
                    reviewed_today += 1

                expected = AGREEING_VERDICT.get(machine_decision(item) or "")
                if expected is not None:
                    scored += 1
                    if item.get("verdict") == expected:
                        agreed += 1

                if resolved_at is not None and created_at is not None:
                    seconds = (resolved_at - created_at).total_seconds()
                    if seconds > 0:
                        duration_sum += seconds
                        duration_count += 1

        stats = QueueStats(
            pending=pending,
            reviewed_today=reviewed_today,
            accuracy=agreed / scored if resolved and scored else 0.0,
            avg_time_seconds=duration_sum / duration_count if resolved and duration_count else 0.0,
            resolved=resolved,
            scored=scored,
        )
        logger.info(
            "queue_stats_computed",
            pending=stats.pending,
            resolved=resolved,
            scored=scored,
            accuracy=stats.accuracy,
        )
        return stats

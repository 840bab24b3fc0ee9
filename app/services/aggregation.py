"""
Decision Log Aggregation Engine

Scans UTC day partitions of the decision log and produces either rolled-up
metrics or a flattened history list.

Partitions are walked one after another; each listing page's objects are
fetched concurrently and consumed in listing order. A bad or unreachable
object is skipped and counted. A failed listing fails the whole request.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import structlog

from app.config import settings
from app.exceptions import TriageError, ValidationError
from app.models.analytics import HistoryResult, HistoryRow, MetricsSummary, TrendPoint
from app.models.review import AGREEING_VERDICT, DecisionCode, Verdict
from app.services.field_extractor import ExtractedFields, extract_fields
from app.services.storage.decision_log import DecisionLogStore, ObjectRef
from app.services.timestamps import end_of_day, isoformat_z, parse_timestamp, start_of_day, utc_now

logger = structlog.get_logger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def parse_date_range(date_from: Optional[str], date_to: Optional[str]) -> Tuple[date, date]:
    """
    Validate an inclusive YYYY-MM-DD range.

    Raises:
        ValidationError: Missing bound, unparseable date, or to before from
    """
    if not date_from or not date_to:
        raise ValidationError("from and to (YYYY-MM-DD) are required query parameters")

    try:
        start = datetime.strptime(date_from, DATE_FORMAT).date()
        end = datetime.strptime(date_to, DATE_FORMAT).date()
    except ValueError:
        raise ValidationError("Invalid date range")

    if end < start:
        raise ValidationError("Invalid date range")

    return start, end


def is_disagreement(fields: ExtractedFields) -> bool:
    """Human verdict contradicts a scoreable machine decision."""
    expected = AGREEING_VERDICT.get(fields.decision or "")
    if expected is None or fields.hitl_verdict not in (Verdict.allow.value, Verdict.block.value):
        return False
    return fields.hitl_verdict != expected


class AggregationEngine:
    """Metrics and history views over the decision log."""

    def __init__(
        self,
        log_store: DecisionLogStore,
        bucket: Optional[str] = None,
        prefix: Optional[str] = None,
        max_workers: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.log_store = log_store
        self.bucket = bucket or settings.decision_log_bucket
        self.prefix = (prefix or settings.decision_log_prefix).strip("/")
        self.max_workers = max_workers or settings.aggregation_max_workers
        self.clock = clock

    def partition_prefix(self, day: date) -> str:
        return f"{self.prefix}/{day.year}/{day.month:02d}/{day.day:02d}/"

    def _fetch(self, ref: ObjectRef) -> Optional[Dict[str, Any]]:
        try:
            return self.log_store.read_json(ref.bucket, ref.key)
        except TriageError as e:
            logger.warning("aggregation_object_skipped", key=ref.key, error=e.message, error_type=type(e).__name__)
        except Exception as e:
            logger.error("aggregation_object_crashed", key=ref.key, error=str(e), exc_info=True)
        return None

    def scan_partitions(
        self,
        days: List[date],
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[Tuple[date, ObjectRef, Optional[Dict[str, Any]]]]:
        """
        Yield (day, ref, record) for every .json object in the given partitions.

        record is None when the object could not be fetched or decoded.

        Raises:
            StoreUnavailableError: A partition listing failed
            ScanCancelledError: cancel_event was set between pages
        """
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for day in days:
                prefix = self.partition_prefix(day)
                objects = 0
                for page in self.log_store.iter_pages(self.bucket, prefix, cancel_event):
                    refs = [ref for ref in page.items if ref.key.endswith(".json")]
                    for ref, doc in zip(refs, executor.map(self._fetch, refs)):
                        objects += 1
                        yield day, ref, doc
                logger.debug("partition_scanned", prefix=prefix, objects=objects)

    def metrics(
        self,
        window_days: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> MetricsSummary:
        """
        Roll up the last window_days UTC days, today included.

        Raises:
            ValidationError: window_days outside 1..max_window_days
        """
        if window_days is None:
            window_days = settings.default_window_days
        if window_days < 1 or window_days > settings.max_window_days:
            raise ValidationError(f"windowDays must be between 1 and {settings.max_window_days}")

        today = self.clock().date()
        days = [today - timedelta(days=offset) for offset in range(window_days - 1, -1, -1)]

        summary = MetricsSummary(
            window_days=window_days,
            trend=[TrendPoint(date=day.isoformat()) for day in days],
        )
        trend_by_day = {point.date: point for point in summary.trend}
        elapsed_sum = 0.0

        for day, ref, doc in self.scan_partitions(days, cancel_event):
            if doc is None:
                summary.skipped += 1
                continue

            fields = extract_fields(doc)
            summary.total += 1
            trend_by_day[day.isoformat()].count += 1

            if fields.elapsed_ms is not None:
                elapsed_sum += fields.elapsed_ms

            if fields.decision == DecisionCode.ALLOW.value:
                summary.allow += 1
            elif fields.decision == DecisionCode.IT_REVIEW.value:
                summary.it_review += 1
            elif fields.decision == DecisionCode.QUARANTINE.value:
                summary.quarantined += 1

            if fields.phi_entities and fields.phi_entities > 0:
                summary.phi_detected += 1

            label = fields.classification or "unknown"
            summary.classification_dist[label] = summary.classification_dist.get(label, 0) + 1

            status_code = doc.get("statusCode")
            if status_code and status_code != 200:
                summary.errors += 1

            if is_disagreement(fields):
                summary.disagreements += 1

        summary.avg_elapsed = elapsed_sum / summary.total if summary.total else 0.0

        logger.info(
            "metrics_aggregated",
            window_days=window_days,
            total=summary.total,
            skipped=summary.skipped,
        )
        return summary

    def history(
        self,
        date_from: Optional[str],
        date_to: Optional[str],
        cancel_event: Optional[threading.Event] = None,
    ) -> HistoryResult:
        """
        Flattened rows for records timestamped within [from 00:00, to 23:59:59.999999] UTC.

        Rows come back in partition/listing order, not sorted by timestamp.

        Raises:
            ValidationError: Missing, unparseable or reversed range (no store call made)
        """
        start_day, end_day = parse_date_range(date_from, date_to)
        start = start_of_day(start_day)
        end = end_of_day(end_day)

        days = []
        day = start_day
        while day <= end_day:
            days.append(day)
            day += timedelta(days=1)

        result = HistoryResult()
        for _, ref, doc in self.scan_partitions(days, cancel_event):
            if doc is None:
                result.skipped += 1
                continue

            row = self.history_row(ref, doc, start, end)
            if row is not None:
                result.history.append(row)

        logger.info(
            "history_aggregated",
            date_from=date_from,
            date_to=date_to,
            count=result.count,
            skipped=result.skipped,
        )
        return result

    def history_row(
        self,
        ref: ObjectRef,
        doc: Dict[str, Any],
        start: datetime,
        end: datetime,
    ) -> Optional[HistoryRow]:
        """Map one record to a display row, or None when it falls outside [start, end]."""
        fields = extract_fields(doc)

        if fields.timestamp:
            ts = parse_timestamp(fields.timestamp)
        else:
            ts = parse_timestamp(ref.updated)
        if ts is None or ts < start or ts > end:
            return None

        return HistoryRow(
            id=fields.message_id or ref.key,
            timestamp=isoformat_z(ts),
            sender=fields.sender or "unknown",
            recipient=fields.recipient or "unknown",
            subject=fields.subject or "(no subject)",
            classification=fields.classification or "unknown",
            confidence=fields.confidence,
            ai_decision=fields.ai_decision,
            it_decision=fields.it_decision,
            latency=fields.latency,
            decision_code=fields.decision,
            hitl_status=fields.hitl_status or "none",
            hitl_verdict=fields.hitl_verdict,
            risk=fields.risk or 0,
            phi_entities=fields.phi_entities or 0,
            log_bucket=ref.bucket,
            log_key=ref.key,
            body_preview=fields.body_preview,
            reasoning=fields.reasoning,
        )

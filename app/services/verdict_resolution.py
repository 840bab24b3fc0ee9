"""
Verdict Resolution Service
Applies a human verdict across the review queue, decision log and feedback stores
"""

from typing import Any, Callable, Dict, Optional
from datetime import datetime

import structlog

from app.exceptions import NotFoundError, PartialWriteError, ValidationError
from app.models.feedback import FeedbackEntry
from app.models.review import LogLocation, QueueStatus, ResolutionResult, Verdict
from app.services.monitoring.error_tracking import add_breadcrumb, set_review_context
from app.services.monitoring.logging import get_correlation_id
from app.services.storage.decision_log import DecisionLogStore
from app.services.storage.feedback import FeedbackStore
from app.services.storage.review_queue import ReviewQueueStore
from app.services.timestamps import isoformat_z, utc_now

logger = structlog.get_logger(__name__)

ALLOWED_VERDICTS = tuple(v.value for v in Verdict)


class VerdictResolutionService:
    """
    Saga with one committing step and two best-effort steps.

    Write flow:
    1. Read the queue item (not found fails before any write)
    2. Mark it resolved in the review queue (authoritative commit)
    3. Patch hitl/queue sub-objects of the decision log record (best effort)
    4. Append a feedback entry for the sender domain (best effort)

    Steps 3 and 4 never roll back step 2. Their failures are reported on the
    result so a downstream outage cannot leave an item stuck pending.
    """

    def __init__(
        self,
        queue_store: ReviewQueueStore,
        log_store: DecisionLogStore,
        feedback_store: FeedbackStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.queue_store = queue_store
        self.log_store = log_store
        self.feedback_store = feedback_store
        self.clock = clock

    def resolve(
        self,
        queue_id: str,
        verdict: Optional[str],
        actor: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ResolutionResult:
        """
        Apply a verdict to a queue item.

        Args:
            queue_id: Review queue item ID
            verdict: "allow" or "block"
            actor: Reviewer identity, "unknown" when missing
            notes: Free-form reviewer notes

        Returns:
            ResolutionResult; log_updated / feedback_recorded report the best-effort steps

        Raises:
            ValidationError: verdict is not allow/block (no store touched)
            NotFoundError: queue item does not exist (no write performed)
            StoreUnavailableError: reading or resolving the queue item failed
        """
        if verdict not in ALLOWED_VERDICTS:
            raise ValidationError('verdict must be "allow" or "block"')

        actor_name = actor or "unknown"
        notes_text = notes or ""
        ts = isoformat_z(self.clock())

        log = logger.bind(
            operation="resolve_verdict",
            queue_id=queue_id,
            verdict=verdict,
            actor=actor_name,
        )
        set_review_context(queue_id, actor_name, get_correlation_id())

        log.info("saga_start", saga_step="read_queue_item")
        item = self.queue_store.get(queue_id)
        if item is None:
            log.info("saga_aborted", reason="queue_item_not_found")
            raise NotFoundError("Queue item not found")

        if item.get("status") == QueueStatus.resolved.value:
            # Re-resolution overwrites; see DESIGN.md open questions
            log.warning(
                "queue_item_already_resolved",
                previous_verdict=item.get("verdict"),
                previous_actor=item.get("actor"),
            )

        log.info("saga_step", saga_step="resolve_queue_item")
        self.queue_store.update(queue_id, {
            "status": QueueStatus.resolved.value,
            "verdict": verdict,
            "actor": actor_name,
            "notes": notes_text,
            "resolved_ts": ts,
        })
        log.info("saga_step", saga_step="queue_item_resolved")

        result = ResolutionResult(
            id=queue_id,
            verdict=verdict,
            actor=actor_name,
            notes=notes_text,
            resolved_ts=ts,
        )

        hitl = {
            "status": QueueStatus.resolved.value,
            "actor": actor_name,
            "verdict": verdict,
            "notes": notes_text,
            "ts": ts,
        }

        bucket = item.get("log_bucket")
        key = item.get("log_key")
        if bucket and key:
            try:
                self.patch_log_record(bucket, key, hitl, ts)
                result.log_updated = True
                result.log_location = LogLocation(bucket=bucket, key=key)
                log.info("saga_step", saga_step="log_patched", log_bucket=bucket, log_key=key)
            except PartialWriteError as e:
                result.partial_failures.append(e.message)
                log.error("saga_step", saga_step="log_patch_failed", error=e.message, log_bucket=bucket, log_key=key)
                add_breadcrumb("saga", "log_patch_failed", level="error", data={"queue_id": queue_id})
        else:
            log.info("saga_step", saga_step="log_patch_skipped", reason="no_log_reference")

        try:
            entry = self.record_feedback(item, verdict, actor_name, ts)
            result.feedback_recorded = True
            log.info("saga_step", saga_step="feedback_recorded", pk=entry.pk, sk=entry.sk)
        except PartialWriteError as e:
            result.partial_failures.append(e.message)
            log.error("saga_step", saga_step="feedback_failed", error=e.message)
            add_breadcrumb("saga", "feedback_failed", level="error", data={"queue_id": queue_id})

        log.info(
            "saga_complete",
            log_updated=result.log_updated,
            feedback_recorded=result.feedback_recorded,
        )
        return result

    def patch_log_record(self, bucket: str, key: str, hitl: Dict[str, Any], ts: str) -> None:
        """
        Full read-modify-write of the decision record.

        Only the hitl and queue sub-objects change; the decision agent's hitl
        copy is rewritten only when the record already carried one.

        Raises:
            PartialWriteError: The record could not be read, decoded or rewritten
        """
        try:
            doc = self.log_store.read_json(bucket, key)
        except Exception as e:
            raise PartialWriteError(f"log_patch: {e}") from e

        doc["hitl"] = dict(hitl)

        agent = doc.get("decision_agent")
        if isinstance(agent, dict) and agent.get("hitl") is not None:
            agent["hitl"] = dict(hitl)

        queue = doc.get("queue")
        if not isinstance(queue, dict):
            queue = {}
        queue["status"] = QueueStatus.resolved.value
        queue["resolved_ts"] = ts
        doc["queue"] = queue

        try:
            self.log_store.write_json(bucket, key, doc)
        except Exception as e:
            raise PartialWriteError(f"log_patch: {e}") from e

    def record_feedback(self, item: Dict[str, Any], verdict: str, actor: str, ts: str) -> FeedbackEntry:
        """
        Raises:
            PartialWriteError: The feedback entry could not be appended
        """
        try:
            entry = FeedbackEntry.from_queue_item(item, verdict, actor, ts)
            self.feedback_store.put(entry.pk, entry.sk, entry.fields())
        except Exception as e:
            raise PartialWriteError(f"feedback: {e}") from e
        return entry

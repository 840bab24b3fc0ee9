"""
Queue Enrichment Service
Joins pending review queue items with their decision log record for display
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import structlog

from app.config import settings
from app.exceptions import TriageError
from app.models.review import QueueStatus
from app.services.field_extractor import extract_fields
from app.services.storage.decision_log import DecisionLogStore
from app.services.storage.review_queue import ReviewQueueStore

logger = structlog.get_logger(__name__)


class QueueEnrichmentService:
    """
    Lists pending queue items with display fields resolved from the log.

    Log fetches fan out over a thread pool and are joined in scan order.
    An item without a log reference, or whose fetch fails, is returned as
    stored: enrichment never fails the listing.
    """

    def __init__(
        self,
        queue_store: ReviewQueueStore,
        log_store: DecisionLogStore,
        max_workers: Optional[int] = None,
        page_limit: Optional[int] = None,
    ):
        self.queue_store = queue_store
        self.log_store = log_store
        self.max_workers = max_workers or settings.enrichment_max_workers
        self.page_limit = page_limit or settings.pending_page_limit

    def list_pending(self) -> List[Dict[str, Any]]:
        """
        One bounded page of pending items, each enriched where possible.

        Raises:
            StoreUnavailableError: The queue scan itself failed
        """
        page = self.queue_store.scan_page(
            {"status": QueueStatus.pending.value},
            limit=self.page_limit,
        )
        items = page.items
        if not items:
            logger.info("pending_listed", count=0)
            return []

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(items))) as executor:
            enriched = list(executor.map(self.enrich_item, items))

        logger.info(
            "pending_listed",
            count=len(enriched),
            enriched=sum(1 for item in enriched if item["enriched"]),
            more_available=page.next_token is not None,
        )
        return enriched

    def enrich_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Merge resolved display fields under the item's own fields."""
        bucket = item.get("log_bucket")
        key = item.get("log_key")
        if not bucket or not key:
            return {**item, "enriched": False}

        log = logger.bind(queue_id=item.get("id"), log_bucket=bucket, log_key=key)
        try:
            doc = self.log_store.read_json(bucket, key)
        except TriageError as e:
            log.warning("enrichment_fetch_failed", error=e.message, error_type=type(e).__name__)
            return {**item, "enriched": False}
        except Exception as e:
            log.error("enrichment_fetch_crashed", error=str(e), exc_info=True)
            return {**item, "enriched": False}

        fields = extract_fields(doc).to_display()
        return {**fields, **item, "enriched": True}

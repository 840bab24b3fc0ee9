"""
Review Queue Store

MongoDB collection holding one mutable document per email awaiting or having
received human review. The queue id is the document _id.
"""

import threading
from typing import Any, Dict, Iterator, List, Optional

import structlog
from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from app.config import settings
from app.exceptions import NotFoundError, StoreUnavailableError
from app.services.monitoring.circuit_breakers import CircuitBreakerError, get_mongodb_breaker
from app.services.pagination import Page, iterate_pages

logger = structlog.get_logger(__name__)

SCAN_BATCH_SIZE = 500


def _to_item(doc: Dict[str, Any]) -> Dict[str, Any]:
    item = dict(doc)
    item["id"] = item.pop("_id")
    return item


def _to_doc(item: Dict[str, Any]) -> Dict[str, Any]:
    doc = dict(item)
    doc["_id"] = doc.pop("id")
    return doc


class ReviewQueueStore:
    """get / put / update / paginated scan over the HITL queue collection."""

    def __init__(self, collection: Optional[Collection] = None):
        self._collection = collection

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            from app.services.mongodb_client import mongodb_service
            self._collection = mongodb_service.collection(settings.hitl_collection)
        return self._collection

    def _call(self, operation: str, func, *args, **kwargs):
        try:
            return get_mongodb_breaker().call(func, *args, **kwargs)
        except CircuitBreakerError as e:
            logger.warning("mongodb_circuit_open", operation=operation)
            raise StoreUnavailableError(f"Review queue unavailable (circuit open): {e}") from e
        except PyMongoError as e:
            logger.error("review_queue_call_failed", operation=operation, error=str(e))
            raise StoreUnavailableError(f"Review queue {operation} failed: {e}") from e

    def get(self, queue_id: str) -> Optional[Dict[str, Any]]:
        doc = self._call("get", self.collection.find_one, {"_id": queue_id})
        return _to_item(doc) if doc else None

    def put(self, item: Dict[str, Any]) -> None:
        """Insert or replace a queue item (item must carry its id)."""
        doc = _to_doc(item)
        self._call("put", self.collection.replace_one, {"_id": doc["_id"]}, doc, upsert=True)

    def update(self, queue_id: str, fields: Dict[str, Any]) -> None:
        """
        Set fields on an existing queue item.

        Raises:
            NotFoundError: No item with this id
        """
        result = self._call("update", self.collection.update_one, {"_id": queue_id}, {"$set": fields})
        if result.matched_count == 0:
            raise NotFoundError(f"Queue item not found: {queue_id}")

    def scan_page(
        self,
        filter: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        start_key: Optional[Any] = None,
    ) -> Page[Dict[str, Any]]:
        """
        Fetch one page in primary-key order.

        Args:
            filter: Field equality filter, e.g. {"status": "pending"}
            limit: Page size; None returns everything matching in one page
            start_key: Last key of the previous page

        Returns:
            Page whose next_token is the last key when the page was full
        """
        query = dict(filter or {})
        if start_key is not None:
            query["_id"] = {"$gt": start_key}

        def _fetch() -> List[Dict[str, Any]]:
            cursor = self.collection.find(query).sort("_id", ASCENDING)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)

        docs = self._call("scan", _fetch)
        next_token = docs[-1]["_id"] if limit and len(docs) == limit else None
        return Page(items=[_to_item(doc) for doc in docs], next_token=next_token)

    def iter_pages(
        self,
        filter: Optional[Dict[str, Any]] = None,
        page_size: int = SCAN_BATCH_SIZE,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[Page[Dict[str, Any]]]:
        """Lazily walk the whole collection (or the filtered part of it)."""
        return iterate_pages(
            lambda token: self.scan_page(filter, page_size, token),
            cancel_event=cancel_event,
        )

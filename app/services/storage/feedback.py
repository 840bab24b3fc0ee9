"""
Feedback Store

Append-only MongoDB collection of learning signals derived from resolved
verdicts. Written here, read by the external learning component.
"""

from typing import Any, Dict, Optional

import structlog
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from app.config import settings
from app.exceptions import StoreUnavailableError
from app.services.monitoring.circuit_breakers import CircuitBreakerError, get_mongodb_breaker

logger = structlog.get_logger(__name__)


class FeedbackStore:

    def __init__(self, collection: Optional[Collection] = None):
        self._collection = collection

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            from app.services.mongodb_client import mongodb_service
            self._collection = mongodb_service.collection(settings.feedback_collection)
        return self._collection

    def put(self, pk: str, sk: str, fields: Dict[str, Any]) -> None:
        """
        Append one entry under (pk, sk).

        Raises:
            StoreUnavailableError: Write failed, including a duplicate key
        """
        doc = {"_id": f"{pk}|{sk}", "pk": pk, "sk": sk, **fields}
        try:
            get_mongodb_breaker().call(self.collection.insert_one, doc)
        except CircuitBreakerError as e:
            raise StoreUnavailableError(f"Feedback store unavailable (circuit open): {e}") from e
        except PyMongoError as e:
            logger.error("feedback_put_failed", pk=pk, sk=sk, error=str(e))
            raise StoreUnavailableError(f"Feedback write failed: {e}") from e

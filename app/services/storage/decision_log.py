"""
Decision Log Store

Google Cloud Storage access for the append-only decision log: one JSON
record per processed email under <prefix>/<year>/<month>/<day>/<file>.json.
"""

import json
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

import structlog
from google.api_core.exceptions import NotFound
from google.cloud import storage

from app.config import settings
from app.exceptions import NotFoundError, ObjectCorruptError, StoreUnavailableError
from app.services.monitoring.circuit_breakers import CircuitBreakerError, get_gcs_breaker
from app.services.pagination import Page, iterate_pages


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ObjectRef:
    """A listed decision log object."""

    bucket: str
    key: str
    updated: Optional[datetime] = None


class DecisionLogStore:
    """
    Read, rewrite and list decision log objects.

    Every call carries an explicit timeout and runs through the GCS circuit
    breaker. A missing object raises NotFoundError, an undecodable one
    ObjectCorruptError, anything else StoreUnavailableError.
    """

    def __init__(
        self,
        client: Optional[storage.Client] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            client: GCS client. Lazily created when omitted.
            timeout: Per-call timeout in seconds. Defaults to settings.store_timeout_seconds.
        """
        self._client = client
        self.timeout = timeout or settings.store_timeout_seconds

    @property
    def client(self) -> storage.Client:
        """Lazy-initialize GCS client."""
        if self._client is None:
            self._client = storage.Client()
        return self._client

    def _call(self, operation: str, func, *args, **kwargs):
        try:
            return get_gcs_breaker().call(func, *args, **kwargs)
        except NotFound:
            raise
        except CircuitBreakerError as e:
            logger.warning("gcs_circuit_open", operation=operation)
            raise StoreUnavailableError(f"Object storage unavailable (circuit open): {e}") from e
        except Exception as e:
            logger.error("gcs_call_failed", operation=operation, error=str(e))
            raise StoreUnavailableError(f"Object storage {operation} failed: {e}") from e

    def read_bytes(self, bucket: str, key: str) -> bytes:
        blob = self.client.bucket(bucket).blob(key)
        try:
            return self._call("read", blob.download_as_bytes, timeout=self.timeout)
        except NotFound as e:
            raise NotFoundError(f"Log object not found: gs://{bucket}/{key}") from e

    def read_json(self, bucket: str, key: str) -> Dict[str, Any]:
        """
        Fetch and decode one decision record.

        Raises:
            NotFoundError: Object does not exist
            ObjectCorruptError: Body is not a UTF-8 JSON object
            StoreUnavailableError: Storage call failed or timed out
        """
        raw = self.read_bytes(bucket, key)
        try:
            doc = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise ObjectCorruptError(f"Unparseable log object gs://{bucket}/{key}: {e}") from e

        if not isinstance(doc, dict):
            raise ObjectCorruptError(
                f"Log object gs://{bucket}/{key} is {type(doc).__name__}, expected object"
            )
        return doc

    def write_json(self, bucket: str, key: str, doc: Dict[str, Any]) -> None:
        """Overwrite one decision record with the full document."""
        blob = self.client.bucket(bucket).blob(key)
        self._call(
            "write",
            blob.upload_from_string,
            json.dumps(doc),
            content_type="application/json",
            timeout=self.timeout,
        )
        logger.debug("log_object_written", bucket=bucket, key=key)

    def list_page(self, bucket: str, prefix: str, page_token: Optional[str] = None) -> Page[ObjectRef]:
        """
        List one page of objects under a prefix.

        Raises:
            StoreUnavailableError: Listing failed (request-fatal for callers)
        """
        def _fetch():
            iterator = self.client.list_blobs(
                bucket,
                prefix=prefix,
                page_token=page_token,
                timeout=self.timeout,
            )
            page = next(iterator.pages, None)
            items = [] if page is None else [
                ObjectRef(bucket=bucket, key=blob.name, updated=blob.updated)
                for blob in page
            ]
            return Page(items=items, next_token=iterator.next_page_token)

        try:
            return self._call("list", _fetch)
        except NotFound as e:
            raise StoreUnavailableError(f"Bucket not found: {bucket}") from e

    def iter_pages(
        self,
        bucket: str,
        prefix: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[Page[ObjectRef]]:
        """Lazily walk every listing page under a prefix."""
        return iterate_pages(
            lambda token: self.list_page(bucket, prefix, token),
            cancel_event=cancel_event,
        )

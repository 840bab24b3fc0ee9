"""
Decision Log Detail Lookup
"""

from typing import Any, Dict, Optional

import structlog

from app.config import settings
from app.exceptions import ValidationError
from app.services.field_extractor import extract_fields
from app.services.storage.decision_log import DecisionLogStore

logger = structlog.get_logger(__name__)


class LogDetailService:

    def __init__(self, log_store: DecisionLogStore, default_bucket: Optional[str] = None):
        self.log_store = log_store
        self.default_bucket = default_bucket or settings.decision_log_bucket

    def get_detail(self, bucket: Optional[str], key: Optional[str]) -> Dict[str, Any]:
        """
        Raw record plus its resolved display fields.

        Raises:
            ValidationError: key missing
            NotFoundError: object does not exist
            ObjectCorruptError: object is not a JSON record
        """
        if not key:
            raise ValidationError("key is a required query parameter")
        bucket = bucket or self.default_bucket

        record = self.log_store.read_json(bucket, key)
        logger.info("log_detail_fetched", bucket=bucket, key=key)
        return {
            "bucket": bucket,
            "key": key,
            "fields": extract_fields(record).to_display(),
            "record": record,
        }

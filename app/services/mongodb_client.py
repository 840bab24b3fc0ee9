"""
MongoDB Client Service
Process-wide connection handle for the review queue and feedback collections
"""

from typing import Optional

import structlog
from pymongo import MongoClient
from pymongo.collection import Collection

from app.exceptions import StoreUnavailableError

logger = structlog.get_logger()


class MongoDBService:
    """
    Lazily connects to MongoDB and hands out collections.

    The client is a stateless connection pool shared across requests.
    """

    def __init__(self, client: Optional[MongoClient] = None):
        self.client = client
        self.db = None
        self.mongodb_url = None
        self.mongodb_database = None
        self._initialized = False

    def _lazy_init(self):
        """Lazy initialization to ensure settings are loaded"""
        if self._initialized:
            return

        self._initialized = True

        # Import settings here to avoid circular imports
        from app.config import settings

        self.mongodb_url = settings.mongodb_url
        self.mongodb_database = settings.mongodb_database
        timeout_ms = int(settings.store_timeout_seconds * 1000)

        if self.client is None:
            if not self.mongodb_url:
                logger.warning("mongodb_url_not_configured")
                return

            # Connection is established on first operation; bounded by the timeouts below
            self.client = MongoClient(
                self.mongodb_url,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
                socketTimeoutMS=timeout_ms,
            )

        self.db = self.client[self.mongodb_database]
        logger.info("mongodb_client_ready", database=self.mongodb_database)

    def is_available(self) -> bool:
        """Check if MongoDB is configured"""
        self._lazy_init()
        return self.client is not None and self.db is not None

    def collection(self, name: str) -> Collection:
        """
        Get a collection handle.

        Raises:
            StoreUnavailableError: MongoDB is not configured
        """
        if not self.is_available():
            raise StoreUnavailableError("MongoDB not configured")
        return self.db[name]


# Singleton instance
mongodb_service = MongoDBService()

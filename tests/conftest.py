"""
Shared fixtures: in-memory stand-ins for the decision log, review queue and
feedback stores. They subclass the real stores so decoding and page
iteration run through production code; only the backend calls are replaced.
"""

import json
from datetime import datetime, timezone

import pytest

from app.exceptions import NotFoundError, StoreUnavailableError
from app.services.monitoring import circuit_breakers
from app.services.pagination import Page
from app.services.storage import DecisionLogStore, ReviewQueueStore, ObjectRef


FIXED_NOW = datetime(2025, 11, 5, 12, 0, 0, tzinfo=timezone.utc)


class FakeDecisionLogStore(DecisionLogStore):

    def __init__(self, page_size=1000):
        super().__init__(client=object(), timeout=1.0)
        self.objects = {}
        self.updated = {}
        self.page_size = page_size
        self.unreachable_keys = set()
        self.failing_prefixes = set()
        self.fail_writes = False
        self.reads = []
        self.writes = []
        self.listings = []

    def add(self, bucket, key, doc, updated=None):
        """Store a record; doc may be a dict or raw bytes."""
        self.objects[(bucket, key)] = doc if isinstance(doc, bytes) else json.dumps(doc).encode("utf-8")
        self.updated[(bucket, key)] = updated

    def doc(self, bucket, key):
        return json.loads(self.objects[(bucket, key)].decode("utf-8"))

    def read_bytes(self, bucket, key):
        self.reads.append((bucket, key))
        if key in self.unreachable_keys:
            raise StoreUnavailableError(f"Object storage read failed: {key}")
        if (bucket, key) not in self.objects:
            raise NotFoundError(f"Log object not found: gs://{bucket}/{key}")
        return self.objects[(bucket, key)]

    def write_json(self, bucket, key, doc):
        if self.fail_writes:
            raise StoreUnavailableError("Object storage write failed: timeout")
        self.writes.append((bucket, key))
        self.objects[(bucket, key)] = json.dumps(doc).encode("utf-8")

    def list_page(self, bucket, prefix, page_token=None):
        self.listings.append((bucket, prefix, page_token))
        if prefix in self.failing_prefixes:
            raise StoreUnavailableError(f"Object storage list failed: {prefix}")

        keys = sorted(k for (b, k) in self.objects if b == bucket and k.startswith(prefix))
        start = int(page_token) if page_token else 0
        chunk = keys[start:start + self.page_size]
        next_token = str(start + self.page_size) if start + self.page_size < len(keys) else None
        return Page(
            items=[ObjectRef(bucket=bucket, key=k, updated=self.updated.get((bucket, k))) for k in chunk],
            next_token=next_token,
        )


class FakeReviewQueueStore(ReviewQueueStore):

    def __init__(self, items=None):
        super().__init__(collection=object())
        self.items = {item["id"]: dict(item) for item in (items or [])}
        self.unavailable = False
        self.updates = []

    def _check(self):
        if self.unavailable:
            raise StoreUnavailableError("Review queue scan failed: connection refused")

    def get(self, queue_id):
        self._check()
        item = self.items.get(queue_id)
        return dict(item) if item else None

    def put(self, item):
        self._check()
        self.items[item["id"]] = dict(item)

    def update(self, queue_id, fields):
        self._check()
        if queue_id not in self.items:
            raise NotFoundError(f"Queue item not found: {queue_id}")
        self.updates.append((queue_id, dict(fields)))
        self.items[queue_id].update(fields)

    def scan_page(self, filter=None, limit=None, start_key=None):
        self._check()
        matching = [
            dict(self.items[key]) for key in sorted(self.items)
            if all(self.items[key].get(f) == v for f, v in (filter or {}).items())
            and (start_key is None or key > start_key)
        ]
        if limit:
            matching = matching[:limit]
        next_token = matching[-1]["id"] if limit and len(matching) == limit else None
        return Page(items=matching, next_token=next_token)


class FakeFeedbackStore:

    def __init__(self):
        self.entries = {}
        self.fail = False

    def put(self, pk, sk, fields):
        if self.fail:
            raise StoreUnavailableError("Feedback write failed: throttled")
        self.entries[(pk, sk)] = dict(fields)


@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """Each test starts with closed circuits."""
    circuit_breakers._breakers.clear()
    yield
    circuit_breakers._breakers.clear()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def log_store():
    return FakeDecisionLogStore()


@pytest.fixture
def queue_store():
    return FakeReviewQueueStore()


@pytest.fixture
def feedback_store():
    return FakeFeedbackStore()

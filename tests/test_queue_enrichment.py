"""
Tests for QueueEnrichmentService

Tests cover:
- Pending filter and page bound
- Enrichment merge (stored fields win)
- Per-item failure isolation
- Scan order preserved across the fan-out
"""

import pytest

from app.exceptions import StoreUnavailableError
from app.services.queue_enrichment import QueueEnrichmentService

BUCKET = "sc-intel-decisions"


def queued(queue_id, status="pending", key=None, **extra):
    item = {"id": queue_id, "status": status, **extra}
    if key:
        item["log_bucket"] = BUCKET
        item["log_key"] = key
    return item


class TestListPending:

    def test_only_pending_items_listed(self, queue_store, log_store):
        queue_store.put(queued("a"))
        queue_store.put(queued("b", status="resolved"))
        service = QueueEnrichmentService(queue_store, log_store)

        items = service.list_pending()

        assert [item["id"] for item in items] == ["a"]

    def test_empty_queue(self, queue_store, log_store):
        assert QueueEnrichmentService(queue_store, log_store).list_pending() == []

    def test_page_limit_bounds_listing(self, queue_store, log_store):
        for i in range(5):
            queue_store.put(queued(f"q-{i}"))
        service = QueueEnrichmentService(queue_store, log_store, page_limit=3)

        assert len(service.list_pending()) == 3

    def test_record_fields_merged_under_item_fields(self, queue_store, log_store):
        queue_store.put(queued("a", key="runs/2025/11/05/a.json", decision="IT_REVIEW"))
        log_store.add(BUCKET, "runs/2025/11/05/a.json", {
            "decision_agent": {"decision": "QUARANTINE", "signals": {"phi_entities": 2}},
            "compact": {"subject": "Payroll update"},
            "elapsed_ms": 1500,
        })

        item = QueueEnrichmentService(queue_store, log_store).list_pending()[0]

        assert item["enriched"] is True
        assert item["subject"] == "Payroll update"
        assert item["phi_entities"] == 2
        assert item["latency"] == "1.5s"
        # the queue item's own fields are never overwritten
        assert item["decision"] == "IT_REVIEW"

    def test_missing_log_object_returns_item_unenriched(self, queue_store, log_store):
        queue_store.put(queued("a", key="runs/2025/11/05/gone.json", note="keep"))

        items = QueueEnrichmentService(queue_store, log_store).list_pending()

        assert len(items) == 1
        assert items[0]["enriched"] is False
        assert items[0]["note"] == "keep"

    def test_failures_do_not_affect_siblings(self, queue_store, log_store):
        queue_store.put(queued("a", key="a.json"))
        queue_store.put(queued("b", key="b.json"))
        queue_store.put(queued("c", key="c.json"))
        queue_store.put(queued("d"))
        log_store.add(BUCKET, "a.json", {"decision": "ALLOW"})
        log_store.add(BUCKET, "b.json", b"{not json")
        log_store.add(BUCKET, "c.json", {"decision": "QUARANTINE"})

        items = QueueEnrichmentService(queue_store, log_store).list_pending()

        assert [(item["id"], item["enriched"]) for item in items] == [
            ("a", True), ("b", False), ("c", True), ("d", False)
        ]

    def test_unreachable_log_object_is_isolated(self, queue_store, log_store):
        queue_store.put(queued("a", key="a.json"))
        log_store.add(BUCKET, "a.json", {"decision": "ALLOW"})
        log_store.unreachable_keys.add("a.json")

        items = QueueEnrichmentService(queue_store, log_store).list_pending()

        assert items[0]["enriched"] is False

    def test_order_preserved_with_many_workers(self, queue_store, log_store):
        ids = [f"q-{i:03d}" for i in range(40)]
        for queue_id in ids:
            key = f"runs/{queue_id}.json"
            queue_store.put(queued(queue_id, key=key))
            log_store.add(BUCKET, key, {"decision": "ALLOW"})
        service = QueueEnrichmentService(queue_store, log_store, max_workers=8)

        assert [item["id"] for item in service.list_pending()] == ids

    def test_queue_scan_failure_propagates(self, queue_store, log_store):
        queue_store.unavailable = True
        with pytest.raises(StoreUnavailableError):
            QueueEnrichmentService(queue_store, log_store).list_pending()

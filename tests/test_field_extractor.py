"""
Tests for decision record field extraction.

Tests cover:
- Candidate priority per field (first match wins)
- Type filtering (wrong-typed candidates fall through)
- Display rendering for decisions and latency
"""

import pytest

from app.services.field_extractor import (
    ExtractedFields,
    extract_fields,
    format_latency,
)


class TestCandidatePriority:
    """The first candidate that yields a value wins."""

    def test_phi_prefers_decision_agent_signal(self):
        doc = {
            "decision_agent": {"signals": {"phi_entities": 3}},
            "phi_entities": 0,
        }
        assert extract_fields(doc).phi_entities == 3

    def test_phi_zero_at_top_level_is_a_value(self):
        """0 is a real count and stops the search."""
        doc = {"phi_entities": 0, "phi": {"entities_detected": 4}}
        assert extract_fields(doc).phi_entities == 0

    def test_phi_from_has_phi_flag(self):
        assert extract_fields({"summary": {"has_phi": True}}).phi_entities == 1
        assert extract_fields({"summary": {"has_phi": False}}).phi_entities == 0

    def test_reasoning_prefers_first_content_note(self):
        doc = {
            "content_notes": [{"reasoning": "Invoice lure"}, {"reasoning": "second"}],
            "reasoning": "top-level",
        }
        assert extract_fields(doc).reasoning == "Invoice lure"

    def test_reasoning_list_joined_with_blank_lines(self):
        doc = {"decision_agent": {"reasons": ["Lookalike domain", "Urgent tone"]}}
        assert extract_fields(doc).reasoning == "Lookalike domain\n\nUrgent tone"

    def test_blank_reasoning_falls_through(self):
        doc = {"reasoning": "   ", "explanation": "fallback"}
        assert extract_fields(doc).reasoning == "fallback"

    def test_elapsed_from_features_map(self):
        doc = {"features": {"timings.elapsed_ms": 1500}}
        assert extract_fields(doc).elapsed_ms == 1500

    def test_elapsed_top_level_beats_nested(self):
        doc = {"elapsed_ms": 420, "timings": {"elapsed_ms": 9999}}
        assert extract_fields(doc).elapsed_ms == 420

    def test_wrong_type_falls_through(self):
        """A string elapsed value is not a measurement."""
        doc = {"elapsed_ms": "fast", "timings": {"elapsed_ms": 800}}
        assert extract_fields(doc).elapsed_ms == 800

    def test_bool_is_not_a_number(self):
        doc = {"risk": True}
        assert extract_fields(doc).risk is None

    def test_decision_prefers_agent_and_is_uppercased(self):
        doc = {"decision_agent": {"decision": "quarantine"}, "decision": "ALLOW"}
        assert extract_fields(doc).decision == "QUARANTINE"

    def test_hitl_verdict_falls_back_to_agent_copy(self):
        doc = {"decision_agent": {"hitl": {"verdict": "block", "status": "resolved"}}}
        fields = extract_fields(doc)
        assert fields.hitl_verdict == "block"
        assert fields.hitl_status == "resolved"

    def test_recipient_list_joined(self):
        doc = {"compact": {"to": ["a@example.com", "b@example.com"]}}
        assert extract_fields(doc).recipient == "a@example.com, b@example.com"

    def test_sender_from_compact_address(self):
        doc = {"compact": {"from": {"addr": "billing@vendor.test"}}, "from_addr": "other@x.test"}
        assert extract_fields(doc).sender == "billing@vendor.test"


class TestExtractionProperties:

    def test_empty_record_yields_all_absent(self):
        fields = extract_fields({})
        assert fields.decision is None
        assert fields.phi_entities is None
        assert fields.ai_decision == "Unknown"
        assert fields.it_decision == "-"
        assert fields.latency == "-"

    def test_extraction_is_idempotent(self):
        doc = {
            "decision_agent": {"decision": "IT_REVIEW", "signals": {"confidence": 0.7}},
            "summary": {"classification": "phishing"},
            "content_notes": [{"reasoning": "odd link"}],
        }
        assert extract_fields(doc) == extract_fields(doc)

    def test_extraction_does_not_mutate_input(self):
        doc = {"decision_agent": {"decision": "allow"}}
        extract_fields(doc)
        assert doc == {"decision_agent": {"decision": "allow"}}


class TestDisplayRendering:

    @pytest.mark.parametrize("elapsed, expected", [
        (None, "-"),
        (850, "850ms"),
        (999, "999ms"),
        (999.6, "999ms"),
        (12.9, "12ms"),
        (1000, "1.0s"),
        (1500, "1.5s"),
        (12345, "12.3s"),
    ])
    def test_format_latency(self, elapsed, expected):
        assert format_latency(elapsed) == expected

    @pytest.mark.parametrize("decision, text", [
        ("ALLOW", "Allowed"),
        ("IT_REVIEW", "Requires HITL review"),
        ("QUARANTINE", "Quarantined"),
        ("SOMETHING", "Unknown"),
    ])
    def test_ai_decision_text(self, decision, text):
        assert extract_fields({"decision": decision}).ai_decision == text

    def test_it_decision_text(self):
        assert extract_fields({"hitl": {"verdict": "allow"}}).it_decision == "Sent"
        assert extract_fields({"hitl": {"verdict": "block"}}).it_decision == "Quarantined"

    def test_to_display_includes_rendered_values(self):
        display = extract_fields({"decision": "ALLOW", "elapsed_ms": 2000}).to_display()
        assert display["ai_decision"] == "Allowed"
        assert display["latency"] == "2.0s"
        assert display["decision"] == "ALLOW"
        assert isinstance(extract_fields({}), ExtractedFields)

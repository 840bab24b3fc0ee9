"""
Decision Record Field Extraction

Resolves display values from decision log records whose schema has drifted
over time. Each field has an ordered list of accessors, newest and most
deeply nested shape first; the first accessor returning a value wins.

Pure functions only. Queue enrichment, history rows and the log detail
lookup all resolve fields through extract_fields().
"""

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional

Accessor = Callable[[Dict[str, Any]], Any]

LATENCY_PLACEHOLDER = "-"
NO_HUMAN_DECISION = "-"

AI_DECISION_TEXT = {
    "ALLOW": "Allowed",
    "IT_REVIEW": "Requires HITL review",
    "QUARANTINE": "Quarantined",
}

HUMAN_DECISION_TEXT = {
    "allow": "Sent",
    "block": "Quarantined",
}

ELAPSED_FEATURE_KEY = "timings.elapsed_ms"


# --- value coercion -------------------------------------------------------

def dig(doc: Any, *path: str) -> Any:
    """Walk nested dicts; None as soon as a step is missing or not a dict."""
    current = doc
    for step in path:
        if not isinstance(current, dict):
            return None
        current = current.get(step)
    return current


def as_number(value: Any) -> Optional[float]:
    # bool is an int subclass; a flag is not a measurement
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def as_text(value: Any) -> Optional[str]:
    """Non-empty string, or a list of strings joined with blank lines."""
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, list):
        parts = [part for part in value if isinstance(part, str) and part.strip()]
        return "\n\n".join(parts) if parts else None
    return None


def as_addresses(value: Any) -> Optional[str]:
    if isinstance(value, list):
        addrs = [addr for addr in value if isinstance(addr, str) and addr.strip()]
        return ", ".join(addrs) if addrs else None
    return as_text(value)


def as_flag_count(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return 1 if value else 0
    return None


def first_note(doc: Dict[str, Any]) -> Any:
    notes = doc.get("content_notes")
    if isinstance(notes, list) and notes and isinstance(notes[0], dict):
        return notes[0].get("reasoning")
    return None


def feature(doc: Dict[str, Any], *path: str) -> Any:
    features = dig(doc, *path)
    if isinstance(features, dict):
        return features.get(ELAPSED_FEATURE_KEY)
    return None


def first_match(doc: Dict[str, Any], candidates: List[Accessor]) -> Any:
    for accessor in candidates:
        value = accessor(doc)
        if value is not None:
            return value
    return None


# --- candidate tables -----------------------------------------------------

REASONING_CANDIDATES: List[Accessor] = [
    lambda d: as_text(first_note(d)),
    lambda d: as_text(d.get("reasoning")),
    lambda d: as_text(dig(d, "summary", "reasoning")),
    lambda d: as_text(dig(d, "decision_agent", "reasoning")),
    lambda d: as_text(dig(d, "decision_agent", "explanation")),
    lambda d: as_text(dig(d, "decision_agent", "reasons")),
    lambda d: as_text(d.get("explanation")),
    lambda d: as_text(d.get("decision_reasons")),
]

PHI_CANDIDATES: List[Accessor] = [
    lambda d: as_number(dig(d, "decision_agent", "signals", "phi_entities")),
    lambda d: as_number(d.get("phi_entities")),
    lambda d: as_number(dig(d, "phi", "entities_detected")),
    lambda d: as_flag_count(dig(d, "summary", "has_phi")),
]

ELAPSED_CANDIDATES: List[Accessor] = [
    lambda d: as_number(d.get("elapsed_ms")),
    lambda d: as_number(dig(d, "timings", "elapsed_ms")),
    lambda d: as_number(feature(d, "features")),
    lambda d: as_number(feature(d, "decision_agent", "features")),
]

CONFIDENCE_CANDIDATES: List[Accessor] = [
    lambda d: as_number(dig(d, "summary", "confidence")),
    lambda d: as_number(dig(d, "decision_agent", "signals", "confidence")),
]

CLASSIFICATION_CANDIDATES: List[Accessor] = [
    lambda d: as_text(dig(d, "summary", "classification")),
    lambda d: as_text(dig(d, "decision_agent", "signals", "classification")),
]

RISK_CANDIDATES: List[Accessor] = [
    lambda d: as_number(dig(d, "summary", "sender_risk")),
    lambda d: as_number(dig(d, "decision_agent", "signals", "sender_risk")),
    lambda d: as_number(d.get("risk")),
]

BODY_PREVIEW_CANDIDATES: List[Accessor] = [
    lambda d: as_text(dig(d, "compact", "body_preview")),
    lambda d: as_text(dig(d, "summary", "body_preview")),
    lambda d: as_text(d.get("body_preview")),
]

DECISION_CANDIDATES: List[Accessor] = [
    lambda d: as_text(dig(d, "decision_agent", "decision")),
    lambda d: as_text(d.get("decision")),
]

HITL_VERDICT_CANDIDATES: List[Accessor] = [
    lambda d: as_text(dig(d, "hitl", "verdict")),
    lambda d: as_text(dig(d, "decision_agent", "hitl", "verdict")),
]

HITL_STATUS_CANDIDATES: List[Accessor] = [
    lambda d: as_text(dig(d, "hitl", "status")),
    lambda d: as_text(dig(d, "decision_agent", "hitl", "status")),
]

SENDER_CANDIDATES: List[Accessor] = [
    lambda d: as_text(dig(d, "compact", "from", "addr")),
    lambda d: as_text(dig(d, "compact", "from")),
    lambda d: as_text(dig(d, "decision_agent", "signals", "from_addr")),
    lambda d: as_text(d.get("from_addr")),
]

RECIPIENT_CANDIDATES: List[Accessor] = [
    lambda d: as_addresses(dig(d, "compact", "to")),
    lambda d: as_text(dig(d, "decision_agent", "signals", "to_addr")),
]

MESSAGE_ID_CANDIDATES: List[Accessor] = [
    lambda d: as_text(dig(d, "sender_intel", "raw", "ids", "message_id")),
    lambda d: as_text(dig(d, "compact", "message_id")),
    lambda d: as_text(d.get("message_id")),
    lambda d: as_text(d.get("id")),
]

TIMESTAMP_CANDIDATES: List[Accessor] = [
    lambda d: as_text(d.get("timestamp")),
    lambda d: as_text(dig(d, "compact", "date_iso")),
]


# --- display rendering ----------------------------------------------------

def format_latency(elapsed_ms: Optional[float]) -> str:
    """1.5s for a second or more, 850ms below that, a dash when unknown."""
    if elapsed_ms is None:
        return LATENCY_PLACEHOLDER
    if elapsed_ms >= 1000:
        return f"{elapsed_ms / 1000:.1f}s"
    return f"{int(elapsed_ms)}ms"


def ai_decision_text(decision: Optional[str]) -> str:
    return AI_DECISION_TEXT.get(decision or "", "Unknown")


def human_decision_text(verdict: Optional[str]) -> str:
    return HUMAN_DECISION_TEXT.get(verdict or "", NO_HUMAN_DECISION)


@dataclass(frozen=True)
class ExtractedFields:
    """Best-effort display values for one decision record."""

    message_id: Optional[str]
    timestamp: Optional[str]
    sender: Optional[str]
    recipient: Optional[str]
    subject: Optional[str]
    body_preview: Optional[str]
    reasoning: Optional[str]
    classification: Optional[str]
    confidence: Optional[float]
    risk: Optional[float]
    phi_entities: Optional[float]
    elapsed_ms: Optional[float]
    decision: Optional[str]
    hitl_status: Optional[str]
    hitl_verdict: Optional[str]

    @property
    def ai_decision(self) -> str:
        return ai_decision_text(self.decision)

    @property
    def it_decision(self) -> str:
        return human_decision_text(self.hitl_verdict)

    @property
    def latency(self) -> str:
        return format_latency(self.elapsed_ms)

    def to_display(self) -> Dict[str, Any]:
        """Flat dict of resolved values plus rendered decision and latency text."""
        display = asdict(self)
        display["ai_decision"] = self.ai_decision
        display["it_decision"] = self.it_decision
        display["latency"] = self.latency
        return display


def extract_fields(doc: Dict[str, Any]) -> ExtractedFields:
    """Resolve every display field of a decision record."""
    decision = first_match(doc, DECISION_CANDIDATES)
    return ExtractedFields(
        message_id=first_match(doc, MESSAGE_ID_CANDIDATES),
        timestamp=first_match(doc, TIMESTAMP_CANDIDATES),
        sender=first_match(doc, SENDER_CANDIDATES),
        recipient=first_match(doc, RECIPIENT_CANDIDATES),
        subject=as_text(dig(doc, "compact", "subject")),
        body_preview=first_match(doc, BODY_PREVIEW_CANDIDATES),
        reasoning=first_match(doc, REASONING_CANDIDATES),
        classification=first_match(doc, CLASSIFICATION_CANDIDATES),
        confidence=first_match(doc, CONFIDENCE_CANDIDATES),
        risk=first_match(doc, RISK_CANDIDATES),
        phi_entities=first_match(doc, PHI_CANDIDATES),
        elapsed_ms=first_match(doc, ELAPSED_CANDIDATES),
        decision=decision.strip().upper() if decision else None,
        hitl_status=first_match(doc, HITL_STATUS_CANDIDATES),
        hitl_verdict=first_match(doc, HITL_VERDICT_CANDIDATES),
    )

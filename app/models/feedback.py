"""
FeedbackEntry Model
Learning signal written once per resolved verdict, keyed by sender domain
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel


def sender_domain(item: Dict[str, Any]) -> str:
    """from_domain when present, else the part after @ in the sender address, else 'unknown'."""
    if item.get("from_domain"):
        return item["from_domain"]
    from_addr = item.get("from_addr") or item.get("from") or ""
    if "@" in from_addr:
        return from_addr.split("@")[-1].lower() or "unknown"
    return "unknown"


class FeedbackEntry(BaseModel):
    """
    Append-only feedback record.

    pk = domain#<from_domain>, sk = verdict#<timestamp>. trust_tier is
    "trusted" for allow and "blocked" otherwise.
    """
    pk: str
    sk: str
    verdict: str
    actor: str
    run_id: str
    from_addr: str
    from_domain: str
    created_ts: str
    trust_tier: str
    log_bucket: Optional[str] = None
    log_key: Optional[str] = None

    @classmethod
    def from_queue_item(cls, item: Dict[str, Any], verdict: str, actor: str, ts: str) -> "FeedbackEntry":
        """Derive the entry from the queue item as it was before resolution."""
        domain = sender_domain(item)
        return cls(
            pk=f"domain#{domain}",
            sk=f"verdict#{ts}",
            verdict=verdict,
            actor=actor,
            run_id=str(item.get("run_id") or item.get("id") or ""),
            from_addr=item.get("from_addr") or item.get("from") or "",
            from_domain=domain,
            created_ts=ts,
            trust_tier="trusted" if verdict == "allow" else "blocked",
            log_bucket=item.get("log_bucket"),
            log_key=item.get("log_key"),
        )

    def fields(self) -> Dict[str, Any]:
        """Everything except the composite key."""
        return self.model_dump(exclude={"pk", "sk"})

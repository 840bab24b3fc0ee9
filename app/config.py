"""
Application Configuration
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Environment
    environment: str = "development"

    # Decision Log (object storage, one JSON record per processed email)
    decision_log_bucket: str = "sc-intel-decisions"
    decision_log_prefix: str = "runs"

    # Review Queue + Feedback (MongoDB collections)
    mongodb_url: Optional[str] = None
    mongodb_database: str = "email_triage"
    hitl_collection: str = "sender_intel_hitl_queue"
    feedback_collection: str = "sender_feedback_table"

    # Store call bounds
    store_timeout_seconds: float = 5.0  # per object fetch/write/list and per Mongo operation

    # Fan-out
    enrichment_max_workers: int = 8
    aggregation_max_workers: int = 8

    # HITL queue listing
    pending_page_limit: int = 100

    # Metrics window
    default_window_days: int = 7
    max_window_days: int = 90

    # Circuit Breaker Configuration
    circuit_breaker_fail_max: int = 5  # Consecutive failures before opening circuit
    circuit_breaker_reset_timeout: int = 60  # Seconds before auto-recovery attempt

    # Sentry Error Tracking
    sentry_dsn: Optional[str] = None
    sentry_environment: Optional[str] = None  # Defaults to environment setting

    # Inference service (external classifier)
    inference_endpoint: Optional[str] = None  # simple classifier URL
    inference_controller_url: Optional[str] = None  # full MIME pipeline URL
    inference_timeout_seconds: float = 30.0

    # Demo emitter
    demo_interval_ms: int = 15 * 60 * 1000
    demo_email_dir: str = "./data/dataset_emails"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()

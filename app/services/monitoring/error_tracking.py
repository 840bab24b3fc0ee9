"""
Sentry Error Tracking
Provides error tracking with review context for production debugging
"""

import logging
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

logger = logging.getLogger(__name__)


def init_sentry() -> bool:
    """
    Initialize Sentry SDK with FastAPI integration.

    If SENTRY_DSN is not configured, logs warning and returns False (disabled).

    Returns:
        True when Sentry was initialized
    """
    from app.config import settings

    if settings.sentry_dsn is None:
        logger.warning("Sentry DSN not configured - error tracking disabled")
        return False

    try:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.sentry_environment or settings.environment,
            traces_sample_rate=0.1,  # 10% of requests traced
            integrations=[
                FastApiIntegration(),
            ],
        )
    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")
        return False

    logger.info(
        "Sentry initialized",
        extra={"environment": settings.sentry_environment or settings.environment}
    )
    return True


def set_review_context(
    queue_id: str,
    actor: str,
    correlation_id: Optional[str] = None
) -> None:
    """
    Tag the current Sentry scope with the queue item under review.

    Args:
        queue_id: Review queue item ID
        actor: Reviewer identity (opaque, caller supplied)
        correlation_id: Optional correlation ID for request tracking
    """
    sentry_sdk.set_context("review", {
        "queue_id": queue_id,
        "actor": actor,
        "correlation_id": correlation_id or "none"
    })
    sentry_sdk.set_tag("queue_id", queue_id)

    if correlation_id:
        sentry_sdk.set_tag("correlation_id", correlation_id)


def add_breadcrumb(
    category: str,
    message: str,
    level: str = "info",
    data: Optional[dict] = None
) -> None:
    """Add breadcrumb to Sentry for the saga step trail."""
    sentry_sdk.add_breadcrumb(
        category=category,
        message=message,
        level=level,
        data=data or {}
    )

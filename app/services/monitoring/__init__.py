"""
Monitoring Module
Exports for structured logging, circuit breakers and error tracking
"""

from app.services.monitoring.logging import setup_logging, CorrelationJsonFormatter, get_correlation_id
from app.services.monitoring.circuit_breakers import (
    get_gcs_breaker,
    get_mongodb_breaker,
    get_inference_breaker,
    CircuitBreakerError,
    CircuitBreakerLogListener,
)
from app.services.monitoring.error_tracking import init_sentry, set_review_context, add_breadcrumb

__all__ = [
    "setup_logging",
    "CorrelationJsonFormatter",
    "get_correlation_id",
    "get_gcs_breaker",
    "get_mongodb_breaker",
    "get_inference_breaker",
    "CircuitBreakerError",
    "CircuitBreakerLogListener",
    "init_sentry",
    "set_review_context",
    "add_breadcrumb",
]

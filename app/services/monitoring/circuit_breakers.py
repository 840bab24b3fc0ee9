"""
Circuit Breaker Implementation for External Service Dependencies

Protects against cascading failures by opening circuits after consecutive failures
and automatically attempting recovery after a timeout period.

Services protected:
- Google Cloud Storage (decision log objects)
- MongoDB (review queue and feedback collections)
- Inference service (external classifier)
"""

import logging
from typing import Dict, Optional

import pybreaker
from google.api_core.exceptions import NotFound

from app.config import settings

logger = logging.getLogger(__name__)

SERVICE_NAMES = {
    "gcs": "google_cloud_storage",
    "mongodb": "mongodb",
    "inference": "inference_service",
}


class CircuitBreakerLogListener(pybreaker.CircuitBreakerListener):
    """
    Logs circuit breaker state changes.

    An opened circuit means the collaborator is isolated and calls fail fast
    until the reset timeout elapses.
    """

    def state_change(self, cb: pybreaker.CircuitBreaker, old_state: pybreaker.CircuitBreakerState, new_state: pybreaker.CircuitBreakerState):
        level = logging.ERROR if new_state.name == pybreaker.STATE_OPEN else logging.WARNING
        logger.log(
            level,
            f"Circuit breaker state change: {cb.name} transitioned from {old_state.name} to {new_state.name}",
            extra={
                "circuit_breaker": cb.name,
                "old_state": old_state.name,
                "new_state": new_state.name,
                "fail_count": cb.fail_counter
            }
        )


def _create_breaker(name: str, exclude: Optional[list] = None) -> pybreaker.CircuitBreaker:
    """
    Create a circuit breaker with configured thresholds.

    Args:
        name: Service name for the circuit breaker
        exclude: Predicates (exception -> bool) for errors that do not count as failures

    Returns:
        Configured CircuitBreaker instance
    """
    return pybreaker.CircuitBreaker(
        name=name,
        fail_max=settings.circuit_breaker_fail_max,
        reset_timeout=settings.circuit_breaker_reset_timeout,
        exclude=exclude or [],
        listeners=[CircuitBreakerLogListener()]
    )


# Module-level instances (lazy initialization)
_breakers: Dict[str, pybreaker.CircuitBreaker] = {}


def get_breaker(service_name: str) -> pybreaker.CircuitBreaker:
    """
    Get circuit breaker for a specific service.

    Lazy initializes breakers on first access to avoid import-time side effects.

    Args:
        service_name: Service name ("gcs", "mongodb", or "inference")

    Returns:
        Circuit breaker instance for the service

    Raises:
        ValueError: If service_name is not recognized
    """
    if service_name not in SERVICE_NAMES:
        raise ValueError(f"Unknown service name: {service_name}. Must be one of {sorted(SERVICE_NAMES)}")

    if service_name not in _breakers:
        # A missing object is an answer, not an outage
        exclude = [lambda e: isinstance(e, NotFound)] if service_name == "gcs" else None
        _breakers[service_name] = _create_breaker(SERVICE_NAMES[service_name], exclude)
        logger.info(f"Initialized {SERVICE_NAMES[service_name]} circuit breaker")

    return _breakers[service_name]


def get_gcs_breaker() -> pybreaker.CircuitBreaker:
    return get_breaker("gcs")


def get_mongodb_breaker() -> pybreaker.CircuitBreaker:
    return get_breaker("mongodb")


def get_inference_breaker() -> pybreaker.CircuitBreaker:
    return get_breaker("inference")


# Re-export exception for caller handling
from pybreaker import CircuitBreakerError

__all__ = [
    "CircuitBreakerLogListener",
    "get_breaker",
    "get_gcs_breaker",
    "get_mongodb_breaker",
    "get_inference_breaker",
    "CircuitBreakerError",
]

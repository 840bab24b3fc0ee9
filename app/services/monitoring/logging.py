"""
Structured JSON Logging with Correlation ID
Provides JSON formatter that automatically injects correlation IDs into all log entries
"""

import logging
import sys

import structlog
from pythonjsonlogger import jsonlogger
from asgi_correlation_id.context import correlation_id

SERVICE_NAME = "email-triage-hitl"


def get_correlation_id() -> str:
    """Correlation ID of the current request, or 'none' outside a request."""
    return correlation_id.get() or 'none'


class CorrelationJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter with automatic correlation ID injection.

    The correlation ID is read from async context (set by CorrelationIdMiddleware).
    """

    def __init__(self, *args, environment: str = "development", **kwargs):
        super().__init__(*args, **kwargs)
        self.environment = environment

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['correlation_id'] = get_correlation_id()
        log_record['service'] = SERVICE_NAME
        log_record['environment'] = self.environment


def add_correlation_id(logger, method_name, event_dict):
    """structlog processor mirroring CorrelationJsonFormatter for structlog events."""
    event_dict.setdefault("correlation_id", get_correlation_id())
    return event_dict


def setup_logging(environment: str = "development", level: int = logging.INFO):
    """
    Configure structured JSON logging to stdout.

    Standard library loggers go through CorrelationJsonFormatter; structlog
    loggers render JSON with the same correlation_id field.

    Returns:
        logging.Handler: The configured handler (for testing)
    """
    handler = logging.StreamHandler(sys.stdout)

    formatter = CorrelationJsonFormatter(
        '%(timestamp)s %(level)s %(name)s %(message)s',
        rename_fields={
            'timestamp': 'asctime',
            'level': 'levelname'
        },
        environment=environment
    )
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            add_correlation_id,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ]
    )

    return handler

"""
Error Taxonomy
Exceptions raised by stores and services, each carrying the HTTP status it maps to
"""


class TriageError(Exception):
    """Base class for all errors surfaced by the triage backend."""

    status_code = 500

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(TriageError):
    """Bad verdict token, missing query parameter, invalid or reversed date range."""

    status_code = 400


class NotFoundError(TriageError):
    """Queue item or decision log object does not exist."""

    status_code = 404


class StoreUnavailableError(TriageError):
    """A backing store could not be reached or rejected the call."""

    status_code = 500


class ObjectCorruptError(TriageError):
    """
    A decision log object could not be decoded.

    Aggregation and enrichment skip these and continue; they are never
    surfaced as a request failure from those paths.
    """

    status_code = 500


class PartialWriteError(TriageError):
    """
    A best-effort write failed after the queue resolution was committed.

    Recorded on the resolution result, never raised out of the resolver.
    """

    status_code = 500


class ScanCancelledError(TriageError):
    """The caller disconnected while a partition scan was in progress."""

    status_code = 499


class UpstreamError(TriageError):
    """The inference service answered with an error; status mirrors the upstream one."""

    def __init__(self, message: str, status_code: int = 502, details=None):
        super().__init__(message, details)
        self.status_code = status_code


class UpstreamUnavailableError(TriageError):
    """The inference service could not be reached."""

    status_code = 503

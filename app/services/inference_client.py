"""
Inference Service Client
Thin proxy to the external email classifier; this backend never looks inside it
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from app.config import settings
from app.exceptions import TriageError, UpstreamError, UpstreamUnavailableError, ValidationError
from app.services.monitoring.circuit_breakers import CircuitBreakerError, get_inference_breaker

logger = structlog.get_logger(__name__)


class InferenceClient:
    """
    Forwards classification requests and returns the decision envelope.

    Two entry points mirror the two upstream surfaces: a simple text
    classifier and the full MIME pipeline controller.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        controller_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.endpoint = endpoint if endpoint is not None else settings.inference_endpoint
        self.controller_url = controller_url if controller_url is not None else settings.inference_controller_url
        self.timeout = timeout or settings.inference_timeout_seconds
        self._client = http_client

    @property
    def client(self) -> httpx.Client:
        """Lazy-init httpx client to avoid import-time side effects."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    @property
    def endpoint_configured(self) -> bool:
        return bool(self.endpoint) and self.endpoint != "PLACEHOLDER_URL"

    @property
    def controller_configured(self) -> bool:
        return bool(self.controller_url)

    def analyze(self, email_content: Optional[str], context: Optional[str] = None) -> Dict[str, Any]:
        """
        Classify plain email text.

        Raises:
            ValidationError: email_content empty
            TriageError: endpoint not configured
            UpstreamError: classifier answered non-2xx
            UpstreamUnavailableError: classifier unreachable
        """
        if not email_content:
            raise ValidationError("emailContent field cannot be empty")
        if not self.endpoint_configured:
            logger.error("inference_endpoint_not_configured")
            raise TriageError("Server configuration error: Missing inference endpoint")

        payload = {"emailContent": email_content, "context": context or "general"}
        return self._post(self.endpoint, payload, operation="analyze")

    def analyze_mime(self, mime_raw: Optional[str] = None, mime_b64: Optional[str] = None) -> Dict[str, Any]:
        """
        Run a raw or base64 MIME message through the full pipeline.

        Raises:
            ValidationError: neither body supplied
        """
        if not mime_raw and not mime_b64:
            raise ValidationError("Either mime_raw or mime_b64 is required")
        if not self.controller_configured:
            logger.error("inference_controller_not_configured")
            raise TriageError("Server configuration error: Missing inference controller URL")

        payload = {"mime_raw": mime_raw} if mime_raw else {"mime_b64": mime_b64}
        envelope = self._post(self.controller_url, payload, operation="analyze_full")

        logger.info(
            "inference_envelope_received",
            decision=envelope.get("decision"),
            risk=envelope.get("risk"),
            phi_entities=envelope.get("phi_entities"),
        )
        return envelope

    def _post(self, url: str, payload: Dict[str, Any], operation: str) -> Dict[str, Any]:
        log = logger.bind(operation=operation, url=url)
        log.info("inference_request_sent")

        try:
            response = get_inference_breaker().call(self.client.post, url, json=payload)
        except CircuitBreakerError as e:
            log.warning("inference_circuit_open")
            raise UpstreamUnavailableError("Inference service unavailable (circuit open)", details=str(e)) from e
        except httpx.HTTPError as e:
            log.error("inference_request_failed", error=str(e))
            raise UpstreamUnavailableError("Unable to connect to inference service", details=str(e)) from e

        if response.is_error:
            log.error("inference_error_response", status_code=response.status_code)
            raise UpstreamError(
                f"Inference service error: {response.reason_phrase}",
                status_code=response.status_code,
                details=response.text,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError("Inference service returned non-JSON body", details=response.text) from e

        if isinstance(body, dict) and body.get("errorMessage"):
            log.error("inference_function_error", details=body)
            raise UpstreamError("Inference function error", status_code=500, details=body)

        log.info("inference_response_received", status_code=response.status_code)
        return body if isinstance(body, dict) else {"result": body}

"""
Tests for the inference proxy client and the demo emitter.
"""

from unittest.mock import Mock

import httpx
import pytest

from app.exceptions import TriageError, UpstreamError, UpstreamUnavailableError, ValidationError
from app.services.demo_emitter import DemoEmitter, replay_sample_email
from app.services.inference_client import InferenceClient

ENDPOINT = "https://classifier.internal/analyze"
CONTROLLER = "https://controller.internal/run"


def client_for(handler):
    return InferenceClient(
        endpoint=ENDPOINT,
        controller_url=CONTROLLER,
        timeout=5,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


class TestInferenceClient:

    def test_analyze_forwards_payload(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = request.content
            return httpx.Response(200, json={"classification": "phishing", "confidence": 0.93})

        data = client_for(handler).analyze("Click here to reset", None)

        assert data == {"classification": "phishing", "confidence": 0.93}
        assert seen["url"] == ENDPOINT
        assert b'"context": "general"' in seen["body"] or b'"context":"general"' in seen["body"]

    def test_analyze_requires_content(self):
        with pytest.raises(ValidationError):
            client_for(lambda request: httpx.Response(200, json={})).analyze("")

    def test_unconfigured_endpoint(self):
        client = InferenceClient(endpoint="", controller_url="", http_client=Mock())
        with pytest.raises(TriageError) as exc:
            client.analyze("hello")
        assert exc.value.status_code == 500
        assert client.endpoint_configured is False
        assert client.controller_configured is False

    def test_upstream_error_status_mirrored(self):
        client = client_for(lambda request: httpx.Response(429, text="slow down"))

        with pytest.raises(UpstreamError) as exc:
            client.analyze("hello")
        assert exc.value.status_code == 429

    def test_function_error_payload(self):
        client = client_for(lambda request: httpx.Response(200, json={"errorMessage": "Task timed out"}))

        with pytest.raises(UpstreamError) as exc:
            client.analyze("hello")
        assert exc.value.status_code == 500

    def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamUnavailableError) as exc:
            client_for(handler).analyze("hello")
        assert exc.value.status_code == 503

    def test_analyze_mime_prefers_raw(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = request.content
            return httpx.Response(200, json={"decision": "QUARANTINE", "risk": 0.8, "phi_entities": 0})

        envelope = client_for(handler).analyze_mime(mime_raw="From: a@b.test\r\n\r\nhi", mime_b64="ignored")

        assert envelope["decision"] == "QUARANTINE"
        assert seen["url"] == CONTROLLER
        assert b"mime_raw" in seen["body"]
        assert b"mime_b64" not in seen["body"]

    def test_analyze_mime_requires_body(self):
        with pytest.raises(ValidationError):
            client_for(lambda request: httpx.Response(200, json={})).analyze_mime()


class TestDemoEmitter:

    def test_start_schedules_job_once(self):
        scheduler = Mock()
        scheduler.running = False
        scheduler.get_job.return_value = None
        emitter = DemoEmitter(emit=Mock(), interval_ms=60000, scheduler=scheduler)

        emitter.start()

        scheduler.start.assert_called_once()
        assert scheduler.add_job.call_args.kwargs["id"] == "demo_emitter"

    def test_start_when_running_is_noop(self):
        scheduler = Mock()
        scheduler.running = True
        scheduler.get_job.return_value = object()
        emitter = DemoEmitter(emit=Mock(), scheduler=scheduler)

        emitter.start()

        scheduler.add_job.assert_not_called()
        assert emitter.is_running() is True

    def test_stop_removes_job(self):
        scheduler = Mock()
        scheduler.running = True
        scheduler.get_job.return_value = object()

        DemoEmitter(emit=Mock(), scheduler=scheduler).stop()

        scheduler.remove_job.assert_called_once_with("demo_emitter")

    def test_emit_failure_is_contained(self):
        emitter = DemoEmitter(emit=Mock(side_effect=RuntimeError("boom")), scheduler=Mock())
        emitter._run()

    def test_replay_sample_email(self, tmp_path):
        (tmp_path / "one.eml").write_text("From: a@b.test\r\n\r\nhello")
        client = Mock()
        client.analyze_mime.return_value = {"decision": "ALLOW"}

        envelope = replay_sample_email(client, str(tmp_path))

        assert envelope == {"decision": "ALLOW"}
        assert "hello" in client.analyze_mime.call_args.kwargs["mime_raw"]

    def test_replay_without_samples(self, tmp_path):
        client = Mock()
        assert replay_sample_email(client, str(tmp_path)) is None
        client.analyze_mime.assert_not_called()

"""
Demo Emitter Control

Periodically replays a sample email through the inference pipeline so the
queue and decision log fill up during a demo. Callers see only
start() / stop() / is_running().
"""

import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.config import settings
from app.services.inference_client import InferenceClient

logger = structlog.get_logger(__name__)

JOB_ID = "demo_emitter"


def replay_sample_email(client: InferenceClient, email_dir: str) -> Optional[dict]:
    """Send one random .eml from email_dir through the full pipeline."""
    files = sorted(Path(email_dir).glob("*.eml"))
    if not files:
        logger.warning("demo_no_sample_emails", email_dir=email_dir)
        return None

    chosen = random.choice(files)
    envelope = client.analyze_mime(mime_raw=chosen.read_text(encoding="utf-8", errors="replace"))
    logger.info("demo_email_emitted", source=chosen.name, decision=envelope.get("decision"))
    return envelope


class DemoEmitter:
    """APScheduler interval job wrapped as a start/stop/is_running capability."""

    def __init__(
        self,
        emit: Callable[[], Any],
        interval_ms: Optional[int] = None,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self.emit = emit
        self.interval_ms = interval_ms or settings.demo_interval_ms
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")

    def _run(self):
        try:
            self.emit()
        except Exception as e:
            logger.error("demo_emit_failed", error=str(e), exc_info=True)

    def start(self) -> None:
        if self.is_running():
            return
        if not self.scheduler.running:
            self.scheduler.start()
        self.scheduler.add_job(
            self._run,
            trigger=IntervalTrigger(seconds=self.interval_ms / 1000),
            id=JOB_ID,
            name="Demo email emitter",
            replace_existing=True,
            next_run_time=datetime.now(timezone.utc),
        )
        logger.info("demo_emitter_started", interval_ms=self.interval_ms)

    def stop(self) -> None:
        if self.scheduler.get_job(JOB_ID) is not None:
            self.scheduler.remove_job(JOB_ID)
            logger.info("demo_emitter_stopped")

    def is_running(self) -> bool:
        return self.scheduler.running and self.scheduler.get_job(JOB_ID) is not None

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

"""
Demo Emitter Router
"""

from fastapi import APIRouter, Depends
import structlog

from app.config import settings
from app.dependencies import get_demo_emitter
from app.services.demo_emitter import DemoEmitter

logger = structlog.get_logger()

router = APIRouter(prefix="/api/demo", tags=["demo"])


def _status(emitter: DemoEmitter) -> dict:
    return {
        "running": emitter.is_running(),
        "intervalMs": emitter.interval_ms,
        "controllerConfigured": bool(settings.inference_controller_url),
    }


@router.post("/start")
async def start_demo(emitter: DemoEmitter = Depends(get_demo_emitter)):
    emitter.start()
    return {"success": True, **_status(emitter)}


@router.post("/stop")
async def stop_demo(emitter: DemoEmitter = Depends(get_demo_emitter)):
    emitter.stop()
    return {"success": True, **_status(emitter)}


@router.get("/status")
async def demo_status(emitter: DemoEmitter = Depends(get_demo_emitter)):
    return {"success": True, **_status(emitter)}

"""
Inference Proxy Router
Forwards classification requests to the external inference service
"""

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool
import structlog

from app.dependencies import get_inference_client
from app.models.inference import AnalyzeFullRequest, AnalyzeRequest
from app.services.inference_client import InferenceClient

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["inference"])


@router.post("/analyze")
async def analyze(
    request: AnalyzeRequest,
    client: InferenceClient = Depends(get_inference_client)
):
    """Classify plain email text with the simple classifier."""
    data = await run_in_threadpool(client.analyze, request.emailContent, request.context)
    return {"success": True, "data": data}


@router.post("/email/analyze-full")
async def analyze_full(
    request: AnalyzeFullRequest,
    client: InferenceClient = Depends(get_inference_client)
):
    """
    Run a raw or base64 MIME email through the full pipeline

    Returns:
        The decision envelope (decision, risk, phi_entities, ...)
    """
    data = await run_in_threadpool(client.analyze_mime, request.mime_raw, request.mime_b64)
    return {"success": True, "data": data}

"""
HITL Review Queue API Router
Pending listing, verdict application and queue statistics
"""

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool
import structlog

from app.dependencies import get_enrichment_service, get_stats_service, get_verdict_service
from app.models.review import VerdictRequest
from app.routers.cancellation import run_cancellable
from app.services.queue_enrichment import QueueEnrichmentService
from app.services.queue_stats import QueueStatsService
from app.services.verdict_resolution import VerdictResolutionService

logger = structlog.get_logger()

router = APIRouter(prefix="/api/hitl", tags=["hitl"])


@router.get("/pending")
async def list_pending(
    service: QueueEnrichmentService = Depends(get_enrichment_service)
):
    """
    List pending queue items enriched from their decision log record

    Items whose log record cannot be fetched are returned as stored.

    Returns:
        dict with success flag, count and items in scan order
    """
    items = await run_in_threadpool(service.list_pending)
    return {
        "success": True,
        "count": len(items),
        "items": items
    }


@router.get("/stats")
async def get_queue_stats(
    request: Request,
    service: QueueStatsService = Depends(get_stats_service)
):
    """
    Queue statistics over the whole review queue

    Returns:
        pending, reviewedToday, accuracy (IT_REVIEW excluded), avgTimeSeconds
    """
    stats = await run_cancellable(request, service.compute)
    return {
        "success": True,
        **stats.model_dump(by_alias=True)
    }


@router.post("/{queue_id}/verdict")
async def apply_verdict(
    queue_id: str,
    request: VerdictRequest,
    service: VerdictResolutionService = Depends(get_verdict_service)
):
    """
    Apply a human verdict (allow/block) to a queue item

    The queue item is resolved even when the log patch or feedback write
    fails; those show up as s3Updated=false / feedbackRecorded=false.

    Raises:
        400: verdict not allow/block
        404: queue item not found
    """
    result = await run_in_threadpool(
        service.resolve,
        queue_id,
        request.verdict,
        request.actor,
        request.notes,
    )
    logger.info("verdict_applied", queue_id=queue_id, verdict=result.verdict,
                log_updated=result.log_updated, feedback_recorded=result.feedback_recorded)
    return result.model_dump(by_alias=True)

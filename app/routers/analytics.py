"""
Decision Log Analytics API Router
Metrics, history and single-record detail over the decision log
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from starlette.concurrency import run_in_threadpool
import structlog

from app.dependencies import get_aggregation_engine, get_log_detail_service
from app.routers.cancellation import run_cancellable
from app.services.aggregation import AggregationEngine
from app.services.log_detail import LogDetailService

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["analytics"])


@router.get("/metrics")
async def get_metrics(
    request: Request,
    window_days: Optional[int] = Query(None, alias="windowDays", description="Lookback window in UTC days, today included"),
    engine: AggregationEngine = Depends(get_aggregation_engine)
):
    """
    Summary metrics over the last windowDays partitions

    Returns:
        dict with success flag and metrics (counts, distributions, avgElapsed, daily trend)
    """
    summary = await run_cancellable(request, engine.metrics, window_days)
    return {
        "success": True,
        "metrics": summary.model_dump(by_alias=True)
    }


@router.get("/history")
async def get_history(
    request: Request,
    date_from: Optional[str] = Query(None, alias="from", description="First day, YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, alias="to", description="Last day (inclusive), YYYY-MM-DD"),
    engine: AggregationEngine = Depends(get_aggregation_engine)
):
    """
    Flattened activity log for an inclusive UTC date range

    Rows are in partition/listing order; sort client-side for chronology.
    """
    result = await run_cancellable(request, engine.history, date_from, date_to)
    return {
        "success": True,
        "count": result.count,
        "skipped": result.skipped,
        "history": [row.model_dump(by_alias=True) for row in result.history]
    }


@router.get("/log/detail")
async def get_log_detail(
    bucket: Optional[str] = Query(None, description="Log bucket, defaults to the configured decision log bucket"),
    key: Optional[str] = Query(None, description="Object key of the decision record"),
    service: LogDetailService = Depends(get_log_detail_service)
):
    """
    One decision record with its resolved display fields

    Raises:
        400: key missing
        404: object not found
    """
    detail = await run_in_threadpool(service.get_detail, bucket, key)
    return {
        "success": True,
        **detail
    }

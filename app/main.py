"""
Email Triage HITL Backend - Main Application
FastAPI entry point for the review queue and decision log analytics
"""

from datetime import datetime, timezone

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from app.config import settings
from app.dependencies import get_demo_emitter, get_inference_client
from app.exceptions import TriageError
from app.routers import analytics_router, demo_router, hitl_router, inference_router
from app.services.demo_emitter import DemoEmitter
from app.services.inference_client import InferenceClient
from app.services.monitoring import init_sentry, setup_logging

setup_logging(settings.environment)
logger = structlog.get_logger()

# FastAPI App
app = FastAPI(
    title="Email Triage HITL Backend",
    description="Human-in-the-loop review workflow and decision log analytics for email threat triage",
    version="1.0.0",
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
)

app.add_middleware(CorrelationIdMiddleware)

# Register routers
app.include_router(hitl_router)
app.include_router(analytics_router)
app.include_router(inference_router)
app.include_router(demo_router)


@app.exception_handler(TriageError)
async def triage_error_handler(request: Request, exc: TriageError):
    """Render every domain error in the success/error envelope with its status."""
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message,
                     error_type=type(exc).__name__, status_code=exc.status_code)
    else:
        logger.info("request_rejected", path=request.url.path, error=exc.message,
                    status_code=exc.status_code)

    content = {"success": False, "error": exc.message}
    if exc.details is not None:
        content["details"] = jsonable_encoder(exc.details)
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("request_invalid", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Invalid request parameters",
            "details": jsonable_encoder(exc.errors())
        }
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("request_crashed", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "details": str(exc)}
    )


@app.on_event("startup")
async def startup_event():
    """Application Startup"""
    init_sentry()
    logger.info(
        "startup",
        environment=settings.environment,
        decision_log_bucket=settings.decision_log_bucket,
        hitl_collection=settings.hitl_collection,
        feedback_collection=settings.feedback_collection,
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Application Shutdown"""
    logger.info("shutdown")
    get_demo_emitter().shutdown()


@app.get("/")
async def root():
    """Root Endpoint"""
    return {
        "message": "Email Triage HITL Backend",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/api/health")
async def health_check(
    inference: InferenceClient = Depends(get_inference_client),
    emitter: DemoEmitter = Depends(get_demo_emitter)
):
    """
    Health Check Endpoint
    Reports configuration of the collaborators this backend talks to
    """
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "inferenceConfigured": inference.endpoint_configured,
        "controllerConfigured": inference.controller_configured,
        "demoEmitterRunning": emitter.is_running(),
        "hitlCollection": settings.hitl_collection,
        "feedbackCollection": settings.feedback_collection,
        "decisionLogBucket": settings.decision_log_bucket,
        "mongodbConfigured": bool(settings.mongodb_url),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development"
    )

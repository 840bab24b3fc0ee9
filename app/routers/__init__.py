"""
API routers package
"""

from app.routers.hitl import router as hitl_router
from app.routers.analytics import router as analytics_router
from app.routers.inference import router as inference_router
from app.routers.demo import router as demo_router

__all__ = ["hitl_router", "analytics_router", "inference_router", "demo_router"]

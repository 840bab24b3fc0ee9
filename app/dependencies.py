"""
Service Providers
FastAPI dependencies handing out process-wide store clients and services

Usage: service: VerdictResolutionService = Depends(get_verdict_service)
Tests swap any of these through app.dependency_overrides.
"""

from functools import lru_cache

from app.config import settings
from app.services.aggregation import AggregationEngine
from app.services.demo_emitter import DemoEmitter, replay_sample_email
from app.services.inference_client import InferenceClient
from app.services.log_detail import LogDetailService
from app.services.queue_enrichment import QueueEnrichmentService
from app.services.queue_stats import QueueStatsService
from app.services.storage import DecisionLogStore, FeedbackStore, ReviewQueueStore
from app.services.verdict_resolution import VerdictResolutionService


# Store handles are stateless connection wrappers, shared across requests

@lru_cache(maxsize=None)
def get_log_store() -> DecisionLogStore:
    return DecisionLogStore()


@lru_cache(maxsize=None)
def get_queue_store() -> ReviewQueueStore:
    return ReviewQueueStore()


@lru_cache(maxsize=None)
def get_feedback_store() -> FeedbackStore:
    return FeedbackStore()


@lru_cache(maxsize=None)
def get_inference_client() -> InferenceClient:
    return InferenceClient()


@lru_cache(maxsize=None)
def get_demo_emitter() -> DemoEmitter:
    client = get_inference_client()
    return DemoEmitter(emit=lambda: replay_sample_email(client, settings.demo_email_dir))


def get_enrichment_service() -> QueueEnrichmentService:
    return QueueEnrichmentService(get_queue_store(), get_log_store())


def get_verdict_service() -> VerdictResolutionService:
    return VerdictResolutionService(get_queue_store(), get_log_store(), get_feedback_store())


def get_aggregation_engine() -> AggregationEngine:
    return AggregationEngine(get_log_store())


def get_stats_service() -> QueueStatsService:
    return QueueStatsService(get_queue_store())


def get_log_detail_service() -> LogDetailService:
    return LogDetailService(get_log_store())

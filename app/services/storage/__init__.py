"""
Storage Services

Decision log objects on GCS; review queue and feedback collections on MongoDB.
"""

from .decision_log import DecisionLogStore, ObjectRef
from .review_queue import ReviewQueueStore
from .feedback import FeedbackStore

__all__ = ["DecisionLogStore", "ObjectRef", "ReviewQueueStore", "FeedbackStore"]

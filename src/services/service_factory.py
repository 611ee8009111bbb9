"""Factories for the process-wide evaluation objects.

The server builds one cache, one tracker and one service at startup and
injects them into the tools; nothing here is a module-level singleton.
"""

from __future__ import annotations

from core.cache import TTLCache
from core.interfaces import CodeEvaluator, TaskStore
from core.models import Evaluation, EvaluationLimits
from core.single_flight import SingleFlightTracker
from services.evaluation_service import EvaluationService


def build_cache(limits: EvaluationLimits) -> TTLCache[Evaluation]:
    return TTLCache(ttl_seconds=limits.ttl_seconds, maxsize=limits.max_size)


def build_tracker(limits: EvaluationLimits) -> SingleFlightTracker:
    return SingleFlightTracker(timeout_seconds=limits.timeout_seconds)


def build_evaluation_service(
    *,
    store: TaskStore,
    evaluator: CodeEvaluator,
    limits: EvaluationLimits,
) -> EvaluationService:
    return EvaluationService(
        store=store,
        evaluator=evaluator,
        cache=build_cache(limits),
        tracker=build_tracker(limits),
    )

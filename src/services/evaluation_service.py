"""Evaluation workflow: cache lookup, single-flight LLM review, persistence.

EvaluationService glues the task store and the code evaluator to the
process-wide evaluation cache and single-flight tracker it is given.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

from core.cache import TTLCache
from core.errors import NotFoundError, ValidationError
from core.interfaces import CodeEvaluator, TaskStore
from core.models import Evaluation, NewTask, Task
from core.scoring import average_score, filter_by_language
from core.single_flight import SingleFlightTracker

logger = logging.getLogger(__name__)

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def normalize_task_id(task_id: str) -> str:
    tid = (task_id or "").strip()
    if not tid:
        raise ValidationError("Task ID is required")
    if not _UUID_RE.match(tid):
        raise ValidationError("Invalid Task ID format")
    return tid.lower()


def _require_user_id(user_id: str) -> str:
    uid = (user_id or "").strip()
    if not uid:
        raise ValidationError("User ID is required")
    return uid


class EvaluationService:
    def __init__(
        self,
        *,
        store: TaskStore,
        evaluator: CodeEvaluator,
        cache: TTLCache[Evaluation],
        tracker: SingleFlightTracker,
    ) -> None:
        self._store = store
        self._evaluator = evaluator
        self._cache = cache
        self._tracker = tracker

    async def evaluate(self, task_id: str, *, cancel_event: Optional[asyncio.Event] = None) -> Evaluation:
        """Return the evaluation for `task_id`, running the LLM review at most once at a time.

        Raises:
          ValidationError for a malformed id or a task without code/language;
          NotFoundError if the task does not exist; AlreadyInProgressError,
          ProcessingTimeoutError or ProcessingCancelledError from the tracker;
          ExternalServiceError from the store or the evaluator.
        """
        tid = normalize_task_id(task_id)

        cached = self._cache.get(tid)
        if cached is not None:
            logger.debug("Evaluation cache hit for task %s", tid)
            if not cached.is_paid:
                # Payment flips the stored row, not the cached copy
                return await self._refresh_unpaid(tid, cached)
            return cached

        return await self._tracker.run(tid, lambda: self._evaluate_uncached(tid), cancel_event=cancel_event)

    async def _refresh_unpaid(self, task_id: str, cached: Evaluation) -> Evaluation:
        stored = await self._store.get_evaluation_for_task(task_id)
        if stored is None or stored == cached:
            return cached
        self._cache.set(task_id, stored)
        return stored

    async def _evaluate_uncached(self, task_id: str) -> Evaluation:
        task = await self._store.get_task(task_id)
        if task is None:
            raise NotFoundError(f"Task '{task_id}' not found")

        existing = await self._store.get_evaluation_for_task(task_id)
        if existing is not None:
            self._cache.set(task_id, existing)
            return existing

        if not task.code.strip() or not task.language.strip():
            raise ValidationError("Task is missing required code or language")

        draft = await self._evaluator.evaluate(task)

        saved = await self._store.insert_evaluation(
            Evaluation(
                task_id=task_id,
                user_id=task.user_id,
                score=draft.score,
                strengths=draft.strengths,
                improvements=draft.improvements,
                full_report=draft.full_report,
                fixed_code=draft.fixed_code,
                is_paid=False,
            )
        )
        self._cache.set(task_id, saved)
        logger.info("Evaluated task %s (score=%s)", task_id, saved.score)
        return saved

    def processing_status(self, task_id: Optional[str] = None) -> Dict[str, Any]:
        status: Dict[str, Any] = {"in_flight": self._tracker.count()}
        if task_id is not None:
            tid = normalize_task_id(task_id)
            status["task_id"] = tid
            status["in_progress"] = self._tracker.is_in_progress(tid)
            status["cached"] = tid in self._cache
        return status

    async def user_stats(self, user_id: str) -> Dict[str, Any]:
        uid = _require_user_id(user_id)

        evaluations = await self._store.list_evaluations(uid)
        return {
            "user_id": uid,
            "total_evaluations": len(evaluations),
            "paid_reports": sum(1 for e in evaluations if e.is_paid),
            "average_score": average_score(evaluations),
        }

    async def upload_task(
        self,
        *,
        user_id: str,
        title: str,
        code: str,
        language: str,
        description: str = "",
    ) -> Task:
        uid = _require_user_id(user_id)
        if not (title or "").strip():
            raise ValidationError("Please enter a task title")
        if not (code or "").strip():
            raise ValidationError("Please enter some code")
        if not (language or "").strip():
            raise ValidationError("Please choose a language")

        task = await self._store.insert_task(
            NewTask(
                user_id=uid,
                title=title.strip(),
                code=code.strip(),
                language=language.strip(),
                description=(description or "").strip(),
            )
        )
        logger.info("Uploaded task %s for user %s", task.id, uid)
        return task

    async def list_tasks(self, user_id: str, *, language: Optional[str] = None) -> Dict[str, Any]:
        """A user's tasks, newest first, each with its evaluation score and paid flag (or None)."""
        uid = _require_user_id(user_id)

        tasks: List[Task] = await self._store.list_tasks(uid)
        if language is not None and language.strip():
            tasks = filter_by_language(tasks, language)

        by_task = {e.task_id: e for e in await self._store.list_evaluations(uid)}
        rows = []
        for task in tasks:
            evaluation = by_task.get(task.id)
            rows.append(
                {
                    "id": task.id,
                    "title": task.title,
                    "language": task.language,
                    "created_at": task.created_at,
                    "evaluation": (
                        {"score": evaluation.score, "is_paid": evaluation.is_paid} if evaluation is not None else None
                    ),
                }
            )

        return {
            "tasks": rows,
            "total": len(rows),
            "evaluated": sum(1 for r in rows if r["evaluation"] is not None),
            "paid": sum(1 for r in rows if r["evaluation"] and r["evaluation"]["is_paid"]),
        }

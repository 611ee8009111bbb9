"""Supabase task store client.

This module provides a lightweight async wrapper around the Supabase
PostgREST API (`/rest/v1`) for the two tables the server touches:
`tasks` (uploaded code snippets) and `evaluations` (LLM verdicts).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from core.errors import ConfigurationError, ExternalServiceError
from core.models import Evaluation, NewTask, Task

logger = logging.getLogger(__name__)


# --- Row mapping ---
def task_from_row(row: Mapping[str, Any]) -> Task:
    return Task(
        id=str(row["id"]),
        user_id=str(row.get("user_id") or ""),
        language=row.get("language") or "",
        code=row.get("code") or "",
        description=row.get("description") or None,
        title=row.get("title") or "",
        created_at=row.get("created_at"),
    )


def task_to_row(task: NewTask) -> Dict[str, Any]:
    return {
        "user_id": task.user_id,
        "title": task.title,
        "code": task.code,
        "language": task.language,
        "description": task.description,
    }


def evaluation_from_row(row: Mapping[str, Any]) -> Evaluation:
    return Evaluation(
        id=str(row["id"]) if row.get("id") is not None else None,
        task_id=str(row.get("task_id") or ""),
        user_id=str(row.get("user_id") or ""),
        score=row.get("score") or 0,
        strengths=tuple(row.get("strengths") or ()),
        improvements=tuple(row.get("improvements") or ()),
        full_report=row.get("full_report") or "",
        fixed_code=row.get("fixed_code") or "",
        is_paid=bool(row.get("is_paid")),
        created_at=row.get("created_at"),
    )


def evaluation_to_row(evaluation: Evaluation) -> Dict[str, Any]:
    return {
        "task_id": evaluation.task_id,
        "user_id": evaluation.user_id,
        "score": evaluation.score,
        "strengths": list(evaluation.strengths),
        "improvements": list(evaluation.improvements),
        "full_report": evaluation.full_report,
        "fixed_code": evaluation.fixed_code,
        "is_paid": evaluation.is_paid,
    }


# --- Main Client ---
class SupabaseClient:
    REST_PATH = "/rest/v1"

    def __init__(self, *, url: str, service_key: str, timeout: float = 10.0, verify: bool = True) -> None:
        self._base_url = (url or "").rstrip("/")
        self._service_key = (service_key or "").strip()
        self._timeout = timeout
        self._verify = verify

    def _create_client(self, custom_headers: Optional[dict] = None) -> httpx.AsyncClient:
        if not self._base_url or not self._service_key:
            raise ConfigurationError("Supabase is not configured")

        headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
            "Accept": "application/json",
            **(custom_headers or {}),
        }
        return httpx.AsyncClient(
            base_url=f"{self._base_url}{self.REST_PATH}",
            headers=headers,
            timeout=self._timeout,
            verify=self._verify,
        )

    async def get_task(self, task_id: str) -> Optional[Task]:
        rows = await self._select("tasks", {"id": f"eq.{task_id}", "select": "*", "limit": "1"})
        return task_from_row(rows[0]) if rows else None

    async def list_tasks(self, user_id: str) -> List[Task]:
        rows = await self._select(
            "tasks",
            {"user_id": f"eq.{user_id}", "select": "*", "order": "created_at.desc"},
        )
        return [task_from_row(r) for r in rows]

    async def insert_task(self, task: NewTask) -> Task:
        row = await self._insert("tasks", task_to_row(task))
        return task_from_row(row)

    async def get_evaluation_for_task(self, task_id: str) -> Optional[Evaluation]:
        rows = await self._select("evaluations", {"task_id": f"eq.{task_id}", "select": "*", "limit": "1"})
        return evaluation_from_row(rows[0]) if rows else None

    async def list_evaluations(self, user_id: str) -> List[Evaluation]:
        rows = await self._select(
            "evaluations",
            {"user_id": f"eq.{user_id}", "select": "*", "order": "created_at.desc"},
        )
        return [evaluation_from_row(r) for r in rows]

    async def insert_evaluation(self, evaluation: Evaluation) -> Evaluation:
        row = await self._insert("evaluations", evaluation_to_row(evaluation))
        return evaluation_from_row(row)

    # --- Internal ---
    async def _select(self, table: str, params: Mapping[str, str]) -> List[Mapping[str, Any]]:
        async with self._create_client() as client:
            try:
                response = await client.get(f"/{table}", params=dict(params))
                if response.status_code == 404:
                    return []
                response.raise_for_status()
                rows = response.json()
            except httpx.HTTPStatusError as e:
                logger.warning("Supabase select on %s failed: %s", table, e.response.status_code)
                raise ExternalServiceError(f"Supabase returned an error: {e}") from e
            except httpx.HTTPError as e:
                raise ExternalServiceError(f"Failed to call Supabase: {e}") from e
            except ValueError as e:
                raise ExternalServiceError(f"Supabase returned a non-JSON body for {table}") from e

        if not isinstance(rows, list):
            raise ExternalServiceError(f"Unexpected Supabase response for {table}")
        return rows

    async def _insert(self, table: str, row: Mapping[str, Any]) -> Mapping[str, Any]:
        # return=representation makes PostgREST echo the stored row (with id)
        async with self._create_client(custom_headers={"Prefer": "return=representation"}) as client:
            try:
                response = await client.post(f"/{table}", json=[dict(row)])
                response.raise_for_status()
                rows = response.json()
            except httpx.HTTPStatusError as e:
                logger.warning("Supabase insert into %s failed: %s", table, e.response.status_code)
                raise ExternalServiceError(f"Failed to save into {table}: {e}") from e
            except httpx.HTTPError as e:
                raise ExternalServiceError(f"Failed to call Supabase: {e}") from e
            except ValueError as e:
                raise ExternalServiceError(f"Supabase returned a non-JSON body for {table}") from e

        if not isinstance(rows, list) or not rows or not isinstance(rows[0], Mapping):
            raise ExternalServiceError(f"Supabase returned no row for the saved {table} entry")
        return rows[0]

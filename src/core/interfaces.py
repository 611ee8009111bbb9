"""Core protocol and interface definitions.

Defines the TaskStore and CodeEvaluator protocols the evaluation service
depends on, so the Supabase and Groq clients (or test fakes) can be
swapped in without touching the service.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from core.models import Evaluation, EvaluationDraft, NewTask, Task


class TaskStore(Protocol):
    """Contract for the relational store holding tasks and evaluations."""
    async def get_task(self, task_id: str) -> Optional[Task]:
        ...

    async def insert_task(self, task: NewTask) -> Task:
        ...

    async def list_tasks(self, user_id: str) -> List[Task]:
        ...

    async def get_evaluation_for_task(self, task_id: str) -> Optional[Evaluation]:
        ...

    async def insert_evaluation(self, evaluation: Evaluation) -> Evaluation:
        ...

    async def list_evaluations(self, user_id: str) -> List[Evaluation]:
        ...


class CodeEvaluator(Protocol):
    """Contract for the LLM-backed reviewer."""
    async def evaluate(self, task: Task) -> EvaluationDraft:
        ...

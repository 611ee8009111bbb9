from dataclasses import replace

import pytest

import core.cache as cache_mod
from core.models import Evaluation, EvaluationDraft, Task


TASK_ID = "3f2b8c1e-9d4a-4b6e-8f10-2a3b4c5d6e7f"
OTHER_TASK_ID = "7a1c2d3e-4f50-4a6b-9c7d-8e9f0a1b2c3d"


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool registration."""

    def __init__(self) -> None:
        self.tools = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator


class FakeClock:
    """Controllable replacement for time.monotonic in cache tests."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStore:
    def __init__(self, tasks=None, evaluations=None):
        self.tasks = {t.id: t for t in (tasks or [])}
        self.evaluations = list(evaluations or [])
        self.inserted = []

    async def get_task(self, task_id):
        return self.tasks.get(task_id)

    async def insert_task(self, new_task):
        n = len(self.tasks) + 1
        task = Task(
            id=f"00000000-0000-4000-8000-{n:012d}",
            user_id=new_task.user_id,
            language=new_task.language,
            code=new_task.code,
            description=new_task.description or None,
            title=new_task.title,
            created_at=f"2026-01-{n:02d}T00:00:00Z",
        )
        self.tasks[task.id] = task
        return task

    async def list_tasks(self, user_id):
        owned = [t for t in self.tasks.values() if t.user_id == user_id]
        return sorted(owned, key=lambda t: t.created_at or "", reverse=True)

    async def get_evaluation_for_task(self, task_id):
        for e in self.evaluations:
            if e.task_id == task_id:
                return e
        return None

    async def insert_evaluation(self, evaluation):
        saved = replace(evaluation, id=f"eval-{len(self.inserted) + 1}")
        self.inserted.append(saved)
        self.evaluations.append(saved)
        return saved

    async def list_evaluations(self, user_id):
        return [e for e in self.evaluations if e.user_id == user_id]


class FakeEvaluator:
    def __init__(self, draft=None, *, gate=None, error=None):
        self.draft = draft or EvaluationDraft(
            score=80,
            strengths=("clear naming",),
            improvements=("handle empty input",),
            full_report="report",
            fixed_code="fixed()",
        )
        self.gate = gate
        self.error = error
        self.calls = []

    async def evaluate(self, task):
        self.calls.append(task.id)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.draft


def make_task(
    task_id=TASK_ID,
    *,
    user_id="user-1",
    language="python",
    code="print('hi')",
    title="Hello",
    created_at=None,
):
    return Task(id=task_id, user_id=user_id, language=language, code=code, title=title, created_at=created_at)


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def clock(monkeypatch):
    # Only for synchronous tests: asyncio's loop also reads time.monotonic.
    fake = FakeClock()
    monkeypatch.setattr(cache_mod.time, "monotonic", fake)
    return fake

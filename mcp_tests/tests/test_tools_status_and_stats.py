import pytest

from conftest import TASK_ID, FakeEvaluator, FakeStore, make_task
from core.models import Evaluation, EvaluationLimits
from services.service_factory import build_evaluation_service
from tools import processing_status as status_tool
from tools import user_stats as stats_tool


def _service(store=None):
    return build_evaluation_service(
        store=store or FakeStore(tasks=[make_task()]),
        evaluator=FakeEvaluator(),
        limits=EvaluationLimits(),
    )


@pytest.mark.asyncio
async def test_processing_status_reports_counts_and_cache(dummy_mcp):
    svc = _service()
    status_tool.register(dummy_mcp, service=svc)
    fn = dummy_mcp.tools["processing_status"]

    assert await fn() == {"in_flight": 0}

    before = await fn(task_id=TASK_ID)
    assert before == {"in_flight": 0, "task_id": TASK_ID, "in_progress": False, "cached": False}

    await svc.evaluate(TASK_ID)

    after = await fn(task_id=TASK_ID)
    assert after["cached"] is True
    assert after["in_progress"] is False


@pytest.mark.asyncio
async def test_user_stats_tool_delegates_to_service(dummy_mcp):
    store = FakeStore(evaluations=[Evaluation(task_id=TASK_ID, user_id="user-1", score=64, is_paid=True)])
    stats_tool.register(dummy_mcp, service=_service(store))
    fn = dummy_mcp.tools["user_stats"]

    out = await fn(user_id="user-1")

    assert out["total_evaluations"] == 1
    assert out["paid_reports"] == 1
    assert out["average_score"] == 64.0

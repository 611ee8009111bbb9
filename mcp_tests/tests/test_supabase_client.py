import json

import httpx
import pytest

from clients.supabase_client import SupabaseClient
from core.errors import ConfigurationError, ExternalServiceError
from core.models import Evaluation, NewTask


def _patch_client(monkeypatch, handler):
    orig = httpx.AsyncClient

    def patched_async_client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return orig(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", patched_async_client)


def _client():
    return SupabaseClient(url="https://db.example/", service_key="svc", timeout=5.0, verify=False)


@pytest.mark.asyncio
async def test_get_task_maps_row(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/rest/v1/tasks"
        assert request.url.params["id"] == "eq.t-1"
        assert request.headers["apikey"] == "svc"
        assert request.headers["Authorization"] == "Bearer svc"
        return httpx.Response(
            200,
            json=[{"id": "t-1", "user_id": "u-1", "language": "go", "code": "package main", "description": ""}],
        )

    _patch_client(monkeypatch, handler)

    task = await _client().get_task("t-1")
    assert task.id == "t-1"
    assert task.language == "go"
    assert task.description is None


@pytest.mark.asyncio
async def test_get_task_missing_returns_none(monkeypatch):
    _patch_client(monkeypatch, lambda request: httpx.Response(200, json=[]))

    assert await _client().get_task("t-404") is None


@pytest.mark.asyncio
async def test_insert_evaluation_returns_saved_row(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/rest/v1/evaluations"
        assert request.headers["Prefer"] == "return=representation"
        rows = json.loads(request.content)
        assert rows[0]["strengths"] == ["a"]
        assert rows[0]["is_paid"] is False
        return httpx.Response(201, json=[{**rows[0], "id": "e-1", "created_at": "2026-01-01T00:00:00Z"}])

    _patch_client(monkeypatch, handler)

    saved = await _client().insert_evaluation(
        Evaluation(task_id="t-1", user_id="u-1", score=70, strengths=("a",), improvements=("b",))
    )
    assert saved.id == "e-1"
    assert saved.strengths == ("a",)
    assert saved.created_at == "2026-01-01T00:00:00Z"


@pytest.mark.asyncio
async def test_list_evaluations_filters_by_user(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["user_id"] == "eq.u-1"
        return httpx.Response(
            200,
            json=[
                {"id": "e-1", "task_id": "t-1", "user_id": "u-1", "score": 60, "is_paid": True},
                {"id": "e-2", "task_id": "t-2", "user_id": "u-1", "score": 90, "is_paid": False},
            ],
        )

    _patch_client(monkeypatch, handler)

    rows = await _client().list_evaluations("u-1")
    assert [e.id for e in rows] == ["e-1", "e-2"]
    assert rows[0].is_paid is True


@pytest.mark.asyncio
async def test_server_error_raises_external_service_error(monkeypatch):
    _patch_client(monkeypatch, lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(ExternalServiceError):
        await _client().get_evaluation_for_task("t-1")


@pytest.mark.asyncio
async def test_missing_configuration_raises():
    c = SupabaseClient(url="", service_key="")
    with pytest.raises(ConfigurationError):
        await c.get_task("t-1")


@pytest.mark.asyncio
async def test_select_non_json_body_raises_external_service_error(monkeypatch):
    _patch_client(monkeypatch, lambda request: httpx.Response(200, text="<html>gateway</html>"))

    with pytest.raises(ExternalServiceError, match="non-JSON"):
        await _client().get_task("t-1")


@pytest.mark.asyncio
async def test_insert_non_json_body_raises_external_service_error(monkeypatch):
    _patch_client(monkeypatch, lambda request: httpx.Response(201, text="<html>gateway</html>"))

    with pytest.raises(ExternalServiceError, match="non-JSON"):
        await _client().insert_evaluation(Evaluation(task_id="t-1", user_id="u-1", score=1))


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"id": "e-1"}, [], ["e-1"]])
async def test_insert_unexpected_json_shape_raises(monkeypatch, body):
    _patch_client(monkeypatch, lambda request: httpx.Response(201, json=body))

    with pytest.raises(ExternalServiceError, match="no row"):
        await _client().insert_evaluation(Evaluation(task_id="t-1", user_id="u-1", score=1))


@pytest.mark.asyncio
async def test_insert_task_posts_row_and_maps_result(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/rest/v1/tasks"
        assert request.headers["Prefer"] == "return=representation"
        rows = json.loads(request.content)
        assert rows == [
            {"user_id": "u-1", "title": "Sum", "code": "sum(xs)", "language": "python", "description": ""}
        ]
        return httpx.Response(201, json=[{**rows[0], "id": "t-9", "created_at": "2026-01-02T00:00:00Z"}])

    _patch_client(monkeypatch, handler)

    task = await _client().insert_task(NewTask(user_id="u-1", title="Sum", language="python", code="sum(xs)"))
    assert task.id == "t-9"
    assert task.title == "Sum"
    assert task.description is None
    assert task.created_at == "2026-01-02T00:00:00Z"


@pytest.mark.asyncio
async def test_list_tasks_orders_newest_first(monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/rest/v1/tasks"
        assert request.url.params["user_id"] == "eq.u-1"
        assert request.url.params["order"] == "created_at.desc"
        return httpx.Response(200, json=[{"id": "t-2", "user_id": "u-1", "title": "B"}, {"id": "t-1", "user_id": "u-1"}])

    _patch_client(monkeypatch, handler)

    tasks = await _client().list_tasks("u-1")
    assert [t.id for t in tasks] == ["t-2", "t-1"]
    assert tasks[0].title == "B"
    assert tasks[1].title == ""

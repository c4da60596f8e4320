"""Tests for the todos CRUD endpoints with the db layer mocked."""

import asyncio
from unittest.mock import patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.core.auth_middleware import AuthContext, require_auth
from app.core.schemas_todos import Todo, TodoFilter, TodoStats
from app.main import app

USER_ID = uuid4()


def _todo(title="Buy milk", **overrides):
    data = {
        "id": uuid4(),
        "user_id": USER_ID,
        "title": title,
        "created_at": "2026-10-18T09:00:00+00:00",
        "updated_at": "2026-10-18T09:00:00+00:00",
        **overrides,
    }
    return Todo(**data)


@pytest.fixture
def client():
    app.dependency_overrides[require_auth] = lambda: AuthContext(user_id=USER_ID, token="t")
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.pop(require_auth, None)


@pytest.fixture
def todos_db():
    with patch("app.api.todos.todos_db") as mock:
        yield mock


@pytest.fixture
def sync_task():
    with patch("app.api.todos.run_sync_in_background") as mock:
        yield mock


class TestListAndStats:
    def test_list(self, client, todos_db):
        todos_db.list_todos.return_value = [_todo("B"), _todo("A")]

        response = client.get("/v1/todos", params={"filter": "active", "search": "milk"})

        assert response.status_code == 200
        assert [t["title"] for t in response.json()] == ["B", "A"]
        todos_db.list_todos.assert_called_once_with(USER_ID, todo_filter=TodoFilter.ACTIVE, search="milk")

    def test_bad_filter(self, client, todos_db):
        assert client.get("/v1/todos", params={"filter": "someday"}).status_code == 400

    def test_stats_route_not_shadowed_by_id(self, client, todos_db):
        todos_db.get_todo_stats.return_value = TodoStats(total=4, completed=1, pending=3)

        response = client.get("/v1/todos/stats")

        assert response.status_code == 200
        assert response.json() == {"total": 4, "completed": 1, "pending": 3}

    def test_requires_auth(self):
        assert TestClient(app).get("/v1/todos").status_code == 401


class TestCreate:
    def test_create_schedules_sync(self, client, todos_db, sync_task):
        todos_db.create_todo.return_value = _todo("Buy milk")

        response = client.post("/v1/todos", json={"title": "Buy milk"})

        assert response.status_code == 201
        assert response.json()["title"] == "Buy milk"
        sync_task.assert_called_once_with(USER_ID)

    def test_blank_title(self, client, todos_db, sync_task):
        todos_db.create_todo.side_effect = ValueError("Title is required")

        response = client.post("/v1/todos", json={"title": " "})

        assert response.status_code == 400
        sync_task.assert_not_called()

    def test_missing_title(self, client, todos_db):
        assert client.post("/v1/todos", json={"notes": "x"}).status_code == 400


class TestItemRoutes:
    def test_get(self, client, todos_db):
        todo = _todo()
        todos_db.get_todo.return_value = todo

        response = client.get(f"/v1/todos/{todo.id}")

        assert response.status_code == 200
        assert response.json()["id"] == str(todo.id)

    def test_get_missing(self, client, todos_db):
        todos_db.get_todo.return_value = None
        assert client.get(f"/v1/todos/{uuid4()}").status_code == 404

    def test_update_text_schedules_sync(self, client, todos_db, sync_task):
        todo = _todo("Buy oat milk")
        todos_db.update_todo.return_value = todo

        response = client.post(f"/v1/todos/{todo.id}", json={"title": "Buy oat milk"})

        assert response.status_code == 200
        sync_task.assert_called_once_with(USER_ID)

    def test_update_completion_only(self, client, todos_db, sync_task):
        todo = _todo(is_completed=True)
        todos_db.update_todo.return_value = todo

        response = client.post(f"/v1/todos/{todo.id}", json={"is_completed": True})

        assert response.status_code == 200
        sync_task.assert_not_called()

    def test_update_missing(self, client, todos_db, sync_task):
        todos_db.update_todo.return_value = None
        assert client.post(f"/v1/todos/{uuid4()}", json={"title": "x"}).status_code == 404
        sync_task.assert_not_called()

    def test_toggle(self, client, todos_db):
        todo = _todo(is_completed=True)
        todos_db.toggle_todo.return_value = todo

        response = client.post(f"/v1/todos/{todo.id}/toggle")

        assert response.status_code == 200
        assert response.json()["is_completed"] is True

    def test_delete(self, client, todos_db):
        todo_id = uuid4()
        todos_db.delete_todo.return_value = True

        response = client.post(f"/v1/todos/{todo_id}/delete")

        assert response.status_code == 200
        assert response.json() == {"deleted": True, "id": str(todo_id)}

    def test_delete_missing(self, client, todos_db):
        todos_db.delete_todo.return_value = False
        assert client.post(f"/v1/todos/{uuid4()}/delete").status_code == 404

    def test_http_delete_not_allowed(self, client, todos_db):
        assert client.delete(f"/v1/todos/{uuid4()}").status_code == 405

    def test_invalid_id(self, client, todos_db):
        assert client.get("/v1/todos/not-a-uuid").status_code == 400


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class TestDbCallsOffEventLoop:
    """Supabase calls are blocking; routes hand them to a worker thread."""

    def test_list(self, client, todos_db):
        seen = []
        todos_db.list_todos.side_effect = lambda *a, **kw: seen.append(_loop_running()) or []

        assert client.get("/v1/todos").status_code == 200
        assert seen == [False]

    def test_create(self, client, todos_db, sync_task):
        seen = []
        todo = _todo()
        todos_db.create_todo.side_effect = lambda *a, **kw: seen.append(_loop_running()) or todo

        assert client.post("/v1/todos", json={"title": "Buy milk"}).status_code == 201
        assert seen == [False]

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.api.repositories import InMemoryRepository


def parse_ts(value: str) -> datetime:
    # Pydantic renders UTC as a trailing 'Z'
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def assert_task_shape(task: dict):
    assert set(task) == {"id", "title", "done", "createdAt", "updatedAt"}
    assert isinstance(task["id"], str) and task["id"]
    assert isinstance(task["title"], str)
    assert isinstance(task["done"], bool)
    parse_ts(task["createdAt"])
    parse_ts(task["updatedAt"])


def create(client: TestClient, title="Test Task", **extra) -> dict:
    res = client.post("/api/tasks", json={"title": title, **extra})
    assert res.status_code == 201, res.text
    return res.json()


class TestHealth:
    def test_health_ok(self, client):
        res = client.get("/api/health")
        assert res.status_code == 200
        data = res.json()
        assert data["ok"] is True
        assert data["driver"] == "memory"
        assert data["uptime"] >= 0

    def test_health_reports_failed_ping(self, settings):
        class DownRepository(InMemoryRepository):
            def ping(self):
                raise ConnectionError("store down")

        app = create_app(settings, repository=DownRepository())
        # no context manager: skip the startup ping
        res = TestClient(app).get("/api/health")
        assert res.status_code == 500
        data = res.json()
        assert data["ok"] is False
        assert data["driver"] == "memory"
        assert "uptime" in data

    def test_startup_fails_when_store_unreachable(self, settings):
        class DownRepository(InMemoryRepository):
            def ping(self):
                raise ConnectionError("store down")

        app = create_app(settings, repository=DownRepository())
        with pytest.raises(Exception):
            with TestClient(app):
                pass


class TestDebug:
    def test_echoes_ip_and_proxy_headers(self, client):
        res = client.get(
            "/api/debug",
            headers={"X-Real-IP": "10.0.0.7", "X-Forwarded-For": "10.0.0.7, 10.0.0.1"},
        )
        assert res.status_code == 200
        data = res.json()
        assert data["ip"] == "testclient"
        assert data["headers"] == {
            "host": "testserver",
            "x-real-ip": "10.0.0.7",
            "x-forwarded-for": "10.0.0.7, 10.0.0.1",
            "x-forwarded-proto": None,
        }


class TestTasksCRUD:
    def test_create_trims_title_and_defaults_done(self, client):
        task = create(client, title="  Buy milk  ")
        assert_task_shape(task)
        assert task["title"] == "Buy milk"
        assert task["done"] is False

    def test_create_with_done(self, client):
        task = create(client, title="Already done", done=True)
        assert task["done"] is True

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (2, True),
            (1, True),
            (0, False),
            ("maybe", True),
            ("false", True),
            ("", False),
            ([1], True),
            ([], True),
            ({"a": 1}, True),
            (False, False),
        ],
    )
    def test_create_coerces_done_by_truthiness(self, client, raw, expected):
        task = create(client, title="Coerced", done=raw)
        assert task["done"] is expected

    @pytest.mark.parametrize("raw, expected", [(2, True), ("maybe", True), ("", False), ({}, True), (0, False)])
    def test_update_coerces_done_by_truthiness(self, client, raw, expected):
        task = create(client, title="Coerced", done=not expected)
        res = client.put(f"/api/tasks/{task['id']}", json={"done": raw})
        assert res.status_code == 200
        assert res.json()["done"] is expected
        assert res.json()["title"] == "Coerced"

    @pytest.mark.parametrize("body", [{"title": ""}, {"title": "   "}, {"title": None}, {}, {"done": True}])
    def test_create_blank_title_rejected_and_not_persisted(self, client, repo, body):
        res = client.post("/api/tasks", json=body)
        assert res.status_code == 400
        assert res.json() == {"error": "title required"}
        assert repo.list() == []

    def test_create_wrong_type_is_validation_error(self, client):
        res = client.post("/api/tasks", json={"title": ["not", "a", "string"]})
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)

    def test_ids_are_unique(self, client):
        ids = {create(client, title=f"Task {i}")["id"] for i in range(20)}
        assert len(ids) == 20

    def test_list_newest_first(self, client):
        a = create(client, title="A")
        b = create(client, title="B")
        res = client.get("/api/tasks")
        assert res.status_code == 200
        assert [t["id"] for t in res.json()] == [b["id"], a["id"]]

    def test_list_empty(self, client):
        res = client.get("/api/tasks")
        assert res.status_code == 200
        assert res.json() == []

    def test_partial_update_done_only(self, client):
        task = create(client, title="Partial")
        res = client.put(f"/api/tasks/{task['id']}", json={"done": True})
        assert res.status_code == 200
        updated = res.json()
        assert updated["id"] == task["id"]
        assert updated["title"] == "Partial"
        assert updated["done"] is True
        assert updated["createdAt"] == task["createdAt"]
        assert parse_ts(updated["updatedAt"]) >= parse_ts(task["updatedAt"])

    def test_partial_update_title_only_trims(self, client):
        task = create(client, title="Old", done=True)
        res = client.put(f"/api/tasks/{task['id']}", json={"title": "  New  "})
        assert res.status_code == 200
        assert res.json()["title"] == "New"
        assert res.json()["done"] is True

    def test_update_blank_title_rejected(self, client, repo):
        task = create(client, title="Keep me")
        res = client.put(f"/api/tasks/{task['id']}", json={"title": "  "})
        assert res.status_code == 400
        assert res.json() == {"error": "title required"}
        assert repo.get(task["id"])["title"] == "Keep me"

    @pytest.mark.parametrize("body", [{"done": True}, {"title": "x"}, {"title": " "}, {}])
    def test_update_unknown_id_is_404(self, client, repo, body):
        existing = create(client, title="Untouched")
        res = client.put("/api/tasks/does-not-exist", json=body)
        assert res.status_code == 404
        assert res.json() == {"error": "not found"}
        stored = repo.list()
        assert len(stored) == 1
        assert stored[0]["title"] == "Untouched"
        assert stored[0]["done"] is False
        assert stored[0]["id"] == existing["id"]

    def test_delete_task(self, client):
        task = create(client, title="ToDelete")

        res_del = client.delete(f"/api/tasks/{task['id']}")
        assert res_del.status_code == 204
        assert res_del.text == ""

        ids = [t["id"] for t in client.get("/api/tasks").json()]
        assert task["id"] not in ids

        # Deleting again should be 404
        res_again = client.delete(f"/api/tasks/{task['id']}")
        assert res_again.status_code == 404
        assert res_again.json() == {"error": "not found"}

    def test_delete_removes_exactly_one(self, client):
        keep = create(client, title="Keep")
        drop = create(client, title="Drop")
        assert client.delete(f"/api/tasks/{drop['id']}").status_code == 204
        assert [t["id"] for t in client.get("/api/tasks").json()] == [keep["id"]]


class TestEndToEnd:
    def test_full_lifecycle(self, client):
        res = client.post("/api/tasks", json={"title": "Write report"})
        assert res.status_code == 201
        task = res.json()
        assert task["id"]

        listed = client.get("/api/tasks").json()
        assert len(listed) == 1
        assert listed[0]["id"] == task["id"]
        assert listed[0]["done"] is False

        res_put = client.put(f"/api/tasks/{task['id']}", json={"done": True})
        assert res_put.status_code == 200
        assert res_put.json()["done"] is True

        assert client.delete(f"/api/tasks/{task['id']}").status_code == 204
        assert client.get("/api/tasks").json() == []


class TestUnexpectedErrors:
    def test_store_failure_becomes_500(self, settings):
        class BrokenRepository(InMemoryRepository):
            def list(self):
                raise RuntimeError("cursor died")

        app = create_app(settings, repository=BrokenRepository())
        with TestClient(app, raise_server_exceptions=False) as c:
            res = c.get("/api/tasks")
        assert res.status_code == 500
        assert res.json() == {"error": "internal error"}

    def test_500_carries_cors_headers(self, settings):
        class BrokenRepository(InMemoryRepository):
            def list(self):
                raise RuntimeError("cursor died")

        app = create_app(settings, repository=BrokenRepository())
        with TestClient(app, raise_server_exceptions=False) as c:
            res = c.get("/api/tasks", headers={"Origin": "http://localhost:3000"})
        assert res.status_code == 500
        assert res.json() == {"error": "internal error"}
        assert res.headers["access-control-allow-origin"] == "http://localhost:3000"


class TestCors:
    def test_allowed_origin_preflight(self, client):
        res = client.options(
            "/api/tasks",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "PUT",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert res.status_code == 200
        assert res.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_unknown_origin_not_allowed(self, client):
        res = client.get("/api/tasks", headers={"Origin": "http://evil.example"})
        assert "access-control-allow-origin" not in res.headers

"""Tests for main.py — HTTP health and tool listing."""
from fastapi.testclient import TestClient

from codearts_chat.main import app_factory, create_app


class TestHttpApi:
    def test_health(self, registry):
        client = TestClient(create_app(registry))
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert "T" in body["timestamp"]

    def test_list_tools(self, registry):
        client = TestClient(create_app(registry))
        tools = client.get("/api/tools").json()
        assert [t["name"] for t in tools] == ["get_environments", "create_environment", "get_gitops_runtime"]
        create = tools[1]
        assert create["required_params"] == ["name", "resource_type", "context"]
        assert "resource_type" in create["params"]

    def test_unknown_route(self, registry):
        client = TestClient(create_app(registry))
        assert client.get("/api/nope").status_code == 404

    def test_app_factory_uses_default_registry(self):
        client = TestClient(app_factory())
        assert len(client.get("/api/tools").json()) == 3

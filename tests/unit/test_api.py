"""Unit tests for FastAPI endpoints."""

from __future__ import annotations

import pytest
from conftest import verdict
from fastapi.testclient import TestClient

from x_news_agent.core.config import Settings, get_settings
from x_news_agent.main import create_app


@pytest.fixture
def agent(make_agent):
    return make_agent()


@pytest.fixture
def app(agent):
    return create_app(agent=agent)


@pytest.fixture
def client(app):
    """Test client without lifespan, so no scheduler task is started."""
    return TestClient(app)


class TestHealthEndpoint:
    def test_health_returns_200(self, client):
        resp = client.get("/healthz/")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["agentRunning"] is False

    def test_health_includes_environment(self, client):
        assert "environment" in client.get("/healthz/").json()


class TestRootEndpoint:
    def test_root_returns_service_info(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["service"] == "X News Agent"


class TestStatusEndpoint:
    def test_initial_status(self, client):
        resp = client.get("/status")
        assert resp.status_code == 200
        assert resp.json() == {
            "isRunning": False,
            "lastRun": None,
            "stats": {"totalRuns": 0, "emailsSent": 0, "postsProcessed": 0},
            "cycleInProgress": False,
        }

    def test_status_excludes_logs(self, client):
        assert "logs" not in client.get("/status").json()

    def test_api_prefix_alias(self, client):
        assert client.get("/api/status").json() == client.get("/status").json()


class TestStartStop:
    def test_start_runs_one_cycle(self, client, agent):
        resp = client.post("/start")

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Agent started successfully"}
        status = client.get("/status").json()
        assert status["isRunning"] is True
        assert status["lastRun"] is not None
        assert status["stats"] == {"totalRuns": 1, "emailsSent": 1, "postsProcessed": 2}
        assert len(agent.notifier.sent) == 1

    def test_second_start_is_rejected(self, client, agent):
        client.post("/start")
        resp = client.post("/start")

        assert resp.json() == {"success": False, "message": "Agent already running"}
        assert client.get("/status").json()["stats"]["totalRuns"] == 1
        assert agent.fetcher.calls == 1

    def test_stop(self, client):
        client.post("/start")
        resp = client.post("/stop")

        assert resp.json() == {"success": True, "message": "Agent stopped"}
        assert client.get("/status").json()["isRunning"] is False

    def test_restart_after_stop(self, client):
        client.post("/start")
        client.post("/stop")
        assert client.post("/api/start").json()["success"] is True
        assert client.get("/status").json()["stats"]["totalRuns"] == 2


class TestNoNewsCycle:
    def test_email_count_unchanged(self, make_agent):
        agent = make_agent(replies=[verdict(0.4, False), verdict(0.1, False)])
        client = TestClient(create_app(agent=agent))

        client.post("/start")

        stats = client.get("/status").json()["stats"]
        assert stats == {"totalRuns": 1, "emailsSent": 0, "postsProcessed": 2}
        assert agent.notifier.sent == []


class TestLogsEndpoint:
    def test_logs_newest_first(self, client):
        client.post("/start")
        client.post("/stop")

        logs = client.get("/logs").json()
        assert logs[0]["message"] == "Agent stopped via API"
        assert logs[0]["type"] == "info"
        assert logs[-1]["message"] == "Agent started via API"
        assert logs[-1]["type"] == "success"
        assert {"timestamp", "message", "type"} <= set(logs[0])

    def test_logs_bounded(self, client, agent):
        for i in range(150):
            agent.log.add(f"message {i}")
        logs = client.get("/api/logs").json()
        assert len(logs) == 100
        assert logs[0]["message"] == "message 149"


class TestControlAuth:
    @pytest.fixture
    def secured_client(self, app):
        app.dependency_overrides[get_settings] = lambda: Settings(control_api_key="s3cret")
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_missing_key_rejected(self, secured_client):
        assert secured_client.post("/start").status_code == 403
        assert secured_client.post("/stop").status_code == 403

    def test_valid_key_accepted(self, secured_client):
        resp = secured_client.post("/stop", headers={"X-API-Key": "s3cret"})
        assert resp.status_code == 200

    def test_read_routes_stay_open(self, secured_client):
        assert secured_client.get("/status").status_code == 200
        assert secured_client.get("/logs").status_code == 200

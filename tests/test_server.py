"""
Tests for the HTTP API. The coordinator is replaced through
``app.dependency_overrides`` so no browser is launched.
"""

import pytest
from fastapi.testclient import TestClient

from trustscan.errors import SessionError
from trustscan.report import ReportAssembler
from trustscan.run_config import Settings
from trustscan.server import app, get_coordinator_factory, get_settings


class StubCoordinator:
    instances = []

    def __init__(self, config, settings):
        self.config = config
        self.settings = settings
        StubCoordinator.instances.append(self)

    async def run(self):
        return ReportAssembler(self.config.start_url).assemble([], [])


class FailingCoordinator(StubCoordinator):

    async def run(self):
        raise SessionError("Chromium failed to launch")


@pytest.fixture
def client(tmp_path):
    StubCoordinator.instances = []
    app.dependency_overrides[get_settings] = lambda: Settings(reports_dir=str(tmp_path / "reports"))
    app.dependency_overrides[get_coordinator_factory] = lambda: StubCoordinator
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_scan_returns_report(client, tmp_path):
    response = client.post("/scan", json={"url": "example.com", "maxPages": 3, "maxDepth": 1})
    assert response.status_code == 200
    body = response.json()
    assert body["startUrl"] == "https://example.com"
    assert body["score"]["total"] == 100
    assert body["trustSummary"] == "High Trust"

    config = StubCoordinator.instances[0].config
    assert (config.max_pages, config.max_depth) == (3, 1)
    assert (tmp_path / "reports" / "example_com.md").exists()


def test_api_alias(client):
    response = client.post("/api/scan", json={"url": "https://example.com"})
    assert response.status_code == 200
    config = StubCoordinator.instances[0].config
    assert (config.max_pages, config.max_depth) == (10, 2)


def test_scan_with_cookie_auth(client):
    response = client.post("/scan", json={
        "url": "https://example.com",
        "auth": {"type": "cookies", "cookies": [{"name": "sid", "value": "1", "domain": "example.com"}]},
    })
    assert response.status_code == 200
    assert StubCoordinator.instances[0].config.auth is not None


def test_missing_url(client):
    response = client.post("/scan", json={})
    assert response.status_code == 422


def test_invalid_url(client):
    response = client.post("/scan", json={"url": "https://example.comhttps://example.com"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid URL"
    assert StubCoordinator.instances == []


def test_invalid_auth(client):
    response = client.post("/scan", json={"url": "https://example.com", "auth": {"type": "oauth"}})
    assert response.status_code == 400
    assert "unknown auth type" in response.json()["details"]


def test_invalid_limits(client):
    response = client.post("/scan", json={"url": "https://example.com", "maxPages": 0})
    assert response.status_code == 422


def test_scan_failure(client):
    app.dependency_overrides[get_coordinator_factory] = lambda: FailingCoordinator
    response = client.post("/scan", json={"url": "https://example.com"})
    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to scan website.",
        "details": "Chromium failed to launch",
    }

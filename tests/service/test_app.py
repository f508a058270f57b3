"""Tests for the FastAPI service mode."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from readyscan import __version__
from readyscan.config import ReadyScanConfig
from readyscan.engine import ReadinessEngine
from readyscan.errors import LocatorInvalid, SourceUnavailable
from readyscan.models import Report
from readyscan.service import create_app
from tests._fixtures.memory_source import MemorySource


class _StubEngine(ReadinessEngine):
    def __init__(self, root: Path) -> None:
        super().__init__(ReadyScanConfig(root=root))
        self.targets: list[str] = []

    def analyze_target(self, target: str, *, cancel: threading.Event | None = None) -> Report:
        self.targets.append(target)
        if target == "missing/repo":
            raise SourceUnavailable("Repository not found: missing/repo")
        if "/" not in target:
            raise LocatorInvalid(f"Could not resolve '{target}'")
        return self.analyze(MemorySource({"package.json": '{"dependencies": {"express": "^4"}}'}))


@pytest.fixture
def engine(tmp_path: Path) -> _StubEngine:
    return _StubEngine(tmp_path)


@pytest.fixture
def client(engine: _StubEngine) -> TestClient:
    return TestClient(create_app(lambda: engine))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__}


def test_analyze_returns_report(client: TestClient, engine: _StubEngine) -> None:
    response = client.post("/analyze", json={"target": "octo/app"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["verdict"] == "Low"
    assert payload["offlineStatus"] == "OnlineOnly"
    assert payload["evidence"][0]["signal"] == "Dep: express"
    assert payload["project"]["name"] == "memory/project"
    assert engine.targets == ["octo/app"]


def test_analyze_applies_request_token(client: TestClient, engine: _StubEngine) -> None:
    client.post("/analyze", json={"target": "octo/app", "token": "abc123"})

    assert engine.config.remote.token == "abc123"


def test_invalid_locator_is_bad_request(client: TestClient) -> None:
    response = client.post("/analyze", json={"target": "nonsense"})

    assert response.status_code == 400
    assert "nonsense" in response.json()["detail"]


def test_unavailable_source_is_not_found(client: TestClient) -> None:
    response = client.post("/analyze", json={"target": "missing/repo"})

    assert response.status_code == 404


def test_request_without_target_is_rejected(client: TestClient) -> None:
    response = client.post("/analyze", json={})

    assert response.status_code == 422

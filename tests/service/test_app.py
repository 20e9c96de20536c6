"""Tests for the FastAPI service mode."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from depgroups.planner import PlanResult, Planner
from depgroups.service import create_app
from tests._fixtures.repo_builder import RepoBuilder


class _RecordingPlanner(Planner):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[dict[str, object]] = []

    def plan(self, path, tier=None, *, max_depth=None) -> PlanResult:  # type: ignore[override]
        self.calls.append({"path": path, "tier": tier, "max_depth": max_depth})
        return super().plan(path, tier, max_depth=max_depth)


@pytest.fixture
def planner() -> _RecordingPlanner:
    return _RecordingPlanner()


@pytest.fixture
def client(planner: _RecordingPlanner) -> TestClient:
    return TestClient(create_app(lambda: planner))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_plan_endpoint(
    client: TestClient, planner: _RecordingPlanner, repo_builder: RepoBuilder
) -> None:
    repo_builder.write(
        {"package.json": json.dumps({"dependencies": {"vue": "^3.4.0", "pinia": "^2.1.0"}})}
    )

    response = client.post(
        "/plan", json={"path": str(repo_builder.path()), "tier": "pro", "max_depth": 2}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["tier"] == "pro"
    assert data["grouped"] is True
    npm = data["ecosystems"]["npm"]
    assert npm["manifest"] == "package.json"
    assert npm["dependencies"] == 2
    assert npm["primary"] == "vue"
    assert npm["frameworks"][0]["packages"] == ["pinia", "vue"]
    assert data["configuration"]["updates"][0]["groups"]["vue-core"]["patterns"] == [
        "vue",
        "vue-router",
        "pinia",
    ]
    assert data["yaml"].startswith("# Dependabot configuration generated by depgroups")
    assert planner.calls == [{"path": str(repo_builder.path()), "tier": "pro", "max_depth": 2}]


def test_plan_endpoint_empty_project(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/plan", json={"path": str(tmp_path)})

    assert response.status_code == 200
    assert response.json()["configuration"] == {"version": 2, "updates": []}


def test_plan_endpoint_missing_path(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/plan", json={"path": str(tmp_path / "missing")})

    assert response.status_code == 404


def test_plan_endpoint_unknown_tier(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/plan", json={"path": str(tmp_path), "tier": "gold"})

    assert response.status_code == 400
    assert "gold" in response.json()["detail"]

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.github.errors import NotFoundError, UpstreamStatusError, UpstreamTransportError
from app.main import app, get_query_service
from app.models.repository import RepositoryDetail, RepositorySummary


class FakeScheduler:
    def stats(self) -> dict[str, int]:
        return {"capacity": 2, "running": 0, "queued": 0, "submitted": 0, "completed": 0, "failed": 0}


class FakeQueryService:
    def __init__(self) -> None:
        self.scheduler = FakeScheduler()
        self.list_error: Exception | None = None
        self.detail_error: Exception | None = None
        self.detail_calls: list[tuple[str, str]] = []

    async def repositories(self) -> list[RepositorySummary]:
        if self.list_error is not None:
            raise self.list_error
        return [RepositorySummary(name="demo", size=12, owner="acme")]

    async def repo_details(self, owner: str, name: str) -> RepositoryDetail:
        self.detail_calls.append((owner, name))
        if self.detail_error is not None:
            raise self.detail_error
        return RepositoryDetail(
            name=name,
            size=12,
            owner=owner,
            is_private=False,
            number_of_files=3,
            yml_content="key: value\n",
            active_webhooks=["web - https://hooks.example.com"],
            yml_path="config.yml",
        )


@pytest.fixture
def service() -> Any:
    fake = FakeQueryService()
    app.dependency_overrides[get_query_service] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client(service: FakeQueryService) -> TestClient:
    return TestClient(app)


def test_health_and_root(client: TestClient) -> None:
    assert client.get("/api/health").json()["status"] == "healthy"
    assert "repo_details" in client.get("/").json()["endpoints"]


def test_list_repositories(client: TestClient) -> None:
    response = client.get("/api/repositories")

    assert response.status_code == 200
    assert response.json() == [{"name": "demo", "size": 12, "owner": "acme"}]


def test_list_repositories_upstream_failure(client: TestClient, service: FakeQueryService) -> None:
    service.list_error = UpstreamTransportError("down")

    response = client.get("/api/repositories")

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to fetch repositories"


def test_repo_details_shape(client: TestClient, service: FakeQueryService) -> None:
    response = client.get("/api/repositories/acme/demo")

    assert response.status_code == 200
    assert response.json() == {
        "name": "demo",
        "size": 12,
        "owner": "acme",
        "isPrivate": False,
        "numberOfFiles": 3,
        "ymlContent": "key: value\n",
        "activeWebhooks": ["web - https://hooks.example.com"],
        "ymlPath": "config.yml",
    }
    assert service.detail_calls == [("acme", "demo")]


def test_repo_details_not_found(client: TestClient, service: FakeQueryService) -> None:
    service.detail_error = NotFoundError("acme", "missing")

    response = client.get("/api/repositories/acme/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Repository acme/missing not found"


def test_repo_details_upstream_failure(client: TestClient, service: FakeQueryService) -> None:
    service.detail_error = UpstreamStatusError("GitHub request failed with status 500", status_code=500)

    response = client.get("/api/repositories/acme/demo")

    assert response.status_code == 502
    assert "status 500" in response.json()["detail"]


def test_stats(client: TestClient) -> None:
    assert client.get("/api/stats").json()["capacity"] == 2

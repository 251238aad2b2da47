from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from app.github.client import GitHubClient
from app.github.errors import NotFoundError
from app.services.repositories import RepositoryListService, RepositoryQueryService
from app.services.repositories.detail_aggregator import RepositoryDetailAggregator
from app.services.repositories.scheduler import DetailScheduler


def _github_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/graphql":
        variables = json.loads(request.content)["variables"]
        if "login" in variables:
            return httpx.Response(
                200,
                json={"data": {"user": {"repositories": {"nodes": [
                    {"name": "demo", "diskUsage": 64, "owner": {"login": "acme"}},
                ]}}}},
            )
        if variables["name"] == "missing":
            return httpx.Response(
                200,
                json={"data": {"repository": None}, "errors": [{"type": "NOT_FOUND", "message": "nope"}]},
            )
        return httpx.Response(
            200,
            json={"data": {"repository": {
                "name": variables["name"],
                "diskUsage": 64,
                "isPrivate": False,
                "owner": {"login": variables["owner"]},
            }}},
        )

    if request.url.host == "raw.github.test":
        return httpx.Response(200, text="services:\n  web: {}\n")

    if request.url.path.endswith("/git/trees/HEAD"):
        return httpx.Response(200, json={"tree": [
            {"path": "docker-compose.yaml", "type": "blob"},
            {"path": "docs", "type": "tree"},
            {"path": "docs/index.md", "type": "blob"},
        ]})

    if request.url.path.endswith("/hooks"):
        return httpx.Response(404, json={"message": "Not Found"})

    return httpx.Response(500)


def _service(capacity: int = 2) -> RepositoryQueryService:
    client = GitHubClient(
        token="t",
        api_url="https://api.github.test",
        graphql_url="https://api.github.test/graphql",
        raw_url="https://raw.github.test",
        transport=httpx.MockTransport(_github_handler),
    )
    return RepositoryQueryService(
        client=client,
        list_service=RepositoryListService(client, login="acme", page_size=100),
        scheduler=DetailScheduler(RepositoryDetailAggregator(client).fetch_details, capacity=capacity),
    )


def test_repo_details_end_to_end() -> None:
    async def run():
        service = _service()
        try:
            return await service.repo_details("acme", "demo")
        finally:
            await service.aclose()

    detail = asyncio.run(run())

    assert detail.number_of_files == 2
    assert detail.yml_path == "docker-compose.yaml"
    assert detail.yml_content == "services:\n  web: {}\n"
    assert detail.active_webhooks == []


def test_repositories_end_to_end() -> None:
    async def run():
        service = _service()
        try:
            return await service.repositories()
        finally:
            await service.aclose()

    repositories = asyncio.run(run())

    assert [repo.to_dict() for repo in repositories] == [{"name": "demo", "size": 64, "owner": "acme"}]


@pytest.mark.asyncio
async def test_missing_repository_surfaces_not_found() -> None:
    service = _service()
    try:
        with pytest.raises(NotFoundError):
            await service.repo_details("acme", "missing")
        assert service.scheduler.stats()["failed"] == 1
        assert service.scheduler.running == 0
    finally:
        await service.aclose()


@pytest.mark.asyncio
async def test_concurrent_detail_requests_share_the_scheduler() -> None:
    service = _service(capacity=1)
    try:
        results = await asyncio.gather(*(service.repo_details("acme", f"r{index}") for index in range(3)))
    finally:
        await service.aclose()

    assert [detail.name for detail in results] == ["r0", "r1", "r2"]
    assert service.scheduler.stats()["completed"] == 3

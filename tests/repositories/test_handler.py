from __future__ import annotations

from app import handler
from app.github.errors import NotFoundError, UpstreamTransportError
from app.models.repository import RepositoryDetail, RepositorySummary


class FakeQueryService:
    detail_error: Exception | None = None
    closed = 0

    async def repositories(self) -> list[RepositorySummary]:
        return [RepositorySummary(name="demo", size=1, owner="acme")]

    async def repo_details(self, owner: str, name: str) -> RepositoryDetail:
        if self.detail_error is not None:
            raise self.detail_error
        return RepositoryDetail(name=name, size=1, owner=owner, is_private=True)

    async def aclose(self) -> None:
        FakeQueryService.closed += 1


def test_lambda_lists_repositories(monkeypatch) -> None:
    monkeypatch.setattr(handler, "RepositoryQueryService", FakeQueryService)

    result = handler.lambda_handler({"operation": "repositories"}, None)

    assert result["statusCode"] == 200
    assert result["result"] == [{"name": "demo", "size": 1, "owner": "acme"}]


def test_lambda_repo_details(monkeypatch) -> None:
    monkeypatch.setattr(handler, "RepositoryQueryService", FakeQueryService)
    closed_before = FakeQueryService.closed

    result = handler.lambda_handler({"operation": "repo_details", "owner": "acme", "name": "demo"}, None)

    assert result["statusCode"] == 200
    assert result["result"]["isPrivate"] is True
    assert FakeQueryService.closed == closed_before + 1


def test_lambda_rejects_bad_events(monkeypatch) -> None:
    monkeypatch.setattr(handler, "RepositoryQueryService", FakeQueryService)

    assert handler.lambda_handler({"operation": "repo_details", "owner": "acme"}, None)["statusCode"] == 400
    assert handler.lambda_handler({"operation": "delete_everything"}, None)["statusCode"] == 400


def test_lambda_maps_failures(monkeypatch) -> None:
    class MissingService(FakeQueryService):
        detail_error = NotFoundError("acme", "gone")

    class BrokenService(FakeQueryService):
        detail_error = UpstreamTransportError("down")

    event = {"operation": "repo_details", "owner": "acme", "name": "gone"}

    monkeypatch.setattr(handler, "RepositoryQueryService", MissingService)
    missing = handler.lambda_handler(event, None)
    monkeypatch.setattr(handler, "RepositoryQueryService", BrokenService)
    broken = handler.lambda_handler(event, None)

    assert missing["statusCode"] == 404
    assert missing["result"] is None
    assert broken["statusCode"] == 502


def test_lambda_unexpected_failure_returns_500(monkeypatch) -> None:
    class CrashingService(FakeQueryService):
        detail_error = KeyError("owner")

    monkeypatch.setattr(handler, "RepositoryQueryService", CrashingService)

    result = handler.lambda_handler({"operation": "repo_details", "owner": "acme", "name": "demo"}, None)

    assert result["statusCode"] == 500
    assert result["operation"] == "repo_details"


def test_lambda_rejects_non_object_events() -> None:
    result = handler.lambda_handler(["repositories"], None)

    assert result["statusCode"] == 400
    assert result["operation"] is None

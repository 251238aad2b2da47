"""Read-only query operations exposed to the browser client."""

from __future__ import annotations

from typing import Any, Optional

from app.github.client import GitHubClient
from app.models.repository import RepositoryDetail, RepositoryRef, RepositorySummary
from app.services.repositories.detail_aggregator import RepositoryDetailAggregator
from app.services.repositories.list_service import RepositoryListService
from app.services.repositories.scheduler import DetailScheduler, build_detail_scheduler


class RepositoryQueryService:
    """`repositories` and `repo_details`, wired to one shared client and scheduler."""

    def __init__(
        self,
        *,
        client: Optional[Any] = None,
        list_service: Optional[RepositoryListService] = None,
        scheduler: Optional[DetailScheduler] = None,
    ) -> None:
        self._client = client or GitHubClient()
        self._list_service = list_service or RepositoryListService(self._client)
        self._scheduler = scheduler or build_detail_scheduler(RepositoryDetailAggregator(self._client))

    @property
    def scheduler(self) -> DetailScheduler:
        return self._scheduler

    async def repositories(self) -> list[RepositorySummary]:
        return await self._list_service.list_repositories()

    async def repo_details(self, owner: str, name: str) -> RepositoryDetail:
        """Raises `NotFoundError` when the repository does not resolve."""
        return await self._scheduler.run(RepositoryRef(owner=owner, name=name))

    async def aclose(self) -> None:
        close = getattr(self._client, "aclose", None)
        if close is not None:
            await close()

"""Owner repository listing (single GraphQL page)."""

from __future__ import annotations

import logging
from typing import Any, Optional

from app.config.settings import settings
from app.github.errors import GraphQLResponseError
from app.models.repository import RepositorySummary
from app.utils.log_sanitizer import sanitize_log_extra

logger = logging.getLogger(__name__)

GITHUB_PAGE_LIMIT = 100

LIST_REPOSITORIES_QUERY = """
query ListRepositories($login: String!, $first: Int!) {
    user(login: $login) {
        repositories(first: $first) {
            nodes {
                name
                diskUsage
                owner {
                    login
                }
            }
        }
    }
}
"""


class RepositoryListService:
    """Lists repositories owned by the configured account.

    Only the first page is fetched; accounts with more repositories than the
    page size are truncated. An unknown login lists nothing.
    """

    def __init__(self, client: Any, *, login: Optional[str] = None, page_size: Optional[int] = None) -> None:
        self._client = client
        self._login = login if login is not None else settings.GITHUB_USERNAME
        requested = page_size if page_size is not None else settings.MAX_LIST_REPOS
        self._page_size = max(1, min(int(requested), GITHUB_PAGE_LIMIT))

    @property
    def page_size(self) -> int:
        return self._page_size

    async def list_repositories(self) -> list[RepositorySummary]:
        try:
            data = await self._client.graphql(
                LIST_REPOSITORIES_QUERY,
                {"login": self._login, "first": self._page_size},
            )
        except GraphQLResponseError as exc:
            if not exc.is_not_found:
                raise
            logger.warning("Configured account not found", extra=sanitize_log_extra(login=self._login))
            return []

        user = data.get("user") or {}
        nodes = (user.get("repositories") or {}).get("nodes") or []
        summaries = [_to_summary(node) for node in nodes if node]

        logger.info(
            "Listed repositories",
            extra=sanitize_log_extra(login=self._login, count=len(summaries), page_size=self._page_size),
        )
        return summaries[: self._page_size]


def _to_summary(node: dict[str, Any]) -> RepositorySummary:
    return RepositorySummary(
        name=node.get("name") or "",
        size=int(node.get("diskUsage") or 0),
        owner=(node.get("owner") or {}).get("login") or "",
    )

"""Per-repository detail fan-out with per-lookup fallbacks."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Optional

from app.github.errors import GraphQLResponseError, NotFoundError, UpstreamError, UpstreamStatusError
from app.models.repository import (
    WEBHOOKS_FAILED_MESSAGE,
    YAML_LOOKUP_FAILED_MESSAGE,
    YAML_TREE_FAILED_MESSAGE,
    RepositoryDetail,
    RepositoryRef,
    YamlFetchError,
    YamlFound,
    YamlNotFound,
    YamlResult,
)
from app.utils.log_sanitizer import sanitize_log_extra

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yml", ".yaml")

REPOSITORY_DETAILS_QUERY = """
query GetRepoDetails($owner: String!, $name: String!) {
    repository(owner: $owner, name: $name) {
        name
        diskUsage
        isPrivate
        owner {
            login
        }
    }
}
"""


class RepositoryDetailAggregator:
    """Builds a `RepositoryDetail` from one metadata query plus three sub-lookups.

    Only the metadata query can fail the whole operation. File count, YAML
    sample and webhooks each degrade to their own fallback value.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    async def fetch_details(self, ref: RepositoryRef) -> RepositoryDetail:
        repo = await self._fetch_metadata(ref)

        number_of_files, yaml_result, active_webhooks = await asyncio.gather(
            self.count_files(ref),
            self.sample_yaml(ref),
            self.active_webhooks(ref),
        )

        owner = (repo.get("owner") or {}).get("login") or ref.owner
        detail = RepositoryDetail(
            name=repo.get("name") or ref.name,
            size=int(repo.get("diskUsage") or 0),
            owner=owner,
            is_private=bool(repo.get("isPrivate")),
            number_of_files=number_of_files,
            yml_content=yaml_result.text,
            active_webhooks=active_webhooks,
            yml_path=yaml_result.path,
        )
        logger.info(
            "Fetched repository details",
            extra=sanitize_log_extra(
                repository=ref.full_name,
                number_of_files=number_of_files,
                yml_path=yaml_result.path,
                webhook_count=len(active_webhooks),
            ),
        )
        return detail

    async def _fetch_metadata(self, ref: RepositoryRef) -> dict[str, Any]:
        try:
            data = await self._client.graphql(REPOSITORY_DETAILS_QUERY, {"owner": ref.owner, "name": ref.name})
        except GraphQLResponseError as exc:
            if exc.is_not_found:
                raise NotFoundError(ref.owner, ref.name) from exc
            raise

        repo = data.get("repository")
        if not repo:
            raise NotFoundError(ref.owner, ref.name)
        return repo

    async def count_files(self, ref: RepositoryRef) -> int:
        """Number of blobs in the recursive HEAD tree; 0 on any failure."""
        try:
            payload = await self._client.get_tree(ref.owner, ref.name)
            entries = _tree_entries(payload, ref)
            if entries is None:
                return 0
            return sum(1 for entry in entries if _is_blob(entry))
        except Exception as exc:
            logger.warning(
                "File count lookup failed; using 0",
                extra=sanitize_log_extra(repository=ref.full_name, error=str(exc)),
            )
            return 0

    async def sample_yaml(self, ref: RepositoryRef) -> YamlResult:
        """Raw content of the first `.yml`/`.yaml` blob in tree order."""
        try:
            return await self._sample_yaml(ref)
        except Exception as exc:
            logger.warning(
                "YAML lookup failed",
                extra=sanitize_log_extra(repository=ref.full_name, error=str(exc)),
            )
            return YamlFetchError(YAML_LOOKUP_FAILED_MESSAGE)

    async def _sample_yaml(self, ref: RepositoryRef) -> YamlResult:
        try:
            payload = await self._client.get_tree(ref.owner, ref.name)
        except UpstreamError as exc:
            logger.warning(
                "Tree fetch for YAML lookup failed",
                extra=sanitize_log_extra(repository=ref.full_name, error=exc.message, status_code=exc.status_code),
            )
            return YamlFetchError(YAML_TREE_FAILED_MESSAGE)

        path = find_first_yaml_path(_tree_entries(payload, ref) or [])
        if path is None:
            return YamlNotFound()

        try:
            content = await self._client.raw(self._client.raw_file_url(ref.owner, ref.name, path))
        except UpstreamStatusError as exc:
            return YamlFetchError(f"{YAML_LOOKUP_FAILED_MESSAGE} - status {exc.status_code}", path=path)
        except UpstreamError as exc:
            logger.warning(
                "Raw YAML fetch failed",
                extra=sanitize_log_extra(repository=ref.full_name, path=path, error=exc.message),
            )
            return YamlFetchError(YAML_TREE_FAILED_MESSAGE)

        return YamlFound(path=path, content=content)

    async def active_webhooks(self, ref: RepositoryRef) -> list[str]:
        """Display strings for active hooks.

        A non-2xx answer yields `[]`; any other failure yields the single
        fallback message.
        """
        try:
            hooks = await self._client.list_hooks(ref.owner, ref.name)
            return [_describe_hook(hook) for hook in hooks if hook.get("active") is True]
        except UpstreamStatusError as exc:
            logger.info(
                "Webhook list unavailable",
                extra=sanitize_log_extra(repository=ref.full_name, status_code=exc.status_code),
            )
            return []
        except Exception as exc:
            logger.warning(
                "Webhook lookup failed",
                extra=sanitize_log_extra(repository=ref.full_name, error=str(exc)),
            )
            return [WEBHOOKS_FAILED_MESSAGE]


def find_first_yaml_path(entries: Iterable[dict[str, Any]]) -> Optional[str]:
    for entry in entries:
        path = entry.get("path") or ""
        if _is_blob(entry) and path.endswith(YAML_SUFFIXES):
            return path
    return None


def _is_blob(entry: Any) -> bool:
    return isinstance(entry, dict) and entry.get("type") == "blob"


def _tree_entries(payload: Any, ref: RepositoryRef) -> Optional[list[dict[str, Any]]]:
    if not isinstance(payload, dict) or payload.get("tree") is None:
        return None
    if payload.get("truncated"):
        logger.warning("Recursive tree listing is truncated", extra=sanitize_log_extra(repository=ref.full_name))
    return list(payload["tree"])


def _describe_hook(hook: dict[str, Any]) -> str:
    url = (hook.get("config") or {}).get("url") or "No URL"
    return f"{hook.get('name')} - {url}"

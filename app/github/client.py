"""Async GitHub client for the GraphQL, REST and raw-content endpoints."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from app.config.settings import settings
from app.github.errors import (
    GraphQLResponseError,
    UpstreamResponseError,
    UpstreamStatusError,
    UpstreamTransportError,
)
from app.utils.log_sanitizer import sanitize_log_extra

logger = logging.getLogger(__name__)


class GitHubClient:
    """Thin authenticated GitHub client.

    Every failure is raised as an `UpstreamError` subclass; nothing is retried
    and nothing is swallowed at this layer.
    """

    ACCEPT_JSON = "application/vnd.github+json"
    API_VERSION = "2022-11-28"

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        graphql_url: Optional[str] = None,
        raw_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token = token or settings.GITHUB_TOKEN
        self._api_url = (api_url or settings.GITHUB_API_URL).rstrip("/")
        self._graphql_url = graphql_url or settings.GITHUB_GRAPHQL_URL
        self._raw_url = (raw_url or settings.GITHUB_RAW_URL).rstrip("/")
        self._user_agent = user_agent or settings.USER_AGENT
        self._timeout_seconds = timeout_seconds or settings.GITHUB_TIMEOUT_SECONDS
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "GitHubClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def graphql(self, query: str, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Run a GraphQL query and return its `data` object."""

        payload = {"query": query, "variables": variables or {}}
        response = await self._send("POST", self._graphql_url, json_body=payload)
        body = self._decode_json(response)
        if not isinstance(body, dict):
            raise UpstreamResponseError(
                "GraphQL response is not a JSON object",
                status_code=response.status_code,
                url=self._graphql_url,
            )

        errors = body.get("errors")
        if errors:
            logger.warning(
                "GitHub GraphQL query returned errors",
                extra=sanitize_log_extra(variables=variables, errors=errors),
            )
            raise GraphQLResponseError(
                f"GraphQL errors: {json.dumps(errors)}",
                errors=errors if isinstance(errors, list) else [errors],
                data=body.get("data"),
                status_code=response.status_code,
                url=self._graphql_url,
            )

        return body.get("data") or {}

    async def rest(self, path: str, *, params: Optional[dict[str, Any]] = None) -> Any:
        """GET a REST endpoint (relative to the API root, or absolute) as JSON."""

        response = await self._send("GET", path, params=params, accept=self.ACCEPT_JSON)
        return self._decode_json(response)

    async def raw(self, url: str) -> str:
        """GET a raw file and return its text verbatim."""

        response = await self._send("GET", url)
        return response.text

    async def get_tree(self, owner: str, name: str, *, ref: str = "HEAD", recursive: bool = True) -> Any:
        params = {"recursive": "1"} if recursive else None
        return await self.rest(f"/repos/{owner}/{name}/git/trees/{ref}", params=params)

    async def list_hooks(self, owner: str, name: str) -> Any:
        return await self.rest(f"/repos/{owner}/{name}/hooks")

    def raw_file_url(self, owner: str, name: str, path: str, *, ref: str = "HEAD") -> str:
        return f"{self._raw_url}/{owner}/{name}/{ref}/{quote(path)}"

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
        accept: Optional[str] = None,
    ) -> httpx.Response:
        client = await self._ensure_client()
        headers = {"Accept": accept} if accept else None

        try:
            response = await client.request(method, url, params=params, json=json_body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning(
                "GitHub request failed",
                extra=sanitize_log_extra(method=method, url=url, params=params, error=str(exc)),
            )
            raise UpstreamTransportError(f"GitHub request failed: {exc}", url=url) from exc

        if not response.is_success:
            logger.warning(
                "GitHub request returned error status",
                extra=sanitize_log_extra(method=method, url=url, params=params, status_code=response.status_code),
            )
            raise UpstreamStatusError(
                f"GitHub request failed with status {response.status_code}",
                status_code=response.status_code,
                url=url,
            )

        return response

    @staticmethod
    def _decode_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamResponseError(
                f"GitHub returned a malformed JSON body: {exc}",
                status_code=response.status_code,
                url=str(response.request.url),
            ) from exc

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client:
            return self._client

        headers = {
            "User-Agent": self._user_agent,
            "X-GitHub-Api-Version": self.API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        else:
            logger.warning("GITHUB_TOKEN is not set; GitHub requests are unauthenticated")

        self._client = httpx.AsyncClient(
            base_url=self._api_url,
            headers=headers,
            timeout=self._timeout_seconds,
            transport=self._transport,
        )
        return self._client

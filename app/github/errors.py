"""Typed failures raised by the GitHub client."""

from __future__ import annotations

from typing import Any, Optional, Sequence


class GitHubClientError(Exception):
    """Base class for every failure surfaced by the GitHub layer."""


class UpstreamError(GitHubClientError):
    """A call to the GitHub API failed."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.url = url


class UpstreamStatusError(UpstreamError):
    """GitHub answered with a non-2xx HTTP status."""


class UpstreamTransportError(UpstreamError):
    """The request never produced an HTTP response (connect, read, timeout)."""


class UpstreamResponseError(UpstreamError):
    """The response body could not be decoded."""


class GraphQLResponseError(UpstreamError):
    """GraphQL responded 200 but carried an `errors` array."""

    def __init__(
        self,
        message: str,
        *,
        errors: Sequence[dict[str, Any]],
        data: Any = None,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message, status_code=status_code, url=url)
        self.errors = list(errors)
        self.data = data

    @property
    def is_not_found(self) -> bool:
        return bool(self.errors) and all(
            isinstance(error, dict) and error.get("type") == "NOT_FOUND" for error in self.errors
        )


class NotFoundError(GitHubClientError):
    """The requested repository does not resolve upstream."""

    def __init__(self, owner: str, name: str) -> None:
        super().__init__(f"Repository {owner}/{name} not found")
        self.owner = owner
        self.name = name

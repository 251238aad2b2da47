"""Domain models"""

from app.models.repository import (
    RepositoryDetail,
    RepositoryRef,
    RepositorySummary,
    YamlFetchError,
    YamlFound,
    YamlNotFound,
    YamlResult,
)

__all__ = [
    "RepositoryRef",
    "RepositorySummary",
    "RepositoryDetail",
    "YamlResult",
    "YamlFound",
    "YamlNotFound",
    "YamlFetchError",
]

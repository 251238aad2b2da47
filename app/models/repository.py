"""Repository value types returned by the list and detail services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

NO_YAML_MESSAGE = "No YAML file found in repository"
YAML_LOOKUP_FAILED_MESSAGE = "Unable to fetch YML file"
YAML_TREE_FAILED_MESSAGE = "Error fetching YAML file"
WEBHOOKS_FAILED_MESSAGE = "Unable to fetch webhook information"


@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class RepositorySummary:
    name: str
    size: int
    owner: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "size": self.size, "owner": self.owner}


@dataclass(frozen=True)
class YamlFound:
    path: str
    content: str

    @property
    def text(self) -> str:
        return self.content


@dataclass(frozen=True)
class YamlNotFound:
    path: Optional[str] = None

    @property
    def text(self) -> str:
        return NO_YAML_MESSAGE


@dataclass(frozen=True)
class YamlFetchError:
    """A YAML file could not be sampled; `path` is set when a match was found."""

    message: str
    path: Optional[str] = None

    @property
    def text(self) -> str:
        return self.message


YamlResult = Union[YamlFound, YamlNotFound, YamlFetchError]


@dataclass
class RepositoryDetail:
    name: str
    size: int
    owner: str
    is_private: bool
    number_of_files: int = 0
    yml_content: str = NO_YAML_MESSAGE
    active_webhooks: list[str] = field(default_factory=list)
    yml_path: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Client-facing shape (camelCase keys)."""
        return {
            "name": self.name,
            "size": self.size,
            "owner": self.owner,
            "isPrivate": self.is_private,
            "numberOfFiles": self.number_of_files,
            "ymlContent": self.yml_content,
            "activeWebhooks": list(self.active_webhooks),
            "ymlPath": self.yml_path,
        }

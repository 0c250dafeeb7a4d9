"""Key Vault data models."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import core_schema

T = TypeVar("T")


class ResourceId(str):
    """Canonical URI of a secret or secret version.

    e.g. https://myvault.vault.azure.net/secrets/db-pass/4387e9f3d6e14c459867679a90fd0f79
    """

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(cls, core_schema.str_schema())

    @property
    def segments(self) -> list[str]:
        path = urlsplit(self).path.strip("/")
        return path.split("/") if path else []

    @property
    def last_segment(self) -> str:
        """Final path segment — the version token for a version id."""
        segments = self.segments
        return segments[-1] if segments else ""

    @property
    def name(self) -> str:
        """Secret name (the segment following /secrets/), or '' if not a secret id."""
        segments = self.segments
        if len(segments) >= 2 and segments[0] == "secrets":
            return segments[1]
        return ""

    @property
    def vault_url(self) -> str:
        parts = urlsplit(self)
        return f"{parts.scheme}://{parts.netloc}" if parts.netloc else ""


class SecretAttributes(BaseModel):
    """Secret management attributes. Wire timestamps are Unix epoch seconds."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    enabled: bool
    created: datetime
    updated: datetime
    recovery_level: str = Field(alias="recoveryLevel")
    expires: datetime | None = Field(default=None, alias="exp")
    not_before: datetime | None = Field(default=None, alias="nbf")

    def to_request(self) -> dict:
        """Writable attributes in wire form. created/updated/recoveryLevel are service-owned."""
        body: dict[str, bool | int] = {"enabled": self.enabled}
        if self.expires is not None:
            body["exp"] = int(self.expires.timestamp())
        if self.not_before is not None:
            body["nbf"] = int(self.not_before.timestamp())
        return body


class SecretVersion(BaseModel):
    """One historical revision of a secret (metadata only — never includes the value)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    secret_name: str
    version: str
    id: ResourceId
    attributes: SecretAttributes
    content_type: str | None = Field(default=None, alias="contentType")


class Secret(BaseModel):
    """A fully materialized secret, including its plaintext value."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    version: str
    value: str
    id: ResourceId
    attributes: SecretAttributes
    content_type: str | None = Field(default=None, alias="contentType")

    def __repr__(self) -> str:
        return f"Secret(name={self.name!r}, version={self.version!r}, value='***')"

    __str__ = __repr__


class IdEntity(BaseModel):
    """Listing record for a secret, without its value."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: ResourceId
    attributes: SecretAttributes
    content_type: str | None = Field(default=None, alias="contentType")

    @property
    def name(self) -> str:
        return self.id.name


@dataclass
class PagedCollection(Generic[T]):
    """One page of results in service order plus the continuation link, if any."""

    items: list[T] = field(default_factory=list)
    next_link: str | None = None

    def add(self, item: T) -> None:
        self.items.append(item)

    @property
    def has_more(self) -> bool:
        return bool(self.next_link)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class CacheEntry:
    """A cached serialized value with an absolute expiry."""

    key: str
    value: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


# Secret references accepted by SecretRepository.get_secret


@dataclass(frozen=True)
class ByName:
    name: str


@dataclass(frozen=True)
class ByNameVersion:
    name: str
    version: str


@dataclass(frozen=True)
class FromVersion:
    entity: SecretVersion


SecretRef = ByName | ByNameVersion | FromVersion

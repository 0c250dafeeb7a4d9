"""
Secret repository — get, list and set secrets in a Key Vault.

Single-secret reads go through the cache: the key is
"{name}-{context_discriminator}" and entries live for one calendar month.
The version is not part of the key, so within the window a name always
resolves to the first Secret fetched for it. Writes never touch the cache.

Usage:
    from azkeyvault.secrets import SecretRepository

    repo = SecretRepository(gateway, MemoryCacheStore(), context_discriminator="v42")
    secret = repo.get_secret("db-pass")
    for item in repo.iter_secrets():
        print(item.name)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Any, Protocol
from urllib.parse import quote

from pydantic import ValidationError

from azkeyvault.cache import CacheStore, one_month_from, utcnow
from azkeyvault.errors import VaultError
from azkeyvault.mapper import map_id_entity, map_secret, map_secret_version, page_items
from azkeyvault.models import (
    ByName,
    ByNameVersion,
    FromVersion,
    IdEntity,
    PagedCollection,
    Secret,
    SecretAttributes,
    SecretRef,
    SecretVersion,
)

logger = logging.getLogger(__name__)


class Gateway(Protocol):
    def get(self, url: str) -> dict: ...

    def post(self, url: str, body: dict) -> dict: ...


def resolve_ref(
    secret: str | SecretVersion | SecretRef, version: str | None = None
) -> tuple[str, str | None]:
    """Resolve any accepted secret reference to a canonical (name, version) pair.

    An explicit version argument always wins over a version carried by the
    reference. A None or empty version means "latest".
    """
    if isinstance(secret, SecretVersion):
        secret = FromVersion(secret)

    if isinstance(secret, FromVersion):
        name, implied = secret.entity.secret_name, secret.entity.version
    elif isinstance(secret, ByNameVersion):
        name, implied = secret.name, secret.version
    elif isinstance(secret, ByName):
        name, implied = secret.name, None
    elif isinstance(secret, str):
        name, implied = secret, None
    else:
        raise TypeError(f"unsupported secret reference: {type(secret).__name__}")

    if not name:
        raise ValueError("secret name is required")
    return name, (version or implied or None)


def _segment(value: str) -> str:
    return quote(value, safe="")


class SecretRepository:
    """Secret operations over an authenticated gateway, with a read-through cache."""

    def __init__(
        self,
        gateway: Gateway,
        cache: CacheStore,
        context_discriminator: str = "",
        clock: Callable[[], datetime] = utcnow,
    ):
        self.gateway = gateway
        self.cache = cache
        self.context_discriminator = context_discriminator or ""
        self.clock = clock

    def __enter__(self) -> SecretRepository:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        close = getattr(self.gateway, "close", None)
        if close is not None:
            close()

    def cache_key(self, name: str) -> str:
        return f"{name}-{self.context_discriminator}"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_secret(
        self, secret: str | SecretVersion | SecretRef, version: str | None = None
    ) -> Secret:
        """Return a secret by name (latest) or by name and version.

        Accepts a bare name, a SecretVersion entity, or a SecretRef. Served
        from the cache when a live entry exists; otherwise fetched and cached.
        """
        name, version = resolve_ref(secret, version)
        key = self.cache_key(name)

        cached = self._from_cache(key)
        if cached is not None:
            logger.debug("Secret cache hit: %s", key)
            return cached

        logger.debug("Secret cache miss: %s (version=%s)", key, version or "latest")
        path = f"/secrets/{_segment(name)}/{_segment(version) if version else ''}"
        try:
            data = self.gateway.get(path)
            result = map_secret(data, name, version)
        except VaultError as e:
            e.with_context("get_secret", name=name, version=version)
            raise

        self.cache.put(key, result.model_dump_json(), one_month_from(self.clock()))
        return result

    def get_secret_versions(self, secret_name: str) -> list[SecretVersion]:
        """Return the versions of a secret in service order (first page only)."""
        path = f"/secrets/{_segment(secret_name)}/versions"
        try:
            data = self.gateway.get(path)
            return [map_secret_version(v, secret_name) for v in page_items(data, "versions")]
        except VaultError as e:
            e.with_context("get_secret_versions", name=secret_name)
            raise

    def iter_secret_versions(self, secret_name: str) -> Iterator[SecretVersion]:
        """Yield every version of a secret, following nextLink until exhausted."""
        url: str | None = f"/secrets/{_segment(secret_name)}/versions"
        while url:
            try:
                data = self.gateway.get(url)
                items = [map_secret_version(v, secret_name) for v in page_items(data, "versions")]
            except VaultError as e:
                e.with_context("iter_secret_versions", name=secret_name)
                raise
            yield from items
            url = data.get("nextLink")

    def get_secrets(self, next_link: str | None = None) -> PagedCollection[IdEntity]:
        """Return one page of the secret listing.

        Pass the previous page's next_link to continue; it is used verbatim.
        """
        url = next_link if next_link else "/secrets"
        try:
            data = self.gateway.get(url)
            page: PagedCollection[IdEntity] = PagedCollection()
            for item in page_items(data, "secrets"):
                page.add(map_id_entity(item))
        except VaultError as e:
            e.with_context("get_secrets", next_link=next_link)
            raise
        page.next_link = data.get("nextLink") or None
        return page

    def iter_secrets(self) -> Iterator[IdEntity]:
        """Yield every secret in the vault, page by page."""
        page = self.get_secrets()
        while True:
            yield from page
            if not page.has_more:
                return
            page = self.get_secrets(page.next_link)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set_secret(
        self,
        name: str,
        value: str,
        attributes: SecretAttributes | None = None,
        content_type: str | None = None,
        tags: dict[str, str] | None = None,
    ) -> Secret:
        """Create a secret, or a new version of an existing one.

        Always hits the network and bypasses the cache; a cached entry for
        this name stays as it was until it expires.
        """
        body: dict[str, Any] = {"value": value}
        if isinstance(attributes, SecretAttributes):
            body["attributes"] = attributes.to_request()
        if content_type:
            body["contentType"] = content_type
        if tags:
            body["tags"] = dict(tags)

        try:
            data = self.gateway.post(f"/secrets/{_segment(name)}", body)
            return map_secret(data, name)
        except VaultError as e:
            e.with_context("set_secret", name=name)
            raise

    # ------------------------------------------------------------------

    def _from_cache(self, key: str) -> Secret | None:
        entry = self.cache.get(key)
        if entry is None:
            return None
        try:
            return Secret.model_validate_json(entry.value)
        except ValidationError as e:
            logger.warning("Secret cache: unreadable entry %s, refetching: %s", key, e)
            return None

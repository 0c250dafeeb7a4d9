"""
azkeyvault — cached Azure Key Vault secret client.

Public API:
    repo = build_repository()            → SecretRepository from AZKV_* env vars
    repo.get_secret(name, version=None)  → Secret (cached for one month)
    repo.get_secret_versions(name)       → list[SecretVersion]
    repo.get_secrets(next_link=None)     → PagedCollection[IdEntity]
    repo.set_secret(name, value, ...)    → Secret
"""

from __future__ import annotations

__version__ = "0.1.0"

from azkeyvault.cache import MemoryCacheStore, RedisCacheStore
from azkeyvault.client import build_repository
from azkeyvault.errors import AuthFailure, MappingFailure, TransportFailure, VaultError
from azkeyvault.http import HttpGateway
from azkeyvault.models import (
    ByName,
    ByNameVersion,
    FromVersion,
    IdEntity,
    PagedCollection,
    ResourceId,
    Secret,
    SecretAttributes,
    SecretVersion,
)
from azkeyvault.secrets import SecretRepository, resolve_ref
from azkeyvault.tokens import (
    AzureCliTokenProvider,
    ManagedIdentityTokenProvider,
    StaticTokenProvider,
)

__all__ = [
    "AuthFailure",
    "AzureCliTokenProvider",
    "ByName",
    "ByNameVersion",
    "FromVersion",
    "HttpGateway",
    "IdEntity",
    "ManagedIdentityTokenProvider",
    "MappingFailure",
    "MemoryCacheStore",
    "PagedCollection",
    "RedisCacheStore",
    "ResourceId",
    "Secret",
    "SecretAttributes",
    "SecretRepository",
    "SecretVersion",
    "StaticTokenProvider",
    "TransportFailure",
    "VaultError",
    "build_repository",
    "resolve_ref",
]

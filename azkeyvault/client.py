"""Wire a SecretRepository together from configuration."""

from __future__ import annotations

import logging

from azkeyvault.cache import CacheStore, MemoryCacheStore, RedisCacheStore
from azkeyvault.config import Config, get_config
from azkeyvault.http import HttpGateway
from azkeyvault.secrets import SecretRepository
from azkeyvault.tokens import (
    AzureCliTokenProvider,
    ManagedIdentityTokenProvider,
    StaticTokenProvider,
    TokenProvider,
)

logger = logging.getLogger(__name__)


def build_token_provider(cfg: Config) -> TokenProvider:
    """Pick a token provider by cfg.token_source."""
    if cfg.token_source == "cli":
        return AzureCliTokenProvider(az_path=cfg.az_path or None)
    if cfg.token_source == "managed_identity":
        return ManagedIdentityTokenProvider(client_id=cfg.client_id or None)
    if cfg.token_source == "static":
        return StaticTokenProvider(cfg.static_token)
    raise ValueError(f"Unknown token source: {cfg.token_source!r}")


def build_cache(cfg: Config) -> CacheStore:
    """Pick a cache backend by cfg.cache.backend."""
    if cfg.cache.backend == "memory":
        return MemoryCacheStore()
    if cfg.cache.backend == "redis":
        return RedisCacheStore.from_url(cfg.cache.redis_url, prefix=cfg.cache.prefix)
    raise ValueError(f"Unknown cache backend: {cfg.cache.backend!r}")


def build_repository(
    cfg: Config | None = None,
    *,
    token_provider: TokenProvider | None = None,
    cache: CacheStore | None = None,
) -> SecretRepository:
    """Build a repository from config; explicit collaborators override config."""
    cfg = cfg or get_config()
    gateway = HttpGateway(
        cfg.vault_url,
        token_provider or build_token_provider(cfg),
        resource=cfg.resource,
        api_version=cfg.api_version,
        timeout=cfg.timeout,
    )
    logger.debug("Key Vault client for %s (cache=%s)", cfg.vault_url, cfg.cache.backend)
    return SecretRepository(
        gateway,
        cache if cache is not None else build_cache(cfg),
        context_discriminator=cfg.context_discriminator,
    )

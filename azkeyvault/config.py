"""
Centralized configuration for azkeyvault.

All configuration is loaded from environment variables with sensible
defaults. The repository itself never reads the environment; this module
is the only place that does, and the values are passed in explicitly.

Usage:
    from azkeyvault.config import get_config
    cfg = get_config()
    print(cfg.vault_url)              # "https://myvault.vault.azure.net"
    print(cfg.context_discriminator)  # "" unless AZKV_CONTEXT is set
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

TOKEN_SOURCES = ("cli", "managed_identity", "static")
CACHE_BACKENDS = ("memory", "redis")


@dataclass(frozen=True)
class CacheConfig:
    """Secret cache backend parameters."""

    backend: str = "memory"
    redis_url: str = "redis://127.0.0.1:6379/0"
    prefix: str = "azkeyvault:secret:"


@dataclass(frozen=True)
class Config:
    """Top-level azkeyvault configuration."""

    # Vault endpoint
    vault_url: str = ""
    api_version: str = "7.4"
    resource: str = "https://vault.azure.net"
    timeout: float = 10.0

    # Credentials
    token_source: str = "cli"
    static_token: str = ""
    client_id: str = ""  # user-assigned managed identity; empty = system-assigned
    az_path: str = ""  # empty = resolve from PATH

    # Cache key suffix distinguishing deployments (empty if unset)
    context_discriminator: str = ""

    cache: CacheConfig = field(default_factory=CacheConfig)


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    cache_cfg = CacheConfig(
        backend=os.environ.get("AZKV_CACHE_BACKEND", "memory").lower(),
        redis_url=os.environ.get("AZKV_REDIS_URL", "redis://127.0.0.1:6379/0"),
        prefix=os.environ.get("AZKV_CACHE_PREFIX", "azkeyvault:secret:"),
    )

    return Config(
        vault_url=os.environ.get("AZKV_VAULT_URL", ""),
        api_version=os.environ.get("AZKV_API_VERSION", "7.4"),
        resource=os.environ.get("AZKV_RESOURCE", "https://vault.azure.net"),
        timeout=float(os.environ.get("AZKV_TIMEOUT", "10")),
        token_source=os.environ.get("AZKV_TOKEN_SOURCE", "cli").lower(),
        static_token=os.environ.get("AZKV_TOKEN", ""),
        client_id=os.environ.get("AZKV_CLIENT_ID", ""),
        az_path=os.environ.get("AZKV_AZ_PATH", ""),
        context_discriminator=os.environ.get(
            "AZKV_CONTEXT", os.environ.get("WORDPRESS_SECRET_VERSION", "")
        ),
        cache=cache_cfg,
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None

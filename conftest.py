"""
Root-level shared test fixtures.

Provides a scripted gateway stub, a controllable clock and Key Vault
payload builders for the tests under tests/.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

VAULT = "https://myvault.vault.azure.net"


class Payloads:
    """Builders for Key Vault response bodies."""

    vault = VAULT

    @staticmethod
    def attributes(**overrides) -> dict:
        data = {
            "enabled": True,
            "created": 1000,
            "updated": 1000,
            "recoveryLevel": "Purgeable",
        }
        data.update(overrides)
        return data

    @classmethod
    def secret(cls, name: str, version: str, value: str = "secret123", **extra) -> dict:
        data = {
            "id": f"{VAULT}/secrets/{name}/{version}",
            "value": value,
            "attributes": cls.attributes(),
        }
        data.update(extra)
        return data

    @classmethod
    def item(cls, name: str, version: str | None = None, **extra) -> dict:
        suffix = f"/{version}" if version else ""
        data = {"id": f"{VAULT}/secrets/{name}{suffix}", "attributes": cls.attributes()}
        data.update(extra)
        return data


class StubGateway:
    """Records calls and replays scripted responses keyed by URL."""

    def __init__(self, responses: dict[str, dict] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, str, dict | None]] = []
        self.closed = False

    def get(self, url: str) -> dict:
        self.calls.append(("GET", url, None))
        return self._respond(url)

    def post(self, url: str, body: dict) -> dict:
        self.calls.append(("POST", url, body))
        return self._respond(url)

    def close(self) -> None:
        self.closed = True

    def _respond(self, url: str) -> dict:
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2026, 1, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove azkeyvault env vars that leak between tests."""
    for key in [
        "AZKV_VAULT_URL",
        "AZKV_API_VERSION",
        "AZKV_RESOURCE",
        "AZKV_TIMEOUT",
        "AZKV_TOKEN_SOURCE",
        "AZKV_TOKEN",
        "AZKV_CLIENT_ID",
        "AZKV_AZ_PATH",
        "AZKV_CONTEXT",
        "WORDPRESS_SECRET_VERSION",
        "AZKV_CACHE_BACKEND",
        "AZKV_REDIS_URL",
        "AZKV_CACHE_PREFIX",
    ]:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def payloads():
    return Payloads

"""
Bearer token providers for the Key Vault API.

Each provider returns a ready Authorization header value ("Bearer <token>")
for a target resource, or raises AuthFailure. Providers do not cache — every
call acquires a fresh token.

Usage:
    from azkeyvault.tokens import AzureCliTokenProvider

    provider = AzureCliTokenProvider()
    header = provider.acquire_token("https://vault.azure.net")
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from typing import Protocol, runtime_checkable

import httpx

from azkeyvault.errors import AuthFailure

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE = "https://vault.azure.net"
DEFAULT_AZ_PATH = "/usr/bin/az"

IMDS_TOKEN_URL = "http://169.254.169.254/metadata/identity/oauth2/token"
IMDS_API_VERSION = "2018-02-01"


@runtime_checkable
class TokenProvider(Protocol):
    def acquire_token(self, resource: str) -> str: ...


def _bearer(token: str) -> str:
    return f"Bearer {token}"


def resolve_az_path() -> str:
    """Locate the az executable, falling back to the well-known install path."""
    return shutil.which("az") or DEFAULT_AZ_PATH


class AzureCliTokenProvider:
    """Acquire tokens by shelling out to `az account get-access-token`."""

    def __init__(self, az_path: str | None = None, timeout: float = 30.0):
        self.az_path = az_path or resolve_az_path()
        self.timeout = timeout

    def acquire_token(self, resource: str) -> str:
        cmd = [self.az_path, "account", "get-access-token", f"--resource={resource}"]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise AuthFailure(
                f"Azure CLI not found at {self.az_path}", operation="acquire_token"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise AuthFailure(
                f"Azure CLI timed out after {self.timeout}s", operation="acquire_token"
            ) from e
        except OSError as e:
            raise AuthFailure(
                f"Azure CLI could not be run at {self.az_path}: {e.strerror or e}",
                operation="acquire_token",
            ) from e

        if result.returncode != 0:
            logger.warning("az get-access-token failed (rc=%d)", result.returncode)
            raise AuthFailure(
                f"Azure CLI exited with {result.returncode}: {result.stderr.strip()[:200]}",
                operation="acquire_token",
                params={"resource": resource},
            )

        output = "".join(result.stdout.splitlines())
        try:
            token = json.loads(output)["accessToken"]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise AuthFailure(
                "Azure CLI returned malformed token output",
                operation="acquire_token",
                params={"resource": resource},
            ) from e
        if not isinstance(token, str) or not token:
            raise AuthFailure(
                "Azure CLI returned an empty accessToken",
                operation="acquire_token",
                params={"resource": resource},
            )
        return _bearer(token)


class ManagedIdentityTokenProvider:
    """Acquire tokens from the Azure instance metadata service (IMDS)."""

    def __init__(
        self,
        client_id: str | None = None,
        endpoint: str = IMDS_TOKEN_URL,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.client_id = client_id
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport

    def acquire_token(self, resource: str) -> str:
        params = {"api-version": IMDS_API_VERSION, "resource": resource}
        if self.client_id:
            params["client_id"] = self.client_id

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.get(self.endpoint, params=params, headers={"Metadata": "true"})
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            logger.warning("Managed identity token request failed: %s", e)
            raise AuthFailure(
                f"managed identity endpoint unavailable: {e}",
                operation="acquire_token",
                params={"resource": resource},
            ) from e
        except ValueError as e:
            raise AuthFailure(
                "managed identity endpoint returned malformed JSON",
                operation="acquire_token",
                params={"resource": resource},
            ) from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthFailure(
                "managed identity response has no access_token",
                operation="acquire_token",
                params={"resource": resource},
            )
        return _bearer(token)


class StaticTokenProvider:
    """Return a fixed token. Useful for tests and pre-issued tokens."""

    def __init__(self, token: str):
        if not token:
            raise AuthFailure("static token is empty", operation="acquire_token")
        self.token = token if token.startswith("Bearer ") else _bearer(token)

    def acquire_token(self, resource: str) -> str:
        return self.token

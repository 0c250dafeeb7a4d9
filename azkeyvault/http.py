"""HTTP gateway — authenticated JSON GET/POST against a vault endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from azkeyvault.errors import TransportFailure
from azkeyvault.tokens import DEFAULT_RESOURCE, TokenProvider

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "7.4"


class HttpGateway:
    """Thin httpx wrapper that authorizes every request with a bearer token.

    The token is acquired on the first request and reused for the lifetime
    of the gateway. Relative paths are resolved against vault_url and get
    the api-version query parameter; absolute URLs (continuation links) are
    sent verbatim.
    """

    def __init__(
        self,
        vault_url: str,
        token_provider: TokenProvider,
        *,
        resource: str = DEFAULT_RESOURCE,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        if not vault_url:
            raise ValueError("vault_url is required (set AZKV_VAULT_URL)")
        self.vault_url = vault_url.rstrip("/")
        self.token_provider = token_provider
        self.resource = resource
        self.api_version = api_version
        self._token: str | None = None
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def __enter__(self) -> HttpGateway:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def authorization(self) -> str:
        if self._token is None:
            self._token = self.token_provider.acquire_token(self.resource)
        return self._token

    def refresh_token(self) -> None:
        """Drop the held token; the next request acquires a new one."""
        self._token = None

    def _resolve(self, url: str) -> tuple[str, dict[str, str]]:
        if url.startswith(("http://", "https://")):
            return url, {}
        return f"{self.vault_url}/{url.lstrip('/')}", {"api-version": self.api_version}

    def get(self, url: str) -> dict:
        return self._request("GET", url)

    def post(self, url: str, body: dict) -> dict:
        return self._request("POST", url, body)

    def _request(self, method: str, url: str, body: dict | None = None) -> dict:
        target, params = self._resolve(url)
        headers = {"Authorization": self.authorization}
        logger.debug("%s %s", method, target)

        try:
            resp = self._client.request(
                method, target, params=params or None, json=body, headers=headers
            )
        except httpx.HTTPError as e:
            raise TransportFailure(f"{method} {target} failed: {e}") from e

        if resp.is_error:
            raise TransportFailure(
                f"{method} {target} returned {resp.status_code}: {_error_message(resp)}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise TransportFailure(
                f"{method} {target} returned malformed JSON", status_code=resp.status_code
            ) from e
        if not isinstance(data, dict):
            raise TransportFailure(
                f"{method} {target} returned {type(data).__name__}, expected object",
                status_code=resp.status_code,
            )
        return data


def _error_message(resp: httpx.Response) -> str:
    """Extract the service error message ({"error": {"code", "message"}}) if present."""
    try:
        error = resp.json().get("error") or {}
        code = error.get("code", "")
        message = error.get("message", "")
        if code or message:
            return f"{code}: {message}".strip(": ")
    except (ValueError, AttributeError):
        pass
    return resp.reason_phrase or "error"

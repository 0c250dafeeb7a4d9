"""
Failure kinds raised by the Key Vault client.

Every failure carries the operation that failed and the identifying
parameters (secret name, version when known) so callers can decide
whether to retry.
"""

from __future__ import annotations


class VaultError(Exception):
    """Base class for all client failures."""

    kind = "VaultError"

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        params: dict[str, str | None] | None = None,
    ):
        self.message = message
        self.operation = operation
        self.params = {k: v for k, v in (params or {}).items() if v is not None}
        super().__init__(self._render())

    def _render(self) -> str:
        parts = [f"{self.kind}: {self.message}"]
        if self.operation:
            parts.append(f"operation={self.operation}")
        for key, value in self.params.items():
            parts.append(f"{key}={value}")
        return " ".join(parts)

    def with_context(self, operation: str, **params: str | None) -> VaultError:
        """Attach operation context, keeping values already set closer to the source.

        When a lower-level operation is already recorded, the outer one is
        kept as the "during" parameter.
        """
        if not self.operation:
            self.operation = operation
        elif self.operation != operation:
            self.params.setdefault("during", operation)
        for key, value in params.items():
            if value is not None:
                self.params.setdefault(key, value)
        self.args = (self._render(),)
        return self


class AuthFailure(VaultError):
    """Token acquisition failed or returned malformed output."""

    kind = "AuthFailure"


class TransportFailure(VaultError):
    """HTTP call failed, returned non-2xx, or returned malformed JSON."""

    kind = "TransportFailure"

    def __init__(self, message: str, *, status_code: int | None = None, **kwargs):
        self.status_code = status_code
        super().__init__(message, **kwargs)


class MappingFailure(VaultError):
    """Response is missing a required field or has the wrong shape."""

    kind = "MappingFailure"

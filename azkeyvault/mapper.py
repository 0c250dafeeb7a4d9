"""
Response mappers — shape converters for Key Vault JSON payloads.

Converts raw API response dicts into the uniform entity models. Optional
fields (exp, nbf, contentType) map to None; missing required fields raise
MappingFailure instead of KeyError/ValidationError.

Usage:
    from azkeyvault.mapper import map_secret

    data = gateway.get(url)
    secret = map_secret(data, "db-pass")
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from azkeyvault.errors import MappingFailure
from azkeyvault.models import IdEntity, ResourceId, Secret, SecretAttributes, SecretVersion

_REQUIRED_ATTRIBUTES = ("enabled", "created", "updated", "recoveryLevel")


def _require(raw: Any, key: str, what: str) -> Any:
    if not isinstance(raw, dict):
        raise MappingFailure(f"{what} is not an object (got {type(raw).__name__})")
    if raw.get(key) is None:
        raise MappingFailure(f"{what} is missing required field '{key}'")
    return raw[key]


def _resource_id(raw: Any, what: str) -> ResourceId:
    value = _require(raw, "id", what)
    if not isinstance(value, str):
        raise MappingFailure(f"{what} field 'id' is not a string")
    return ResourceId(value)


def map_attributes(raw: Any) -> SecretAttributes:
    """Convert a raw attributes object into SecretAttributes."""
    for key in _REQUIRED_ATTRIBUTES:
        _require(raw, key, "attributes")
    try:
        return SecretAttributes(
            enabled=raw["enabled"],
            created=raw["created"],
            updated=raw["updated"],
            recovery_level=raw["recoveryLevel"],
            expires=raw.get("exp"),
            not_before=raw.get("nbf"),
        )
    except ValidationError as e:
        raise MappingFailure(f"invalid attributes: {e.errors()[0]['msg']}") from e


def map_secret(raw: Any, name: str, version: str | None = None) -> Secret:
    """Convert a single-secret response (GET or POST) into a Secret.

    If version is not given, it is taken from the last segment of the id,
    i.e. whatever the service designated as latest.
    """
    resource_id = _resource_id(raw, "secret")
    value = _require(raw, "value", "secret")
    attributes = map_attributes(_require(raw, "attributes", "secret"))
    try:
        return Secret(
            name=name,
            version=version or resource_id.last_segment,
            value=value,
            id=resource_id,
            attributes=attributes,
            content_type=raw.get("contentType"),
        )
    except ValidationError as e:
        raise MappingFailure(f"invalid secret: {e.errors()[0]['msg']}") from e


def map_secret_version(raw: Any, secret_name: str) -> SecretVersion:
    """Convert one element of a versions listing. The name comes from the caller."""
    resource_id = _resource_id(raw, "secret version")
    attributes = map_attributes(_require(raw, "attributes", "secret version"))
    try:
        return SecretVersion(
            secret_name=secret_name,
            version=resource_id.last_segment,
            id=resource_id,
            attributes=attributes,
            content_type=raw.get("contentType"),
        )
    except ValidationError as e:
        raise MappingFailure(f"invalid secret version: {e.errors()[0]['msg']}") from e


def map_id_entity(raw: Any) -> IdEntity:
    """Convert one element of a secrets listing."""
    resource_id = _resource_id(raw, "secret item")
    attributes = map_attributes(_require(raw, "attributes", "secret item"))
    try:
        return IdEntity(
            id=resource_id,
            attributes=attributes,
            content_type=raw.get("contentType"),
        )
    except ValidationError as e:
        raise MappingFailure(f"invalid secret item: {e.errors()[0]['msg']}") from e


def page_items(raw: Any, what: str) -> list:
    """Return the 'value' array of a listing response."""
    items = _require(raw, "value", what)
    if not isinstance(items, list):
        raise MappingFailure(f"{what} field 'value' is not a list")
    return items

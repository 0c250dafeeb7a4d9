"""
Secret cache — key/value store with absolute expiry.

Two backends:
  MemoryCacheStore  — process-local dict (default)
  RedisCacheStore   — shared Redis, entries also expire server-side (EXAT)

Expiry is always re-checked at read time against the store's clock, so a
read never returns an entry whose expiry has passed. There is no eviction
beyond expiry.
"""

from __future__ import annotations

import calendar
import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from azkeyvault.models import CacheEntry

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def one_month_from(now: datetime) -> datetime:
    """Same time one calendar month later, clamped to the last day of that month."""
    year, month = (now.year + 1, 1) if now.month == 12 else (now.year, now.month + 1)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


@runtime_checkable
class CacheStore(Protocol):
    def get(self, key: str) -> CacheEntry | None: ...

    def put(self, key: str, value: str, expires_at: datetime) -> None: ...


class MemoryCacheStore:
    """In-process cache. Unbounded; last writer wins."""

    def __init__(self, clock: Clock = utcnow):
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            del self._entries[key]
            return None
        return entry

    def put(self, key: str, value: str, expires_at: datetime) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, expires_at=expires_at)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisCacheStore:
    """Redis-backed cache shared across processes.

    Backend errors degrade to a cache miss (logged) rather than failing the
    caller's request.
    """

    def __init__(self, client, prefix: str = "azkeyvault:secret:", clock: Clock = utcnow):
        self.client = client
        self.prefix = prefix
        self.clock = clock

    @classmethod
    def from_url(cls, url: str, **kwargs) -> RedisCacheStore:
        import redis

        return cls(redis.Redis.from_url(url, decode_responses=True), **kwargs)

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> CacheEntry | None:
        try:
            raw = self.client.get(self._key(key))
        except Exception as e:
            logger.warning("Secret cache: Redis get failed: %s", e)
            return None
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")

        try:
            data = json.loads(raw)
            entry = CacheEntry(
                key=key,
                value=data["value"],
                expires_at=datetime.fromisoformat(data["expires_at"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Secret cache: discarding malformed entry %s: %s", key, e)
            return None

        if entry.is_expired(self.clock()):
            return None
        return entry

    def put(self, key: str, value: str, expires_at: datetime) -> None:
        payload = json.dumps({"value": value, "expires_at": expires_at.isoformat()})
        try:
            self.client.set(self._key(key), payload, exat=int(expires_at.timestamp()))
        except Exception as e:
            logger.warning("Secret cache: Redis set failed: %s", e)

"""
Persisted key-value state store abstraction.

Supports an in-memory implementation for tests/local runs and a
Redis-backed implementation for production.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, TypeVar

import redis
from redis import exceptions as redis_exceptions

T = TypeVar("T")


class KeyValueStore(Protocol):
    """Synchronous string-keyed store; keys() follows enumeration order."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...

    def keys(self) -> list[str]:
        ...


@dataclass
class InMemoryKeyValueStore:
    """Insertion-ordered store for testing/dev. Overwrites keep their position."""

    items: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove(self, key: str) -> None:
        self.items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self.items)

    def snapshot(self) -> dict[str, str]:
        """Copy of the raw contents (useful in tests)."""
        return dict(self.items)


@dataclass
class RedisKeyValueStore:
    """All keys live as fields of a single Redis hash."""

    url: str
    hash_key: str = "fitness-app:state"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url, decode_responses=True)

    def _call(self, op: Callable[[redis.Redis], T]) -> T:
        try:
            return op(self.client)
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections; reconnect once, then let
            # a second failure propagate to the caller.
            self.client = redis.Redis.from_url(self.url, decode_responses=True)
            return op(self.client)

    def get(self, key: str) -> Optional[str]:
        return self._call(lambda c: c.hget(self.hash_key, key))

    def set(self, key: str, value: str) -> None:
        self._call(lambda c: c.hset(self.hash_key, key, value))

    def remove(self, key: str) -> None:
        self._call(lambda c: c.hdel(self.hash_key, key))

    def keys(self) -> list[str]:
        return list(self._call(lambda c: c.hkeys(self.hash_key)))

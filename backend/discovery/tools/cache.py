"""Injected, time-bounded caches owned by the calling layer."""

import hashlib
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


def make_key(namespace: str, payload: BaseModel) -> str:
    """Generate deterministic cache key from payload."""
    data = payload.model_dump(mode="json")
    sorted_json = json.dumps(data, sort_keys=True)
    hash_digest = hashlib.sha256(sorted_json.encode()).hexdigest()
    return f"{namespace}:{hash_digest}"


class TTLCache(Protocol):
    """get/set/invalidate capability handed to adapters and the orchestrator."""

    def get(self, key: str, now: datetime | None = None) -> Any | None: ...

    def set(self, key: str, value: Any, ttl_seconds: int, now: datetime | None = None) -> None: ...

    def invalidate(self, key: str | None = None) -> None: ...


@dataclass
class CacheEntry(Generic[T]):
    """Cached value with metadata."""

    value: T
    cached_at: datetime
    ttl_seconds: int

    def is_fresh(self, now: datetime) -> bool:
        """Check if cache entry is still valid."""
        return (now - self.cached_at).total_seconds() < self.ttl_seconds


class InMemoryTTLCache:
    """In-memory TTL cache."""

    def __init__(self) -> None:
        self._cache: dict[str, CacheEntry[Any]] = {}

    def make_key(self, namespace: str, payload: BaseModel) -> str:
        return make_key(namespace, payload)

    def get(self, key: str, now: datetime | None = None) -> Any | None:
        """Get cached value if fresh, None otherwise."""
        now = now or datetime.now()
        entry = self._cache.get(key)
        if entry and entry.is_fresh(now):
            return entry.value
        elif entry:
            # Expired - remove
            del self._cache[key]
        return None

    def set(self, key: str, value: Any, ttl_seconds: int, now: datetime | None = None) -> None:
        """Store value in cache with TTL. A non-positive TTL stores nothing."""
        if ttl_seconds <= 0:
            return
        self._cache[key] = CacheEntry(
            value=value, cached_at=now or datetime.now(), ttl_seconds=ttl_seconds
        )

    def invalidate(self, key: str | None = None) -> None:
        """Drop one key, or everything when key is None."""
        if key is None:
            self._cache.clear()
        else:
            self._cache.pop(key, None)

    def __len__(self) -> int:
        return len(self._cache)

"""Tenant-aware TTL cache for derived read models.

Keys are structured so that entries for one tenant can never be served to
another, and so a tenant's entries can be invalidated together.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable


@dataclass(frozen=True)
class CacheKey:
    """Structured cache key.

    Attributes:
        tenant_id: Tenant the cached value belongs to (None for global values)
        name: Name of the cached computation
        params: Sorted parameter pairs that the value depends on
    """

    tenant_id: str | None
    name: str
    params: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def build(cls, tenant_id: str | None, name: str, **params: Any) -> CacheKey:
        return cls(tenant_id=tenant_id, name=name, params=tuple(sorted(params.items())))


@runtime_checkable
class ITTLCache(Protocol):
    """Port for an expiring key/value cache."""

    async def get(self, key: CacheKey) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        ...

    async def set(self, key: CacheKey, value: Any, ttl_seconds: float) -> None:
        """Store a value for ttl_seconds."""
        ...

    async def invalidate_tenant(self, tenant_id: str | None) -> int:
        """Drop every entry for a tenant, returning how many were removed."""
        ...


class InMemoryTTLCache:
    """Process-local TTL cache guarded by an asyncio lock."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[CacheKey, tuple[float, Any]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def get(self, key: CacheKey) -> Any | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    async def set(self, key: CacheKey, value: Any, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        async with self._lock:
            self._entries[key] = (self._clock() + ttl_seconds, value)

    async def invalidate_tenant(self, tenant_id: str | None) -> int:
        async with self._lock:
            stale = [key for key in self._entries if key.tenant_id == tenant_id]
            for key in stale:
                del self._entries[key]
            return len(stale)

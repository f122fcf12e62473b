"""Shared infrastructure dependencies.

Provides process-wide resources only: the event bus and the TTL cache.
Does NOT import from bounded contexts to maintain DDD boundaries.
"""

from functools import lru_cache

from shared_kernel.cache import InMemoryTTLCache
from shared_kernel.events import InMemoryEventBus


@lru_cache
def get_event_bus() -> InMemoryEventBus:
    """Get the application-scoped event bus (singleton).

    Live connections subscribe here to be told when their session is revoked.
    """
    return InMemoryEventBus()


@lru_cache
def get_cache() -> InMemoryTTLCache:
    """Get the application-scoped TTL cache (singleton)."""
    return InMemoryTTLCache()

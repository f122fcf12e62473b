"""Best-effort, non-blocking publish/subscribe.

Used to tell live connections that their session was revoked. Publishing
never waits on a subscriber: a full queue drops the event for that
subscriber only.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from shared_kernel.events.observability import DefaultEventBusProbe, EventBusProbe

SESSION_TOPIC_PREFIX = "session:"


def session_topic(token_hash: str) -> str:
    """Topic that connections authenticated with a given session listen on."""
    return f"{SESSION_TOPIC_PREFIX}{token_hash}"


@dataclass(frozen=True)
class SessionDisconnectRequested:
    """A session was revoked and any connection using it should close."""

    principal_id: str
    token_hash: str
    occurred_at: datetime

    @property
    def topic(self) -> str:
        return session_topic(self.token_hash)


@runtime_checkable
class IEventBus(Protocol):
    """Port for in-process event delivery."""

    def publish(self, topic: str, event: Any) -> int:
        """Deliver an event to every subscriber of a topic.

        Returns:
            Number of subscribers that received the event
        """
        ...

    def subscribe(self, topic: str) -> asyncio.Queue[Any]:
        """Register a new subscriber queue for a topic."""
        ...

    def unsubscribe(self, topic: str, queue: asyncio.Queue[Any]) -> None:
        """Remove a subscriber queue."""
        ...


class InMemoryEventBus:
    """Event bus keeping one bounded asyncio queue per subscriber."""

    def __init__(
        self,
        max_queue_size: int = 100,
        probe: EventBusProbe | None = None,
    ) -> None:
        self._max_queue_size = max_queue_size
        self._subscribers: dict[str, set[asyncio.Queue[Any]]] = defaultdict(set)
        self._probe = probe or DefaultEventBusProbe()

    def publish(self, topic: str, event: Any) -> int:
        delivered = 0
        for queue in list(self._subscribers.get(topic, ())):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                self._probe.event_dropped(topic, type(event).__name__)
                continue
            delivered += 1
        self._probe.event_published(topic, type(event).__name__, delivered)
        return delivered

    def subscribe(self, topic: str) -> asyncio.Queue[Any]:
        queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers[topic].add(queue)
        self._probe.subscriber_added(topic)
        return queue

    def unsubscribe(self, topic: str, queue: asyncio.Queue[Any]) -> None:
        subscribers = self._subscribers.get(topic)
        if not subscribers:
            return
        subscribers.discard(queue)
        if not subscribers:
            del self._subscribers[topic]
        self._probe.subscriber_removed(topic)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

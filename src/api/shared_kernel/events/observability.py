"""Observability probes for the event bus."""

from __future__ import annotations

from typing import Protocol

import structlog

logger = structlog.get_logger()


class EventBusProbe(Protocol):
    """Protocol for event bus observability."""

    def event_published(self, topic: str, event_type: str, delivered: int) -> None:
        """Called after an event was handed to all subscribers of a topic."""
        ...

    def event_dropped(self, topic: str, event_type: str) -> None:
        """Called when a subscriber queue was full and the event was dropped."""
        ...

    def subscriber_added(self, topic: str) -> None:
        """Called when a subscriber starts listening on a topic."""
        ...

    def subscriber_removed(self, topic: str) -> None:
        """Called when a subscriber stops listening on a topic."""
        ...


class DefaultEventBusProbe:
    """Default implementation using structlog."""

    def __init__(self) -> None:
        self._log = logger.bind(component="event_bus")

    def event_published(self, topic: str, event_type: str, delivered: int) -> None:
        self._log.debug(
            "event_published", topic=topic, event_type=event_type, delivered=delivered
        )

    def event_dropped(self, topic: str, event_type: str) -> None:
        self._log.warning("event_dropped", topic=topic, event_type=event_type)

    def subscriber_added(self, topic: str) -> None:
        self._log.debug("event_subscriber_added", topic=topic)

    def subscriber_removed(self, topic: str) -> None:
        self._log.debug("event_subscriber_removed", topic=topic)

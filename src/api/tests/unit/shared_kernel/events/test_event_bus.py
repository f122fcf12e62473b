"""Unit tests for the in-memory event bus."""

from datetime import UTC, datetime
from unittest.mock import Mock

import pytest

from shared_kernel.events import (
    EventBusProbe,
    InMemoryEventBus,
    SessionDisconnectRequested,
    session_topic,
)


def _disconnect(token_hash: str = "abc") -> SessionDisconnectRequested:
    return SessionDisconnectRequested(
        principal_id="01HZX0000000000000000USER1",
        token_hash=token_hash,
        occurred_at=datetime(2026, 3, 2, tzinfo=UTC),
    )


class TestInMemoryEventBus:
    @pytest.mark.asyncio
    async def test_subscriber_receives_published_event(self):
        bus = InMemoryEventBus()
        queue = bus.subscribe(session_topic("abc"))

        delivered = bus.publish(session_topic("abc"), _disconnect())

        assert delivered == 1
        event = queue.get_nowait()
        assert event.token_hash == "abc"
        assert event.topic == "session:abc"

    @pytest.mark.asyncio
    async def test_publish_without_subscribers_delivers_nothing(self):
        bus = InMemoryEventBus()

        assert bus.publish(session_topic("nobody"), _disconnect("nobody")) == 0

    @pytest.mark.asyncio
    async def test_topics_are_isolated(self):
        bus = InMemoryEventBus()
        mine = bus.subscribe(session_topic("mine"))

        bus.publish(session_topic("theirs"), _disconnect("theirs"))

        assert mine.empty()

    @pytest.mark.asyncio
    async def test_full_queue_drops_event_without_blocking(self):
        probe = Mock(spec=EventBusProbe)
        bus = InMemoryEventBus(max_queue_size=1, probe=probe)
        slow = bus.subscribe("topic")
        fast = bus.subscribe("topic")

        bus.publish("topic", "first")
        fast.get_nowait()
        delivered = bus.publish("topic", "second")

        assert delivered == 1
        assert slow.qsize() == 1
        assert slow.get_nowait() == "first"
        probe.event_dropped.assert_called_once_with("topic", "str")

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_delivery(self):
        bus = InMemoryEventBus()
        queue = bus.subscribe("topic")

        bus.unsubscribe("topic", queue)
        bus.publish("topic", "event")

        assert queue.empty()
        assert bus.subscriber_count("topic") == 0

    @pytest.mark.asyncio
    async def test_unsubscribe_unknown_topic_is_noop(self):
        bus = InMemoryEventBus()
        bus.unsubscribe("missing", bus.subscribe("other"))

        assert bus.subscriber_count("other") == 1

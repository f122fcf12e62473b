"""In-process event delivery for cross-cutting notifications."""

from shared_kernel.events.bus import (
    IEventBus,
    InMemoryEventBus,
    SessionDisconnectRequested,
    session_topic,
)
from shared_kernel.events.observability import DefaultEventBusProbe, EventBusProbe

__all__ = [
    "DefaultEventBusProbe",
    "EventBusProbe",
    "IEventBus",
    "InMemoryEventBus",
    "SessionDisconnectRequested",
    "session_topic",
]

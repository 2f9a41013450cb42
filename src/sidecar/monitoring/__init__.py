"""Host notification plumbing."""

from sidecar.monitoring.event_bus import (
    Event,
    EventBus,
    EventSink,
    EventType,
    LoggingSink,
    RecordingSink,
    StreamSink,
)

__all__ = [
    "Event",
    "EventBus",
    "EventSink",
    "EventType",
    "LoggingSink",
    "RecordingSink",
    "StreamSink",
]

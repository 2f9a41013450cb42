"""Host notifications for a session.

The ``SessionController`` publishes three kinds of message to whatever UI
hosts it: ``init`` (catalog overview), ``url_changed`` (the context for a
new page), and ``data_updated`` (the full record list). Hosts subscribe a
sink per transport. A control panel bridge, a line-delimited stream on
stdout, or the logger are typical.

Delivery is sequential and best-effort: a sink that raises is logged and
skipped, and the remaining sinks still receive the message.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from sidecar.models.results import utc_timestamp

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Channels a host can receive."""

    INIT = "init"
    URL_CHANGED = "url_changed"
    DATA_UPDATED = "data_updated"
    LOG = "log"
    ERROR = "error"


class Event(BaseModel):
    """One host message."""

    model_config = ConfigDict(frozen=True)

    event_type: EventType
    timestamp: str = Field(default_factory=utc_timestamp)
    data: dict[str, Any] = Field(default_factory=dict)

    def to_message(self) -> dict[str, Any]:
        """Return the ``{channel, payload, timestamp}`` shape sent to hosts."""
        return {"channel": self.event_type.value, "payload": self.data, "timestamp": self.timestamp}

    def to_jsonl(self) -> str:
        return json.dumps(self.to_message(), default=str)


@runtime_checkable
class EventSink(Protocol):
    """Anything that can receive host messages."""

    async def handle_event(self, event: Event) -> None: ...


def _summarize(event: Event) -> str:
    data = event.data
    if event.event_type == EventType.URL_CHANGED:
        source = (data.get("source") or {}).get("id", "-")
        scenario = (data.get("scenario") or {}).get("id", "-")
        return f"{data.get('url', '')} -> {source}/{scenario}"
    if event.event_type == EventType.DATA_UPDATED:
        return f"{len(data.get('records', []))} record(s)"
    if event.event_type == EventType.INIT:
        return f"{len(data.get('sources', []))} source(s), {len(data.get('processors', []))} processor(s)"
    return json.dumps(data, default=str)[:200]


class LoggingSink:
    """Log a one-line summary of each message.

    ``error`` messages are logged at WARNING, everything else at DEBUG.
    """

    def __init__(self, logger_name: str = "sidecar.events") -> None:
        self._logger = logging.getLogger(logger_name)

    async def handle_event(self, event: Event) -> None:
        level = logging.WARNING if event.event_type == EventType.ERROR else logging.DEBUG
        self._logger.log(level, "%s: %s", event.event_type.value, _summarize(event))


class RecordingSink:
    """Keep every message in memory, for tests and headless hosts."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    async def handle_event(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, event_type: EventType) -> list[Event]:
        return [e for e in self.events if e.event_type == event_type]

    def last(self, event_type: EventType) -> Event | None:
        """Return the most recent message on *event_type*, if any."""
        matching = self.of_type(event_type)
        return matching[-1] if matching else None

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)


class StreamSink:
    """Write each message as one JSON line to a text stream (e.g. ``sys.stdout``)."""

    def __init__(self, stream: Any) -> None:
        self._stream = stream

    async def handle_event(self, event: Event) -> None:
        self._stream.write(event.to_jsonl() + "\n")
        flush = getattr(self._stream, "flush", None)
        if flush is not None:
            flush()


class EventBus:
    """Fan host messages out to subscribed sinks, in subscription order."""

    def __init__(self, sinks: list[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = []
        for sink in sinks or ():
            self.subscribe(sink)

    def subscribe(self, sink: EventSink) -> Callable[[], None]:
        """Add *sink* and return a callable that unsubscribes it."""
        self._sinks.append(sink)
        return lambda: self.unsubscribe(sink)

    def unsubscribe(self, sink: EventSink) -> None:
        self._sinks = [s for s in self._sinks if s is not sink]

    @property
    def sinks(self) -> tuple[EventSink, ...]:
        return tuple(self._sinks)

    async def emit(self, event_type: EventType | str, data: dict[str, Any] | None = None) -> Event:
        """Deliver a message to every sink and return it.

        An unrecognised channel name is delivered on ``log``.
        """
        if not isinstance(event_type, EventType):
            try:
                event_type = EventType(event_type)
            except ValueError:
                logger.debug("Unknown event channel %r delivered as log", event_type)
                event_type = EventType.LOG

        event = Event(event_type=event_type, data=data or {})
        for sink in list(self._sinks):
            try:
                await sink.handle_event(event)
            except Exception:
                logger.exception("Sink %s failed on %s", type(sink).__name__, event_type.value)
        return event

"""Where suite and scenario events go.

A Suite owns one MultiSink. The recorder of every scenario in the suite emits
status changes and finished summaries into it, and the sink fans them out to
whatever was registered: a JSONL artifact file, an in-memory list for tests,
or the debug log.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from assay.events.types import Event

logger = logging.getLogger(__name__)


@runtime_checkable
class EventSink(Protocol):
    """Anything a Suite can hand events to."""

    def emit(self, event: Event) -> None: ...

    def close(self) -> None:
        """Flush and release resources. Called once the run is over."""
        ...


class MultiSink:
    """Fans each event out to every registered sink.

    A sink that raises is logged and skipped, so one broken artifact writer
    never costs the others an event.

    Example:
        sink = MultiSink([JsonlSink("runs/events.jsonl")])
        sink.add(ListSink())
    """

    def __init__(self, sinks: list[EventSink] | None = None):
        self._sinks: list[EventSink] = []
        for sink in sinks or []:
            self.add(sink)

    def add(self, sink: EventSink) -> None:
        """Register a sink. Registering the same sink twice is a no-op."""
        if not any(s is sink for s in self._sinks):
            self._sinks.append(sink)

    def remove(self, sink: EventSink) -> None:
        self._sinks = [s for s in self._sinks if s is not sink]

    def emit(self, event: Event) -> None:
        for sink in list(self._sinks):
            try:
                sink.emit(event)
            except Exception:
                logger.warning("event sink %r failed to emit %s", sink, event.type, exc_info=True)

    def close(self) -> None:
        for sink in list(self._sinks):
            try:
                sink.close()
            except Exception:
                logger.warning("event sink %r failed to close", sink, exc_info=True)

    def __len__(self) -> int:
        return len(self._sinks)


class NullSink:
    """Discards events. Used by scenarios that belong to no suite."""

    def emit(self, event: Event) -> None:
        pass

    def close(self) -> None:
        pass


class LoggingSink:
    """Writes a one-line summary of each event to the ``assay`` debug log."""

    def __init__(self, level: int = logging.DEBUG):
        self.level = level

    def emit(self, event: Event) -> None:
        subject = f"{event.suite}/{event.scenario}" if event.scenario else event.suite
        detail = getattr(event, "status", None) or getattr(event, "passed", "")
        logger.log(self.level, "%s %s %s", event.type, subject, detail)

    def close(self) -> None:
        pass


class ListSink:
    """Keeps every event in memory, in emit order."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def close(self) -> None:
        pass

    def clear(self) -> None:
        self.events.clear()

    def of_type(self, event_type: str) -> list[Event]:
        """Events whose `type` discriminator equals event_type."""
        return [e for e in self.events if e.type == event_type]

    def for_scenario(self, title: str) -> list[Event]:
        """Events emitted on behalf of one scenario."""
        return [e for e in self.events if e.scenario == title]

    def __len__(self) -> int:
        return len(self.events)

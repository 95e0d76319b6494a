"""Structured event emission for pipeline observability.

Components receive an EventEmitter and report counts, durations and
decisions as (name, fields) pairs. Sinks decide what to do with them;
the default sink writes a debug log line.
"""

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

EventSink = Callable[[str, dict[str, Any]], None]


def log_sink(name: str, fields: dict[str, Any]) -> None:
    logger.debug("event=%s %s", name, fields)


class EventEmitter:
    def __init__(self, sinks: list[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks) if sinks is not None else [log_sink]

    def add_sink(self, sink: EventSink) -> None:
        self._sinks.append(sink)

    def emit(self, name: str, **fields: Any) -> None:
        for sink in self._sinks:
            try:
                sink(name, fields)
            except Exception as e:
                logger.warning("Event sink failed for %s: %s", name, e)


class RecordingSink:
    """Keeps emitted events in memory. Used by tests and the generation-run audit."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, name: str, fields: dict[str, Any]) -> None:
        self.events.append((name, fields))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def find(self, name: str) -> list[dict[str, Any]]:
        return [fields for event, fields in self.events if event == name]


_default = EventEmitter()


def default_emitter() -> EventEmitter:
    return _default

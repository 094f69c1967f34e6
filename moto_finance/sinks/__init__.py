"""Output sinks for outbound financing events."""

from typing import Protocol

from moto_finance.models.events import Event
from moto_finance.sinks.console import ConsoleSink
from moto_finance.sinks.json_file import JsonLinesSink


class EventSink(Protocol):
    """Anything that accepts outbound events."""

    def emit(self, event: Event) -> None: ...

    def close(self) -> None: ...


__all__ = ["ConsoleSink", "EventSink", "JsonLinesSink"]

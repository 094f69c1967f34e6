"""Console sink for debugging and development."""

import json
from typing import Any

from moto_finance.models.events import Event
from moto_finance.sinks.serialization import to_dict


class ConsoleSink:
    """Print outbound events to stdout."""

    def __init__(self, pretty: bool = True, include_data: bool = False) -> None:
        """Initialize console sink.

        Parameters
        ----------
        pretty : bool
            Pretty-print JSON output.
        include_data : bool
            Print the full event payload instead of a one-line notice.
        """
        self.pretty = pretty
        self.include_data = include_data
        self._counts: dict[str, int] = {}

    def emit(self, event: Event) -> None:
        """Print one event."""
        if self.include_data:
            self._print(to_dict(event))
        else:
            print(f"[{event.event_time:%Y-%m-%d %H:%M:%S}] {event.event_type} {event.subject}")

        self._counts[event.event_type] = self._counts.get(event.event_type, 0) + 1

    def close(self) -> None:
        """Print summary and close."""
        print(f"\n{'='*60}")
        print("Console Sink Summary")
        print("=" * 60)
        for event_type, count in self._counts.items():
            print(f"  {event_type}: {count} events")

    def _print(self, data: dict[str, Any]) -> None:
        if self.pretty:
            print(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        else:
            print(json.dumps(data, ensure_ascii=False, default=str))

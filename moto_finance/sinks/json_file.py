"""JSON Lines sink for outbound events."""

import json
from pathlib import Path
from typing import TextIO

from moto_finance.exceptions import SinkError
from moto_finance.models.events import Event
from moto_finance.sinks.serialization import to_dict


class JsonLinesSink:
    """Append events to ``<output_dir>/<filename>``, one JSON document per line."""

    def __init__(self, output_dir: str | Path, filename: str = "events.jsonl") -> None:
        """Initialize JSON Lines sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory for the events file.
        filename : str
            Events file name.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.file_path = self.output_dir / filename
        self._file: TextIO | None = None
        self._count = 0

    def emit(self, event: Event) -> None:
        """Append one event and flush it to disk."""
        try:
            if self._file is None:
                self._file = open(self.file_path, "a", encoding="utf-8")
            self._file.write(json.dumps(to_dict(event), ensure_ascii=False) + "\n")
            self._file.flush()
        except OSError as exc:
            raise SinkError(f"Cannot write event to {self.file_path}: {exc}") from exc
        self._count += 1

    def close(self) -> None:
        """Close the events file."""
        if self._file is not None:
            self._file.close()
            self._file = None
        print(f"Events written to: {self.file_path} ({self._count} events)")

"""Run artifacts: suite events as JSON lines.

``assay run --artifacts-dir`` writes one ``events.jsonl`` per run. Every line is
one event; scenario_finished lines carry the scenario's full log, so a run can
be re-read and re-rendered without executing anything.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import IO

from pydantic import TypeAdapter

from assay.events.types import Event

_EVENT = TypeAdapter(Event)


class JsonlSink:
    """Appends each event to a JSONL file and flushes after every line.

    Several suites in one run may share the sink; their events interleave in
    emit order.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh: IO[str] = self.path.open("a", encoding="utf-8")
        self.written = 0

    def emit(self, event: Event) -> None:
        self._fh.write(event.model_dump_json() + "\n")
        self._fh.flush()
        self.written += 1

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()

    def __enter__(self) -> JsonlSink:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def iter_events(path: str | Path, event_type: str | None = None) -> Iterator[Event]:
    """Yield the events stored in a run artifact, optionally of one type only.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValidationError: If a line is not a known event.
    """
    with open(path, encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            event = _EVENT.validate_json(line)
            if event_type is None or event.type == event_type:
                yield event


def read_events(path: str | Path, event_type: str | None = None) -> list[Event]:
    return list(iter_events(path, event_type))

"""Append-only log collection for one scenario."""

from __future__ import annotations

from typing import Iterator

from assay.events.types import BaseEntry, LogEntry


class LogCollection:
    """Ordered record of headings, comments and assertion results.

    Entries are never removed. Pass/fail status is derived by scanning entry
    types, nothing is aggregated on insert.
    """

    def __init__(self) -> None:
        self._items: list[LogEntry] = []

    def add(self, entry: BaseEntry) -> BaseEntry:
        self._items.append(entry)  # type: ignore[arg-type]
        return entry

    @property
    def items(self) -> list[LogEntry]:
        """A copy of all entries in insertion order."""
        return list(self._items)

    @property
    def has_failures(self) -> bool:
        return any(item.is_failure for item in self._items)

    @property
    def failures(self) -> list[LogEntry]:
        return [item for item in self._items if item.is_failure]

    @property
    def passes(self) -> list[LogEntry]:
        return [item for item in self._items if item.is_pass]

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

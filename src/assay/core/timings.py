"""Timing marks recorded over a scenario's lifecycle.

Marks are wall-clock seconds (``time.time()``); durations are milliseconds.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, Field


def _elapsed_ms(start: float | None, end: float | None) -> float | None:
    if start is None or end is None:
        return None
    return round((end - start) * 1000, 3)


class Timings(BaseModel):
    """When a scenario was created, started, requested, loaded and finished."""

    initialized: float = Field(default_factory=time.time)
    executed: float | None = None
    request_started: float | None = None
    response_loaded: float | None = None
    finished: float | None = None

    def mark(self, name: str) -> float:
        now = time.time()
        setattr(self, name, now)
        return now

    @property
    def total_ms(self) -> float:
        """Creation to completion, or to now while still running."""
        end = self.finished if self.finished is not None else time.time()
        return round((end - self.initialized) * 1000, 3)

    @property
    def execution_ms(self) -> float | None:
        return _elapsed_ms(self.executed, self.finished)

    @property
    def request_ms(self) -> float | None:
        return _elapsed_ms(self.request_started, self.response_loaded)

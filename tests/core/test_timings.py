"""Tests for core/timings.py - lifecycle timing marks."""

from __future__ import annotations

from assay.core.timings import Timings


class TestTimings:
    """Tests for Timings."""

    def test_unset_durations_are_none(self) -> None:
        """Durations need both marks."""
        timings = Timings()
        assert timings.execution_ms is None
        assert timings.request_ms is None

    def test_durations_in_milliseconds(self) -> None:
        """Durations are the differences between marks, in ms."""
        timings = Timings(initialized=100.0, executed=100.5, request_started=101.0,
                          response_loaded=101.25, finished=102.0)
        assert timings.execution_ms == 1500.0
        assert timings.request_ms == 250.0
        assert timings.total_ms == 2000.0

    def test_mark_sets_field(self) -> None:
        """mark records now under the given name."""
        timings = Timings()
        stamp = timings.mark("executed")
        assert timings.executed == stamp
        assert stamp >= timings.initialized

    def test_total_runs_until_finished(self) -> None:
        """total_ms grows while the scenario has not finished."""
        timings = Timings()
        assert timings.total_ms >= 0

"""Tests for core/recorder.py - log writes and event emission."""

from __future__ import annotations

from assay.core.recorder import Recorder
from assay.events.collection import LogCollection
from assay.events.sink import ListSink
from assay.events.types import ScenarioFinishedEvent, ScenarioStatusChangedEvent
from assay.scenario.model import Scenario
from assay.scenario.suite import Suite
from assay.types import ScenarioStatusEvent


class TestRecorderEntries:
    """Tests for log entry helpers."""

    def test_entries_appended_in_order(self) -> None:
        """Each helper appends one typed entry."""
        log = LogCollection()
        recorder = Recorder(Scenario(None, "Standalone"), log)

        recorder.heading("Title")
        recorder.subheading("Phase")
        recorder.comment("note")
        recorder.passed("ok")
        recorder.failed("bad", "details")
        recorder.warning("maybe")

        assert [e.type for e in log] == [
            "heading", "subheading", "comment", "pass", "fail", "warning",
        ]
        assert log.items[4].details == "details"

    def test_without_suite_uses_null_sink(self) -> None:
        """A scenario outside a suite emits nowhere, without error."""
        recorder = Recorder(Scenario(None, "Standalone"), LogCollection())
        recorder.status(ScenarioStatusEvent.EXECUTION_START)
        recorder.finished()


class TestRecorderEvents:
    """Tests for event emission."""

    def test_status_event(self) -> None:
        """status emits the scenario's state alongside the event."""
        sink = ListSink()
        suite = Suite("Site", sink=sink)
        scenario = suite.scenario("Home")

        scenario._recorder.status(ScenarioStatusEvent.EXECUTION_START)

        (event,) = sink.events
        assert isinstance(event, ScenarioStatusChangedEvent)
        assert event.suite == "Site"
        assert event.scenario == "Home"
        assert event.status == "execution_start"
        assert event.state == "created"

    def test_sink_added_later_receives_events(self) -> None:
        """The suite's sink is looked up on every emit."""
        suite = Suite("Site")
        scenario = suite.scenario("Home")
        sink = ListSink()
        suite.add_sink(sink)

        scenario._recorder.finished()

        (event,) = sink.events
        assert isinstance(event, ScenarioFinishedEvent)
        assert event.passed is False

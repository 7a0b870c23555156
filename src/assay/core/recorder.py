"""Log recorder for assay scenarios.

Recorder is the single write path from a Scenario into its LogCollection and
out to the suite's EventSink:
- Log entries (headings, comments, results) are appended immediately
- Status changes and the finished scenario are emitted as typed events
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from assay.events.collection import LogCollection
from assay.events.sink import EventSink, NullSink
from assay.events.types import (
    BaseEntry,
    CommentEntry,
    FailEntry,
    HeadingEntry,
    PassEntry,
    ScenarioFinishedEvent,
    ScenarioStatusChangedEvent,
    SubHeadingEntry,
    WarningEntry,
)
from assay.types import ScenarioStatusEvent

if TYPE_CHECKING:
    from assay.scenario.model import Scenario

logger = logging.getLogger(__name__)


class Recorder:
    """Appends entries to a scenario's log and emits its events.

    Example:
        recorder = Recorder(scenario, LogCollection())
        recorder.heading("Homepage loads")
        recorder.passed("HTTP Status Code is between 200 and 299")
        recorder.failed("h1 does not exist")
    """

    def __init__(self, scenario: Scenario, log: LogCollection):
        """Initialize the recorder.

        Args:
            scenario: The scenario whose log this is. Its suite's sink is
                looked up on every emit, so sinks added later still receive
                events.
            log: The collection entries are appended to.
        """
        self._scenario = scenario
        self._log = log

    @property
    def log(self) -> LogCollection:
        return self._log

    @property
    def sink(self) -> EventSink:
        suite = self._scenario.suite
        return suite.sink if suite is not None else NullSink()

    @property
    def _suite_title(self) -> str:
        suite = self._scenario.suite
        return suite.title if suite is not None else ""

    def add(self, entry: BaseEntry) -> BaseEntry:
        logger.debug(
            "[%s] %s: %s", self._scenario.title, getattr(entry, "type", ""), entry.message
        )
        return self._log.add(entry)

    def heading(self, message: str) -> BaseEntry:
        return self.add(HeadingEntry(message=message))

    def subheading(self, message: str) -> BaseEntry:
        return self.add(SubHeadingEntry(message=message))

    def comment(self, message: str) -> BaseEntry:
        return self.add(CommentEntry(message=message))

    def passed(self, message: str) -> BaseEntry:
        return self.add(PassEntry(message=message))

    def failed(self, message: str, details: str | None = None) -> BaseEntry:
        return self.add(FailEntry(message=message, details=details))

    def warning(self, message: str, details: str | None = None) -> BaseEntry:
        return self.add(WarningEntry(message=message, details=details))

    def status(self, status: ScenarioStatusEvent) -> None:
        """Emit a status change.

        Args:
            status: The lifecycle event being published.
        """
        self.sink.emit(
            ScenarioStatusChangedEvent(
                suite=self._suite_title,
                scenario=self._scenario.title,
                status=status.value,
                state=self._scenario.state.value,
            )
        )

    def finished(self) -> None:
        """Emit the finished scenario with its full log."""
        scenario = self._scenario
        self.sink.emit(
            ScenarioFinishedEvent(
                suite=self._suite_title,
                scenario=scenario.title,
                state=scenario.state.value,
                passed=scenario.has_passed,
                error=scenario.error,
                url=scenario.url,
                final_url=scenario.final_url,
                redirect_chain=scenario.redirect_chain,
                duration_ms=scenario.execution_duration,
                entries=self._log.items,
            )
        )

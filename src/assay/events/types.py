"""Pydantic models for log entries and status events.

Log entries are what a scenario records while it runs (headings, comments,
assertion results). Events wrap status changes and finished scenarios so they
can be streamed to sinks and persisted as JSONL.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BaseEntry(BaseModel):
    """Base class for all log entries."""

    message: str
    timestamp: datetime = Field(default_factory=_utc_now)

    @property
    def is_failure(self) -> bool:
        return False

    @property
    def is_pass(self) -> bool:
        return False


class HeadingEntry(BaseEntry):
    """Scenario title, logged when execution starts."""

    type: Literal["heading"] = "heading"


class SubHeadingEntry(BaseEntry):
    """Label of an assertion phase."""

    type: Literal["subheading"] = "subheading"


class CommentEntry(BaseEntry):
    """Neutral line in the output."""

    type: Literal["comment"] = "comment"


class PassEntry(BaseEntry):
    """A passing assertion."""

    type: Literal["pass"] = "pass"

    @property
    def is_pass(self) -> bool:
        return True


class FailEntry(BaseEntry):
    """A failing assertion or an execution error."""

    type: Literal["fail"] = "fail"
    details: str | None = None

    @property
    def is_failure(self) -> bool:
        return True


class WarningEntry(BaseEntry):
    """An optional assertion that failed, or an assertion that never resolved.

    Warnings are reported but never fail the scenario.
    """

    type: Literal["warning"] = "warning"
    details: str | None = None


LogEntry = Annotated[
    Union[
        HeadingEntry,
        SubHeadingEntry,
        CommentEntry,
        PassEntry,
        FailEntry,
        WarningEntry,
    ],
    Field(discriminator="type"),
]


class BaseEvent(BaseModel):
    """Base class for all events."""

    timestamp: datetime = Field(default_factory=_utc_now)
    suite: str = ""
    scenario: str = ""

    model_config = {"extra": "allow"}


class ScenarioStatusChangedEvent(BaseEvent):
    """Emitted whenever a scenario publishes a status change."""

    type: Literal["scenario_status"] = "scenario_status"
    status: str = ""
    state: str = ""


class ScenarioFinishedEvent(BaseEvent):
    """Emitted once per scenario with its full log."""

    type: Literal["scenario_finished"] = "scenario_finished"
    state: str = ""
    passed: bool = False
    error: str | None = None
    url: str | None = None
    final_url: str | None = None
    redirect_chain: list[str] = Field(default_factory=list)
    duration_ms: float | None = None
    entries: list[LogEntry] = Field(default_factory=list)


class SuiteFinishedEvent(BaseEvent):
    """Emitted when every scenario of a suite is done."""

    type: Literal["suite_finished"] = "suite_finished"
    passed: bool = False
    total: int = 0
    failed: int = 0
    duration_ms: float = 0.0
    summary: dict[str, Any] = Field(default_factory=dict)


Event = Annotated[
    Union[
        ScenarioStatusChangedEvent,
        ScenarioFinishedEvent,
        SuiteFinishedEvent,
    ],
    Field(discriminator="type"),
]

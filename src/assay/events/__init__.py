"""Event system for assay."""

from assay.events.types import (
    Event,
    LogEntry,
    HeadingEntry,
    SubHeadingEntry,
    CommentEntry,
    PassEntry,
    FailEntry,
    WarningEntry,
    ScenarioStatusChangedEvent,
    ScenarioFinishedEvent,
    SuiteFinishedEvent,
)
from assay.events.collection import LogCollection
from assay.events.sink import EventSink, ListSink, LoggingSink, MultiSink, NullSink
from assay.events.jsonl import JsonlSink, iter_events, read_events

__all__ = [
    "Event",
    "LogEntry",
    "HeadingEntry",
    "SubHeadingEntry",
    "CommentEntry",
    "PassEntry",
    "FailEntry",
    "WarningEntry",
    "ScenarioStatusChangedEvent",
    "ScenarioFinishedEvent",
    "SuiteFinishedEvent",
    "LogCollection",
    "EventSink",
    "MultiSink",
    "NullSink",
    "ListSink",
    "LoggingSink",
    "JsonlSink",
    "iter_events",
    "read_events",
]

"""Core type definitions for assay.

This module contains the enums shared across the codebase. Backend-specific
types (Playwright handles, httpx objects) stay inside their adapters.
"""

from __future__ import annotations

from enum import Enum


class ScenarioState(str, Enum):
    """Lifecycle states of a Scenario."""

    CREATED = "created"
    WAITING = "waiting"  # Explicit wait, unresolved path params, or no phases yet
    EXECUTING = "executing"  # Before hooks + fetch dispatched
    RESPONSE_RECEIVED = "response_received"  # Adapter resolved, pipes running
    RUNNING_PHASES = "running_phases"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (
            ScenarioState.COMPLETED,
            ScenarioState.SKIPPED,
            ScenarioState.CANCELLED,
        )

    @property
    def is_pending(self) -> bool:
        return self in (ScenarioState.CREATED, ScenarioState.WAITING)


class ScenarioStatusEvent(str, Enum):
    """Status changes published to scenario subscribers."""

    BEFORE_EXECUTE = "before_execute"
    EXECUTION_START = "execution_start"
    EXECUTION_PROGRESS = "execution_progress"
    EXECUTION_SKIPPED = "execution_skipped"
    EXECUTION_CANCELLED = "execution_cancelled"
    AFTER_EXECUTE = "after_execute"
    FINISHED = "finished"


class ResponseType(str, Enum):
    """How a fetched response is turned into values for assertions."""

    RESOURCE = "resource"  # Generic: status, headers, body
    JSON = "json"
    XML = "xml"
    DOCUMENT = "document"  # Well-formed markup (XHTML) parsed as a document
    BROWSER = "browser"  # Live browser page

    @property
    def requires_browser(self) -> bool:
        return self is ResponseType.BROWSER


class LineType(str, Enum):
    """Kinds of entries in a scenario log."""

    HEADING = "heading"
    SUBHEADING = "subheading"
    COMMENT = "comment"
    PASS = "pass"
    FAIL = "fail"
    WARNING = "warning"  # Optional failure or incomplete assertion


HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options")

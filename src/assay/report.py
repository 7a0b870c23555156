"""Console report for finished suites."""

from __future__ import annotations

from assay.events.types import LogEntry
from assay.scenario.model import Scenario
from assay.scenario.suite import Suite
from assay.types import LineType

_PREFIX = {
    LineType.SUBHEADING: "  ",
    LineType.COMMENT: "  » ",
    LineType.PASS: "  ✔ ",
    LineType.FAIL: "  ✕ ",
    LineType.WARNING: "  ! ",
}


def render_entry(entry: LogEntry) -> list[str]:
    line_type = LineType(entry.type)
    if line_type is LineType.HEADING:
        return ["", entry.message]
    lines = [f"{_PREFIX[line_type]}{entry.message}"]
    details = getattr(entry, "details", None)
    if details and line_type in (LineType.FAIL, LineType.WARNING):
        lines.extend(f"      {line}" for line in details.splitlines())
    return lines


def render_scenario(scenario: Scenario) -> list[str]:
    entries = scenario.get_log()
    if not entries:
        return ["", scenario.title, f"  » Did not run ({scenario.state.value})"]
    lines: list[str] = []
    if entries[0].type != LineType.HEADING.value:
        lines.extend(["", scenario.title])
    for entry in entries:
        lines.extend(render_entry(entry))
    return lines


def render_suite(suite: Suite) -> list[str]:
    """Render a suite and all its scenario logs as console lines."""
    lines = [
        "",
        suite.title,
        f"» Base URL: {suite.base_url or '(none)'}",
    ]
    if suite.options.environment:
        lines.append(f"» Environment: {suite.options.environment}")
    lines.append(f"» Took {suite.duration:.0f}ms")
    lines.append(f"» Passed? {'Yes' if suite.passed else 'No'}")
    for scenario in suite.scenarios:
        lines.extend(render_scenario(scenario))
    return lines

"""Exception hierarchy for assay.

Configuration errors are raised to the caller immediately. Execution errors are
caught by the Scenario and turned into failing log entries.
"""

from __future__ import annotations


class AssayError(Exception):
    """Base class for all assay errors."""


class ConfigurationError(AssayError):
    """Invalid use of the builder or control API (e.g. mutating after start)."""


class ExecutionError(AssayError):
    """A scenario could not run to completion (fetch, pipe or phase failure)."""


class PhaseTimeoutError(ExecutionError):
    """An assertion phase did not settle within the phase timeout."""

    def __init__(self, timeout_s: float, label: str | None = None):
        self.timeout_s = timeout_s
        self.label = label
        where = f" in phase '{label}'" if label else ""
        super().__init__(f"Timed out after {timeout_s:g}s{where}")


class CapabilityNotSupportedError(AssayError):
    """A Value backend does not implement the requested capability."""

    def __init__(self, capability: str, value_name: str):
        self.capability = capability
        self.value_name = value_name
        super().__init__(f"{capability}() is not supported by {value_name}")


class ScenarioFailedError(AssayError):
    """Raised by Scenario.promise() when the scenario did not pass."""

    def __init__(self, scenario):
        self.scenario = scenario
        super().__init__(f"Scenario failed: {scenario.title}")

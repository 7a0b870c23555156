from assay.config import ExecutionOptions, load_options
from assay.core.context import AssertionContext
from assay.errors import (
    AssayError,
    CapabilityNotSupportedError,
    ConfigurationError,
    ExecutionError,
    PhaseTimeoutError,
    ScenarioFailedError,
)
from assay.scenario.assertions import Assertion
from assay.scenario.model import Scenario
from assay.scenario.suite import Suite
from assay.types import ResponseType, ScenarioState, ScenarioStatusEvent
from assay.value.base import Value

__all__ = [
    "Suite",
    "Scenario",
    "Assertion",
    "AssertionContext",
    "Value",
    "ResponseType",
    "ScenarioState",
    "ScenarioStatusEvent",
    "ExecutionOptions",
    "load_options",
    "AssayError",
    "ConfigurationError",
    "ExecutionError",
    "PhaseTimeoutError",
    "CapabilityNotSupportedError",
    "ScenarioFailedError",
]

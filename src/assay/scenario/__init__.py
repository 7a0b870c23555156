"""Scenarios and suites.

This package provides:
- the Scenario state machine (request, phases, lifecycle hooks)
- fluent assertions used inside phases
- Suite grouping plus a loader for the CLI
"""

from assay.scenario.assertions import Assertion
from assay.scenario.hooks import Hook, HookList
from assay.scenario.loader import load_suites, load_target
from assay.scenario.model import Scenario
from assay.scenario.suite import Suite

__all__ = [
    "Assertion",
    "Hook",
    "HookList",
    "Scenario",
    "Suite",
    "load_suites",
    "load_target",
]

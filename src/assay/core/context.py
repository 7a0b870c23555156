"""Assertion context handed to each phase callback."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Callable

from assay.errors import ConfigurationError
from assay.types import ResponseType
from assay.value.base import Value
from assay.value.element import Link

if TYPE_CHECKING:
    from assay.response.base import ProtoResponse
    from assay.scenario.assertions import Assertion
    from assay.scenario.model import Scenario
    from assay.scenario.suite import Suite

_UNSET: Any = object()


class AssertionContext:
    """Everything one assertion phase can see and do.

    A new context is created for every phase. It tracks the assertions and
    sub-scenarios the phase starts so the scenario can wait for all of them
    before moving on.

    Attributes:
        scenario: The scenario running this phase.
        response: The response object for the loaded resource.
        result: Return value of the previous phase (None for the first).
    """

    def __init__(self, scenario: Scenario, response: ProtoResponse):
        self.scenario = scenario
        self.response = response
        self.result: Any = None
        self._assertions: list[Assertion] = []
        self._sub_scenarios: list[Scenario] = []
        self._link_tasks: list[asyncio.Task] = []

    @property
    def suite(self) -> Suite | None:
        return self.scenario.suite

    @property
    def assertions(self) -> list[Assertion]:
        return list(self._assertions)

    @property
    def sub_scenarios(self) -> list[Scenario]:
        return list(self._sub_scenarios)

    @property
    def incomplete_assertions(self) -> list[Assertion]:
        """Assertions created in this phase that never got a verb."""
        return [a for a in self._assertions if not a.is_started]

    @property
    def pending_assertions(self) -> int:
        return sum(1 for a in self._assertions if a.is_started and not a.is_settled)

    @property
    def pending_sub_scenarios(self) -> int:
        return sum(1 for s in self._sub_scenarios if not s.has_finished)

    def comment(self, message: Any) -> AssertionContext:
        self.scenario.comment(message)
        return self

    def log_pass(self, message: str) -> None:
        self.scenario.record_result(True, message)

    def assert_that(self, subject: Any, value: Any = _UNSET) -> Assertion:
        """Start an assertion.

        ``assert_that(value)`` names the assertion after the value;
        ``assert_that("message", value)`` uses the message instead.
        """
        from assay.scenario.assertions import Assertion

        if value is _UNSET:
            assertion = Assertion(self, subject)
        else:
            assertion = Assertion(self, value, message=str(subject))
        self._assertions.append(assertion)
        return assertion

    async def find(self, selector: str) -> Value:
        return await self.response.find(selector)

    async def find_all(self, selector: str) -> list[Value]:
        return await self.response.find_all(selector)

    def get(self, alias: str) -> Any:
        return self.scenario.get(alias)

    def set(self, alias: str, value: Any) -> AssertionContext:
        self.scenario.set(alias, value)
        return self

    async def pause(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def open(
        self,
        title: str,
        target: str | Link | Value,
        *phases: Callable[..., Any],
        response_type: ResponseType | str | None = None,
    ) -> Scenario:
        """Spawn a sub-scenario for a URL, Link or element found in this phase.

        Elements are resolved to their link asynchronously; the sub-scenario
        starts as soon as it has a URL and at least one phase. This phase does
        not finish until the sub-scenario has.
        """
        suite = self.scenario.suite
        if suite is None:
            raise ConfigurationError("Sub-scenarios can only be opened inside a suite.")
        sub = suite.scenario(title, response_type or self.scenario.response_type)
        if phases:
            sub.next(*phases)
        self._sub_scenarios.append(sub)
        if isinstance(target, Value) and target.is_element():
            task = asyncio.get_running_loop().create_task(self._open_element(sub, target))
            self._link_tasks.append(task)
        elif isinstance(target, Link):
            sub.open(target.uri)
        elif isinstance(target, Value):
            sub.open(target.to_string())
        else:
            sub.open(str(target))
        return sub

    async def _open_element(self, sub: Scenario, element: Value) -> None:
        try:
            link = await element.get_link()
        except Exception as e:
            self.scenario.record_result(
                False, f"Could not open {sub.title}", details=f"{type(e).__name__}: {e}"
            )
            await sub.cancel()
            return
        if not link.is_navigation():
            await sub.skip(f"{element.name} has no link to follow")
            return
        sub.open(link.uri)

    async def assertions_resolved(self) -> None:
        """Wait until every started assertion (including ones added meanwhile) settles."""
        while True:
            tasks = [
                a.task
                for a in self._assertions
                if a.task is not None and not a.task.done()
            ]
            if not tasks:
                return
            await asyncio.gather(*tasks)

    async def sub_scenarios_resolved(self) -> None:
        """Wait until every spawned sub-scenario has finished."""
        if self._link_tasks:
            await asyncio.gather(*self._link_tasks)
        while True:
            pending = [s for s in self._sub_scenarios if not s.has_finished]
            if not pending:
                return
            await asyncio.gather(*(s.wait_for_finished() for s in pending))

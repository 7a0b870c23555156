"""Suite: a titled group of scenarios sharing a base URL and an event sink."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Any, Self

from assay.config import ExecutionOptions
from assay.errors import ConfigurationError
from assay.events.sink import EventSink, MultiSink
from assay.events.types import SuiteFinishedEvent
from assay.http.adapter import FetchAdapter
from assay.scenario.hooks import HookList, hooks_from_args
from assay.scenario.model import Scenario
from assay.types import ResponseType

logger = logging.getLogger(__name__)


class Suite:
    """A collection of scenarios run together.

    Example:
        suite = Suite("Blog API", base_url="https://blog.example.com")
        suite.json("Lists posts").open("/api/posts").next(check_posts)
        asyncio.run(suite.run())
    """

    def __init__(
        self,
        title: str,
        base_url: str | None = None,
        options: ExecutionOptions | None = None,
        sink: EventSink | None = None,
        adapter: FetchAdapter | None = None,
    ):
        self.title = title
        self.adapter = adapter
        self._base_url = base_url
        self._options = options or ExecutionOptions()
        self._sink = MultiSink([sink] if sink is not None else [])
        self._scenarios: list[Scenario] = []
        self._by_tag: dict[str, list[Scenario]] = {}
        self._finally = HookList("finally")
        self._wait = False
        self._started_at = time.time()
        self._finished_at: float | None = None
        self._done = asyncio.Event()

    def __repr__(self) -> str:
        return f"<Suite {self.title!r} scenarios={len(self._scenarios)}>"

    @property
    def options(self) -> ExecutionOptions:
        return self._options

    @property
    def base_url(self) -> str | None:
        return self._options.base_url or self._base_url

    @property
    def sink(self) -> MultiSink:
        return self._sink

    @property
    def scenarios(self) -> list[Scenario]:
        return list(self._scenarios)

    @property
    def duration(self) -> float:
        """Milliseconds since the suite was created, frozen once it finishes."""
        end = self._finished_at if self._finished_at is not None else time.time()
        return round((end - self._started_at) * 1000, 3)

    @property
    def is_done(self) -> bool:
        return all(s.has_finished for s in self._scenarios)

    @property
    def has_finished(self) -> bool:
        return self._finished_at is not None

    @property
    def passed(self) -> bool:
        return all(s.has_passed for s in self._scenarios)

    @property
    def failed(self) -> bool:
        return any(s.has_failed for s in self._scenarios)

    def add_sink(self, sink: EventSink) -> Self:
        self._sink.add(sink)
        return self

    def base(self, url: str) -> Self:
        self._base_url = url
        return self

    def configure(self, options: ExecutionOptions) -> Self:
        """Replace the run options; only allowed before any scenario starts."""
        if any(s.has_executed for s in self._scenarios):
            raise ConfigurationError(
                "Can not change options after scenarios have started executing."
            )
        self._options = options
        return self

    def wait(self, flag: bool = True) -> Self:
        """Make scenarios created from now on wait for ``execute()``."""
        self._wait = flag
        return self

    def finally_(self, *args: Any) -> Self:
        """Callbacks run with the suite once every scenario has finished."""
        if self.has_finished:
            raise ConfigurationError("Can not add finally callbacks after the suite has finished.")
        self._finally.add(hooks_from_args(args))
        return self

    def scenario(
        self,
        title: str,
        response_type: ResponseType | str = ResponseType.RESOURCE,
        tags: list[str] | None = None,
    ) -> Scenario:
        scenario = Scenario(self, title, response_type, tags=tags)
        if self._wait:
            scenario.wait()
        self._scenarios.append(scenario)
        for tag in scenario.tags:
            self._by_tag.setdefault(tag, []).append(scenario)
        return scenario

    def resource(self, title: str, tags: list[str] | None = None) -> Scenario:
        return self.scenario(title, ResponseType.RESOURCE, tags)

    def json(self, title: str, tags: list[str] | None = None) -> Scenario:
        return self.scenario(title, ResponseType.JSON, tags)

    def xml(self, title: str, tags: list[str] | None = None) -> Scenario:
        return self.scenario(title, ResponseType.XML, tags)

    def document(self, title: str, tags: list[str] | None = None) -> Scenario:
        return self.scenario(title, ResponseType.DOCUMENT, tags)

    def browser(self, title: str, tags: list[str] | None = None, **browser_options: Any) -> Scenario:
        scenario = self.scenario(title, ResponseType.BROWSER, tags)
        if browser_options:
            scenario.set_response_type(ResponseType.BROWSER, **browser_options)
        return scenario

    def get_scenario_by_tag(self, tag: str) -> Scenario | None:
        tagged = self._by_tag.get(tag)
        return tagged[0] if tagged else None

    def get_all_scenarios_by_tag(self, tag: str) -> list[Scenario]:
        return list(self._by_tag.get(tag, []))

    def execute(self) -> Self:
        """Lift the suite wait and start every scenario still pending."""
        self._wait = False
        for scenario in self._scenarios:
            if not scenario.has_executed:
                scenario.execute()
        return self

    async def run(self) -> Self:
        """Start pending scenarios and wait until everything that started has finished.

        Scenarios still waiting on a path parameter, a phase or another
        scenario that never succeeds are left unstarted; the suite then
        finishes without passing.
        """
        for scenario in list(self._scenarios):
            if scenario.is_ready_to_execute:
                scenario.execute()
        while True:
            running = [s for s in self._scenarios if s.has_executed and not s.has_finished]
            if not running:
                break
            await asyncio.gather(*(s.wait_for_finished() for s in running))
            # Success hooks may have released waiting scenarios.
            for scenario in list(self._scenarios):
                if scenario.is_ready_to_execute:
                    scenario.execute()
        await self._finish()
        return self

    async def _scenario_finished(self, scenario: Scenario) -> None:
        logger.debug("%s: scenario finished: %s", self.title, scenario.title)
        if self.is_done:
            await self._finish()

    async def _finish(self) -> None:
        if self.has_finished:
            return
        self._finished_at = time.time()
        for hook in self._finally:
            try:
                result = hook.callback(self)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.warning("Suite finally hook failed for %s", self.title, exc_info=True)
        failed = [s for s in self._scenarios if not s.has_passed]
        self._sink.emit(
            SuiteFinishedEvent(
                suite=self.title,
                passed=self.passed,
                total=len(self._scenarios),
                failed=len(failed),
                duration_ms=self.duration,
                summary={
                    "base_url": self.base_url,
                    "environment": self._options.environment,
                    "states": {s.title: s.state.value for s in self._scenarios},
                },
            )
        )
        self._done.set()

"""Scenario: one request, its assertion phases and its lifecycle hooks.

A scenario moves through an explicit state machine::

    CREATED -> WAITING -> EXECUTING -> RESPONSE_RECEIVED -> RUNNING_PHASES -> COMPLETED
    CREATED/WAITING -> SKIPPED | CANCELLED

It starts on its own as soon as it has a URL without unfilled ``{params}``, at
least one phase and no explicit wait, provided an event loop is running.
Otherwise ``Suite.run()`` starts it.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Self
from urllib.parse import urljoin, urlsplit

from assay.config import ExecutionOptions
from assay.core.context import AssertionContext
from assay.core.recorder import Recorder
from assay.core.timings import Timings
from assay.errors import (
    ConfigurationError,
    ExecutionError,
    PhaseTimeoutError,
    ScenarioFailedError,
)
from assay.events.collection import LogCollection
from assay.events.types import LogEntry
from assay.http.adapter import FetchAdapter, HttpxAdapter, LocalFileAdapter
from assay.http.browser import BrowserAdapter
from assay.http.request import BrowserOptions, HttpAuth, HttpProxy, HttpRequest, HttpTimeout
from assay.http.response import HttpResponse
from assay.response.base import ProtoResponse
from assay.response.factory import create_response
from assay.scenario.assertions import Assertion
from assay.scenario.hooks import Hook, HookList, hooks_from_args
from assay.types import HTTP_METHODS, ResponseType, ScenarioState, ScenarioStatusEvent
from assay.value.base import Value

if TYPE_CHECKING:
    from assay.scenario.suite import Suite

logger = logging.getLogger(__name__)

_PATH_PARAM = re.compile(r"\{[A-Za-z0-9_ -]+\}")
_METHOD_PREFIX = re.compile(r"^([A-Z]+) (.*)$")

StatusCallback = Callable[["Scenario", ScenarioStatusEvent], Any]


def _consume_result(task: asyncio.Task) -> None:
    # Abandoned phase work: retrieve the outcome so it is never reported as unhandled.
    if not task.cancelled():
        task.exception()


class Scenario:
    """One test: a request plus the phases that assert on its response.

    Example:
        scenario = (
            suite.json("Lists articles")
            .open("/api/articles")
            .next(lambda ctx: ctx.assert_that(ctx.response.status_code).equals(200))
        )
    """

    def __init__(
        self,
        suite: Suite | None,
        title: str,
        response_type: ResponseType | str = ResponseType.RESOURCE,
        tags: list[str] | None = None,
        options: ExecutionOptions | None = None,
    ):
        self.suite = suite
        self.tags: list[str] = list(tags or [])
        self._title = title
        self._options = options
        self._state = ScenarioState.CREATED
        self._log = LogCollection()
        self._recorder = Recorder(self, self._log)
        self._timings = Timings()
        self._request = HttpRequest()
        self._response_type = ResponseType(response_type)
        self._response: ProtoResponse = create_response(self)
        self._adapter: FetchAdapter | None = None
        self._active_adapter: FetchAdapter | None = None
        self._phases = HookList("next")
        self._hooks = {
            stage: HookList(stage)
            for stage in ("before", "after", "success", "failure", "finally", "pipe")
        }
        self._subscribers: list[StatusCallback] = []
        self._subscriber_tasks: set[asyncio.Task] = set()
        self._aliases: dict[str, Any] = {}
        self._explicit_wait = False
        self._waited_ms = 0.0
        self._ignore_assertions = False
        self._is_mock = False
        self._final_url: str | None = None
        self._redirect_chain: list[str] = []
        self._error: str | None = None
        self._task: asyncio.Task | None = None
        self._response_loaded = asyncio.Event()
        self._finished = asyncio.Event()
        self._apply_response_type()

    def __repr__(self) -> str:
        return f"<Scenario {self._title!r} {self._state.value}>"

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, new_title: str) -> None:
        if self.has_executed:
            raise ConfigurationError(
                "Can not change the scenario's title after execution has started."
            )
        self._title = new_title

    @property
    def options(self) -> ExecutionOptions:
        if self._options is not None:
            return self._options
        if self.suite is not None:
            return self.suite.options
        return ExecutionOptions()

    @property
    def state(self) -> ScenarioState:
        return self._state

    @property
    def response_type(self) -> ResponseType:
        return self._response_type

    @property
    def request(self) -> HttpRequest:
        return self._request

    @property
    def response(self) -> ProtoResponse:
        return self._response

    @property
    def url(self) -> str | None:
        return self._request.uri

    @url.setter
    def url(self, value: str | None) -> None:
        if self._timings.request_started is not None:
            raise ConfigurationError(
                "Can not change the URL after the request has already started."
            )
        if value is not None:
            match = _METHOD_PREFIX.match(value)
            if match is not None:
                verb = match.group(1).lower()
                if verb in HTTP_METHODS:
                    self._request.method = verb
                value = match.group(2)
        self._request.uri = value

    @property
    def final_url(self) -> str | None:
        return self._final_url

    @property
    def redirect_chain(self) -> list[str]:
        return list(self._redirect_chain)

    @property
    def redirect_count(self) -> int:
        return len(self._redirect_chain)

    @property
    def timings(self) -> Timings:
        return self._timings

    @property
    def total_duration(self) -> float:
        """Milliseconds from creation to completion (or now)."""
        return self._timings.total_ms

    @property
    def execution_duration(self) -> float | None:
        """Milliseconds from start of execution to completion."""
        return self._timings.execution_ms

    @property
    def request_duration(self) -> float | None:
        """Milliseconds from request start to response loaded."""
        return self._timings.request_ms

    @property
    def error(self) -> str | None:
        """The execution error that ended this scenario, if any."""
        return self._error

    @property
    def is_mock(self) -> bool:
        return self._is_mock

    @property
    def browser_page(self) -> Any:
        adapter = self._active_adapter
        return adapter.page if isinstance(adapter, BrowserAdapter) else None

    @property
    def has_executed(self) -> bool:
        return not self._state.is_pending

    @property
    def has_finished(self) -> bool:
        return self._finished.is_set()

    @property
    def has_failed(self) -> bool:
        return self._log.has_failures

    @property
    def has_passed(self) -> bool:
        return self.has_finished and not self.has_failed

    @property
    def is_ready_to_execute(self) -> bool:
        return (
            self._state.is_pending
            and not self._explicit_wait
            and not self._is_implicit_wait
            and len(self._phases) > 0
        )

    @property
    def _is_implicit_wait(self) -> bool:
        return self.url is None or _PATH_PARAM.search(self.url) is not None

    # ------------------------------------------------------------------
    # Request configuration
    # ------------------------------------------------------------------

    def open(self, url: str, **request_options: Any) -> Self:
        """Set the URL (optionally prefixed with a verb: ``"POST /items"``)."""
        if self.has_executed:
            raise ConfigurationError("Can not call open after the scenario has executed.")
        if request_options:
            self._request.set_options(**request_options)
        self.url = str(url)
        self._is_mock = False
        self._try_auto_execute()
        return self

    def mock(self, local_path: str) -> Self:
        """Load a local file instead of fetching over the network."""
        if self.has_executed:
            raise ConfigurationError("Can not call mock after the scenario has executed.")
        self.url = local_path
        self._is_mock = True
        self._try_auto_execute()
        return self

    def set_adapter(self, adapter: FetchAdapter) -> Self:
        self._adapter = adapter
        return self

    def set_method(self, method: str) -> Self:
        self._request.set_method(method)
        return self

    def set_header(self, key: str, value: Any) -> Self:
        self._request.set_header(key, value)
        return self

    def set_headers(self, headers: dict[str, Any]) -> Self:
        for key, value in headers.items():
            self._request.set_header(key, value)
        return self

    def set_cookie(self, key: str, value: str) -> Self:
        self._request.set_cookie(key, value)
        return self

    def set_json_body(self, body: Any) -> Self:
        self._request.set_json_body(body)
        return self

    def set_raw_body(self, body: str | bytes) -> Self:
        self._request.data = body
        return self

    def set_form_data(self, form: dict[str, Any], multipart: bool = False) -> Self:
        self._request.set_form_data(form, multipart)
        return self

    def set_timeout(self, timeout: float | HttpTimeout) -> Self:
        if not isinstance(timeout, HttpTimeout):
            seconds = float(timeout)
            timeout = HttpTimeout(open=seconds, response=seconds, read=seconds)
        self._request.timeout = timeout
        return self

    def set_proxy(self, proxy: HttpProxy) -> Self:
        self._request.proxy = proxy
        return self

    def set_max_redirects(self, n: int) -> Self:
        self._request.max_redirects = n
        return self

    def set_basic_auth(self, username: str, password: str) -> Self:
        self._request.auth = HttpAuth(username=username, password=password)
        self._request.auth_type = "basic"
        return self

    def set_digest_auth(self, username: str, password: str) -> Self:
        self._request.auth = HttpAuth(username=username, password=password)
        self._request.auth_type = "digest"
        return self

    def set_bearer_token(self, token: str) -> Self:
        return self.set_header("Authorization", f"Bearer {token}")

    def verify_cert(self, verify: bool = True) -> Self:
        self._request.verify_cert = verify
        return self

    def set_response_type(self, response_type: ResponseType | str, **browser_options: Any) -> Self:
        if self.has_executed:
            raise ConfigurationError("Scenario was already executed. Can not change type.")
        self._response_type = ResponseType(response_type)
        self._apply_response_type(**browser_options)
        self._response = create_response(self)
        return self

    def _apply_response_type(self, **browser_options: Any) -> None:
        if self._response_type.requires_browser:
            self._request.browser = BrowserOptions(**browser_options)
            self._request.type = "generic"
        else:
            self._request.browser = None
            self._request.type = "json" if self._response_type is ResponseType.JSON else "generic"

    # ------------------------------------------------------------------
    # Phases and hooks
    # ------------------------------------------------------------------

    def _ensure_open_for(self, name: str) -> None:
        if self._state.is_terminal:
            raise ConfigurationError(f"Can not add {name} callbacks after execution has finished.")

    def next(self, *args: Any) -> Self:
        """Append assertion phases: ``next(cb)``, ``next("label", cb)``, ``next(cb1, cb2)``."""
        self._ensure_open_for("next")
        self._phases.add(hooks_from_args(args))
        self._try_auto_execute()
        return self

    def next_prepend(self, *args: Any) -> Self:
        """Insert assertion phases before all others."""
        self._ensure_open_for("next")
        self._phases.add(hooks_from_args(args), prepend=True)
        self._try_auto_execute()
        return self

    def _add_hooks(self, stage: str, args: tuple[Any, ...]) -> Self:
        self._ensure_open_for(stage)
        self._hooks[stage].add(hooks_from_args(args))
        return self

    def before(self, *args: Any) -> Self:
        return self._add_hooks("before", args)

    def after(self, *args: Any) -> Self:
        return self._add_hooks("after", args)

    def success(self, *args: Any) -> Self:
        return self._add_hooks("success", args)

    def failure(self, *args: Any) -> Self:
        return self._add_hooks("failure", args)

    def finally_(self, *args: Any) -> Self:
        return self._add_hooks("finally", args)

    def pipe(self, *args: Any) -> Self:
        """Transform the HttpResponse before phases see it; return a new one or None."""
        return self._add_hooks("pipe", args)

    def pause(self, seconds: float) -> Self:
        """Append a phase that waits before the next one starts."""

        def pause_phase(context: AssertionContext) -> Any:
            context.comment(f"Pause for {seconds:g}s")
            return context.pause(seconds)

        return self.next(pause_phase)

    def subscribe(self, callback: StatusCallback) -> Self:
        self._subscribers.append(callback)
        return self

    # ------------------------------------------------------------------
    # Log
    # ------------------------------------------------------------------

    def comment(self, message: Any) -> Self:
        if isinstance(message, str):
            text = message
        elif isinstance(message, Value):
            text = message.to_string()
        else:
            text = json.dumps(message, indent=2, default=str)
        self._recorder.comment(text)
        return self

    def record_result(
        self,
        passed: bool,
        message: str,
        details: str | None = None,
        optional: bool = False,
    ) -> Self:
        """Log an assertion outcome; optional failures become warnings."""
        if self._ignore_assertions:
            return self
        if passed:
            self._recorder.passed(message)
        elif optional:
            self._recorder.warning(f"{message} (Optional)", details)
        else:
            self._recorder.failed(message, details)
        return self

    def ignore(self, assertions: bool | Callable[[], Any] = True) -> Self:
        """Stop logging assertions, or run ``assertions()`` with logging off."""
        if callable(assertions):
            self._ignore_assertions = True
            try:
                assertions()
            finally:
                self._ignore_assertions = False
        else:
            self._ignore_assertions = assertions
        return self

    def get_log(self) -> list[LogEntry]:
        return self._log.items

    @property
    def log(self) -> LogCollection:
        return self._log

    def set(self, alias: str, value: Any) -> Self:
        self._aliases[alias] = value
        return self

    def get(self, alias: str) -> Any:
        return self._aliases.get(alias)

    # ------------------------------------------------------------------
    # Waiting and control
    # ------------------------------------------------------------------

    def wait(self, flag: bool = True) -> Self:
        """Hold execution until ``wait(False)`` or ``execute()``."""
        if self._explicit_wait and not flag:
            self._waited_ms = self._timings.total_ms
        self._explicit_wait = flag
        if flag:
            self._refresh_pending_state()
        else:
            self._try_auto_execute()
        return self

    def wait_for(self, other: Scenario) -> Self:
        """Wait until ``other`` succeeds."""
        if other is self:
            raise ConfigurationError("Scenario can't wait for itself")
        self.wait()
        other.success(lambda *_: self.wait(False))
        return self

    def set_path_params(self, params: dict[str, Any]) -> Self:
        """Fill ``{name}`` placeholders in the URL."""
        url = self.url or ""
        for key, value in params.items():
            url = url.replace(f"{{{key}}}", str(value))
        self.url = url or None
        self._try_auto_execute()
        return self

    def execute(self, path_params: dict[str, Any] | None = None) -> Self:
        """Lift any wait and start, if a URL and a phase are present.

        Raises:
            ConfigurationError: Already started, or no running event loop.
        """
        if self.has_executed:
            raise ConfigurationError(
                "Scenario has already started executing. Can not call execute again."
            )
        if path_params:
            url = self.url or ""
            for key, value in path_params.items():
                url = url.replace(f"{{{key}}}", str(value))
            self.url = url or None
        if self._explicit_wait:
            self._waited_ms = self._timings.total_ms
            self._explicit_wait = False
        if self.is_ready_to_execute:
            self._start()
        else:
            self._refresh_pending_state()
        return self

    async def skip(self, message: str | None = None) -> Self:
        """Finish without fetching: before, after and finally hooks still run."""
        if self.has_executed:
            raise ConfigurationError("Can't skip Scenario since it already started executing.")
        self._set_state(ScenarioState.SKIPPED)
        self._timings.mark("executed")
        await self._fire("before")
        self._publish(ScenarioStatusEvent.EXECUTION_SKIPPED)
        self.comment(f"Skipped: {message}" if message else "Skipped")
        self._publish(ScenarioStatusEvent.EXECUTION_PROGRESS)
        await self._fire_after()
        await self._fire_finally()
        return self

    async def cancel(self) -> Self:
        """Like skip, without the skip comment."""
        if self.has_executed:
            raise ConfigurationError("Can't cancel Scenario since it already started executing.")
        self._set_state(ScenarioState.CANCELLED)
        self._timings.mark("executed")
        await self._fire("before")
        self._publish(ScenarioStatusEvent.EXECUTION_CANCELLED)
        await self._fire_after()
        await self._fire_finally()
        return self

    async def wait_for_finished(self) -> Self:
        await self._finished.wait()
        return self

    async def wait_for_response(self) -> Self:
        await self._response_loaded.wait()
        return self

    async def promise(self) -> Self:
        """Wait for completion.

        Raises:
            ScenarioFailedError: The scenario finished without passing.
        """
        await self.wait_for_finished()
        if not self.has_passed:
            raise ScenarioFailedError(self)
        return self

    def build_url(self) -> str:
        """Resolve the URL against the suite's base URL."""
        path = self.url or "/"
        base = self.suite.base_url if self.suite is not None else None
        if not base:
            return path
        if re.match(r"^https?://", path) or path.startswith("data:"):
            return path
        parts = urlsplit(base)
        if path.startswith("//"):
            return f"{parts.scheme}:{path}"
        if path.startswith("/"):
            return f"{parts.scheme}://{parts.netloc}{path}"
        return urljoin(base, path)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _set_state(self, state: ScenarioState) -> None:
        if state is not self._state:
            logger.debug("%s: %s -> %s", self._title, self._state.value, state.value)
            self._state = state

    def _refresh_pending_state(self) -> None:
        if not self._state.is_pending:
            return
        waiting = self._explicit_wait or self._is_implicit_wait or len(self._phases) == 0
        self._set_state(ScenarioState.WAITING if waiting else ScenarioState.CREATED)

    def _try_auto_execute(self) -> None:
        if not self.is_ready_to_execute:
            self._refresh_pending_state()
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self._refresh_pending_state()
            return
        self._start()

    def _start(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise ConfigurationError(
                "Scenario.execute() needs a running event loop; use Suite.run()."
            ) from e
        self._set_state(ScenarioState.EXECUTING)
        self._timings.mark("executed")
        self._task = loop.create_task(self._run(), name=f"assay:{self._title}")

    def _publish(self, status: ScenarioStatusEvent) -> None:
        self._recorder.status(status)
        for callback in list(self._subscribers):
            try:
                result = callback(self, status)
                if inspect.isawaitable(result):
                    task = asyncio.ensure_future(result)
                    self._subscriber_tasks.add(task)
                    task.add_done_callback(self._subscriber_done)
            except Exception:
                logger.warning("Status subscriber failed for %s", self._title, exc_info=True)

    def _subscriber_done(self, task: asyncio.Task) -> None:
        self._subscriber_tasks.discard(task)
        if task.cancelled() or task.exception() is None:
            return
        logger.warning(
            "Status subscriber failed for %s", self._title, exc_info=task.exception()
        )

    async def _fire(self, stage: str) -> None:
        """Run one hook stage; a failure is logged and the lifecycle goes on."""
        try:
            await self._hooks[stage].run(self, on_label=self.comment)
        except Exception as e:
            self._recorder.failed(f"{stage} hook failed", f"{type(e).__name__}: {e}")

    async def _fire_after(self) -> None:
        self._timings.mark("finished")
        await self._fire("after")
        self._publish(ScenarioStatusEvent.AFTER_EXECUTE)

    async def _fire_finally(self) -> None:
        await self._fire("finally")
        self._publish(ScenarioStatusEvent.FINISHED)
        await self._close_adapter()
        self._response_loaded.set()
        self._finished.set()
        self._recorder.finished()
        if self._subscriber_tasks:
            await asyncio.gather(*self._subscriber_tasks, return_exceptions=True)
        if self.suite is not None:
            await self.suite._scenario_finished(self)

    async def _run(self) -> None:
        try:
            await self._hooks["before"].run(self, on_label=self.comment)
        except Exception as e:
            await self._complete(f"before hook failed: {e}", f"{type(e).__name__}: {e}")
            return
        self._publish(ScenarioStatusEvent.BEFORE_EXECUTE)
        self._recorder.heading(self._title)
        if self._waited_ms > 0:
            self.comment(f"Waited {self._waited_ms:.0f}ms")
        self._publish(ScenarioStatusEvent.EXECUTION_START)
        try:
            http_response = await self._dispatch()
        except Exception as e:
            await self._complete(f"Failed to load {self.url}", str(e) or type(e).__name__)
            return
        self._publish(ScenarioStatusEvent.EXECUTION_PROGRESS)
        await self._process_response(http_response)

    def _select_adapter(self) -> FetchAdapter:
        if self._is_mock:
            return LocalFileAdapter()
        if self._adapter is not None:
            return self._adapter
        if self.suite is not None and self.suite.adapter is not None:
            return self.suite.adapter
        if self._response_type.requires_browser:
            return BrowserAdapter()
        return HttpxAdapter()

    async def _dispatch(self) -> HttpResponse:
        if self.url is None:
            raise ExecutionError("Can not execute request with no URL.")
        if not self._is_mock:
            self.url = self.build_url()
        if self._request.browser is not None and self.options.headless is not None:
            self._request.browser = self._request.browser.model_copy(
                update={"headless": self.options.headless}
            )
        self._timings.mark("request_started")
        self._final_url = self.url
        adapter = self._select_adapter()
        self._active_adapter = adapter
        response = await adapter.fetch(self._request)
        self._redirect_chain = list(response.redirect_chain)
        if response.url:
            self._final_url = response.url
        return response

    async def _pipe_response(self, http_response: HttpResponse) -> HttpResponse:
        for hook in self._hooks["pipe"]:
            if hook.label:
                self.comment(hook.label)
            result = hook.callback(http_response)
            if inspect.isawaitable(result):
                result = await result
            if result is not None:
                http_response = result
        return http_response

    async def _process_response(self, http_response: HttpResponse) -> None:
        self._set_state(ScenarioState.RESPONSE_RECEIVED)
        try:
            http_response = await self._pipe_response(http_response)
            self._response.init(http_response)
        except Exception as e:
            await self._complete(f"Failed to process response: {e}", f"{type(e).__name__}: {e}")
            return
        self._timings.mark("response_loaded")
        self._response_loaded.set()
        self._recorder.passed(f"Loaded {self._response.response_type_name} {self.url}")
        self._set_state(ScenarioState.RUNNING_PHASES)
        self._publish(ScenarioStatusEvent.EXECUTION_PROGRESS)
        error: str | None = None
        last: Any = None
        index = 0
        while index < len(self._phases):
            phase = self._phases[index]
            index += 1
            context = AssertionContext(self, self._response)
            context.result = last
            self._response.context = context
            if phase.label:
                self._recorder.subheading(phase.label)
            try:
                last = await self._run_phase(phase, context)
            except Exception as e:
                error = str(e) or type(e).__name__
                break
        await self._complete(error)

    async def _run_phase(self, phase: Hook, context: AssertionContext) -> Any:
        task = asyncio.get_running_loop().create_task(self._settle_phase(phase, context))
        timeout = self.options.phase_timeout_s
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if task not in done:
            task.add_done_callback(_consume_result)
            task.cancel()
            raise PhaseTimeoutError(timeout, phase.label)
        return task.result()

    async def _settle_phase(self, phase: Hook, context: AssertionContext) -> Any:
        result = phase.callback(context)
        # An Assertion returned without a verb is reported as incomplete below.
        if inspect.isawaitable(result) and not isinstance(result, Assertion):
            result = await result
        await context.assertions_resolved()
        await context.sub_scenarios_resolved()
        for assertion in context.incomplete_assertions:
            self._recorder.warning(f"Incomplete assertion: {assertion.name}")
        return result

    async def _complete(self, error: str | None = None, details: str | None = None) -> None:
        if self._state.is_terminal:
            return
        await self._fire_after()
        self.comment(f"Took {self.execution_duration:.0f}ms")
        self._set_state(ScenarioState.COMPLETED)
        if error is None:
            if self.has_failed:
                await self._fire("failure")
            else:
                await self._fire("success")
        else:
            self._error = error
            self._recorder.failed(error, details)
            await self._fire("failure")
            self.comment(details or error)
        await self._fire_finally()

    async def _close_adapter(self) -> None:
        adapter, self._active_adapter = self._active_adapter, None
        close = getattr(adapter, "close", None)
        if close is None:
            return
        try:
            await close()
        except Exception:
            logger.warning("Failed to close adapter for %s", self._title, exc_info=True)

"""Assertion library for scenario phases.

An Assertion is bound to one subject (a Value, raw data, or an awaitable that
resolves to either) and evaluated by exactly one verb::

    context.assert_that(context.response.status_code).between(200, 299)
    await context.assert_that("Has a title", await context.find("h1")).exists()
    context.assert_that(items.length).not_.equals(0)

Synchronous subjects are checked and logged as soon as the verb is called.
Awaitable subjects (and async callbacks) are checked on a task; awaiting the
Assertion waits for that task and returns the Assertion. The owning phase does
not finish until every started assertion has settled, and an assertion that
never gets a verb is reported as incomplete.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generator

from assay.errors import ConfigurationError
from assay.value.base import Value

if TYPE_CHECKING:
    from assay.core.context import AssertionContext

Check = Callable[[Value], "bool | Awaitable[bool]"]


def _raw(expected: Any) -> Any:
    return expected.data if isinstance(expected, Value) else expected


def describe(data: Any) -> str:
    """Render an expected or actual value for a log message."""
    if isinstance(data, Value):
        return data.name
    if isinstance(data, re.Pattern):
        return f"/{data.pattern}/"
    if isinstance(data, str):
        return f'"{data}"'
    if data is None:
        return "null"
    try:
        return json.dumps(data, default=str)
    except ValueError:
        return str(data)


def loose_equals(actual: Any, expected: Any) -> bool:
    """Equality that lets numbers match their string form ("5" == 5)."""
    if actual == expected:
        return True
    if isinstance(actual, bool) or isinstance(expected, bool):
        return False
    scalars = (int, float, str)
    if isinstance(actual, scalars) and isinstance(expected, scalars):
        try:
            return float(actual) == float(expected)
        except ValueError:
            return False
    return False


def _normalize(data: Any) -> str:
    text = data if isinstance(data, str) else Value(data).to_string()
    return " ".join(text.split()).casefold()


def _contains(data: Any, item: Any) -> bool:
    if isinstance(data, str):
        return str(item) in data
    if isinstance(data, Mapping):
        return item in data
    if isinstance(data, (list, tuple)):
        return any(loose_equals(x, item) for x in data)
    return False


def _search(data: Any, pattern: str | re.Pattern) -> bool:
    compiled = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
    return compiled.search(Value(data).to_string()) is not None


def _is_empty(data: Any) -> bool:
    if data is None:
        return True
    try:
        return len(data) == 0
    except TypeError:
        return False


async def _gather_results(results: list[Any]) -> list[Any]:
    return [await r if inspect.isawaitable(r) else r for r in results]


def _each(
    value: Value,
    callback: Callable[[Any], Any],
    combine: Callable[[list[bool]], bool],
) -> bool | Awaitable[bool]:
    results = [callback(item) for item in value.to_array()]
    if any(inspect.isawaitable(r) for r in results):

        async def settle() -> bool:
            return combine([bool(r) for r in await _gather_results(results)])

        return settle()
    return combine([bool(r) for r in results])


class Assertion:
    """One expectation about one subject, logged to the scenario when checked."""

    def __init__(
        self,
        context: AssertionContext,
        subject: Any,
        message: str | None = None,
    ):
        self._context = context
        self._subject = subject
        self._message = message
        self._negated = False
        self._optional = False
        self._started = False
        self._task: asyncio.Task | None = None
        self._passed: bool | None = None
        self._value: Value | None = None

    def __repr__(self) -> str:
        return f"<Assertion {self.name!r} passed={self._passed}>"

    @property
    def name(self) -> str:
        if self._message:
            return self._message
        if self._value is not None:
            return self._value.name
        if isinstance(self._subject, Value):
            return self._subject.name
        return "it"

    @property
    def not_(self) -> Assertion:
        """Negate the next verb."""
        self._negated = not self._negated
        return self

    @property
    def optional(self) -> Assertion:
        """Log a failure as a warning instead of failing the scenario."""
        self._optional = True
        return self

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_settled(self) -> bool:
        return self._passed is not None

    @property
    def passed(self) -> bool | None:
        return self._passed

    @property
    def task(self) -> asyncio.Task | None:
        """The task checking an awaitable subject, if any."""
        return self._task

    @property
    def value(self) -> Value | None:
        """The resolved subject, once checked."""
        return self._value

    def __await__(self) -> Generator[Any, None, Assertion]:
        return self.settled().__await__()

    async def settled(self) -> Assertion:
        if not self._started:
            raise ConfigurationError(f"Assertion on {self.name} was never evaluated.")
        if self._task is not None:
            await asyncio.shield(self._task)
        return self

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def _coerce(self, data: Any) -> Value:
        if isinstance(data, Value):
            return data
        return Value(data, self._context, "it")

    def _run(self, positive: str, negative: str, check: Check, resolve: bool = True) -> Assertion:
        if self._started:
            raise ConfigurationError("An assertion can only be evaluated once.")
        self._started = True
        if not resolve or inspect.isawaitable(self._subject):
            self._start(self._evaluate(positive, negative, check, resolve))
            return self
        value = self._coerce(self._subject)
        try:
            outcome = check(value)
        except Exception as e:
            self._settle(False, positive, negative, value, f"{type(e).__name__}: {e}")
            return self
        if inspect.isawaitable(outcome):
            self._start(self._finish(outcome, positive, negative, value))
        else:
            self._settle(bool(outcome), positive, negative, value)
        return self

    def _start(self, coro: Awaitable[None]) -> None:
        self._task = asyncio.get_running_loop().create_task(coro)

    async def _finish(
        self, outcome: Awaitable[Any], positive: str, negative: str, value: Value
    ) -> None:
        try:
            passed = bool(await outcome)
        except Exception as e:
            self._settle(False, positive, negative, value, f"{type(e).__name__}: {e}")
            return
        self._settle(passed, positive, negative, value)

    async def _evaluate(
        self, positive: str, negative: str, check: Check, resolve: bool
    ) -> None:
        if resolve:
            try:
                value = self._coerce(await self._subject)
            except Exception as e:
                self._settle(False, positive, negative, None, f"{type(e).__name__}: {e}")
                return
        else:
            value = Value(self._subject, self._context, "it")
        try:
            outcome = check(value)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as e:
            self._settle(False, positive, negative, value, f"{type(e).__name__}: {e}")
            return
        self._settle(bool(outcome), positive, negative, value)

    def _settle(
        self,
        outcome: bool,
        positive: str,
        negative: str,
        value: Value | None,
        details: str | None = None,
    ) -> None:
        self._value = value
        self._passed = outcome != self._negated
        subject = value.name if value is not None else self.name
        if self._message:
            message = self._message
        elif self._negated or outcome:
            message = f"{subject} {positive}"
        else:
            message = f"{subject} {negative}"
        if self._negated:
            message = f"NOT: {message}"
        if not self._passed and details is None and value is not None:
            details = f"Actual value: {describe(value.data)}"
        self._context.scenario.record_result(
            self._passed,
            message,
            details=None if self._passed else details,
            optional=self._optional,
        )

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def equals(self, expected: Any) -> Assertion:
        want = _raw(expected)
        return self._run(
            f"equals {describe(expected)}",
            f"does not equal {describe(expected)}",
            lambda v: loose_equals(v.data, want),
        )

    def exactly(self, expected: Any) -> Assertion:
        want = _raw(expected)
        return self._run(
            f"is exactly {describe(expected)}",
            f"is not exactly {describe(expected)}",
            lambda v: type(v.data) is type(want) and v.data == want,
        )

    def like(self, expected: Any) -> Assertion:
        want = _normalize(_raw(expected))
        return self._run(
            f"is like {describe(expected)}",
            f"is not like {describe(expected)}",
            lambda v: _normalize(v.data) == want,
        )

    def contains(self, item: Any) -> Assertion:
        want = _raw(item)
        return self._run(
            f"contains {describe(item)}",
            f"does not contain {describe(item)}",
            lambda v: _contains(v.data, want),
        )

    def includes(self, item: Any) -> Assertion:
        want = _raw(item)
        return self._run(
            f"includes {describe(item)}",
            f"does not include {describe(item)}",
            lambda v: _contains(v.data, want),
        )

    def matches(self, pattern: str | re.Pattern) -> Assertion:
        shown = describe(pattern if isinstance(pattern, re.Pattern) else re.compile(pattern))
        return self._run(
            f"matches {shown}",
            f"does not match {shown}",
            lambda v: _search(v.data, pattern),
        )

    def starts_with(self, prefix: Any) -> Assertion:
        want = _raw(prefix)

        def check(v: Value) -> bool:
            if isinstance(v.data, (list, tuple)):
                return bool(v.data) and loose_equals(v.data[0], want)
            return v.to_string().startswith(str(want))

        return self._run(
            f"starts with {describe(prefix)}",
            f"does not start with {describe(prefix)}",
            check,
        )

    def ends_with(self, suffix: Any) -> Assertion:
        want = _raw(suffix)

        def check(v: Value) -> bool:
            if isinstance(v.data, (list, tuple)):
                return bool(v.data) and loose_equals(v.data[-1], want)
            return v.to_string().endswith(str(want))

        return self._run(
            f"ends with {describe(suffix)}",
            f"does not end with {describe(suffix)}",
            check,
        )

    def greater_than(self, n: Any) -> Assertion:
        bound = Value(_raw(n)).to_float()
        return self._run(
            f"is greater than {describe(n)}",
            f"is not greater than {describe(n)}",
            lambda v: v.to_float() > bound,
        )

    def greater_than_or_equals(self, n: Any) -> Assertion:
        bound = Value(_raw(n)).to_float()
        return self._run(
            f"is greater than or equal to {describe(n)}",
            f"is not greater than or equal to {describe(n)}",
            lambda v: v.to_float() >= bound,
        )

    def less_than(self, n: Any) -> Assertion:
        bound = Value(_raw(n)).to_float()
        return self._run(
            f"is less than {describe(n)}",
            f"is not less than {describe(n)}",
            lambda v: v.to_float() < bound,
        )

    def less_than_or_equals(self, n: Any) -> Assertion:
        bound = Value(_raw(n)).to_float()
        return self._run(
            f"is less than or equal to {describe(n)}",
            f"is not less than or equal to {describe(n)}",
            lambda v: v.to_float() <= bound,
        )

    def between(self, low: Any, high: Any) -> Assertion:
        lo, hi = Value(_raw(low)).to_float(), Value(_raw(high)).to_float()
        return self._run(
            f"is between {describe(low)} and {describe(high)}",
            f"is not between {describe(low)} and {describe(high)}",
            lambda v: lo <= v.to_float() <= hi,
        )

    def exists(self) -> Assertion:
        return self._run("exists", "does not exist", lambda v: not v.is_null())

    def is_empty(self) -> Assertion:
        return self._run("is empty", "is not empty", lambda v: _is_empty(v.data))

    def is_true(self) -> Assertion:
        return self._run("is true", "is not true", lambda v: v.data is True)

    def is_false(self) -> Assertion:
        return self._run("is false", "is not false", lambda v: v.data is False)

    def every(self, callback: Callable[[Any], Any]) -> Assertion:
        return self._run(
            "passes the check for every item",
            "does not pass the check for every item",
            lambda v: _each(v, callback, all),
        )

    def some(self, callback: Callable[[Any], Any]) -> Assertion:
        return self._run(
            "passes the check for some item",
            "does not pass the check for any item",
            lambda v: _each(v, callback, any),
        )

    def none(self, callback: Callable[[Any], Any]) -> Assertion:
        return self._run(
            "passes the check for no item",
            "passes the check for some item",
            lambda v: _each(v, callback, lambda results: not any(results)),
        )

    def resolves(self) -> Assertion:
        async def check(v: Value) -> bool:
            if not inspect.isawaitable(v.data):
                return True
            try:
                await v.data
            except Exception:
                return False
            return True

        return self._run("resolves", "does not resolve", check, resolve=False)

    def rejects(self) -> Assertion:
        async def check(v: Value) -> bool:
            if not inspect.isawaitable(v.data):
                return False
            try:
                await v.data
            except Exception:
                return True
            return False

        return self._run("rejects", "does not reject", check, resolve=False)

"""Tests for scenario/assertions.py - the assertion verbs."""

from __future__ import annotations

import asyncio
import re

import pytest

from assay.errors import ConfigurationError
from assay.scenario.assertions import describe, loose_equals


def last_entry(context):
    return context.scenario.get_log()[-1]


class TestHelpers:
    """Tests for describe and loose_equals."""

    def test_describe(self) -> None:
        """Strings are quoted, None is null, patterns get slashes."""
        assert describe("a") == '"a"'
        assert describe(None) == "null"
        assert describe(5) == "5"
        assert describe([1, "x"]) == '[1, "x"]'
        assert describe(re.compile(r"^a")) == "/^a/"

    def test_loose_equals(self) -> None:
        """Numbers match their string form, booleans do not."""
        assert loose_equals("5", 5)
        assert loose_equals(2.0, "2")
        assert not loose_equals(True, "1")
        assert not loose_equals("five", 5)


class TestVerbs:
    """Tests for synchronous verbs."""

    def test_equals_pass(self, make_context) -> None:
        """A passing equals logs a pass with the positive message."""
        context = make_context()
        assertion = context.assert_that(5).equals(5)
        assert assertion.passed is True
        entry = last_entry(context)
        assert (entry.type, entry.message) == ("pass", "it equals 5")

    def test_equals_fail_reports_actual(self, make_context) -> None:
        """A failing verb logs the negative message and the actual value."""
        context = make_context()
        context.assert_that(5).equals(6)
        entry = last_entry(context)
        assert (entry.type, entry.message) == ("fail", "it does not equal 6")
        assert entry.details == "Actual value: 5"

    def test_not_prefix(self, make_context) -> None:
        """Negated assertions are prefixed and invert the outcome."""
        context = make_context()
        assert context.assert_that(5).not_.equals(6).passed is True
        assert last_entry(context).message == "NOT: it equals 6"

        assert context.assert_that(5).not_.equals(5).passed is False
        entry = last_entry(context)
        assert (entry.type, entry.message) == ("fail", "NOT: it equals 5")

    def test_value_subject_named(self, make_context) -> None:
        """Value subjects are named after the value."""
        context = make_context(status_code=404)
        context.assert_that(context.response.status_code).less_than(400)
        assert last_entry(context).message == "HTTP Status Code is not less than 400"

    def test_exactly_checks_type(self, make_context) -> None:
        """exactly does not coerce."""
        context = make_context()
        assert context.assert_that("5").equals(5).passed is True
        assert context.assert_that("5").exactly(5).passed is False

    def test_like_normalizes(self, make_context) -> None:
        """like ignores case and whitespace runs."""
        context = make_context()
        assert context.assert_that("  Hello\n  World ").like("hello world").passed is True

    @pytest.mark.parametrize(
        ("subject", "item", "expected"),
        [
            ("abc", "b", True),
            ([1, 2], "2", True),
            ({"a": 1}, "a", True),
            ({"a": 1}, "b", False),
            (42, 4, False),
        ],
    )
    def test_contains(self, make_context, subject, item, expected: bool) -> None:
        """contains works on strings, lists and mappings."""
        context = make_context()
        assert context.assert_that(subject).contains(item).passed is expected

    def test_matches(self, make_context) -> None:
        """matches searches the string form."""
        context = make_context()
        assert context.assert_that("abc").matches(r"^a").passed is True
        assert last_entry(context).message == "it matches /^a/"
        assert context.assert_that(123).matches(re.compile(r"2")).passed is True

    def test_starts_and_ends_with(self, make_context) -> None:
        """Lists compare their first and last items."""
        context = make_context()
        assert context.assert_that([1, 2, 3]).starts_with(1).passed is True
        assert context.assert_that([1, 2, 3]).ends_with(2).passed is False
        assert context.assert_that("hello").ends_with("lo").passed is True

    def test_comparisons(self, make_context) -> None:
        """Numeric comparisons coerce strings; NaN never compares."""
        context = make_context()
        assert context.assert_that("10").greater_than(9).passed is True
        assert context.assert_that(10).greater_than_or_equals(10).passed is True
        assert context.assert_that(3).less_than_or_equals(2).passed is False
        assert context.assert_that(5).between(1, 10).passed is True
        assert context.assert_that("abc").greater_than(0).passed is False

    def test_exists_and_empty(self, make_context) -> None:
        """exists rejects null; is_empty accepts null and empty sequences."""
        context = make_context()
        assert context.assert_that(None).exists().passed is False
        assert context.assert_that(0).exists().passed is True
        assert context.assert_that([]).is_empty().passed is True
        assert context.assert_that(None).is_empty().passed is True
        assert context.assert_that(0).is_empty().passed is False

    def test_booleans(self, make_context) -> None:
        """is_true and is_false want real booleans."""
        context = make_context()
        assert context.assert_that(True).is_true().passed is True
        assert context.assert_that(1).is_true().passed is False
        assert context.assert_that(False).is_false().passed is True

    def test_every_some_none(self, make_context) -> None:
        """Collection checks apply the callback per item."""
        context = make_context()
        assert context.assert_that([2, 4]).every(lambda x: x % 2 == 0).passed is True
        assert context.assert_that([1, 4]).some(lambda x: x > 3).passed is True
        assert context.assert_that([1, 4]).none(lambda x: x > 3).passed is False

    def test_check_exception_fails(self, make_context) -> None:
        """An exception inside a check fails with its message as details."""
        context = make_context()
        context.assert_that([0]).every(lambda x: 1 / x)
        entry = last_entry(context)
        assert entry.type == "fail"
        assert entry.details.startswith("ZeroDivisionError")

    def test_message_replaces_description(self, make_context) -> None:
        """A message form assertion logs only the message."""
        context = make_context()
        context.assert_that("Count is right", 2).equals(3)
        entry = last_entry(context)
        assert (entry.type, entry.message) == ("fail", "Count is right")
        assert entry.details == "Actual value: 2"

    def test_optional_failure_warns(self, make_context) -> None:
        """Optional failures become warnings with an (Optional) suffix."""
        context = make_context()
        assertion = context.assert_that(1).optional.equals(2)
        assert assertion.passed is False
        entry = last_entry(context)
        assert (entry.type, entry.message) == ("warning", "it does not equal 2 (Optional)")
        assert not context.scenario.has_failed

    def test_one_verb_only(self, make_context) -> None:
        """An assertion can only be evaluated once."""
        context = make_context()
        assertion = context.assert_that(1).equals(1)
        with pytest.raises(ConfigurationError):
            assertion.equals(2)

    def test_value_assert_that(self, make_context) -> None:
        """Bound values start assertions on themselves."""
        context = make_context(body="hello")
        context.response.body.assert_that("Body says hello").equals("hello")
        assert last_entry(context).message == "Body says hello"


class TestAsyncSubjects:
    """Tests for awaitable subjects and async checks."""

    def test_awaitable_subject(self, make_context) -> None:
        """Coroutine subjects are resolved on a task and logged when settled."""

        async def run():
            context = make_context()

            async def fetch_count() -> int:
                await asyncio.sleep(0)
                return 3

            assertion = context.assert_that(fetch_count()).equals(3)
            assert assertion.is_started and not assertion.is_settled
            assert await assertion is assertion
            return context, assertion

        context, assertion = asyncio.run(run())
        assert assertion.passed is True
        assert last_entry(context).message == "it equals 3"

    def test_failing_awaitable_subject(self, make_context) -> None:
        """A subject that raises fails the assertion with the error as details."""

        async def run():
            context = make_context()

            async def broken() -> int:
                raise RuntimeError("nope")

            await context.assert_that(broken()).equals(1)
            return context

        entry = last_entry(asyncio.run(run()))
        assert entry.type == "fail"
        assert entry.details == "RuntimeError: nope"

    def test_async_callback(self, make_context) -> None:
        """Async every() callbacks are awaited."""

        async def positive(x: int) -> bool:
            await asyncio.sleep(0)
            return x > 0

        async def run():
            context = make_context()
            assertion = context.assert_that([1, 2]).every(positive)
            await context.assertions_resolved()
            return assertion

        assert asyncio.run(run()).passed is True

    def test_resolves_and_rejects(self, make_context) -> None:
        """resolves/rejects look at the awaitable itself."""

        async def ok() -> int:
            return 1

        async def fail() -> int:
            raise ValueError("bad")

        async def run():
            context = make_context()
            results = [
                await context.assert_that(ok()).resolves(),
                await context.assert_that(fail()).rejects(),
                await context.assert_that(ok()).rejects(),
                await context.assert_that(5).resolves(),
            ]
            return context, [a.passed for a in results]

        context, outcomes = asyncio.run(run())
        assert outcomes == [True, True, False, True]
        assert last_entry(context).message == "it resolves"

    def test_settled_without_verb(self, make_context) -> None:
        """Awaiting an assertion that was never evaluated is an error."""

        async def run():
            context = make_context()
            await context.assert_that(1)

        with pytest.raises(ConfigurationError, match="never evaluated"):
            asyncio.run(run())

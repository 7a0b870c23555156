"""Tests for scenario/hooks.py - callback lists."""

from __future__ import annotations

import asyncio

import pytest

from assay.errors import ConfigurationError
from assay.scenario.hooks import Hook, HookList, hooks_from_args


def noop(*args):
    return None


class TestHooksFromArgs:
    """Tests for hooks_from_args."""

    def test_callbacks_only(self) -> None:
        """Each callable becomes an unlabelled hook."""
        hooks = hooks_from_args((noop, noop))
        assert hooks == [Hook(noop), Hook(noop)]

    def test_label_applies_to_first(self) -> None:
        """A leading label names only the first callback."""
        hooks = hooks_from_args(("  Check headers ", noop, noop))
        assert [h.label for h in hooks] == ["Check headers", None]

    def test_blank_label_dropped(self) -> None:
        """Whitespace-only labels are ignored."""
        assert hooks_from_args(("  ", noop))[0].label is None

    @pytest.mark.parametrize("args", [(), ("label",), (noop, "not callable")])
    def test_missing_callback(self, args: tuple) -> None:
        """Labels without callbacks and non-callables are rejected."""
        with pytest.raises(ConfigurationError, match="No callback provided"):
            hooks_from_args(args)


class TestHookList:
    """Tests for HookList."""

    def test_prepend(self) -> None:
        """Prepended hooks run first, in the order given."""
        hooks = HookList("next")
        hooks.add([Hook(noop, "c")])
        hooks.add([Hook(noop, "a"), Hook(noop, "b")], prepend=True)
        assert [h.label for h in hooks] == ["a", "b", "c"]
        assert len(hooks) == 3
        assert hooks[0].label == "a"

    def test_run_in_order_with_labels(self) -> None:
        """Sync and async hooks run one at a time; labels are reported first."""
        order: list[str] = []

        async def slow(value: int) -> None:
            await asyncio.sleep(0.01)
            order.append(f"slow {value}")

        hooks = HookList("before")
        hooks.add([Hook(slow, "Warm up"), Hook(lambda value: order.append(f"fast {value}"))])

        asyncio.run(hooks.run(7, on_label=lambda label: order.append(label)))

        assert order == ["Warm up", "slow 7", "fast 7"]

    def test_first_error_stops(self) -> None:
        """An exception propagates and later hooks do not run."""
        ran: list[str] = []

        def explode() -> None:
            raise RuntimeError("boom")

        hooks = HookList("after")
        hooks.add([Hook(explode), Hook(lambda: ran.append("later"))])

        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(hooks.run())
        assert ran == []

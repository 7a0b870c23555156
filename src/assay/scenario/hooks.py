"""Ordered callback lists for each lifecycle stage."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from assay.errors import ConfigurationError


@dataclass
class Hook:
    callback: Callable[..., Any]
    label: str | None = None


def hooks_from_args(args: tuple[Any, ...]) -> list[Hook]:
    """Parse ``(callback, ...)`` or ``("label", callback, ...)``.

    The label applies to the first callback only.

    Raises:
        ConfigurationError: No callable was given, or an argument is not callable.
    """
    items = list(args)
    label: str | None = None
    if items and isinstance(items[0], str):
        label = items.pop(0).strip() or None
    if not items:
        raise ConfigurationError("No callback provided.")
    hooks = []
    for index, callback in enumerate(items):
        if not callable(callback):
            raise ConfigurationError("No callback provided.")
        hooks.append(Hook(callback, label if index == 0 else None))
    return hooks


class HookList:
    """Callbacks for one stage, run one at a time in declaration order."""

    def __init__(self, stage: str):
        self.stage = stage
        self._hooks: list[Hook] = []

    def add(self, hooks: list[Hook], prepend: bool = False) -> None:
        if prepend:
            self._hooks[:0] = hooks
        else:
            self._hooks.extend(hooks)

    def __len__(self) -> int:
        return len(self._hooks)

    def __iter__(self) -> Iterator[Hook]:
        return iter(list(self._hooks))

    def __getitem__(self, index: int) -> Hook:
        return self._hooks[index]

    async def run(
        self,
        *args: Any,
        on_label: Callable[[str], Any] | None = None,
    ) -> None:
        """Call each hook with ``args`` and await it before starting the next.

        The first exception stops the list and propagates.
        """
        for hook in list(self._hooks):
            if hook.label and on_label is not None:
                on_label(hook.label)
            result = hook.callback(*args)
            if inspect.isawaitable(result):
                await result

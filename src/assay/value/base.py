"""Value: the uniform wrapper every assertion operates on.

A Value pairs underlying data with a human-readable name. Projections
(``first``, ``trim``, ``nth(2)``, ``sum()``...) always return a *new* Value
whose name describes the projection; the source is never mutated.

DOM-like capabilities (attributes, classes, traversal, clicking, typing) live on
the same class so the engine can call them without knowing the backend, but the
base implementation raises :class:`CapabilityNotSupportedError`. Backends in
``assay.value.xml`` and ``assay.value.browser`` override what they support.
"""

from __future__ import annotations

import inspect
import json
import math
import statistics
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, NoReturn
from urllib.parse import urljoin

from assay.errors import CapabilityNotSupportedError
from assay.value.util import (
    first_in,
    get_field,
    last_in,
    middle_in,
    natural_key,
    nth_in,
    path_search,
    random_in,
    to_ordinal,
    to_type,
)

if TYPE_CHECKING:
    from assay.core.context import AssertionContext
    from assay.scenario.assertions import Assertion


class Value:
    """Wrapper around arbitrary data with a name for reporting."""

    def __init__(
        self,
        data: Any,
        context: AssertionContext | None = None,
        name: str | None = None,
        parent: Value | None = None,
        highlight: str = "",
    ):
        self._data = data
        self._context = context
        self._name = name
        self._parent = parent
        self._highlight = highlight
        self._source_code: str | None = None
        self._path: str = ""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}: {self._data!r}>"

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def data(self) -> Any:
        """The underlying data."""
        return self._data

    @property
    def name(self) -> str:
        return self._name or "it"

    @property
    def context(self) -> AssertionContext | None:
        return self._context

    @property
    def parent(self) -> Value | None:
        return self._parent

    @property
    def highlight(self) -> str:
        """Literal substring of the source document this value maps to."""
        return self._highlight

    @property
    def source_code(self) -> str:
        return self._source_code or ""

    @property
    def path(self) -> str:
        return self._path

    @property
    def tag_name(self) -> str:
        return ""

    def rename(self, new_name: str) -> Value:
        self._name = new_name
        return self

    # ------------------------------------------------------------------
    # Type introspection
    # ------------------------------------------------------------------

    def to_type(self) -> str:
        return to_type(self._data)

    def is_null(self) -> bool:
        return self._data is None

    def is_array(self) -> bool:
        return self.to_type() == "array"

    def is_string(self) -> bool:
        return self.to_type() == "string"

    def is_object(self) -> bool:
        return self.to_type() == "object"

    def is_boolean(self) -> bool:
        return self.to_type() == "boolean"

    def is_number(self) -> bool:
        return self.to_type() == "number" and not self.is_nan()

    def is_nan(self) -> bool:
        return isinstance(self._data, float) and math.isnan(self._data)

    def is_numeric(self) -> bool:
        if self.is_boolean() or self._data is None:
            return False
        try:
            return not math.isnan(float(self._data))
        except (TypeError, ValueError):
            return False

    def is_regex(self) -> bool:
        return self.to_type() == "regexp"

    def is_awaitable(self) -> bool:
        return inspect.isawaitable(self._data)

    def is_element(self) -> bool:
        return False

    # ------------------------------------------------------------------
    # Coercions
    # ------------------------------------------------------------------

    def to_string(self) -> str:
        data = self._data
        if isinstance(data, Value):
            return data.to_string()
        if data is None:
            return ""
        if isinstance(data, bool):
            return "true" if data else "false"
        if isinstance(data, (Mapping, list, tuple)):
            return json.dumps(data, default=str)
        return str(data)

    def __str__(self) -> str:
        return self.to_string()

    def to_bool(self) -> bool:
        return bool(self._data)

    def to_float(self) -> float:
        """Numeric value, or NaN when the data does not parse."""
        if isinstance(self._data, (int, float)) and not isinstance(self._data, bool):
            return float(self._data)
        try:
            return float(self.to_string().strip())
        except ValueError:
            return math.nan

    def to_int(self) -> int | None:
        """Truncated integer value, or None when the data does not parse."""
        number = self.to_float()
        if math.isnan(number) or math.isinf(number):
            return None
        return int(number)

    def to_array(self) -> list[Any]:
        if isinstance(self._data, (list, tuple)):
            return list(self._data)
        return [self._data]

    def to_json(self) -> Any:
        """Structured data; strings are parsed as JSON (None if they don't parse)."""
        if isinstance(self._data, (Mapping, list, tuple)):
            return self._data
        try:
            return json.loads(self.to_string())
        except ValueError:
            return None

    def to_url(self, base_url: str | None = None) -> str:
        return urljoin(base_url, self.to_string()) if base_url else self.to_string()

    # ------------------------------------------------------------------
    # Projections (always a new Value)
    # ------------------------------------------------------------------

    def _wrap(
        self,
        data: Any,
        name: str,
        parent: Value | None = None,
        highlight: str | None = None,
    ) -> Value:
        value = Value(
            data,
            self._context,
            name,
            parent,
            self._highlight if highlight is None else highlight,
        )
        if parent is not None and not value._source_code:
            value._source_code = parent._source_code
        return value

    def _derive(self, data: Any, name: str | None = None) -> Value:
        return self._wrap(data, name or self.name, parent=self)

    @property
    def length(self) -> Value:
        try:
            size = len(self._data)
        except TypeError:
            size = 0
        return self._derive(size, f"Length of {self.name}")

    @property
    def trim(self) -> Value:
        data = self._data.strip() if isinstance(self._data, str) else self._data
        return self._derive(data, f"Trim of {self.name}")

    @property
    def uppercase(self) -> Value:
        data = self._data.upper() if isinstance(self._data, str) else self._data
        return self._derive(data, f"Uppercase of {self.name}")

    @property
    def lowercase(self) -> Value:
        data = self._data.lower() if isinstance(self._data, str) else self._data
        return self._derive(data, f"Lowercase of {self.name}")

    @property
    def first(self) -> Value:
        return self._derive(first_in(self._data), f"First in {self.name}")

    @property
    def mid(self) -> Value:
        return self._derive(middle_in(self._data), f"Middle in {self.name}")

    @property
    def last(self) -> Value:
        return self._derive(last_in(self._data), f"Last in {self.name}")

    @property
    def random(self) -> Value:
        return self._derive(random_in(self._data), f"Random in {self.name}")

    @property
    def keys(self) -> Value:
        keys = list(self._data.keys()) if isinstance(self._data, Mapping) else []
        return self._derive(keys, f"Keys of {self.name}")

    @property
    def values(self) -> Value:
        if isinstance(self._data, Mapping):
            values = list(self._data.values())
        elif isinstance(self._data, (list, tuple)):
            values = list(self._data)
        else:
            values = []
        return self._derive(values, f"Values of {self.name}")

    @property
    def as_string(self) -> Value:
        return self._derive(self.to_string())

    @property
    def as_array(self) -> Value:
        return self._derive(self.to_array())

    @property
    def as_float(self) -> Value:
        return self._derive(self.to_float())

    @property
    def as_int(self) -> Value:
        return self._derive(self.to_int())

    @property
    def as_bool(self) -> Value:
        return self._derive(self.to_bool())

    @property
    def as_json(self) -> Value:
        return self._derive(self.to_json())

    def nth(self, index: int) -> Value:
        return self._derive(
            nth_in(self._data, index), f"{to_ordinal(index + 1)} value in {self.name}"
        )

    def item(self, key: str | int) -> Value:
        """Look up a key, index or dotted path (``items[0].name``)."""
        if isinstance(key, int):
            data = nth_in(self._data, key)
        else:
            data = path_search(self._data, key)
        return self._derive(data, f"{key} in {self.name}")

    def split(self, separator: str | None = None, limit: int = -1) -> Value:
        return self._derive(self.to_string().split(separator, limit))

    def join(self, separator: str) -> Value:
        return self._derive(separator.join(str(item) for item in self.to_array()))

    def pluck(self, key: str) -> Value:
        return self._derive(
            [get_field(row, key) for row in self.to_array()],
            f"Values of {key} in {self.name}",
        )

    def col(self, key: str | list[str]) -> Value:
        """Extract one column (or several, as row lists) from array-like data."""
        rows = self.to_array()
        if isinstance(key, list):
            return self._derive(
                [[get_field(row, k) for k in key] for row in rows],
                f"{', '.join(key)} in {self.name}",
            )
        return self._derive([get_field(row, key) for row in rows], f"{key} in {self.name}")

    def map(self, callback: Callable[[Any], Any]) -> Value:
        if self.is_array():
            return self._derive([callback(item) for item in self.to_array()])
        return self._derive(callback(self._data))

    def filter(self, callback: Callable[[Any], bool]) -> Value:
        return self._derive([item for item in self.to_array() if callback(item)])

    def reduce(self, callback: Callable[[Any, Any], Any], initial: Any = None) -> Value:
        acc = initial
        for item in self.to_array():
            acc = callback(acc, item)
        return self._derive(acc)

    def every(self, callback: Callable[[Any], bool]) -> Value:
        return self._derive(all(callback(item) for item in self.to_array()))

    def some(self, callback: Callable[[Any], bool]) -> Value:
        return self._derive(any(callback(item) for item in self.to_array()))

    def none(self, callback: Callable[[Any], bool]) -> Value:
        return self._derive(not any(callback(item) for item in self.to_array()))

    def _column(self, key: str | None) -> list[Any]:
        rows = self.to_array()
        return [get_field(row, key) for row in rows] if key else rows

    def _numbers(self, key: str | None) -> list[float]:
        # Entries that do not parse become NaN and poison the aggregate.
        return [Value(v).to_float() for v in self._column(key)]

    def min(self, key: str | None = None) -> Value:
        column = [v for v in self._column(key) if v is not None]
        return self._derive(
            min(column, key=natural_key) if column else None, f"Min of {self.name}"
        )

    def max(self, key: str | None = None) -> Value:
        column = [v for v in self._column(key) if v is not None]
        return self._derive(
            max(column, key=natural_key) if column else None, f"Max of {self.name}"
        )

    def sum(self, key: str | None = None) -> Value:
        return self._derive(math.fsum(self._numbers(key)), f"Sum of {self.name}")

    def count(self, key: str | None = None) -> Value:
        """Number of rows, or of rows where ``key`` is truthy."""
        rows = self.to_array()
        total = sum(1 for row in rows if get_field(row, key)) if key else len(rows)
        return self._derive(total, f"Count of {self.name}")

    def avg(self, key: str | None = None) -> Value:
        column = self._numbers(key)
        return self._derive(
            statistics.fmean(column) if column else None, f"Average of {self.name}"
        )

    def median(self, key: str | None = None) -> Value:
        column = self._numbers(key)
        if not column:
            middle = None
        elif any(math.isnan(n) for n in column):
            middle = math.nan
        else:
            middle = statistics.median(column)
        return self._derive(middle, f"Median of {self.name}")

    def unique(self) -> Value:
        seen: list[Any] = []
        for item in self.to_array():
            if item not in seen:
                seen.append(item)
        return self._derive(seen, f"Unique in {self.name}")

    def group_by(self, key: str) -> Value:
        groups: dict[Any, list[Any]] = {}
        for row in self.to_array():
            groups.setdefault(get_field(row, key), []).append(row)
        return self._derive(groups, f"{self.name} grouped by {key}")

    def asc(self, key: str | None = None) -> Value:
        rows = sorted(
            self.to_array(),
            key=lambda row: natural_key(get_field(row, key) if key else row),
        )
        return self._derive(rows)

    def desc(self, key: str | None = None) -> Value:
        rows = sorted(
            self.to_array(),
            key=lambda row: natural_key(get_field(row, key) if key else row),
            reverse=True,
        )
        return self._derive(rows)

    # ------------------------------------------------------------------
    # Context helpers
    # ------------------------------------------------------------------

    def echo(self, callback: Callable[[str], str] | None = None) -> Value:
        if self._context is not None:
            text = self.to_string()
            self._context.comment(callback(text) if callback else text)
        return self

    def assert_that(self, message: str | None = None) -> Assertion:
        if self._context is None:
            from assay.errors import ConfigurationError

            raise ConfigurationError(f"{self.name} is not bound to an assertion context")
        if message is None:
            return self._context.assert_that(self)
        return self._context.assert_that(message, self)

    # ------------------------------------------------------------------
    # Capabilities every backend has
    # ------------------------------------------------------------------

    async def get_property(self, key: str) -> Value:
        if isinstance(self._data, Mapping):
            data = self._data.get(key)
        else:
            data = getattr(self._data, key, None)
        return self._wrap(data, f"{self.name} property of {key}", parent=self)

    async def has_property(self, key: str, value: Any = None) -> bool:
        found = await self.get_property(key)
        return _matches(found, value)

    async def get_value(self) -> Value:
        return self

    async def has_value(self, value: Any = None) -> bool:
        return _matches(await self.get_value(), value)

    async def get_text(self) -> Value:
        return self._wrap(self.to_string(), self.name, self._parent, self._highlight)

    async def has_text(self, text: str | None = None) -> bool:
        found = (await self.get_text()).to_string()
        return text == found if text else bool(found)

    async def get_url(self) -> Value:
        url = self.to_string() if self.is_string() else None
        return self._wrap(url, f"URL from {self.name}", parent=self)

    async def find(self, selector: str) -> Value:
        return self.item(selector)

    async def find_all(self, selector: str) -> list[Value]:
        return [await self.find(selector)]

    async def is_visible(self) -> bool:
        return True

    async def is_hidden(self) -> bool:
        return False

    # ------------------------------------------------------------------
    # Document-element capabilities (backends override)
    # ------------------------------------------------------------------

    def _unsupported(self, capability: str) -> NoReturn:
        raise CapabilityNotSupportedError(capability, self.name)

    async def get_attribute(self, key: str) -> Value:
        self._unsupported("get_attribute")

    async def has_attribute(self, key: str, value: Any = None) -> bool:
        found = await self.get_attribute(key)
        if found.is_null():
            return False
        return _matches(found, value)

    async def get_class_name(self) -> Value:
        self._unsupported("get_class_name")

    async def has_class_name(self, name: str | None = None) -> bool:
        classes = (await self.get_class_name()).to_string().split()
        if name is None:
            return bool(classes)
        return name in classes

    async def get_tag(self) -> Value:
        self._unsupported("get_tag")

    async def get_inner_text(self) -> Value:
        self._unsupported("get_inner_text")

    async def get_inner_html(self) -> Value:
        self._unsupported("get_inner_html")

    async def get_outer_html(self) -> Value:
        self._unsupported("get_outer_html")

    async def get_style_property(self, key: str) -> Value:
        self._unsupported("get_style_property")

    async def get_children(self, selector: str | None = None) -> list[Value]:
        self._unsupported("get_children")

    async def get_first_child(self, selector: str | None = None) -> Value:
        self._unsupported("get_first_child")

    async def get_last_child(self, selector: str | None = None) -> Value:
        self._unsupported("get_last_child")

    async def get_descendants(self, selector: str | None = None) -> list[Value]:
        self._unsupported("get_descendants")

    async def get_parent(self) -> Value:
        self._unsupported("get_parent")

    async def get_ancestor(self, selector: str) -> Value:
        self._unsupported("get_ancestor")

    async def get_ancestors(self, selector: str | None = None) -> list[Value]:
        self._unsupported("get_ancestors")

    async def get_siblings(self, selector: str | None = None) -> list[Value]:
        self._unsupported("get_siblings")

    async def get_next_sibling(self, selector: str | None = None) -> Value:
        self._unsupported("get_next_sibling")

    async def get_next_siblings(self, selector: str | None = None) -> list[Value]:
        self._unsupported("get_next_siblings")

    async def get_previous_sibling(self, selector: str | None = None) -> Value:
        self._unsupported("get_previous_sibling")

    async def get_previous_siblings(self, selector: str | None = None) -> list[Value]:
        self._unsupported("get_previous_siblings")

    async def get_bounds(self) -> dict[str, float] | None:
        return None

    async def click(self) -> Value:
        self._unsupported("click")

    async def submit(self) -> Value:
        self._unsupported("submit")

    async def focus(self) -> Value:
        self._unsupported("focus")

    async def hover(self) -> Value:
        self._unsupported("hover")

    async def blur(self) -> Value:
        self._unsupported("blur")

    async def press(self, key: str) -> Value:
        self._unsupported("press")

    async def type(self, text: str, delay_ms: float = 0) -> Value:
        self._unsupported("type")

    async def clear(self) -> Value:
        self._unsupported("clear")

    async def clear_then_type(self, text: str, delay_ms: float = 0) -> Value:
        self._unsupported("clear_then_type")

    async def select_option(self, value: str | list[str]) -> Value:
        self._unsupported("select_option")

    async def fill_form(self, form_data: Mapping[str, Any]) -> Value:
        self._unsupported("fill_form")

    async def scroll_to(self) -> Value:
        self._unsupported("scroll_to")

    async def screenshot(self) -> bytes:
        self._unsupported("screenshot")

    async def eval(self, js: str) -> Any:
        self._unsupported("eval")

    async def wait_for_visible(self) -> Value:
        self._unsupported("wait_for_visible")

    async def wait_for_hidden(self) -> Value:
        self._unsupported("wait_for_hidden")


def _matches(found: Value, expected: Any) -> bool:
    if expected is None:
        return not found.is_null()
    if hasattr(expected, "search"):
        return expected.search(found.to_string()) is not None
    return found.data == expected

"""Document element backend over a live Playwright element handle.

Every capability is a round trip to the browser. Instances are created with
:meth:`BrowserElement.create` so the tag name is known up front.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from assay.value.base import Value
from assay.value.element import DocumentElement

if TYPE_CHECKING:
    from assay.core.context import AssertionContext

_NEXT_SIBLINGS = """(el, sel) => {
  const out = [];
  for (let n = el.nextElementSibling; n; n = n.nextElementSibling) {
    if (!sel || n.matches(sel)) out.push(n);
  }
  return out;
}"""

_PREVIOUS_SIBLINGS = """(el, sel) => {
  const out = [];
  for (let n = el.previousElementSibling; n; n = n.previousElementSibling) {
    if (!sel || n.matches(sel)) out.push(n);
  }
  return out;
}"""

_SIBLINGS = """(el, sel) => Array.from(el.parentElement ? el.parentElement.children : [])
  .filter(n => n !== el && (!sel || n.matches(sel)))"""

_ANCESTORS = """(el, sel) => {
  const out = [];
  for (let n = el.parentElement; n; n = n.parentElement) {
    if (!sel || n.matches(sel)) out.push(n);
  }
  return out;
}"""

_CHILDREN = """(el, sel) => Array.from(el.children).filter(n => !sel || n.matches(sel))"""


class BrowserElement(DocumentElement):
    """A Playwright ElementHandle on the scenario's page."""

    def __init__(
        self,
        handle: Any,
        context: AssertionContext | None,
        name: str | None,
        tag_name: str = "",
        parent: Value | None = None,
        path: str = "",
    ):
        super().__init__(handle, context, name, parent)
        self._tag_name = tag_name.lower()
        self._path = path

    @classmethod
    async def create(
        cls,
        handle: Any,
        context: AssertionContext | None,
        name: str | None,
        parent: Value | None = None,
        path: str = "",
    ) -> BrowserElement:
        tag_name = await handle.evaluate("el => el.tagName")
        return cls(handle, context, name, str(tag_name or ""), parent, path)

    @property
    def handle(self) -> Any:
        return self._data

    @property
    def tag_name(self) -> str:
        return self._tag_name

    def to_string(self) -> str:
        return f"<{self._tag_name or 'element'}> {self.name}"

    async def _element(self, handle: Any, name: str, path: str = "") -> Value:
        if handle is None:
            return self._wrap(None, name, parent=self)
        return await BrowserElement.create(handle, self._context, name, self, path)

    async def _collect(self, js: str, selector: str | None, name: str) -> list[Value]:
        array = await self._data.evaluate_handle(js, selector)
        properties = await array.get_properties()
        elements: list[Value] = []
        for prop in properties.values():
            element = prop.as_element()
            if element is not None:
                elements.append(await self._element(element, name))
        await array.dispose()
        return elements

    async def find(self, selector: str) -> Value:
        return await self._element(await self._data.query_selector(selector), selector, selector)

    async def find_all(self, selector: str) -> list[Value]:
        handles = await self._data.query_selector_all(selector)
        return [
            await self._element(h, f"{selector} [{i}]", selector)
            for i, h in enumerate(handles)
        ]

    async def get_attribute(self, key: str) -> Value:
        return self._wrap(
            await self._data.get_attribute(key), f"{key} of {self.name}", parent=self
        )

    async def get_property(self, key: str) -> Value:
        prop = await self._data.get_property(key)
        return self._wrap(
            await prop.json_value(), f"{self.name} property of {key}", parent=self
        )

    async def get_class_name(self) -> Value:
        return self._wrap(
            await self._data.get_attribute("class"), f"{self.name} Class", parent=self
        )

    async def get_text(self) -> Value:
        return self._wrap(
            await self._data.text_content(), f"Text of {self.name}", parent=self
        )

    async def get_inner_text(self) -> Value:
        return self._wrap(
            await self._data.inner_text(), f"Inner Text of {self.name}", parent=self
        )

    async def get_inner_html(self) -> Value:
        return self._wrap(
            await self._data.inner_html(), f"Inner HTML of {self.name}", parent=self
        )

    async def get_outer_html(self) -> Value:
        html = await self._data.evaluate("el => el.outerHTML")
        return self._wrap(html, f"Outer HTML of {self.name}", parent=self)

    async def get_value(self) -> Value:
        prop = await self._data.get_property("value")
        return self._wrap(await prop.json_value(), f"Value of {self.name}", parent=self)

    async def get_style_property(self, key: str) -> Value:
        style = await self._data.evaluate(
            "(el, key) => window.getComputedStyle(el).getPropertyValue(key)", key
        )
        return self._wrap(style, f"Style of {key}", parent=self)

    async def get_children(self, selector: str | None = None) -> list[Value]:
        return await self._collect(_CHILDREN, selector, f"Child of {self.name}")

    async def get_first_child(self, selector: str | None = None) -> Value:
        children = await self.get_children(selector)
        return children[0] if children else self._wrap(None, f"First child of {self.name}")

    async def get_last_child(self, selector: str | None = None) -> Value:
        children = await self.get_children(selector)
        return children[-1] if children else self._wrap(None, f"Last child of {self.name}")

    async def get_descendants(self, selector: str | None = None) -> list[Value]:
        return await self.find_all(selector or "*")

    async def get_parent(self) -> Value:
        handle = (await self._data.evaluate_handle("el => el.parentElement")).as_element()
        return await self._element(handle, f"Parent of {self.name}")

    async def get_ancestors(self, selector: str | None = None) -> list[Value]:
        return await self._collect(_ANCESTORS, selector, f"Ancestor of {self.name}")

    async def get_ancestor(self, selector: str) -> Value:
        ancestors = await self.get_ancestors(selector)
        return ancestors[0] if ancestors else self._wrap(None, f"Ancestor of {self.name}")

    async def get_siblings(self, selector: str | None = None) -> list[Value]:
        return await self._collect(_SIBLINGS, selector, f"Sibling of {self.name}")

    async def get_next_siblings(self, selector: str | None = None) -> list[Value]:
        return await self._collect(_NEXT_SIBLINGS, selector, f"Next sibling of {self.name}")

    async def get_next_sibling(self, selector: str | None = None) -> Value:
        found = await self.get_next_siblings(selector)
        return found[0] if found else self._wrap(None, f"Next sibling of {self.name}")

    async def get_previous_siblings(self, selector: str | None = None) -> list[Value]:
        return await self._collect(
            _PREVIOUS_SIBLINGS, selector, f"Previous sibling of {self.name}"
        )

    async def get_previous_sibling(self, selector: str | None = None) -> Value:
        found = await self.get_previous_siblings(selector)
        return found[0] if found else self._wrap(None, f"Previous sibling of {self.name}")

    async def get_bounds(self) -> dict[str, float] | None:
        return await self._data.bounding_box()

    async def is_visible(self) -> bool:
        return await self._data.is_visible()

    async def is_hidden(self) -> bool:
        return await self._data.is_hidden()

    def _completed(self, verb: str) -> None:
        if self._context is not None:
            self._context.log_pass(f"{verb} {self.name}")

    async def click(self) -> Value:
        await self._data.click()
        self._completed("Clicked")
        return self

    async def submit(self) -> Value:
        await self._data.evaluate("el => (el.form || el).requestSubmit()")
        self._completed("Submitted")
        return self

    async def focus(self) -> Value:
        await self._data.focus()
        return self

    async def hover(self) -> Value:
        await self._data.hover()
        return self

    async def blur(self) -> Value:
        await self._data.evaluate("el => el.blur()")
        return self

    async def press(self, key: str) -> Value:
        await self._data.press(key)
        return self

    async def type(self, text: str, delay_ms: float = 0) -> Value:
        await self._data.type(text, delay=delay_ms)
        self._completed("Typed into")
        return self

    async def clear(self) -> Value:
        await self._data.fill("")
        return self

    async def clear_then_type(self, text: str, delay_ms: float = 0) -> Value:
        await self.clear()
        return await self.type(text, delay_ms)

    async def select_option(self, value: str | list[str]) -> Value:
        await self._data.select_option(value)
        return self

    async def fill_form(self, form_data: Mapping[str, Any]) -> Value:
        if not self.is_tag("form"):
            raise ValueError(f"{self.name} is not a form element")
        for field_name, field_value in form_data.items():
            field = await self._data.query_selector(f'[name="{field_name}"]')
            if field is None:
                continue
            tag = str(await field.evaluate("el => el.tagName")).lower()
            if tag == "select":
                await field.select_option(field_value)
            else:
                await field.fill(str(field_value))
        self._completed("Filled out")
        return self

    async def scroll_to(self) -> Value:
        await self._data.scroll_into_view_if_needed()
        return self

    async def screenshot(self) -> bytes:
        return await self._data.screenshot()

    async def eval(self, js: str) -> Any:
        return await self._data.evaluate(js)

    async def wait_for_visible(self) -> Value:
        await self._data.wait_for_element_state("visible")
        return self

    async def wait_for_hidden(self) -> Value:
        await self._data.wait_for_element_state("hidden")
        return self

"""Document element backend over the standard library ElementTree.

Selectors are ElementTree's XPath subset (``a``, ``.//div[@class='x']``,
``ul/li[2]``). A bare tag path is searched anywhere below the element.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from xml.etree import ElementTree as ET

from assay.value.base import Value
from assay.value.element import DocumentElement

if TYPE_CHECKING:
    from assay.core.context import AssertionContext

DOCUMENT_TAG = "#document"


def normalize_selector(selector: str) -> str:
    if selector.startswith((".", "/")):
        return selector if not selector.startswith("/") else f".{selector}"
    return f".//{selector}"


def local_name(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].lower()


class XmlElement(DocumentElement):
    """One ElementTree element plus the document root it belongs to."""

    def __init__(
        self,
        element: ET.Element,
        context: AssertionContext | None,
        name: str | None,
        root: ET.Element,
        parents: dict[ET.Element, ET.Element] | None = None,
        parent: Value | None = None,
        path: str = "",
    ):
        super().__init__(element, context, name, parent)
        self._root = root
        self._parents = parents
        self._path = path
        self._source_code = self._serialize(element)
        self._highlight = self._source_code

    @staticmethod
    def _serialize(element: ET.Element) -> str:
        detached = copy.copy(element)
        detached.tail = None
        return ET.tostring(detached, encoding="unicode")

    @property
    def element(self) -> ET.Element:
        return self._data

    @property
    def tag_name(self) -> str:
        return local_name(self._data.tag)

    def _parent_map(self) -> dict[ET.Element, ET.Element]:
        if self._parents is None:
            self._parents = {
                child: p
                for p in self._root.iter()
                if p.tag != DOCUMENT_TAG
                for child in p
            }
        return self._parents

    def _element(self, element: ET.Element, name: str, path: str = "") -> XmlElement:
        return XmlElement(
            element,
            self._context,
            name,
            self._root,
            self._parent_map(),
            parent=self,
            path=path,
        )

    def _missing(self, name: str) -> Value:
        return self._wrap(None, name, parent=self)

    def _matching(self, selector: str | None) -> set[int] | None:
        if selector is None:
            return None
        return {id(el) for el in self._root.iterfind(normalize_selector(selector))}

    def _filter(self, elements: list[ET.Element], selector: str | None) -> list[ET.Element]:
        allowed = self._matching(selector)
        if allowed is None:
            return elements
        return [el for el in elements if id(el) in allowed]

    async def find(self, selector: str) -> Value:
        found = self._data.find(normalize_selector(selector))
        if found is None:
            return self._missing(selector)
        return self._element(found, selector, selector)

    async def find_all(self, selector: str) -> list[Value]:
        return [
            self._element(el, f"{selector} [{i}]", selector)
            for i, el in enumerate(self._data.findall(normalize_selector(selector)))
        ]

    async def get_attribute(self, key: str) -> Value:
        return self._wrap(self._data.get(key), f"{key} of {self.name}", parent=self)

    async def get_property(self, key: str) -> Value:
        return await self.get_attribute(key)

    async def get_class_name(self) -> Value:
        return self._wrap(self._data.get("class"), f"{self.name} Class", parent=self)

    async def get_text(self) -> Value:
        return self._wrap("".join(self._data.itertext()), f"Text of {self.name}", parent=self)

    async def get_inner_text(self) -> Value:
        return self._wrap(
            "".join(self._data.itertext()), f"Inner Text of {self.name}", parent=self
        )

    async def get_inner_html(self) -> Value:
        inner = (self._data.text or "") + "".join(
            ET.tostring(child, encoding="unicode") for child in self._data
        )
        return self._wrap(inner, f"Inner HTML of {self.name}", parent=self)

    async def get_outer_html(self) -> Value:
        return self._wrap(self._source_code, f"Outer HTML of {self.name}", parent=self)

    async def get_value(self) -> Value:
        value = self._data.get("value")
        if value is None:
            value = "".join(self._data.itertext())
        return self._wrap(value, f"Value of {self.name}", parent=self)

    async def get_children(self, selector: str | None = None) -> list[Value]:
        children = self._filter(list(self._data), selector)
        return [self._element(el, f"Child of {self.name}") for el in children]

    async def get_first_child(self, selector: str | None = None) -> Value:
        children = await self.get_children(selector)
        return children[0] if children else self._missing(f"First child of {self.name}")

    async def get_last_child(self, selector: str | None = None) -> Value:
        children = await self.get_children(selector)
        return children[-1] if children else self._missing(f"Last child of {self.name}")

    async def get_descendants(self, selector: str | None = None) -> list[Value]:
        found = self._data.findall(normalize_selector(selector or "*"))
        return [self._element(el, f"Descendant of {self.name}") for el in found]

    async def get_parent(self) -> Value:
        parent = self._parent_map().get(self._data)
        if parent is None:
            return self._missing(f"Parent of {self.name}")
        return self._element(parent, f"Parent of {self.name}")

    async def get_ancestors(self, selector: str | None = None) -> list[Value]:
        chain: list[ET.Element] = []
        current = self._parent_map().get(self._data)
        while current is not None:
            chain.append(current)
            current = self._parent_map().get(current)
        return [
            self._element(el, f"Ancestor of {self.name}")
            for el in self._filter(chain, selector)
        ]

    async def get_ancestor(self, selector: str) -> Value:
        ancestors = await self.get_ancestors(selector)
        return ancestors[0] if ancestors else self._missing(f"Ancestor of {self.name}")

    def _sibling_elements(self) -> tuple[list[ET.Element], int]:
        parent = self._parent_map().get(self._data)
        if parent is None:
            return [self._data], 0
        siblings = list(parent)
        return siblings, siblings.index(self._data)

    async def get_siblings(self, selector: str | None = None) -> list[Value]:
        siblings, index = self._sibling_elements()
        others = siblings[:index] + siblings[index + 1 :]
        return [
            self._element(el, f"Sibling of {self.name}")
            for el in self._filter(others, selector)
        ]

    async def get_next_siblings(self, selector: str | None = None) -> list[Value]:
        siblings, index = self._sibling_elements()
        return [
            self._element(el, f"Next sibling of {self.name}")
            for el in self._filter(siblings[index + 1 :], selector)
        ]

    async def get_next_sibling(self, selector: str | None = None) -> Value:
        found = await self.get_next_siblings(selector)
        return found[0] if found else self._missing(f"Next sibling of {self.name}")

    async def get_previous_siblings(self, selector: str | None = None) -> list[Value]:
        siblings, index = self._sibling_elements()
        before = list(reversed(siblings[:index]))
        return [
            self._element(el, f"Previous sibling of {self.name}")
            for el in self._filter(before, selector)
        ]

    async def get_previous_sibling(self, selector: str | None = None) -> Value:
        found = await self.get_previous_siblings(selector)
        return found[0] if found else self._missing(f"Previous sibling of {self.name}")

    async def fill_form(self, form_data: Mapping[str, Any]) -> Value:
        """Set the value attribute of named fields inside this form."""
        if not self.is_tag("form"):
            raise ValueError(f"{self.name} is not a form element")
        for field_name, field_value in form_data.items():
            for field in self._data.iterfind(f".//*[@name='{field_name}']"):
                field.set("value", str(field_value))
        return self

"""Parse XML and HTML bodies into ElementTree elements.

Both parsers return a synthetic ``#document`` element whose only child is the
document's root element, so selectors can match the root itself.
"""

from __future__ import annotations

from html.parser import HTMLParser
from xml.etree import ElementTree as ET

from assay.value.xml import DOCUMENT_TAG

VOID_ELEMENTS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr",
    }
)


def _strip_namespaces(root: ET.Element) -> None:
    for el in root.iter():
        if isinstance(el.tag, str) and "}" in el.tag:
            el.tag = el.tag.split("}", 1)[1]
        for key in [k for k in el.attrib if "}" in k]:
            el.attrib[key.split("}", 1)[1]] = el.attrib.pop(key)


def _document(root: ET.Element) -> ET.Element:
    document = ET.Element(DOCUMENT_TAG)
    document.append(root)
    return document


def parse_xml(body: str) -> ET.Element:
    """Raises ``xml.etree.ElementTree.ParseError`` on malformed input."""
    root = ET.fromstring(body)
    _strip_namespaces(root)
    return _document(root)


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.document = ET.Element(DOCUMENT_TAG)
        self._stack: list[ET.Element] = [self.document]

    def _append_text(self, text: str) -> None:
        current = self._stack[-1]
        if len(current):
            last = current[-1]
            last.tail = (last.tail or "") + text
        else:
            current.text = (current.text or "") + text

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = ET.SubElement(
            self._stack[-1], tag, {k: v if v is not None else "" for k, v in attrs}
        )
        if tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        ET.SubElement(self._stack[-1], tag, {k: v if v is not None else "" for k, v in attrs})

    def handle_endtag(self, tag: str) -> None:
        # Close up to the matching open tag; stray end tags are ignored.
        for index in range(len(self._stack) - 1, 0, -1):
            if self._stack[index].tag == tag:
                del self._stack[index:]
                return

    def handle_data(self, data: str) -> None:
        self._append_text(data)


def parse_html(body: str) -> ET.Element:
    """Lenient HTML parse: unclosed and void tags are handled, never raises."""
    builder = _TreeBuilder()
    builder.feed(body)
    builder.close()
    return builder.document

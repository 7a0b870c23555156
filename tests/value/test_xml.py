"""Tests for value/xml.py and value/element.py - the ElementTree backend."""

from __future__ import annotations

import asyncio

from assay.response.markup import parse_html, parse_xml
from assay.value.element import Link
from assay.value.xml import XmlElement, normalize_selector

PAGE = """<html><body>
<div id="main" class="content wide">
  <h1>Title</h1>
  <p class="lead">First <b>bold</b> para</p>
  <p>Second para</p>
  <a href="/next">Next</a>
  <a href="#top">Top</a>
  <a href="mailto:team@example.test">Mail</a>
</div>
<form action="/submit"><input name="email" value=""><input name="age"></form>
</body></html>"""


def _document(body: str = PAGE) -> XmlElement:
    root = parse_html(body)
    return XmlElement(root, None, "Document", root)


class TestSelectors:
    """Tests for selector normalization."""

    def test_bare_tag_searches_descendants(self) -> None:
        """A bare tag path is searched anywhere below."""
        assert normalize_selector("p") == ".//p"

    def test_relative_paths_kept(self) -> None:
        """Paths starting with '.' are used as written; '/' is anchored."""
        assert normalize_selector("./div") == "./div"
        assert normalize_selector("/html") == "./html"


class TestFind:
    """Tests for find/find_all."""

    def test_find_matches_root(self) -> None:
        """The document root element itself can be selected."""
        html = asyncio.run(_document().find("html"))
        assert html.is_element()
        assert html.tag_name == "html"

    def test_find_missing_returns_null(self) -> None:
        """No match gives a null Value named after the selector."""
        missing = asyncio.run(_document().find("table"))
        assert missing.is_null()
        assert missing.name == "table"

    def test_find_all_names_each_match(self) -> None:
        """Each match is named with its index."""
        found = asyncio.run(_document().find_all("p"))
        assert [v.name for v in found] == ["p [0]", "p [1]"]

    def test_attribute_predicate(self) -> None:
        """XPath attribute predicates work."""
        lead = asyncio.run(_document().find(".//p[@class='lead']"))
        assert asyncio.run(lead.get_text()).data == "First bold para"


class TestElementCapabilities:
    """Tests for DOM-like capabilities."""

    def test_attributes_and_classes(self) -> None:
        """Attribute and class lookups."""
        div = asyncio.run(_document().find(".//div[@id='main']"))
        assert asyncio.run(div.get_attribute("id")).data == "main"
        assert asyncio.run(div.has_class_name("wide")) is True
        assert asyncio.run(div.has_class_name("narrow")) is False
        assert asyncio.run(div.has_attribute("missing")) is False

    def test_inner_and_outer_html(self) -> None:
        """Serialized markup of an element."""
        h1 = asyncio.run(_document().find("h1"))
        assert asyncio.run(h1.get_outer_html()).data == "<h1>Title</h1>"
        assert asyncio.run(h1.get_inner_html()).data == "Title"

    def test_children_and_parent(self) -> None:
        """Traversal down and up the tree."""
        div = asyncio.run(_document().find("div"))
        children = asyncio.run(div.get_children())
        assert [c.tag_name for c in children] == ["h1", "p", "p", "a", "a", "a"]
        assert asyncio.run(children[0].get_parent()).tag_name == "div"
        paragraphs = asyncio.run(div.get_children("p"))
        assert len(paragraphs) == 2

    def test_siblings(self) -> None:
        """Next/previous sibling lookups."""
        h1 = asyncio.run(_document().find("h1"))
        assert asyncio.run(h1.get_next_sibling()).tag_name == "p"
        assert asyncio.run(h1.get_previous_sibling()).is_null()
        assert len(asyncio.run(h1.get_siblings("a"))) == 3

    def test_ancestors_stop_at_root(self) -> None:
        """The synthetic document wrapper is never an ancestor."""
        h1 = asyncio.run(_document().find("h1"))
        tags = [a.tag_name for a in asyncio.run(h1.get_ancestors())]
        assert tags == ["div", "body", "html"]

    def test_value_of_input(self) -> None:
        """Inputs report their value attribute."""
        email = asyncio.run(_document().find(".//input[@name='email']"))
        assert asyncio.run(email.get_value()).data == ""

    def test_fill_form(self) -> None:
        """fill_form sets values on named fields of a form."""
        doc = _document()
        form = asyncio.run(doc.find("form"))
        asyncio.run(form.fill_form({"email": "a@b.test", "age": 30}))
        age = asyncio.run(doc.find(".//input[@name='age']"))
        assert asyncio.run(age.get_attribute("value")).data == "30"


class TestLinks:
    """Tests for URL and link helpers."""

    def test_get_url_for_anchor(self) -> None:
        """Anchors expose their href."""
        link = asyncio.run(_document().find("a"))
        assert asyncio.run(link.get_url()).data == "/next"

    def test_get_url_for_form(self) -> None:
        """Forms expose their action."""
        form = asyncio.run(_document().find("form"))
        assert asyncio.run(form.get_url()).data == "/submit"

    def test_link_navigation(self) -> None:
        """Fragments and mailto links are not navigation."""
        assert Link("/next", "https://example.test/a").is_navigation()
        assert Link("/next", "https://example.test/a").uri == "https://example.test/next"
        assert not Link("#top", "https://example.test/").is_navigation()
        assert not Link("mailto:x@example.test").is_navigation()
        assert not Link("").is_navigation()


class TestXmlDocuments:
    """Tests for namespaced XML documents."""

    def test_namespaces_stripped(self) -> None:
        """Atom elements are addressable by local name."""
        root = parse_xml(
            '<feed xmlns="http://www.w3.org/2005/Atom"><entry><title>One</title></entry></feed>'
        )
        doc = XmlElement(root, None, "Document", root)
        title = asyncio.run(doc.find("entry/title"))
        assert asyncio.run(title.get_text()).data == "One"

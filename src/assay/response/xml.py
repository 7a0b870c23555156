from __future__ import annotations

from xml.etree import ElementTree as ET

from assay.errors import ExecutionError
from assay.http.response import HttpResponse
from assay.response.base import ProtoResponse
from assay.response.markup import parse_html, parse_xml
from assay.types import ResponseType
from assay.value.base import Value
from assay.value.xml import XmlElement


class XmlResponse(ProtoResponse):
    """XML document. Selectors are ElementTree XPath-subset expressions."""

    response_type = ResponseType.XML
    response_type_name = "XML"

    def __init__(self, scenario):
        super().__init__(scenario)
        self._document: ET.Element | None = None

    def _parse(self, body: str) -> ET.Element:
        try:
            return parse_xml(body)
        except ET.ParseError as e:
            raise ExecutionError(f"Response body is not well-formed XML: {e}") from e

    def init(self, http_response: HttpResponse) -> None:
        super().init(http_response)
        self._document = self._parse(http_response.body)

    @property
    def root(self) -> XmlElement:
        if self._document is None:
            raise ExecutionError("Response has not been loaded yet.")
        return XmlElement(self._document, self.context, "Document", self._document)

    async def find(self, selector: str) -> Value:
        return await self.root.find(selector)

    async def find_all(self, selector: str) -> list[Value]:
        return await self.root.find_all(selector)


class DocumentResponse(XmlResponse):
    """HTML page parsed leniently into the same element tree."""

    response_type = ResponseType.DOCUMENT
    response_type_name = "HTML Page"

    def _parse(self, body: str) -> ET.Element:
        return parse_html(body)

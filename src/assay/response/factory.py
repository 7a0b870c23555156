"""Map a scenario's response type to its response class."""

from __future__ import annotations

from typing import TYPE_CHECKING

from assay.response.base import ProtoResponse, ResourceResponse
from assay.response.browser import BrowserResponse
from assay.response.json import JsonResponse
from assay.response.xml import DocumentResponse, XmlResponse
from assay.types import ResponseType

if TYPE_CHECKING:
    from assay.scenario.model import Scenario

RESPONSE_CLASSES: dict[ResponseType, type[ProtoResponse]] = {
    ResponseType.RESOURCE: ResourceResponse,
    ResponseType.JSON: JsonResponse,
    ResponseType.XML: XmlResponse,
    ResponseType.DOCUMENT: DocumentResponse,
    ResponseType.BROWSER: BrowserResponse,
}


def create_response(scenario: Scenario) -> ProtoResponse:
    return RESPONSE_CLASSES[scenario.response_type](scenario)

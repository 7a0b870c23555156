"""Response-to-value factory and the per-type response objects."""

from assay.response.base import ProtoResponse, ResourceResponse
from assay.response.browser import BrowserResponse
from assay.response.factory import create_response
from assay.response.json import JsonResponse
from assay.response.xml import DocumentResponse, XmlResponse

__all__ = [
    "ProtoResponse",
    "ResourceResponse",
    "JsonResponse",
    "XmlResponse",
    "DocumentResponse",
    "BrowserResponse",
    "create_response",
]

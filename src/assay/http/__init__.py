"""Request descriptor, normalized response and fetch adapters."""

from assay.http.adapter import FetchAdapter, HttpxAdapter, LocalFileAdapter
from assay.http.browser import BrowserAdapter
from assay.http.request import (
    BrowserOptions,
    HttpAuth,
    HttpProxy,
    HttpRequest,
    HttpTimeout,
)
from assay.http.response import HttpResponse

__all__ = [
    "FetchAdapter",
    "HttpxAdapter",
    "LocalFileAdapter",
    "BrowserAdapter",
    "BrowserOptions",
    "HttpAuth",
    "HttpProxy",
    "HttpRequest",
    "HttpTimeout",
    "HttpResponse",
]

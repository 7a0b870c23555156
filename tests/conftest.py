"""Shared test fixtures for assay tests."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from assay.config import ExecutionOptions
from assay.core.context import AssertionContext
from assay.events.sink import ListSink
from assay.http.adapter import HttpxAdapter
from assay.http.response import HttpResponse
from assay.scenario.suite import Suite

BASE_URL = "https://example.test"

ARTICLE_PAGE = """<!DOCTYPE html>
<html>
  <head><title>Articles</title></head>
  <body>
    <h1 class="headline">Latest articles</h1>
    <ul id="articles">
      <li><a href="/articles/1">First</a></li>
      <li><a href="/articles/2">Second</a></li>
      <li><a href="#top">Back to top</a></li>
    </ul>
    <img src="/logo.png">
    <form action="/search"><input name="q" value=""></form>
  </body>
</html>
"""

FEED_XML = """<?xml version="1.0"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Feed</title>
  <entry><title>One</title><link href="https://example.test/1"/></entry>
  <entry><title>Two</title><link href="https://example.test/2"/></entry>
</feed>
"""

ARTICLES_JSON = {
    "total": 3,
    "items": [
        {"id": 1, "title": "Alpha", "views": 30},
        {"id": 2, "title": "Beta", "views": 10},
        {"id": 3, "title": "Gamma", "views": 20},
    ],
}


# =============================================================================
# HTTP Fixtures
# =============================================================================


def _route(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/articles":
        return httpx.Response(200, json=ARTICLES_JSON)
    if path == "/api/broken":
        return httpx.Response(200, text="{not json", headers={"Content-Type": "application/json"})
    if path in ("/search", "/articles", "/"):
        return httpx.Response(200, text=ARTICLE_PAGE, headers={"Content-Type": "text/html"})
    if path.startswith("/articles/"):
        article_id = path.rsplit("/", 1)[-1]
        body = f"<html><body><h1>Article {article_id}</h1></body></html>"
        return httpx.Response(200, text=body, headers={"Content-Type": "text/html"})
    if path == "/feed.xml":
        return httpx.Response(200, text=FEED_XML, headers={"Content-Type": "application/atom+xml"})
    if path == "/echo":
        payload = {
            "method": request.method,
            "headers": dict(request.headers),
            "body": request.content.decode() if request.content else "",
        }
        return httpx.Response(200, text=json.dumps(payload))
    if path == "/old":
        return httpx.Response(301, headers={"Location": f"{BASE_URL}/api/articles"})
    return httpx.Response(404, text="Not Found")


@pytest.fixture
def route() -> Callable[[httpx.Request], httpx.Response]:
    """Request handler serving the canned test site."""
    return _route


@pytest.fixture
def adapter() -> HttpxAdapter:
    """HttpxAdapter whose client is backed by MockTransport (no network)."""
    return HttpxAdapter(httpx.AsyncClient(transport=httpx.MockTransport(_route)))


@pytest.fixture
def failing_adapter() -> HttpxAdapter:
    """HttpxAdapter whose transport always fails to connect."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return HttpxAdapter(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


# =============================================================================
# Suite Fixtures
# =============================================================================


@pytest.fixture
def sink() -> ListSink:
    """Fresh ListSink collecting every emitted event."""
    return ListSink()


@pytest.fixture
def suite(adapter: HttpxAdapter, sink: ListSink) -> Suite:
    """Suite pointed at the canned site through the mock adapter."""
    return Suite(
        "Example site",
        base_url=BASE_URL,
        options=ExecutionOptions(phase_timeout_s=2.0),
        sink=sink,
        adapter=adapter,
    )


@pytest.fixture
def make_context(suite: Suite) -> Callable[..., AssertionContext]:
    """Build an AssertionContext for a fresh scenario with a loaded response."""

    def factory(
        response_type: str = "resource",
        body: str = "",
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> AssertionContext:
        scenario = suite.scenario("Context under test", response_type)
        scenario.open("/")
        http_response = HttpResponse(
            status_code=status_code,
            status_message="OK",
            headers=httpx.Headers(headers or {}),
            body=body,
            url=f"{BASE_URL}/",
        )
        scenario.response.init(http_response)
        context = AssertionContext(scenario, scenario.response)
        scenario.response.context = context
        return context

    return factory


@pytest.fixture
def log_of() -> Callable[[Any], list[tuple[str, str]]]:
    """(type, message) pairs of a scenario's log, for compact assertions."""

    def read(scenario: Any) -> list[tuple[str, str]]:
        return [(e.type, e.message) for e in scenario.get_log()]

    return read

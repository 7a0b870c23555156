"""Fetch adapters: turn an HttpRequest into an HttpResponse."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from assay.errors import ExecutionError
from assay.http.request import HttpRequest
from assay.http.response import HttpResponse

logger = logging.getLogger(__name__)


@runtime_checkable
class FetchAdapter(Protocol):
    """Anything that can perform one request for a scenario."""

    async def fetch(self, request: HttpRequest) -> HttpResponse:
        """Perform the request.

        Raises:
            ExecutionError: The resource could not be loaded.
        """
        ...


def _timeout(request: HttpRequest) -> httpx.Timeout:
    t = request.timeout
    return httpx.Timeout(t.response, connect=t.open, read=t.read)


def _auth(request: HttpRequest) -> httpx.Auth | None:
    if request.auth is None:
        return None
    if request.auth_type == "digest":
        return httpx.DigestAuth(request.auth.username, request.auth.password)
    return httpx.BasicAuth(request.auth.username, request.auth.password)


def _request_kwargs(request: HttpRequest) -> dict[str, Any]:
    headers = dict(request.headers)
    if request.cookies:
        headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in request.cookies.items())
    kwargs: dict[str, Any] = {
        "headers": headers,
        "follow_redirects": request.follow_redirects,
        "timeout": _timeout(request),
    }
    auth = _auth(request)
    if auth is not None:
        kwargs["auth"] = auth
    if request.json_body is not None:
        kwargs["json"] = request.json_body
    elif request.data is not None:
        kwargs["content"] = request.data
    elif request.form is not None:
        if request.multipart:
            kwargs["files"] = {k: (None, str(v)) for k, v in request.form.items()}
        else:
            kwargs["data"] = {k: str(v) for k, v in request.form.items()}
    return kwargs


class HttpxAdapter:
    """Default network adapter over ``httpx.AsyncClient``.

    Pass ``client`` to reuse a configured client (tests hand in one built on
    ``httpx.MockTransport``); it is not closed by the adapter. Without one, a
    client is created per fetch with the request's proxy, redirect and
    certificate settings.
    """

    def __init__(self, client: httpx.AsyncClient | None = None):
        self._client = client

    async def fetch(self, request: HttpRequest) -> HttpResponse:
        if not request.uri:
            raise ExecutionError("Can not execute request with no URL.")
        kwargs = _request_kwargs(request)
        logger.debug("%s %s", request.method.upper(), request.uri)
        try:
            if self._client is not None:
                response = await self._client.request(
                    request.method.upper(), request.uri, **kwargs
                )
            else:
                async with httpx.AsyncClient(
                    verify=request.verify_cert,
                    max_redirects=request.max_redirects,
                    proxy=request.proxy.url if request.proxy else None,
                ) as client:
                    response = await client.request(
                        request.method.upper(), request.uri, **kwargs
                    )
        except httpx.HTTPError as e:
            raise ExecutionError(f"{type(e).__name__}: {e}") from e
        return HttpResponse.from_httpx(response)


class LocalFileAdapter:
    """Serves ``request.uri`` from the local filesystem (``Scenario.mock``)."""

    async def fetch(self, request: HttpRequest) -> HttpResponse:
        if not request.uri:
            raise ExecutionError("Can not load a mock with no path.")
        try:
            return HttpResponse.from_local_file(request.uri)
        except OSError as e:
            raise ExecutionError(f"{type(e).__name__}: {e}") from e

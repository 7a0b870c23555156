"""Browser-capable fetch adapter over Playwright's async API.

Playwright is an optional dependency (``pip install assay[browser]``); it is
imported when a browser scenario first fetches.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from assay.errors import ExecutionError
from assay.http.request import BrowserOptions, HttpRequest
from assay.http.response import HttpResponse

logger = logging.getLogger(__name__)


class BrowserAdapter:
    """Opens the request in a Chromium page and keeps the page alive.

    The page stays open after ``fetch`` so browser-backed values can query and
    drive it during assertion phases. Call :meth:`close` when done.
    """

    def __init__(self) -> None:
        self._playwright: Any = None
        self._browser: Any = None
        self.page: Any = None
        self.console_messages: list[str] = []

    async def fetch(self, request: HttpRequest) -> HttpResponse:
        if not request.uri:
            raise ExecutionError("Can not execute request with no URL.")
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import async_playwright

        options = request.browser or BrowserOptions()
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=options.headless, slow_mo=options.slow_mo_ms
            )
            context = await self._browser.new_context(
                viewport={"width": options.width, "height": options.height},
                extra_http_headers=request.headers or None,
                ignore_https_errors=not request.verify_cert,
                http_credentials=(
                    {"username": request.auth.username, "password": request.auth.password}
                    if request.auth
                    else None
                ),
            )
            if request.cookies:
                await context.add_cookies(
                    [
                        {"name": k, "value": v, "url": request.uri}
                        for k, v in request.cookies.items()
                    ]
                )
            self.page = await context.new_page()
            if options.record_console:
                self.page.on("console", self._on_console(options.output_console))
            timeout_ms = (request.timeout.response or request.timeout.open or 0) * 1000
            response = await self.page.goto(request.uri, timeout=timeout_ms)
            if response is None:
                raise ExecutionError(f"Failed to load {request.uri}")
            chain: list[str] = []
            previous = response.request.redirected_from
            while previous is not None:
                chain.insert(0, previous.url)
                previous = previous.redirected_from
            return HttpResponse(
                status_code=response.status,
                status_message=response.status_text,
                headers=httpx.Headers(await response.all_headers()),
                body=await self.page.content(),
                url=response.url,
                redirect_chain=chain,
                cookies={c["name"]: c["value"] for c in await context.cookies()},
            )
        except PlaywrightError as e:
            raise ExecutionError(str(e)) from e

    def _on_console(self, echo: bool):
        def handler(message: Any) -> None:
            line = f"{message.type}: {message.text}"
            self.console_messages.append(line)
            if echo:
                logger.info(line)

        return handler

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        self.page = None

from __future__ import annotations

from typing import Any

from assay.errors import ExecutionError
from assay.response.base import ProtoResponse
from assay.types import ResponseType
from assay.value.base import Value
from assay.value.browser import BrowserElement


class BrowserResponse(ProtoResponse):
    """Live page in a browser. Selectors are CSS selectors."""

    response_type = ResponseType.BROWSER
    response_type_name = "Browser"

    @property
    def is_browser(self) -> bool:
        return True

    @property
    def page(self) -> Any:
        page = self.scenario.browser_page
        if page is None:
            raise ExecutionError("No browser page is open for this scenario.")
        return page

    async def find(self, selector: str) -> Value:
        handle = await self.page.query_selector(selector)
        if handle is None:
            return self._value(None, selector)
        return await BrowserElement.create(handle, self.context, selector, path=selector)

    async def find_all(self, selector: str) -> list[Value]:
        handles = await self.page.query_selector_all(selector)
        return [
            await BrowserElement.create(h, self.context, f"{selector} [{i}]", path=selector)
            for i, h in enumerate(handles)
        ]

    async def eval(self, js: str, *args: Any) -> Value:
        return self._value(await self.page.evaluate(js, *args), "Evaluated JavaScript")

    async def screenshot(self, full_page: bool = False) -> bytes:
        return await self.page.screenshot(full_page=full_page)

    async def wait_for_selector(self, selector: str, timeout_s: float = 30.0) -> Value:
        handle = await self.page.wait_for_selector(selector, timeout=timeout_s * 1000)
        if handle is None:
            return self._value(None, selector)
        return await BrowserElement.create(handle, self.context, selector, path=selector)

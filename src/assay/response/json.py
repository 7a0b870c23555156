from __future__ import annotations

from typing import Any

from assay.errors import ExecutionError
from assay.http.response import HttpResponse
from assay.response.base import ProtoResponse
from assay.types import ResponseType
from assay.value.base import Value
from assay.value.util import path_search


class JsonResponse(ProtoResponse):
    """JSON API response. Selectors are paths such as ``items[0].name``."""

    response_type = ResponseType.JSON
    response_type_name = "JSON"

    def __init__(self, scenario):
        super().__init__(scenario)
        self._json: Any = None

    def init(self, http_response: HttpResponse) -> None:
        super().init(http_response)
        try:
            self._json = http_response.json_data()
        except ValueError as e:
            raise ExecutionError(f"Response body is not valid JSON: {e}") from e

    @property
    def json_root(self) -> Value:
        return self._value(self._json, "JSON Response")

    async def find(self, selector: str) -> Value:
        return self._value(path_search(self._json, selector), selector)

    async def find_all(self, selector: str) -> list[Value]:
        found = path_search(self._json, selector)
        if found is None:
            return []
        if isinstance(found, list):
            return [self._value(item, f"{selector} [{i}]") for i, item in enumerate(found)]
        return [self._value(found, selector)]

"""Response objects exposed to assertion phases as ``context.response``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from assay.errors import CapabilityNotSupportedError
from assay.http.response import HttpResponse
from assay.types import ResponseType
from assay.value.base import Value

if TYPE_CHECKING:
    from assay.core.context import AssertionContext
    from assay.scenario.model import Scenario


class ProtoResponse:
    """Capability surface shared by every response type.

    Accessors return Values bound to the current assertion context so they can
    be asserted on directly::

        context.response.status_code.assert_that().between(200, 299)
    """

    response_type = ResponseType.RESOURCE
    response_type_name = "Resource"

    def __init__(self, scenario: Scenario):
        self.scenario = scenario
        self.context: AssertionContext | None = None
        self._http = HttpResponse()

    def init(self, http_response: HttpResponse) -> None:
        """Bind the normalized response; subclasses parse the body here."""
        self._http = http_response

    @property
    def http_response(self) -> HttpResponse:
        return self._http

    @property
    def is_browser(self) -> bool:
        return False

    def _value(self, data: Any, name: str) -> Value:
        return Value(data, self.context, name)

    @property
    def status_code(self) -> Value:
        return self._value(self._http.status_code, "HTTP Status Code")

    @property
    def status_message(self) -> Value:
        return self._value(self._http.status_message, "HTTP Status Message")

    @property
    def headers(self) -> Value:
        return self._value(dict(self._http.headers), "HTTP Headers")

    def header(self, key: str) -> Value:
        return self._value(self._http.headers.get(key), f"HTTP Headers[{key}]")

    @property
    def body(self) -> Value:
        return self._value(self._http.body, "Raw Response Body")

    @property
    def json_body(self) -> Value:
        try:
            data = self._http.json_data()
        except ValueError:
            data = None
        return self._value(data, "Response Body as JSON")

    @property
    def url(self) -> Value:
        return self._value(self.scenario.url, "Request URL")

    @property
    def final_url(self) -> Value:
        return self._value(self.scenario.final_url, "Response URL")

    @property
    def load_time(self) -> Value:
        return self._value(self.scenario.request_duration, "Load Time")

    @property
    def length(self) -> Value:
        return self._value(len(self._http.body), "Length of Response Body")

    def cookie(self, key: str) -> Value:
        return self._value(self._http.cookies.get(key), f"Cookie {key}")

    async def find(self, selector: str) -> Value:
        raise CapabilityNotSupportedError("find", self.response_type_name)

    async def find_all(self, selector: str) -> list[Value]:
        raise CapabilityNotSupportedError("find_all", self.response_type_name)


class ResourceResponse(ProtoResponse):
    """Any resource: status, headers and body, no selectors."""

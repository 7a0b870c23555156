"""Request descriptor handed to fetch adapters."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from assay.types import HTTP_METHODS


class HttpTimeout(BaseModel):
    """Timeouts in seconds. None means no limit."""

    open: float | None = 10.0
    response: float | None = 30.0
    read: float | None = 30.0


class HttpAuth(BaseModel):
    username: str
    password: str


class HttpProxy(BaseModel):
    host: str
    port: int
    protocol: str = "http"
    auth: HttpAuth | None = None

    @property
    def url(self) -> str:
        credentials = ""
        if self.auth is not None:
            credentials = f"{self.auth.username}:{self.auth.password}@"
        return f"{self.protocol}://{credentials}{self.host}:{self.port}"


class BrowserOptions(BaseModel):
    """Options for browser-driven scenarios."""

    headless: bool = True
    record_console: bool = True
    output_console: bool = False
    width: int = 1280
    height: int = 720
    slow_mo_ms: float = 0


class HttpRequest(BaseModel):
    """Everything an adapter needs to perform one fetch.

    Only one of ``json_body``, ``data`` and ``form`` is sent; they are checked
    in that order.
    """

    uri: str | None = None
    method: str = "get"
    headers: dict[str, str] = Field(default_factory=dict)
    cookies: dict[str, str] = Field(default_factory=dict)
    json_body: Any = None
    data: str | bytes | None = None
    form: dict[str, Any] | None = None
    multipart: bool = False
    auth: HttpAuth | None = None
    auth_type: Literal["basic", "digest"] | None = None
    proxy: HttpProxy | None = None
    timeout: HttpTimeout = Field(default_factory=HttpTimeout)
    max_redirects: int = 10
    follow_redirects: bool = True
    verify_cert: bool = True
    browser: BrowserOptions | None = None
    type: Literal["generic", "json"] = "generic"

    def set_method(self, method: str) -> HttpRequest:
        verb = method.lower()
        if verb not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")
        self.method = verb
        return self

    def set_header(self, key: str, value: Any) -> HttpRequest:
        self.headers[key] = str(value)
        return self

    def set_cookie(self, key: str, value: str) -> HttpRequest:
        self.cookies[key] = value
        return self

    def set_json_body(self, body: Any) -> HttpRequest:
        self.json_body = body
        self.headers.setdefault("Content-Type", "application/json")
        return self

    def set_form_data(self, form: dict[str, Any], multipart: bool = False) -> HttpRequest:
        self.form = dict(form)
        self.multipart = multipart
        return self

    def set_options(self, **options: Any) -> HttpRequest:
        """Apply keyword overrides, validating each field."""
        validated = self.model_validate({**self.model_dump(), **options})
        for key in options:
            setattr(self, key, getattr(validated, key))
        return self

"""Normalized response every adapter returns."""

from __future__ import annotations

import json
import mimetypes
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field


class HttpResponse(BaseModel):
    """Status, headers and body of a fetched resource.

    ``headers`` is an ``httpx.Headers`` so lookups are case-insensitive and
    insertion order is kept. ``redirect_chain`` lists the URLs that redirected,
    in the order they were visited.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status_code: int = 0
    status_message: str = ""
    headers: httpx.Headers = Field(default_factory=httpx.Headers)
    body: str = ""
    url: str = ""
    redirect_chain: list[str] = Field(default_factory=list)
    cookies: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> HttpResponse:
        return cls(
            status_code=response.status_code,
            status_message=response.reason_phrase,
            headers=httpx.Headers(response.headers),
            body=response.text,
            url=str(response.url),
            redirect_chain=[str(r.url) for r in response.history],
            cookies=dict(response.cookies),
        )

    @classmethod
    def from_local_file(cls, path: str | Path) -> HttpResponse:
        """Serve a file from disk as if it were a 200 response."""
        file_path = Path(path)
        body = file_path.read_text(encoding="utf-8")
        content_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            status_code=200,
            status_message="OK",
            headers=httpx.Headers({"Content-Type": content_type or "text/plain"}),
            body=body,
            url=file_path.resolve().as_uri(),
        )

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    def json_data(self) -> Any:
        """Body parsed as JSON. Raises ValueError when it isn't JSON."""
        return json.loads(self.body)

"""Extended capability base for values backed by a document element."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import urljoin, urlparse

from assay.value.base import Value

if TYPE_CHECKING:
    from assay.scenario.model import Scenario
    from assay.types import ResponseType

SRC_TAGS = ("img", "script", "video", "audio", "object", "iframe", "source")
HREF_TAGS = ("a", "link")


class Link:
    """A URL found in a document, resolved against the page it came from."""

    def __init__(self, uri: str, base_url: str | None = None):
        self.raw = uri
        self.uri = urljoin(base_url, uri) if base_url else uri

    def is_navigation(self) -> bool:
        """True for links that can be fetched (not anchors, mailto, javascript)."""
        if not self.raw or self.raw.startswith("#"):
            return False
        return urlparse(self.uri).scheme in ("http", "https", "file", "")

    def __str__(self) -> str:
        return self.uri


class DocumentElement(Value):
    """A Value that wraps one element of a parsed document or a live page.

    Subclasses implement the DOM-like capabilities their backend supports and
    leave the rest to the base class, which raises CapabilityNotSupportedError.
    """

    def is_element(self) -> bool:
        return True

    def is_tag(self, *tag_names: str) -> bool:
        if not self.tag_name:
            return False
        return self.tag_name in tag_names if tag_names else True

    async def get_tag(self) -> Value:
        return self._wrap(self.tag_name, f"Tag Name of {self.name}", parent=self)

    async def has_tag(self, tag: str | None = None) -> bool:
        if tag is None:
            return bool(self.tag_name)
        return self.tag_name == tag

    async def get_url(self) -> Value:
        url: Any = None
        if self.is_tag(*SRC_TAGS):
            url = (await self.get_attribute("src")).data
        elif self.is_tag(*HREF_TAGS):
            url = (await self.get_attribute("href")).data
        elif self.is_tag("form"):
            url = (await self.get_attribute("action")).data
            if not url and self._context is not None:
                url = self._context.scenario.url
        return self._wrap(url, f"URL from {self.name}", parent=self)

    async def get_link(self) -> Link:
        src = await self.get_url()
        base = self._context.scenario.build_url() if self._context is not None else None
        return Link(src.to_string() if src.is_string() else "", base)

    def open(
        self,
        title: str,
        *phases: Callable[..., Any],
        response_type: ResponseType | str | None = None,
    ) -> Scenario:
        """Spawn a sub-scenario that loads the resource this element links to."""
        if self._context is None:
            from assay.errors import ConfigurationError

            raise ConfigurationError(f"{self.name} is not bound to an assertion context")
        return self._context.open(title, self, *phases, response_type=response_type)

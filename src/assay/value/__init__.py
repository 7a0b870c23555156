"""Value abstraction and its document element backends."""

from assay.value.base import Value
from assay.value.browser import BrowserElement
from assay.value.element import DocumentElement, Link
from assay.value.xml import XmlElement

__all__ = [
    "Value",
    "BrowserElement",
    "DocumentElement",
    "Link",
    "XmlElement",
]

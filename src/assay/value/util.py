"""Helpers shared by Value projections."""

from __future__ import annotations

import inspect
import random
import re
import unicodedata
from collections.abc import Mapping
from typing import Any

_DIGITS = re.compile(r"(\d+(?:\.\d+)?)")
_PATH_TOKEN = re.compile(r"[^.\[\]]+|\[(-?\d+)\]")


def to_type(data: Any) -> str:
    """Name the kind of data the way assertions and reports talk about it."""
    from assay.value.base import Value

    if data is None:
        return "null"
    if isinstance(data, Value):
        return "value"
    if isinstance(data, bool):
        return "boolean"
    if isinstance(data, (int, float)):
        return "number"
    if isinstance(data, str):
        return "string"
    if isinstance(data, (list, tuple)):
        return "array"
    if isinstance(data, Mapping):
        return "object"
    if isinstance(data, re.Pattern):
        return "regexp"
    if inspect.isawaitable(data):
        return "promise"
    return type(data).__name__.lower()


def _sequence(data: Any) -> Any:
    if isinstance(data, (list, tuple, str)):
        return data
    if isinstance(data, Mapping):
        return list(data.values())
    return None


def nth_in(data: Any, index: int) -> Any:
    seq = _sequence(data)
    if seq is None or not -len(seq) <= index < len(seq):
        return None
    return seq[index]


def first_in(data: Any) -> Any:
    return nth_in(data, 0)


def last_in(data: Any) -> Any:
    seq = _sequence(data)
    return seq[-1] if seq else None


def middle_in(data: Any) -> Any:
    seq = _sequence(data)
    return seq[(len(seq) - 1) // 2] if seq else None


def random_in(data: Any) -> Any:
    seq = _sequence(data)
    return random.choice(seq) if seq else None


def to_ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def natural_key(value: Any) -> tuple:
    """Sort key comparing text case- and accent-insensitively, digits numerically.

    "item 2" sorts before "Item 10", "é" compares equal to "e".
    """
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, (int, float)):
        return ((0, float(value), ""),)
    if value is None:
        return ((2, 0.0, ""),)
    text = unicodedata.normalize("NFKD", str(value))
    text = "".join(c for c in text if not unicodedata.combining(c)).casefold()
    parts = []
    for chunk in _DIGITS.split(text):
        if not chunk:
            continue
        if _DIGITS.fullmatch(chunk):
            parts.append((0, float(chunk), ""))
        else:
            parts.append((1, 0.0, chunk))
    return tuple(parts)


def get_field(row: Any, key: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def path_search(data: Any, path: str) -> Any:
    """Look up a dotted/indexed path such as ``items[0].name``.

    Returns None as soon as a segment is missing.
    """
    current = data
    for match in _PATH_TOKEN.finditer(path):
        if current is None:
            return None
        index = match.group(1)
        if index is not None:
            current = nth_in(current, int(index)) if isinstance(current, (list, tuple)) else None
        elif isinstance(current, Mapping):
            current = current.get(match.group(0))
        elif isinstance(current, (list, tuple)) and match.group(0).lstrip("-").isdigit():
            current = nth_in(current, int(match.group(0)))
        else:
            current = getattr(current, match.group(0), None)
    return current

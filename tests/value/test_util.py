"""Tests for value/util.py - shared helpers."""

from __future__ import annotations

import re

from assay.value.util import natural_key, path_search, to_ordinal, to_type


class TestToType:
    """Tests for to_type."""

    def test_regex_and_awaitable(self) -> None:
        """Compiled patterns and coroutines get their own names."""

        async def pending() -> None:
            return None

        coro = pending()
        try:
            assert to_type(coro) == "promise"
        finally:
            coro.close()
        assert to_type(re.compile("x")) == "regexp"

    def test_unknown_type_uses_class_name(self) -> None:
        """Other objects are named after their class."""
        assert to_type(b"x") == "bytes"


class TestOrdinal:
    """Tests for to_ordinal."""

    def test_suffixes(self) -> None:
        """English ordinal suffixes including the teens."""
        assert [to_ordinal(n) for n in (1, 2, 3, 4, 11, 12, 13, 21, 22, 101)] == [
            "1st", "2nd", "3rd", "4th", "11th", "12th", "13th", "21st", "22nd", "101st",
        ]


class TestNaturalKey:
    """Tests for natural_key."""

    def test_accents_ignored(self) -> None:
        """Accented letters compare like their base letters."""
        assert natural_key("école") == natural_key("Ecole")

    def test_numbers_before_text(self) -> None:
        """Numbers sort before words, None sorts last."""
        values = ["b", None, 3, "a"]
        assert sorted(values, key=natural_key) == [3, "a", "b", None]


class TestPathSearch:
    """Tests for path_search."""

    def test_nested_lookup(self) -> None:
        """Dotted keys and bracket indexes."""
        data = {"a": {"b": [{"c": 1}, {"c": 2}]}}
        assert path_search(data, "a.b[1].c") == 2

    def test_dotted_index(self) -> None:
        """A bare number segment indexes into lists."""
        assert path_search({"a": [5, 6]}, "a.1") == 6

    def test_missing_segment(self) -> None:
        """Missing segments short-circuit to None."""
        assert path_search({"a": None}, "a.b.c") is None
        assert path_search({"a": {}}, "a.b") is None

"""Tests for scenario/loader.py - finding suites in files and modules."""

from __future__ import annotations

from pathlib import Path

import pytest

from assay.scenario.loader import load_suites, load_suites_from_dir, load_target
from assay.scenario.suite import Suite

SUITE_FILE = """
from assay import Suite

suite = Suite("{title}", base_url="https://example.test")
suite.json("Articles", tags=["api"]).open("/api/articles").next(lambda ctx: None)
"""

GET_SUITES_FILE = """
from assay import Suite


def get_suites():
    return [Suite("Alpha"), Suite("Beta")]
"""


def write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadTarget:
    """Tests for load_target."""

    def test_suite_variable(self, tmp_path: Path) -> None:
        """A module-level `suite` is picked up."""
        path = write(tmp_path / "home.py", SUITE_FILE.format(title="Home"))

        suites = load_target(str(path))

        assert [s.title for s in suites] == ["Home"]
        assert isinstance(suites[0], Suite)
        assert [s.title for s in suites[0].scenarios] == ["Articles"]

    def test_get_suites_function(self, tmp_path: Path) -> None:
        """`get_suites()` may return several suites."""
        path = write(tmp_path / "many.py", GET_SUITES_FILE)
        assert [s.title for s in load_target(str(path))] == ["Alpha", "Beta"]

    def test_module_attr_must_resolve_to_suites(self) -> None:
        """package.module:attr imports the attribute and checks what it is."""
        with pytest.raises(TypeError, match="Suite reference"):
            load_target("assay.config:DEFAULT_PHASE_TIMEOUT_S")

    def test_missing_file(self, tmp_path: Path) -> None:
        """Unknown paths raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_target(str(tmp_path / "nope.py"))

    def test_file_without_suite(self, tmp_path: Path) -> None:
        """Files must define one of the known names."""
        path = write(tmp_path / "empty.py", "x = 1\n")
        with pytest.raises(AttributeError, match="must define"):
            load_target(str(path))


class TestLoadDirectory:
    """Tests for directory discovery."""

    def test_loads_sorted_and_skips_private(self, tmp_path: Path) -> None:
        """Files load in name order; underscore files are skipped."""
        write(tmp_path / "b_suite.py", SUITE_FILE.format(title="B"))
        write(tmp_path / "a_suite.py", SUITE_FILE.format(title="A"))
        write(tmp_path / "_helpers.py", "raise RuntimeError('never imported')\n")

        suites = load_suites_from_dir(tmp_path)

        assert [s.title for s in suites] == ["A", "B"]

    def test_recursive(self, tmp_path: Path) -> None:
        """recursive=True walks subdirectories."""
        nested = tmp_path / "nested"
        nested.mkdir()
        write(nested / "deep.py", SUITE_FILE.format(title="Deep"))

        assert [s.title for s in load_suites_from_dir(tmp_path, recursive=True)] == ["Deep"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        """A directory without suites is an error."""
        with pytest.raises(FileNotFoundError, match="No suites found"):
            load_suites_from_dir(tmp_path)

    def test_load_suites_mixes_refs(self, tmp_path: Path) -> None:
        """load_suites concatenates every ref in order."""
        one = write(tmp_path / "one.py", SUITE_FILE.format(title="One"))
        other = tmp_path / "more"
        other.mkdir()
        write(other / "two.py", SUITE_FILE.format(title="Two"))

        assert [s.title for s in load_suites([str(one), str(other)])] == ["One", "Two"]

"""Suite loader for CLI.

Supported refs:
- `path/to/file.py` (expects `suite`/`suites` variable or `get_suite()`/`get_suites()` function)
- `package.module:attr` (attr is Suite, list[Suite], or a callable returning one of those)
- directory path: loads all `*.py` files as suite modules
"""

from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from assay.scenario.suite import Suite


def _load_module_from_file(path: Path) -> ModuleType:
    """Load a suite module from a file path via importlib.

    The module is registered in `sys.modules` before it executes, which
    `dataclasses.dataclass` and friends rely on.
    """
    suffix = f"{abs(hash(str(path))) & 0xFFFFFFFF:x}"
    module_name = f"assay_suite_{path.stem}_{suffix}"

    spec = importlib.util.spec_from_file_location(module_name, str(path))
    if spec is None or spec.loader is None:
        raise RuntimeError(f"Failed to create module spec for suite: {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)  # type: ignore[attr-defined]
    return module


def _coerce_suites(obj: Any) -> list[Suite]:
    if isinstance(obj, Suite):
        return [obj]
    if isinstance(obj, (list, tuple)) and all(isinstance(s, Suite) for s in obj):
        return list(obj)
    if callable(obj):
        v = obj()
        if isinstance(v, Suite):
            return [v]
        if isinstance(v, (list, tuple)) and all(isinstance(s, Suite) for s in v):
            return list(v)
    raise TypeError(
        "Suite reference must resolve to `Suite`, `list[Suite]`, or a callable returning one of those"
    )


def load_target(ref: str) -> list[Suite]:
    """Load one or more suites from a ref (file, directory or module:attr)."""
    if ":" in ref and not ref.strip().endswith(".py"):
        mod_name, attr = ref.split(":", 1)
        module = importlib.import_module(mod_name)
        return _coerce_suites(getattr(module, attr))

    path = Path(ref)
    if not path.exists():
        raise FileNotFoundError(ref)
    if path.is_dir():
        return load_suites_from_dir(path)

    module = _load_module_from_file(path.resolve())
    for name in ("suites", "get_suites", "suite", "get_suite"):
        if hasattr(module, name):
            return _coerce_suites(getattr(module, name))

    raise AttributeError(
        f"{ref} must define `suite`, `get_suite()`, `suites`, or `get_suites()`"
    )


def load_suites_from_dir(
    dir_path: str | Path,
    *,
    glob: str = "*.py",
    recursive: bool = False,
) -> list[Suite]:
    """Discover and load suites from every matching file in a directory."""
    base = Path(dir_path)
    if not base.exists():
        raise FileNotFoundError(str(dir_path))
    if not base.is_dir():
        raise NotADirectoryError(str(dir_path))

    pattern = f"**/{glob}" if recursive else glob
    suites: list[Suite] = []

    for path in sorted(base.glob(pattern)):
        if not path.is_file():
            continue
        if path.name.startswith("_"):
            continue
        suites.extend(load_target(str(path)))

    if not suites:
        raise FileNotFoundError(f"No suites found in {base} (glob={glob}, recursive={recursive})")

    return suites


def load_suites(refs: list[str]) -> list[Suite]:
    suites: list[Suite] = []
    for ref in refs:
        suites.extend(load_target(ref))
    return suites

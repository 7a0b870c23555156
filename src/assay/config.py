"""Execution options shared by every scenario in a run.

Options are built once, before any Suite starts creating scenarios, and handed
down from the Suite to each Scenario. They are frozen for the rest of the run.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PHASE_TIMEOUT_S = 30.0


def _env_bool(value: str | None) -> bool | None:
    if value is None or value.strip() == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


class ExecutionOptions(BaseModel):
    """Run-wide overrides.

    Attributes:
        headless: Force browser scenarios headless (True) or headed (False).
            None keeps whatever the scenario asked for.
        phase_timeout_s: How long one assertion phase may take to settle.
        environment: Free-form environment name (dev, staging, prod).
        base_url: Replaces every suite's base URL when set.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    headless: bool | None = None
    phase_timeout_s: float = Field(default=DEFAULT_PHASE_TIMEOUT_S, gt=0)
    environment: str | None = None
    base_url: str | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ExecutionOptions:
        """Build options from ASSAY_* environment variables."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        headless = _env_bool(env.get("ASSAY_HEADLESS"))
        if headless is not None:
            values["headless"] = headless
        if env.get("ASSAY_PHASE_TIMEOUT"):
            values["phase_timeout_s"] = float(env["ASSAY_PHASE_TIMEOUT"])
        if env.get("ASSAY_ENV"):
            values["environment"] = env["ASSAY_ENV"]
        if env.get("ASSAY_BASE_URL"):
            values["base_url"] = env["ASSAY_BASE_URL"]
        return cls(**values)

    def merged(self, **overrides: object) -> ExecutionOptions:
        """Return a validated copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return type(self).model_validate({**self.model_dump(), **changes})


def load_options(path: str | Path) -> ExecutionOptions:
    """Load options from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValidationError: If the content doesn't match ExecutionOptions.
    """
    return ExecutionOptions.model_validate_json(Path(path).read_text(encoding="utf-8"))

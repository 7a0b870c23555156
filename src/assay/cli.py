from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger("assay")


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging for the assay CLI."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assay",
        description="Run HTTP, document and browser test scenarios.",
    )
    sub = parser.add_subparsers(dest="cmd", required=False)

    run_p = sub.add_parser(
        "run",
        help="Run one or more suites (files, module:attr, or directories)",
    )
    run_p.add_argument(
        "targets",
        nargs="+",
        help="Targets: path/to/file.py OR package.module:attr OR directory",
    )
    run_p.add_argument(
        "--tag",
        action="append",
        default=None,
        help="Only run scenarios with this tag (repeatable)",
    )
    run_p.add_argument("--base-url", default=None, help="Override every suite's base URL")
    run_p.add_argument("--env", default=None, help="Environment name shown in the report")
    headless = run_p.add_mutually_exclusive_group()
    headless.add_argument(
        "--headless",
        dest="headless",
        action="store_true",
        default=None,
        help="Force browser scenarios to run headless",
    )
    headless.add_argument(
        "--no-headless",
        dest="headless",
        action="store_false",
        help="Force browser scenarios to open a visible window",
    )
    run_p.add_argument(
        "--phase-timeout",
        type=float,
        default=None,
        help="Seconds one assertion phase may take (default: 30)",
    )
    run_p.add_argument(
        "--artifacts-dir",
        default=None,
        help="Write events.jsonl for this run under this directory",
    )
    run_p.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")

    list_p = sub.add_parser("list", help="List the suites and scenarios a target defines")
    list_p.add_argument("targets", nargs="+")
    return parser


async def _run_suites(suites: list, tags: list[str] | None) -> None:
    if tags:
        for suite in suites:
            wanted = {id(s) for tag in tags for s in suite.get_all_scenarios_by_tag(tag)}
            for scenario in suite.scenarios:
                if id(scenario) not in wanted and not scenario.has_executed:
                    await scenario.cancel()
    await asyncio.gather(*(suite.run() for suite in suites))


def main(argv: list[str] | None = None) -> None:
    """Console script entry point (`assay`)."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.cmd not in ("run", "list"):
        parser.print_help()
        return

    _setup_logging(getattr(args, "verbose", False))

    from assay.config import ExecutionOptions
    from assay.events.jsonl import JsonlSink
    from assay.events.sink import LoggingSink
    from assay.report import render_suite
    from assay.scenario.loader import load_suites

    suites = load_suites(args.targets)

    if args.cmd == "list":
        for suite in suites:
            logger.info(suite.title)
            for scenario in suite.scenarios:
                tags = f" [{', '.join(scenario.tags)}]" if scenario.tags else ""
                logger.info(f"  - {scenario.title} ({scenario.response_type.value}){tags}")
        return

    env_overrides = ExecutionOptions.from_env().model_dump(exclude_unset=True)
    sink = None
    if args.artifacts_dir:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        sink = JsonlSink(Path(args.artifacts_dir) / f"run-{stamp}" / "events.jsonl")
        logger.info(f"Writing events to {sink.path}")
    for suite in suites:
        options = suite.options.merged(**env_overrides).merged(
            base_url=args.base_url,
            environment=args.env,
            headless=args.headless,
            phase_timeout_s=args.phase_timeout,
        )
        suite.configure(options)
        if sink is not None:
            suite.add_sink(sink)
        if args.verbose:
            suite.add_sink(LoggingSink())

    total = sum(len(s.scenarios) for s in suites)
    logger.info(f"\nRunning {len(suites)} suite(s), {total} scenario(s)...")

    try:
        asyncio.run(_run_suites(suites, args.tag))
    finally:
        if sink is not None:
            sink.close()

    for suite in suites:
        for line in render_suite(suite):
            logger.info(line)

    passed = sum(1 for s in suites if s.passed)
    logger.info("")
    logger.info(f"Results: {passed} passed, {len(suites) - passed} failed, {len(suites)} suites")
    raise SystemExit(0 if passed == len(suites) else 1)

"""
Command-line entry point.

    authflow list [-t TAG]
    authflow run [-s NAME ...] [-t TAG ...] [--base-url URL] [--headed]
                 [--browser TYPE] [--parallel N] [--log-level LEVEL] [--json]

The process exits 0 when every selected scenario passes, 1 when any fails,
and 2 on usage errors.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from pydantic import ValidationError

from .config import AuthFlowConfig, set_config
from .logging_config import get_logger, setup_logging
from .runner import run_catalog
from .scenarios import list_scenarios

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="authflow",
        description="Browser-driven acceptance tests for sign-in, sign-up and session handling"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List catalog scenarios")
    list_parser.add_argument("-t", "--tag", action="append", dest="tags", help="Only scenarios with this tag")

    run_parser = subparsers.add_parser("run", help="Run catalog scenarios")
    run_parser.add_argument("-s", "--scenario", action="append", dest="names", help="Scenario to run (repeatable)")
    run_parser.add_argument("-t", "--tag", action="append", dest="tags", help="Only scenarios with this tag")
    run_parser.add_argument("--base-url", help="Base URL of the application under test")
    run_parser.add_argument("--browser", choices=["chromium", "firefox", "webkit"], help="Browser engine")
    headless = run_parser.add_mutually_exclusive_group()
    headless.add_argument("--headless", dest="headless", action="store_true", default=None,
                          help="Run the browser headless")
    headless.add_argument("--headed", dest="headless", action="store_false",
                          help="Show the browser window")
    run_parser.add_argument("--parallel", type=int, help="Scenarios run concurrently")
    run_parser.add_argument("--log-level", default="INFO",
                            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    run_parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    return parser


def _config_from_args(args) -> AuthFlowConfig:
    overrides = {}
    if args.base_url:
        overrides['base_url'] = args.base_url
    if args.browser:
        overrides['browser_type'] = args.browser
    if args.headless is not None:
        overrides['headless'] = args.headless
    if args.parallel is not None:
        overrides['max_parallel'] = args.parallel
    return AuthFlowConfig(**overrides)


def _list(args) -> int:
    for s in list_scenarios(tags=args.tags):
        tags = f" [{', '.join(s.tags)}]" if s.tags else ""
        print(f"{s.name:28s} {s.description}{tags}")
    return 0


def _run(args) -> int:
    try:
        config = _config_from_args(args)
        # Unknown scenario names are a usage error
        selected = list_scenarios(names=args.names, tags=args.tags)
    except (ValidationError, KeyError) as e:
        print(f"authflow: error: {e}", file=sys.stderr)
        return 2

    if not selected:
        print(f"authflow: error: no scenario matches tags {', '.join(args.tags or [])}", file=sys.stderr)
        return 2

    set_config(config)
    setup_logging(
        level=args.log_level,
        log_to_file=True,
        log_file=str(config.get_log_path())
    )
    config.log_config()

    report = asyncio.run(run_catalog(config, names=args.names, tags=args.tags))

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print(report.summary())

    return report.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the command and return the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "list":
        return _list(args)
    return _run(args)


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
weightdrift CLI -- benchmark weight drift detection and reconciliation.

Usage:
  weightdrift run [--config PATH] [--pallet NAME]... [--skip-build]
                  [--auto-commit] [--policy stop|reverify] [--no-stream]
  weightdrift check PALLET OUTPUT_FILE [--config PATH]
  weightdrift extract FILE FUNCTION
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from weightdrift.console import configure, console

logger = logging.getLogger("weightdrift")

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_MISMATCH = 2
EXIT_INTERRUPTED = 130

# ---------------------------------------------------------------------------
# CLI commands
# ---------------------------------------------------------------------------


def cmd_run(args: argparse.Namespace) -> int:
    """Build, benchmark every pallet, patch and publish."""
    from weightdrift.bench.runner import SubprocessBenchmarkRunner, build_runtime
    from weightdrift.config import load_config
    from weightdrift.domain.errors import ConfigurationError
    from weightdrift.domain.models import PalletStatus, PatchPolicy
    from weightdrift.git.ops import GitPublisher
    from weightdrift.scheduler.loop import Scheduler

    config = load_config(args.config)
    if args.auto_commit:
        config = replace(config, auto_commit=True)
    if args.policy:
        config = replace(config, patch_policy=PatchPolicy(args.policy))

    pallets = args.pallet or list(config.pallets)
    unknown = [p for p in pallets if p not in config.pallets]
    if unknown:
        raise ConfigurationError(f"pallet(s) not configured: {', '.join(unknown)}")

    console.kv(
        {
            "Pallets": " ".join(pallets),
            "Threshold": f"{config.threshold}%",
            "Max retries": str(config.max_retries),
            "Auto-commit": "on" if config.auto_commit else "off",
            "Patch policy": config.patch_policy.value,
        },
        title="weightdrift",
    )

    if config.build_command and not args.skip_build:
        console.info("Building runtime-benchmarks …")
        build_runtime(config.build_command, config.root)

    runner = SubprocessBenchmarkRunner(config.benchmark, config.root, echo=not args.no_stream)
    publisher = GitPublisher(config.root, config.git)
    report = Scheduler(config, runner, publisher).run(pallets)

    if any(o.status is PalletStatus.FAILED for o in report.outcomes):
        console.error("Some pallets failed re-verification after patching.")
        return EXIT_FATAL
    console.success("All pallets processed.")
    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    """Evaluate a captured benchmark output against a pallet's dispatch file."""
    from weightdrift.bench.parser import parse_lines
    from weightdrift.config import load_config, resolve_pallet
    from weightdrift.domain.errors import ConfigurationError
    from weightdrift.evaluator import evaluate_attempt
    from weightdrift.report import show_attempt

    config = load_config(args.config)
    pallet = resolve_pallet(config, args.pallet)
    if not args.output.is_file():
        raise ConfigurationError(f"benchmark output not found: {args.output}")

    source = pallet.dispatch_path.read_text(encoding="utf-8")
    with args.output.open(encoding="utf-8", errors="replace") as handle:
        result = evaluate_attempt(
            pallet.name, 1, parse_lines(handle), source, config.threshold
        )
    show_attempt(result)
    if result.passed:
        console.success(f"'{pallet.name}' within tolerance.")
        return EXIT_OK
    return EXIT_MISMATCH


def cmd_extract(args: argparse.Namespace) -> int:
    """Print the literal declared for a function."""
    from weightdrift.domain.errors import ConfigurationError
    from weightdrift.literals import extract_literal

    if not args.file.is_file():
        raise ConfigurationError(f"file not found: {args.file}")
    literal = extract_literal(args.file.read_text(encoding="utf-8"), args.function)
    console.kv(
        {
            "Weight": str(literal.weight),
            "Reads": str(literal.reads),
            "Writes": str(literal.writes),
        },
        title=args.function,
    )
    return EXIT_OK


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    from weightdrift.config import CONFIG_FILE

    parser = argparse.ArgumentParser(
        prog="weightdrift",
        description="weightdrift -- benchmark weight drift detection",
    )
    sub = parser.add_subparsers(dest="command")

    # weightdrift run
    run_p = sub.add_parser("run", help="Benchmark pallets and reconcile weights")
    run_p.add_argument("--config", type=Path, default=Path(CONFIG_FILE), help="Config file")
    run_p.add_argument(
        "--pallet", action="append", default=[], help="Only this pallet (repeatable)"
    )
    run_p.add_argument("--skip-build", action="store_true", help="Do not build the runtime")
    run_p.add_argument(
        "--auto-commit",
        action="store_true",
        help="Allow patch-and-commit regardless of AUTO_COMMIT_WEIGHTS",
    )
    run_p.add_argument(
        "--policy", choices=["stop", "reverify"], default=None, help="After-patch behaviour"
    )
    run_p.add_argument("--no-stream", action="store_true", help="Do not echo benchmark output")
    run_p.add_argument("--verbose", action="store_true", help="Enable debug logging")
    run_p.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    run_p.add_argument("--log-file", type=Path, default=None, help="Audit log location")

    # weightdrift check
    check_p = sub.add_parser("check", help="Evaluate a captured benchmark output")
    check_p.add_argument("pallet", help="Configured pallet name")
    check_p.add_argument("output", type=Path, help="File holding benchmark output")
    check_p.add_argument("--config", type=Path, default=Path(CONFIG_FILE), help="Config file")

    # weightdrift extract
    extract_p = sub.add_parser("extract", help="Show the weight declared for a function")
    extract_p.add_argument("file", type=Path, help="Dispatch source file")
    extract_p.add_argument("function", help="Function name")

    return parser


def _setup_logging(args: argparse.Namespace) -> None:
    """Configure the file-based audit log for ``run``."""
    from weightdrift.config import log_file

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    path: Path = args.log_file or log_file(args.config.resolve().parent)
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(path),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        level=level,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure(backend="auto")

    if args.command == "run":
        _setup_logging(args)

    commands = {"run": cmd_run, "check": cmd_check, "extract": cmd_extract}
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return EXIT_FATAL

    from weightdrift.domain.errors import (
        BenchmarkToolError,
        PublishFailure,
        RetriesExhausted,
        WeightDriftError,
    )

    try:
        return handler(args)
    except RetriesExhausted as exc:
        logger.error("%s", exc)
        console.error(str(exc))
        console.failure_list(exc.failures)
    except BenchmarkToolError as exc:
        logger.error("%s", exc)
        console.error(str(exc))
        if exc.output_tail:
            console.panel(exc.output_tail, title="last output", style="red")
    except PublishFailure as exc:
        logger.error("%s (branch=%s)", exc, exc.branch)
        console.error(str(exc))
        if exc.last_commit:
            console.panel(exc.last_commit, title="last commit", style="red")
    except WeightDriftError as exc:
        logger.error("%s", exc)
        console.error(str(exc))
    except KeyboardInterrupt:
        console.warning("Interrupted.")
        return EXIT_INTERRUPTED
    return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())

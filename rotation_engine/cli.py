"""
rotation-engine CLI

Usage:
    # Generate the next rotation from the settings file and append it to history
    python -m rotation_engine generate --config config/rotation.yaml

    # Preview without touching history, ignoring the cadence
    python -m rotation_engine generate --dry-run --force --seed 7

    # Show registered strategies and validators
    python -m rotation_engine list
"""
from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

import yaml
from pydantic import ValidationError

from .config import load_settings
from .engine import default_engine
from .models import AssignmentRequest
from .scheduler import format_assignment, run_assignment
from .sources import CsvHistorySink, CsvSource

EXIT_OK = 0
EXIT_BAD_INPUT = 2
EXIT_EXHAUSTED = 3


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_list(args) -> int:
    engine = default_engine()
    print("strategies:")
    for name in engine.list_strategies():
        print(f"  {name:<20} {engine.strategies[name].description}")
    print("validators:")
    for name in engine.list_validators():
        print(f"  {name}")
    return EXIT_OK


def cmd_generate(args) -> int:
    try:
        settings = load_settings(args.config)
        config = settings.strategy_config(seed=args.seed, max_attempts=args.max_attempts)
    except (OSError, ValueError, ValidationError, yaml.YAMLError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_BAD_INPUT

    participants_csv = args.participants or settings.participants_csv
    history_csv = args.history or settings.history_csv
    if not participants_csv:
        print("Error: no participants CSV configured (use --participants)", file=sys.stderr)
        return EXIT_BAD_INPUT

    source = CsvSource(participants_csv, args.targets or settings.targets, history_csv)
    sink = None if args.dry_run or not history_csv else CsvHistorySink(history_csv)
    request = AssignmentRequest(
        strategy=args.strategy or settings.default_strategy,
        config=config,
        force=args.force,
    )

    try:
        result = run_assignment(source, sink, request, interval_days=settings.interval_days())
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_BAD_INPUT
    if result.skipped:
        print("Not due yet; use --force to run anyway.")
        return EXIT_OK
    if not result.ok:
        print(f"Error ({result.error_kind}): {result.error}", file=sys.stderr)
        return EXIT_EXHAUSTED if result.error_kind == "no_valid_assignment" else EXIT_BAD_INPUT

    participants = source.list_active_participants()
    targets = source.list_active_targets()
    for line in format_assignment(result.assignment, participants, targets):
        print(line)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rotation-engine", description="Fair recurring task assignment")
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate the next assignment")
    gen.add_argument("--config", default=None, help="Settings YAML (default: $ROTATION_ENGINE_CONFIG)")
    gen.add_argument("--strategy", default=None)
    gen.add_argument("--participants", default=None, help="Participants CSV")
    gen.add_argument("--targets", default=None, help="Targets CSV (overrides settings targets)")
    gen.add_argument("--history", default=None, help="History CSV")
    gen.add_argument("--seed", type=int, default=None)
    gen.add_argument("--max-attempts", type=int, default=None)
    gen.add_argument("--force", action="store_true", help="Ignore the assignment interval")
    gen.add_argument("--dry-run", action="store_true", help="Do not append to history")
    gen.set_defaults(func=cmd_generate)

    ls = sub.add_parser("list", help="List strategies and validators")
    ls.set_defaults(func=cmd_list)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return args.func(args)

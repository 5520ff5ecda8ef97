"""Rill CLI entry points.
This module exposes demo commands for list and file pipelines.
It maps argparse commands onto pipeline runner calls.
"""

from __future__ import annotations

import argparse
import math
import sys
from dataclasses import replace
from typing import Any, Sequence

from core.config import RillConfig, parse_log_level, parse_produce_timeout
from core.constants import DEFAULT_DEMO_ITEMS, SUPPORTED_LOG_LEVELS
from core.errors import RillError
from core.logging_config import configure_logging
from core.types import PipelineResult
from pipeline.runner import run_file_pipeline, run_items_pipeline


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="rill", description="Rill streaming pipeline demo")
    parser.add_argument(
        "--log-level",
        choices=SUPPORTED_LOG_LEVELS,
        type=str.upper,
        help="Override RILL_LOG_LEVEL for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_run_command(subparsers)
    _add_stream_file_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Rill CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args)
    except RillError as error:
        print(f"Invalid configuration: {error}", file=sys.stderr)
        return 2
    configure_logging(config.log_level)
    if args.command == "run":
        return _report(run_items_pipeline(args.items or DEFAULT_DEMO_ITEMS, config))
    if args.command == "stream-file":
        return _report(run_file_pipeline(args.path, config))
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(args: argparse.Namespace) -> RillConfig:
    """Build config from environment and apply CLI overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Effective runtime config.
    """
    config = RillConfig.from_env()
    if args.log_level:
        config = replace(config, log_level=parse_log_level(args.log_level))
    if args.delay is not None:
        config = replace(config, item_delay_seconds=args.delay)
    if args.timeout is not None:
        config = replace(config, produce_timeout_seconds=parse_produce_timeout(args.timeout))
    chunk_size = getattr(args, "chunk_size", None)
    if chunk_size is not None:
        config = replace(config, chunk_size=chunk_size)
    return config


def _report(result: PipelineResult) -> int:
    """Print the terminal pipeline message.

    Args:
        result: Finished pipeline result.

    Returns:
        Exit code.
    """
    if result.succeeded:
        print("Pipeline finished successfully.")
        return 0
    print(f"Pipeline failed at {result.failed_stage} stage: {result.error}", file=sys.stderr)
    return 1


def _non_negative_float(raw_value: str) -> float:
    value = float(raw_value)
    if not math.isfinite(value) or value < 0:
        raise argparse.ArgumentTypeError(f"expected a finite value >= 0, got {raw_value}")
    return value


def _positive_int(raw_value: str) -> int:
    value = int(raw_value)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a value > 0, got {raw_value}")
    return value


def _add_timing_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--delay",
        type=_non_negative_float,
        help="Seconds of simulated latency before each record",
    )
    parser.add_argument(
        "--timeout",
        help="Seconds allowed for each produce call, or 'none' to disable",
    )


def _add_run_command(subparsers: Any) -> None:
    """Register run subcommand."""
    parser = subparsers.add_parser("run", help="Uppercase a list of items")
    parser.add_argument("items", nargs="*", help="Items to stream (default: a b c d e)")
    _add_timing_arguments(parser)


def _add_stream_file_command(subparsers: Any) -> None:
    """Register stream-file subcommand."""
    parser = subparsers.add_parser("stream-file", help="Uppercase a text file chunk by chunk")
    parser.add_argument("path", help="UTF-8 text file to stream")
    parser.add_argument("--chunk-size", type=_positive_int, help="Characters per record")
    _add_timing_arguments(parser)

"""Command-line interface for the traffic logger."""

from __future__ import annotations

import argparse
import logging
import sys

from .config import CollectorConfig, parse_duration
from .errors import ConfigurationError, TrafficLoggerError


def build_parser() -> argparse.ArgumentParser:
    """Build the parser.

    ``log`` is an optional positional rather than a subcommand so that
    flags bind to the same options whether they appear before or after it.
    """
    parser = argparse.ArgumentParser(
        prog="traffic-logger",
        description="Network interface traffic logger",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=["log"],
        help="Optional alias: log network interface traffic to a file",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=str,
        default="1s",
        help="Polling interval, e.g. 10ms, 1s, 1m30s (default: 1s)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default="",
        help="Output file path (default: {timestamp}.csv)",
    )
    parser.add_argument(
        "-f",
        "--iface",
        action="append",
        default=[],
        help="Network interface to skip; repeat for several (default: none)",
    )
    parser.add_argument(
        "-s",
        "--silent",
        action="store_true",
        help="Silent mode: do not print samples to the console",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> tuple[CollectorConfig, bool]:
    """Parse command-line arguments.

    Returns:
        The run configuration and whether debug logging was requested.

    Raises:
        ConfigurationError: If the interval or output path is invalid.
    """
    args = build_parser().parse_args(argv)

    config = CollectorConfig.build(
        interval=parse_duration(args.interval),
        output_path=args.output or None,
        excluded_interfaces=args.iface,
        quiet=args.silent,
    )
    return config, args.verbose


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)-5s] - %(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


def main(argv: list[str] | None = None) -> None:
    """Entry point for the traffic logger CLI."""
    try:
        config, debug = parse_args(argv)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(debug=debug)

    # Import here so --help works without touching signals or sysfs
    from .collector import run_collector

    try:
        run_collector(config)
    except TrafficLoggerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)

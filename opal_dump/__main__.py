"""Entry point for extracting OPAL platform dumps."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn

from pydantic import ValidationError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="opal-dump-extract",
        description="Extract platform dumps from sysfs and save them to the filesystem",
    )
    parser.add_argument(
        "--version",
        "-V",
        action="store_true",
        help="Show version and exit",
    )
    parser.add_argument(
        "-A",
        "--no-ack",
        dest="ack_dumps",
        action="store_false",
        default=None,
        help="Don't acknowledge dumps",
    )
    parser.add_argument(
        "-s",
        "--sysfs",
        dest="sysfs_path",
        metavar="DIR",
        default=None,
        help="sysfs directory (default /sys)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        dest="output_dir",
        metavar="DIR",
        default=None,
        help="Directory to save dumps (default /var/log/dump)",
    )
    parser.add_argument(
        "-m",
        "--max-dumps",
        dest="max_dumps",
        metavar="MAX",
        type=int,
        default=None,
        help="Maximum number of dumps of a specific type to be saved (default 4)",
    )
    parser.add_argument(
        "-w",
        "--wait",
        dest="wait",
        action="store_true",
        default=None,
        help="Wait for new dumps after draining",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--json-logs",
        dest="json_logs",
        action="store_true",
        default=None,
        help="Emit console logs as JSON lines",
    )
    parser.add_argument(
        "--no-syslog",
        dest="syslog",
        action="store_false",
        default=None,
        help="Do not send logs to the system log",
    )
    return parser


def run_extract(args: argparse.Namespace) -> int:
    """Drain pending dumps, optionally waiting for more.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    from opal_dump.config import load_settings
    from opal_dump.core.errors import OpalDumpError
    from opal_dump.core.logging import configure_logging
    from opal_dump.services.extractor import DumpExtractor

    # Provisional logging so configuration problems are reported
    configure_logging(level="DEBUG" if args.verbose else "NOTICE", syslog=args.syslog is not False)

    try:
        settings = load_settings(
            sysfs_path=args.sysfs_path,
            output_dir=args.output_dir,
            max_dumps=args.max_dumps,
            ack_dumps=args.ack_dumps,
            wait=args.wait,
            log_level="DEBUG" if args.verbose else None,
            json_logs=args.json_logs,
            syslog=args.syslog,
        )
    except ValidationError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    configure_logging(
        level=settings.log_level,
        json_format=settings.json_logs,
        syslog=settings.syslog,
    )

    extractor = DumpExtractor(settings)
    try:
        extractor.prepare()
        summary = extractor.run()
    except OpalDumpError as e:
        logger.error("%s", e)
        return 1

    return summary.exit_code


def main() -> NoReturn:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if args.version:
        from opal_dump import __version__

        print(f"opal-dump-extract {__version__}")
        sys.exit(0)

    try:
        sys.exit(run_extract(args))
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Command-line entry for rss2ical."""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from . import run_server


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the rss2ical CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="rss2ical",
        description="RSS2ICal - serve RSS feeds as iCalendar subscriptions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m rss2ical                          # Start server on default port (8080)
  python -m rss2ical --port 3000              # Start server on port 3000
  python -m rss2ical --config rss2ical.yaml   # Load settings from a YAML file
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number for the web server (default: 8080, or from PORT / RSS2ICAL_WEB_PORT env var)",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Optional YAML configuration file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def main(argv: list[str] | None = None) -> NoReturn:
    """Run the rss2ical CLI."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    try:
        run_server(args)
    except OSError as exc:
        print(f"rss2ical: failed to start server: {exc}", file=sys.stderr)
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()

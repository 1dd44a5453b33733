"""pyports command line entry point."""

import argparse
import logging
import sys
from collections.abc import Sequence
from importlib.metadata import PackageNotFoundError, version

from rich.console import Console

from pyports.filters import exclude_ports, filter_ports
from pyports.models import ScanConfig
from pyports.render import render_ports
from pyports.scanner import PortScanner, ScanError
from pyports.sysview import SystemView

logger = logging.getLogger(__name__)


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from None
    if not 0 <= port <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def _version() -> str:
    try:
        return version("pyports")
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pyports",
        description="Shows open ports with process information",
    )
    parser.add_argument(
        "-l", "--localhost", action="store_true", help="Show only localhost ports"
    )
    parser.add_argument(
        "-a", "--all", action="store_true", help="Show all ports (including non-localhost)"
    )
    parser.add_argument(
        "-p", "--port", type=_port, metavar="PORT", help="Check specific port"
    )
    parser.add_argument(
        "-d",
        "--detailed",
        action="store_true",
        help="Show detailed output with full paths and commands",
    )
    parser.add_argument(
        "-c", "--compact", action="store_true", help="Show compact table format"
    )
    parser.add_argument(
        "-f",
        "--filter",
        metavar="TEXT",
        help="Filter results by text (searches in process name, command, and working directory)",
    )
    parser.add_argument(
        "-x",
        "--exclude",
        metavar="TEXT",
        help="Exclude results containing text (searches in process name, command, and working directory)",
    )
    parser.add_argument(
        "--tui", action="store_true", help="Browse the results in an interactive viewer"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log diagnostics to stderr"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    return parser


def config_from_args(args: argparse.Namespace) -> ScanConfig:
    """Scan scope from parsed arguments. Localhost only unless --all is given."""
    return ScanConfig(
        localhost_only=args.localhost or not args.all,
        specific_port=args.port,
    )


def main(
    argv: Sequence[str] | None = None,
    view: SystemView | None = None,
    console: Console | None = None,
) -> int:
    """Entry point for pyports. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    scanner = PortScanner(view, config_from_args(args))
    logger.debug("scanning with %s", scanner.config)

    if args.tui:
        from pyports.app import PortsApp

        PortsApp(scanner, include=args.filter, exclude=args.exclude).run()
        return 0

    try:
        ports = scanner.scan()
    except ScanError as exc:
        print(f"pyports: {exc}", file=sys.stderr)
        return 1

    if args.filter:
        ports = filter_ports(ports, args.filter)
    if args.exclude:
        ports = exclude_ports(ports, args.exclude)

    render_ports(ports, console, detailed=args.detailed, compact=args.compact)
    return 0


if __name__ == "__main__":
    sys.exit(main())

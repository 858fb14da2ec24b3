"""
tfgrafana command line entry point.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from tfgrafana.cli.read import handle_read_command, register_read_parser
from tfgrafana.cli.schema import handle_schema_command, register_schema_parser
from tfgrafana.cli.tfgen import handle_generate_command, handle_tfgen_command, register_tfgen_parser
from tfgrafana.core.errors import main_with_error_handling
from tfgrafana.logging import configure_logging
from tfgrafana.version import VERSION

HANDLERS = {
    "schema": handle_schema_command,
    "read": handle_read_command,
    "tfgen": handle_tfgen_command,
    "generate": handle_generate_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tfgrafana", description="Grafana provider toolkit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-json", action="store_true", help="Render logs as JSON")

    subparsers = parser.add_subparsers(dest="command", required=True)
    register_schema_parser(subparsers)
    register_read_parser(subparsers)
    register_tfgen_parser(subparsers)
    return parser


@main_with_error_handling()
def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING, json=args.log_json)
    return HANDLERS[args.command](args)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()

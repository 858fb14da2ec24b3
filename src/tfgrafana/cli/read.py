"""
Read command: configure the provider and read one data source.

Example:
    tfgrafana read grafana_dashboards --set tags='["prod"]' --config provider.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any

import structlog

from tfgrafana.cli.ux import print_diagnostics, print_json, success
from tfgrafana.config.loader import load_provider_config
from tfgrafana.core.errors import ProviderError, ValidationError
from tfgrafana.framework.lifecycle import read_data_source
from tfgrafana.provider.provider import GrafanaProvider
from tfgrafana.provider.registry import data_source_registry

logger = structlog.get_logger()


def split_assignments(assignments: list[str]) -> dict[str, str]:
    """Split ``name=value`` pairs without interpreting the values."""
    values: dict[str, str] = {}
    for assignment in assignments:
        name, sep, raw = assignment.partition("=")
        if not sep or not name:
            raise ValidationError(f"Expected name=value, got {assignment!r}")
        values[name] = raw
    return values


def parse_assignments(assignments: list[str]) -> dict[str, Any]:
    """Parse ``name=value`` pairs; values are decoded as JSON when possible."""
    values: dict[str, Any] = {}
    for name, raw in split_assignments(assignments).items():
        try:
            values[name] = json.loads(raw)
        except ValueError:
            values[name] = raw
    return values


async def _read(provider: GrafanaProvider, type_name: str, config: dict[str, Any]) -> dict[str, Any]:
    data_source, diags = provider.data_source(type_name)
    print_diagnostics(diags)
    if diags.has_error():
        raise ProviderError(f"Cannot configure {type_name}")

    resp = await read_data_source(data_source, config)
    print_diagnostics(resp.diagnostics)
    if resp.diagnostics.has_error():
        raise ProviderError(f"Failed to read {type_name}", {"errors": len(resp.diagnostics.errors)})
    return resp.state.raw or {}


def read_command(type_name: str, assignments: list[str] | None = None, config_path: str | None = None) -> int:
    if type_name not in data_source_registry:
        raise ValidationError(f"Unknown data source type: {type_name}", {"type": type_name})

    provider = GrafanaProvider()
    diags = provider.configure_with(load_provider_config(config_path))
    print_diagnostics(diags)
    if diags.has_error():
        raise ProviderError("Provider configuration failed")

    state = asyncio.run(_read(provider, type_name, parse_assignments(assignments or [])))
    print_json(state)
    success(f"Read {type_name}")
    return 0


def register_read_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register read subcommand parser."""
    parser = subparsers.add_parser("read", help="Read a data source and print its state as JSON")
    parser.add_argument("type_name", help="Data source type, e.g. grafana_dashboards")
    parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Set a data source argument (value parsed as JSON when possible); repeatable",
    )
    parser.add_argument("--config", dest="config_path", help="Provider configuration YAML file")


def handle_read_command(args: argparse.Namespace) -> int:
    return read_command(args.type_name, args.assignments, args.config_path)

"""
Schema command: dump provider, resource and data source schemas as JSON.
"""

from __future__ import annotations

import argparse
from typing import Any

from tfgrafana.cli.ux import print_json
from tfgrafana.core.errors import ValidationError
from tfgrafana.framework.schema import DescriptionConfig
from tfgrafana.provider.provider import provider_schema
from tfgrafana.provider.registry import data_source_registry, resource_registry


def schema_document(type_name: str | None = None, descriptions: DescriptionConfig | None = None) -> dict[str, Any]:
    """Build the schema document for every type, or for ``type_name`` only."""
    descriptions = descriptions or DescriptionConfig()

    if type_name is not None:
        if type_name in resource_registry:
            return resource_registry.create(type_name).schema().to_dict(descriptions)
        if type_name in data_source_registry:
            return data_source_registry.create(type_name).schema().to_dict(descriptions)
        raise ValidationError(f"Unknown resource or data source type: {type_name}", {"type": type_name})

    return {
        "provider": provider_schema().to_dict(descriptions),
        "resource_schemas": {
            spec.name: spec.factory().schema().to_dict(descriptions) for spec in resource_registry.list()
        },
        "data_source_schemas": {
            spec.name: spec.factory().schema().to_dict(descriptions) for spec in data_source_registry.list()
        },
    }


def schema_command(type_name: str | None = None, markdown: bool = True) -> int:
    print_json(schema_document(type_name, DescriptionConfig(markdown=markdown)))
    return 0


def register_schema_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register schema subcommand parser."""
    parser = subparsers.add_parser("schema", help="Print provider, resource and data source schemas as JSON")
    parser.add_argument("type_name", nargs="?", help="Only print the schema of this resource or data source type")
    parser.add_argument(
        "--plain",
        dest="markdown",
        action="store_false",
        help="Render descriptions without markdown",
    )


def handle_schema_command(args: argparse.Namespace) -> int:
    return schema_command(type_name=args.type_name, markdown=args.markdown)

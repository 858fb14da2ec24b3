"""
CLI commands for tfgrafana.
"""

from tfgrafana.cli.main import build_parser, main
from tfgrafana.cli.read import read_command
from tfgrafana.cli.schema import schema_command
from tfgrafana.cli.tfgen import abstract_dashboards_command, postprocess_command, strip_defaults_command

__all__ = [
    "abstract_dashboards_command",
    "build_parser",
    "main",
    "postprocess_command",
    "read_command",
    "schema_command",
]

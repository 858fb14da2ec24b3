"""
tfgen and generate commands: post-process generated Terraform files.
"""

from __future__ import annotations

import argparse

from tfgrafana.cli.read import split_assignments
from tfgrafana.cli.ux import info, success
from tfgrafana.tfgen.config import GenerateConfig, OutputFormat
from tfgrafana.tfgen.postprocess import abstract_dashboards, postprocess, strip_defaults


def strip_defaults_command(path: str, extra: list[str] | None = None) -> int:
    # Expressions are matched as written, so values are not JSON-decoded.
    if strip_defaults(path, split_assignments(extra or [])):
        success(f"Stripped defaults from {path}")
    else:
        info(f"No changes to {path}")
    return 0


def abstract_dashboards_command(path: str) -> int:
    if abstract_dashboards(path):
        success(f"Moved dashboard JSON out of {path}")
    else:
        info(f"No changes to {path}")
    return 0


def postprocess_command(output_dir: str, include: list[str] | None = None, output_format: str = "hcl") -> int:
    config = GenerateConfig(
        output_dir=output_dir,
        include_resources=include or [],
        format=OutputFormat(output_format),
    )
    changed = postprocess(config)
    success(f"Post-processed {output_dir} ({len(changed)} file(s) changed)")
    return 0


def register_tfgen_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register tfgen and generate subcommand parsers."""
    tfgen_parser = subparsers.add_parser("tfgen", help="Rewrite a generated Terraform file")
    tfgen_subparsers = tfgen_parser.add_subparsers(dest="tfgen_command", required=True)

    strip_parser = tfgen_subparsers.add_parser(
        "strip-defaults", help="Remove null, empty and default-valued attributes"
    )
    strip_parser.add_argument("path", help="Terraform file to rewrite")
    strip_parser.add_argument(
        "--extra",
        action="append",
        default=[],
        metavar="NAME=EXPR",
        help='Also remove attribute NAME when its expression is EXPR, e.g. --extra \'org_id="1"\'; repeatable',
    )

    abstract_parser = tfgen_subparsers.add_parser(
        "abstract-dashboards", help="Move inline dashboard JSON into files/<name>.json"
    )
    abstract_parser.add_argument("path", help="Terraform file to rewrite")

    generate_parser = subparsers.add_parser("generate", help="Generated configuration helpers")
    generate_subparsers = generate_parser.add_subparsers(dest="generate_command", required=True)
    post_parser = generate_subparsers.add_parser("postprocess", help="Run every rewriting pass over a directory")
    post_parser.add_argument("--output-dir", required=True, help="Directory holding the generated .tf files")
    post_parser.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Keep only resources matching type.name PATTERN (* wildcard); repeatable",
    )
    post_parser.add_argument(
        "--format",
        dest="output_format",
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.HCL.value,
        help="Format of the generated files (default: hcl)",
    )


def handle_tfgen_command(args: argparse.Namespace) -> int:
    if args.tfgen_command == "strip-defaults":
        return strip_defaults_command(args.path, args.extra)
    return abstract_dashboards_command(args.path)


def handle_generate_command(args: argparse.Namespace) -> int:
    return postprocess_command(args.output_dir, args.include, args.output_format)

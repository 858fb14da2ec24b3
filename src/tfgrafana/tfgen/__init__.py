"""Rewriting passes for generated Terraform configuration."""

from tfgrafana.tfgen.config import CloudConfig, GenerateConfig, GrafanaConfig, OutputFormat
from tfgrafana.tfgen.hcl import HCLParseError, parse
from tfgrafana.tfgen.postprocess import abstract_dashboards, filter_resources, postprocess, strip_defaults

__all__ = [
    "CloudConfig",
    "GenerateConfig",
    "GrafanaConfig",
    "HCLParseError",
    "OutputFormat",
    "abstract_dashboards",
    "filter_resources",
    "parse",
    "postprocess",
    "strip_defaults",
]

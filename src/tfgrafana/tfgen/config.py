from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class OutputFormat(StrEnum):
    JSON = "json"
    HCL = "hcl"
    CROSSPLANE = "crossplane"


class GrafanaConfig(BaseModel):
    url: str = ""
    auth: str = ""
    sm_url: str = ""
    sm_access_token: str = ""
    oncall_url: str = ""
    oncall_token: str = ""


class CloudConfig(BaseModel):
    access_policy_token: str = ""
    org: str = ""
    create_stack_service_account: bool = False
    stack_service_account_name: str = ""


PASS_THROUGH = "Generator setting carried for the caller that produced the files; postprocessing does not read it."


class GenerateConfig(BaseModel):
    """Settings for post-processing generated Terraform files.

    Only ``output_dir``, ``include_resources`` and ``format`` drive the
    passes. The other fields describe how the files were generated and are
    kept so one config object can travel from generation to postprocessing.
    """

    output_dir: str
    # Patterns of the form `resourceType.resourceName`; `*` is a wildcard.
    include_resources: list[str] = Field(default_factory=list)
    format: OutputFormat = OutputFormat.HCL
    clobber: bool = Field(default=False, description=PASS_THROUGH)
    provider_version: str = Field(default="", description=PASS_THROUGH)
    grafana: GrafanaConfig | None = Field(default=None, description=PASS_THROUGH)
    cloud: CloudConfig | None = Field(default=None, description=PASS_THROUGH)

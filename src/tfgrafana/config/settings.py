"""
Provider settings using Pydantic.

Every field can be set explicitly or through a ``GRAFANA_``-prefixed
environment variable (``GRAFANA_URL``, ``GRAFANA_AUTH``, ``GRAFANA_SM_URL``,
...). Explicit values win over the environment.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

import structlog
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from tfgrafana.clients.base import DEFAULT_RETRY_STATUS_CODES
from tfgrafana.clients.cloud import DEFAULT_CLOUD_API_URL
from tfgrafana.clients.oncall import DEFAULT_ONCALL_URL
from tfgrafana.clients.syntheticmonitoring import DEFAULT_SM_URL
from tfgrafana.framework.validators import URLWithHTTPOrHTTPS

logger = structlog.get_logger()

ANONYMOUS_AUTH = "anonymous"

_URL_FIELDS = (
    "url",
    "cloud_api_url",
    "cloud_provider_url",
    "connections_api_url",
    "sm_url",
    "oncall_url",
)


class ProviderConfig(BaseSettings):
    """Provider configuration."""

    # Grafana
    url: str | None = None
    auth: str | None = None
    http_headers: dict[str, str] = {}
    org_id: int | None = None

    # HTTP client behaviour
    retries: int = 3
    retry_status_codes: Annotated[list[str], NoDecode] = list(DEFAULT_RETRY_STATUS_CODES)
    retry_wait: int = 0

    # TLS (file path or literal PEM)
    tls_key: str | None = None
    tls_cert: str | None = None
    ca_cert: str | None = None
    insecure_skip_verify: bool = False

    # Grafana Cloud
    cloud_access_policy_token: str | None = None
    cloud_api_key: str | None = None
    cloud_api_url: str = DEFAULT_CLOUD_API_URL

    # Cloud Provider / Connections APIs
    cloud_provider_url: str | None = None
    cloud_provider_access_token: str | None = None
    connections_api_url: str | None = None
    connections_api_access_token: str | None = None

    # Synthetic Monitoring
    sm_access_token: str | None = None
    sm_url: str = DEFAULT_SM_URL

    # OnCall
    oncall_access_token: str | None = None
    oncall_url: str = DEFAULT_ONCALL_URL

    # Pass-through: accepted from the provider block and environment, read by no resource.
    store_dashboard_sha256: bool = False

    model_config = SettingsConfigDict(
        env_prefix="GRAFANA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("retry_status_codes", mode="before")
    @classmethod
    def _split_status_codes(cls, value: Any) -> Any:
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                return json.loads(text)
            return [code.strip() for code in text.split(",") if code.strip()]
        return value

    @field_validator(*_URL_FIELDS)
    @classmethod
    def _check_url(cls, value: str | None, info: Any) -> str | None:
        diags = URLWithHTTPOrHTTPS().validate(info.field_name, value)
        if diags.has_error():
            raise ValueError(diags.errors[0].detail)
        return value

    @model_validator(mode="after")
    def _apply_defaults(self) -> ProviderConfig:
        if self.cloud_api_key:
            if self.cloud_access_policy_token:
                raise ValueError('"cloud_access_policy_token": conflicts with cloud_api_key')
            logger.warning("deprecated_provider_setting", setting="cloud_api_key", replacement="cloud_access_policy_token")
            self.cloud_access_policy_token = self.cloud_api_key
        if self.org_id is not None and self.org_id > 1 and self.auth and self.auth_kind == "token":
            raise ValueError("org_id is only supported with basic auth. API keys are already org-scoped")
        return self

    @property
    def auth_kind(self) -> str:
        """One of ``anonymous``, ``basic`` or ``token``."""
        if not self.auth or self.auth == ANONYMOUS_AUTH:
            return "anonymous"
        if ":" in self.auth:
            return "basic"
        return "token"

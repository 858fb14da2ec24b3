"""
The Grafana provider: provider-level schema, configuration and the registry
of resource and data source types it serves.
"""

from __future__ import annotations

import ssl
from typing import Any

import structlog

from tfgrafana.config.loader import build_provider_config
from tfgrafana.config.settings import ProviderConfig
from tfgrafana.core.errors import ConfigurationError
from tfgrafana.framework.diagnostics import Diagnostics
from tfgrafana.framework.resource import DataSource, Resource
from tfgrafana.framework.schema import (
    BoolAttribute,
    Int64Attribute,
    ListAttribute,
    MapAttribute,
    Schema,
    StringAttribute,
)
from tfgrafana.framework.validators import url_with_http_or_https
from tfgrafana.provider.clients import Clients, create_clients
from tfgrafana.provider.registry import data_source_registry, resource_registry
from tfgrafana.version import VERSION

logger = structlog.get_logger()


def _env(name: str) -> str:
    return f" May alternatively be set via the `GRAFANA_{name.upper()}` environment variable."


def provider_schema() -> Schema:
    url = (url_with_http_or_https(),)
    return Schema(
        description="Provider for Grafana, Grafana Cloud and their companion APIs.",
        attributes={
            "url": StringAttribute(
                optional=True, validators=url, description="The root URL of a Grafana server." + _env("url")
            ),
            "auth": StringAttribute(
                optional=True,
                sensitive=True,
                description=(
                    "API token, basic auth in the `username:password` format or `anonymous` (string literal)."
                    + _env("auth")
                ),
            ),
            "http_headers": MapAttribute(
                optional=True,
                sensitive=True,
                description="Optional. HTTP headers mapping keys to values used for accessing the Grafana and Grafana Cloud APIs."
                + _env("http_headers"),
            ),
            "retries": Int64Attribute(
                optional=True,
                description="The amount of retries to use for Grafana API and Grafana Cloud API calls. Defaults to 3."
                + _env("retries"),
            ),
            "retry_status_codes": ListAttribute(
                optional=True,
                description=(
                    "The status codes to retry on for Grafana API and Grafana Cloud API calls. Use `x` as a digit "
                    'wildcard. Defaults to 429 and 5xx.' + _env("retry_status_codes")
                ),
            ),
            "retry_wait": Int64Attribute(
                optional=True,
                description="The amount of time in seconds to wait between retries for Grafana API and Grafana Cloud API calls."
                + _env("retry_wait"),
            ),
            "org_id": Int64Attribute(
                optional=True,
                deprecated="Use the `org_id` attributes on resources instead.",
                description="The Grafana org ID, if you are using a self-hosted OSS or enterprise Grafana instance."
                + _env("org_id"),
            ),
            "tls_key": StringAttribute(
                optional=True,
                description="Client TLS key (file path or literal value) to use to authenticate to the Grafana server."
                + _env("tls_key"),
            ),
            "tls_cert": StringAttribute(
                optional=True,
                description="Client TLS certificate (file path or literal value) to use to authenticate to the Grafana server."
                + _env("tls_cert"),
            ),
            "ca_cert": StringAttribute(
                optional=True,
                description="Certificate CA bundle (file path or literal value) to use to verify the Grafana server's certificate."
                + _env("ca_cert"),
            ),
            "insecure_skip_verify": BoolAttribute(
                optional=True, description="Skip TLS certificate verification." + _env("insecure_skip_verify")
            ),
            "cloud_access_policy_token": StringAttribute(
                optional=True,
                sensitive=True,
                conflicts_with=("cloud_api_key",),
                description="Access Policy Token for Grafana Cloud." + _env("cloud_access_policy_token"),
            ),
            "cloud_api_key": StringAttribute(
                optional=True,
                sensitive=True,
                deprecated="Use `cloud_access_policy_token` instead.",
                description="Deprecated: Use `cloud_access_policy_token` instead." + _env("cloud_api_key"),
            ),
            "cloud_api_url": StringAttribute(
                optional=True,
                validators=url,
                description="Grafana Cloud's API URL." + _env("cloud_api_url"),
            ),
            "cloud_provider_url": StringAttribute(
                optional=True,
                validators=url,
                description="A Grafana Cloud Provider backend address." + _env("cloud_provider_url"),
            ),
            "cloud_provider_access_token": StringAttribute(
                optional=True,
                sensitive=True,
                description="A Grafana Cloud Provider access token." + _env("cloud_provider_access_token"),
            ),
            "connections_api_url": StringAttribute(
                optional=True,
                validators=url,
                description="A Grafana Connections API address." + _env("connections_api_url"),
            ),
            "connections_api_access_token": StringAttribute(
                optional=True,
                sensitive=True,
                description="A Grafana Connections API access token." + _env("connections_api_access_token"),
            ),
            "sm_access_token": StringAttribute(
                optional=True,
                sensitive=True,
                description="A Synthetic Monitoring access token." + _env("sm_access_token"),
            ),
            "sm_url": StringAttribute(
                optional=True,
                validators=url,
                description="Synthetic monitoring backend address." + _env("sm_url"),
            ),
            "oncall_access_token": StringAttribute(
                optional=True,
                sensitive=True,
                description="A Grafana OnCall access token." + _env("oncall_access_token"),
            ),
            "oncall_url": StringAttribute(
                optional=True,
                validators=url,
                description="An Grafana OnCall backend address." + _env("oncall_url"),
            ),
            "store_dashboard_sha256": BoolAttribute(
                optional=True,
                description="Set to true if you want to save only the sha256sum instead of complete dashboard model JSON."
                + _env("store_dashboard_sha256"),
            ),
        },
    )


class GrafanaProvider:
    """Holds the configured clients and hands out configured resources."""

    type_name = "grafana"

    def __init__(self, version: str = VERSION) -> None:
        self.version = version
        self.config: ProviderConfig | None = None
        self.clients: Clients | None = None

    def schema(self) -> Schema:
        return provider_schema()

    @property
    def configured(self) -> bool:
        return self.clients is not None

    def configure(self, values: dict[str, Any] | None = None) -> Diagnostics:
        """Validate provider settings, merge the environment and build clients."""
        values = dict(values or {})
        diags = self.schema().validate(values)
        if diags.has_error():
            return diags

        try:
            cfg = build_provider_config(values)
        except ConfigurationError as exc:
            diags.add_error(exc.message, str(exc.details.get("detail", "")))
            return diags

        if cfg.cloud_api_key:
            diags.add_warning(
                "Deprecated attribute",
                "cloud_api_key is deprecated, use cloud_access_policy_token instead",
                path="cloud_api_key",
            )
        diags.extend(self.configure_with(cfg))
        return diags

    def configure_with(self, config: ProviderConfig) -> Diagnostics:
        """Configure from an already-built ``ProviderConfig``."""
        diags = Diagnostics()
        try:
            self.clients = create_clients(config)
        except ConfigurationError as exc:
            diags.add_error(exc.message)
            return diags
        except (ssl.SSLError, OSError) as exc:
            diags.add_exception("Failed to load TLS configuration", exc)
            return diags
        self.config = config
        logger.info("provider_configured", version=self.version, clients=self.clients.configured())
        return diags

    def resources(self) -> dict[str, type[Resource]]:
        return {spec.name: spec.factory for spec in resource_registry.list()}  # type: ignore[misc]

    def data_sources(self) -> dict[str, type[DataSource]]:
        return {spec.name: spec.factory for spec in data_source_registry.list()}  # type: ignore[misc]

    def resource(self, name: str) -> tuple[Resource, Diagnostics]:
        """Create resource ``name`` bound to this provider's clients."""
        resource = resource_registry.create(name)
        return resource, self._bind(resource)

    def data_source(self, name: str) -> tuple[DataSource, Diagnostics]:
        data_source = data_source_registry.create(name)
        return data_source, self._bind(data_source)

    def _bind(self, target: Resource | DataSource) -> Diagnostics:
        if self.clients is None:
            return Diagnostics.from_error(
                "Unconfigured provider",
                "The provider must be configured before resources or data sources are used.",
            )
        return target.configure(self.clients)

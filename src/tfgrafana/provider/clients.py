"""
Client wiring: build one API client per configured service from a
``ProviderConfig``.

A service whose credentials are missing gets no client; resources bound to
it report their missing-client diagnostic when configured.
"""

from __future__ import annotations

import os
import ssl
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, fields
from typing import Any, Iterator

import structlog

from tfgrafana.clients import (
    CloudProviderClient,
    ConnectionsClient,
    GrafanaClient,
    GrafanaCloudClient,
    OnCallClient,
    SyntheticMonitoringClient,
)
from tfgrafana.config.settings import ProviderConfig
from tfgrafana.core.errors import ConfigurationError

logger = structlog.get_logger()

PEM_MARKER = "-----BEGIN"


@dataclass
class Clients:
    grafana_api: GrafanaClient | None = None
    cloud_api: GrafanaCloudClient | None = None
    cloudprovider_api: CloudProviderClient | None = None
    connections_api: ConnectionsClient | None = None
    oncall_api: OnCallClient | None = None
    sm_api: SyntheticMonitoringClient | None = None

    def configured(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]


def is_literal_pem(value: str) -> bool:
    return value.lstrip().startswith(PEM_MARKER)


@contextmanager
def pem_path(value: str, prefix: str) -> Iterator[str]:
    """Yield a file path for ``value``; literal PEM lives in a temp dir for the block's duration."""
    if not is_literal_pem(value):
        if not os.path.exists(value):
            raise ConfigurationError(f"TLS file not found: {value}", {"path": value})
        yield value
        return
    with tempfile.TemporaryDirectory(prefix=prefix) as tmp:
        path = os.path.join(tmp, f"{prefix}material.pem")
        with open(path, "w") as f:
            f.write(value)
        yield path


def tls_verify(cfg: ProviderConfig) -> bool | ssl.SSLContext:
    """Build the ``verify`` argument for the Grafana client."""
    if not (cfg.ca_cert or cfg.tls_cert or cfg.tls_key):
        return not cfg.insecure_skip_verify

    if cfg.ca_cert and is_literal_pem(cfg.ca_cert):
        context = ssl.create_default_context(cadata=cfg.ca_cert)
    elif cfg.ca_cert:
        with pem_path(cfg.ca_cert, "ca-") as cafile:
            context = ssl.create_default_context(cafile=cafile)
    else:
        context = ssl.create_default_context()

    if cfg.tls_cert or cfg.tls_key:
        if not (cfg.tls_cert and cfg.tls_key):
            raise ConfigurationError("tls_cert and tls_key must be set together")
        with pem_path(cfg.tls_cert, "cert-") as certfile, pem_path(cfg.tls_key, "key-") as keyfile:
            context.load_cert_chain(certfile, keyfile)

    if cfg.insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def _retry_kwargs(cfg: ProviderConfig) -> dict[str, Any]:
    return {
        "retries": cfg.retries,
        "retry_status_codes": cfg.retry_status_codes,
        "retry_wait": cfg.retry_wait,
    }


def create_clients(cfg: ProviderConfig) -> Clients:
    clients = Clients()
    retry = _retry_kwargs(cfg)

    if cfg.url:
        clients.grafana_api = GrafanaClient(
            cfg.url,
            cfg.auth,
            org_id=cfg.org_id,
            headers=cfg.http_headers,
            verify=tls_verify(cfg),
            **retry,
        )

    if cfg.cloud_access_policy_token:
        clients.cloud_api = GrafanaCloudClient(cfg.cloud_api_url, cfg.cloud_access_policy_token, **retry)

    if cfg.cloud_provider_url and cfg.cloud_provider_access_token:
        clients.cloudprovider_api = CloudProviderClient(
            cfg.cloud_provider_url, cfg.cloud_provider_access_token, **retry
        )

    if cfg.connections_api_url and cfg.connections_api_access_token:
        clients.connections_api = ConnectionsClient(
            cfg.connections_api_url, cfg.connections_api_access_token, **retry
        )

    if cfg.oncall_access_token:
        clients.oncall_api = OnCallClient(cfg.oncall_url, cfg.oncall_access_token, **retry)
    elif cfg.url and cfg.auth_kind == "token":
        # Service account tokens authenticate through the Grafana stack.
        clients.oncall_api = OnCallClient(cfg.oncall_url, cfg.auth, grafana_url=cfg.url, **retry)

    if cfg.sm_access_token:
        clients.sm_api = SyntheticMonitoringClient(cfg.sm_url, cfg.sm_access_token, **retry)

    logger.debug("clients_created", clients=clients.configured())
    return clients

"""Root test configuration."""

import logging
import os

import pytest
import structlog

from tfgrafana.clients import (
    CloudProviderClient,
    ConnectionsClient,
    GrafanaClient,
    GrafanaCloudClient,
    OnCallClient,
    SyntheticMonitoringClient,
)
from tfgrafana.provider.clients import Clients

GRAFANA_URL = "https://grafana.example.com"
CLOUD_URL = "https://grafana.example.net"
CLOUD_PROVIDER_URL = "https://cloud-provider.example.com"
CONNECTIONS_URL = "https://connections.example.com"
ONCALL_URL = "https://oncall.example.com"
SM_URL = "https://sm.example.com"


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Keep GRAFANA_* variables and stray .env files out of every test."""
    for name in list(os.environ):
        if name.startswith("GRAFANA_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def clients():
    return Clients(
        grafana_api=GrafanaClient(GRAFANA_URL, "admin:admin", retries=0),
        cloud_api=GrafanaCloudClient(CLOUD_URL, "cloud-token", retries=0),
        cloudprovider_api=CloudProviderClient(CLOUD_PROVIDER_URL, "cp-token", retries=0),
        connections_api=ConnectionsClient(CONNECTIONS_URL, "conn-token", retries=0),
        oncall_api=OnCallClient(ONCALL_URL, "oncall-token", retries=0),
        sm_api=SyntheticMonitoringClient(SM_URL, "sm-token", retries=0),
    )


@pytest.fixture
def configured(clients):
    """Instantiate a resource or data source class bound to the test clients."""

    def _configured(cls):
        target = cls()
        diags = target.configure(clients)
        assert not diags.has_error(), diags
        return target

    return _configured

from tfgrafana.clients.base import (
    BaseHTTPClient,
    NotFoundError,
    PermanentHTTPError,
    RetryableHTTPError,
)
from tfgrafana.clients.cloud import GrafanaCloudClient
from tfgrafana.clients.cloudprovider import CloudProviderClient
from tfgrafana.clients.connections import ConnectionsClient
from tfgrafana.clients.grafana import GrafanaClient
from tfgrafana.clients.oncall import OnCallClient
from tfgrafana.clients.syntheticmonitoring import SyntheticMonitoringClient

__all__ = [
    "BaseHTTPClient",
    "NotFoundError",
    "PermanentHTTPError",
    "RetryableHTTPError",
    "GrafanaClient",
    "GrafanaCloudClient",
    "CloudProviderClient",
    "ConnectionsClient",
    "OnCallClient",
    "SyntheticMonitoringClient",
]

"""Resources and data sources, grouped by the API they manage."""

from tfgrafana.resources import cloud, cloudprovider, connections, grafana, oncall, syntheticmonitoring

_PACKAGES = (grafana, cloud, cloudprovider, connections, oncall, syntheticmonitoring)

RESOURCES = [cls for package in _PACKAGES for cls in package.RESOURCES]
DATA_SOURCES = [cls for package in _PACKAGES for cls in package.DATA_SOURCES]

__all__ = ["DATA_SOURCES", "RESOURCES"]

"""Grafana Synthetic Monitoring data sources."""

from tfgrafana.resources.syntheticmonitoring.data_source_probes import ProbesDataSource

RESOURCES: list = []
DATA_SOURCES = [ProbesDataSource]

__all__ = ["DATA_SOURCES", "ProbesDataSource", "RESOURCES"]

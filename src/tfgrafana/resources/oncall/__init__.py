"""Grafana OnCall data sources."""

from tfgrafana.resources.oncall.data_source_user import OnCallUserDataSource

RESOURCES: list = []
DATA_SOURCES = [OnCallUserDataSource]

__all__ = ["DATA_SOURCES", "OnCallUserDataSource", "RESOURCES"]

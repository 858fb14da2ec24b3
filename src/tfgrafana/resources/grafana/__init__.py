"""Grafana OSS, Enterprise and Alerting resources."""

from tfgrafana.resources.grafana.data_source_dashboard import DashboardDataSource
from tfgrafana.resources.grafana.data_source_dashboards import DashboardsByFolderDataSource, DashboardsDataSource
from tfgrafana.resources.grafana.resource_annotation import AnnotationResource
from tfgrafana.resources.grafana.resource_dashboard_public import DashboardPublicResource
from tfgrafana.resources.grafana.resource_data_source_config_lbac_rules import DataSourceConfigLBACRulesResource
from tfgrafana.resources.grafana.resource_notification_policy import NotificationPolicyResource
from tfgrafana.resources.grafana.resource_slo import SloResource

RESOURCES = [
    AnnotationResource,
    DashboardPublicResource,
    DataSourceConfigLBACRulesResource,
    NotificationPolicyResource,
    SloResource,
]

DATA_SOURCES = [
    DashboardDataSource,
    DashboardsDataSource,
    DashboardsByFolderDataSource,
]

__all__ = [
    "AnnotationResource",
    "DATA_SOURCES",
    "DashboardDataSource",
    "DashboardPublicResource",
    "DashboardsByFolderDataSource",
    "DashboardsDataSource",
    "DataSourceConfigLBACRulesResource",
    "NotificationPolicyResource",
    "RESOURCES",
    "SloResource",
]

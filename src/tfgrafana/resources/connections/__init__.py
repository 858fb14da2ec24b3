"""Grafana Cloud Connections resources."""

from tfgrafana.resources.connections.resource_metrics_endpoint_scrape_job import MetricsEndpointScrapeJobResource

RESOURCES = [MetricsEndpointScrapeJobResource]
DATA_SOURCES: list = []

__all__ = ["DATA_SOURCES", "MetricsEndpointScrapeJobResource", "RESOURCES"]

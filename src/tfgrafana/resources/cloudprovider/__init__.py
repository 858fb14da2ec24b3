"""Grafana Cloud Provider (AWS) resources."""

from tfgrafana.resources.cloudprovider.data_source_aws_cloudwatch_scrape_job import AWSCloudWatchScrapeJobDataSource
from tfgrafana.resources.cloudprovider.resource_aws_cloudwatch_scrape_job import AWSCloudWatchScrapeJobResource

RESOURCES = [AWSCloudWatchScrapeJobResource]
DATA_SOURCES = [AWSCloudWatchScrapeJobDataSource]

__all__ = ["AWSCloudWatchScrapeJobDataSource", "AWSCloudWatchScrapeJobResource", "DATA_SOURCES", "RESOURCES"]

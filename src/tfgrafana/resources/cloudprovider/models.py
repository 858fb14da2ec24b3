"""
Typed models for AWS CloudWatch scrape jobs and their conversion to and from
the Cloud Provider API payloads.
"""

from __future__ import annotations

from dataclasses import dataclass

from tfgrafana.clients.cloudprovider import (
    AWSCloudWatchCustomNamespace,
    AWSCloudWatchMetric,
    AWSCloudWatchScrapeJob,
    AWSCloudWatchService,
    AWSCloudWatchTagFilter,
)
from tfgrafana.framework.resource_id import new_resource_id, string_id_field
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import BoolValue, Int64Value, SetValue, StringValue

SCRAPE_JOB_TYPE_NAME = "grafana_cloud_provider_aws_cloudwatch_scrape_job"

SCRAPE_JOB_ID = new_resource_id(
    string_id_field("stack_id"),
    string_id_field("job_name"),
    resource_type=SCRAPE_JOB_TYPE_NAME,
)


@dataclass
class MetricModel:
    name: StringValue = tfsdk("name", StringValue)
    statistics: SetValue = tfsdk("statistics", SetValue)


@dataclass
class TagFilterModel:
    key: StringValue = tfsdk("key", StringValue)
    value: StringValue = tfsdk("value", StringValue)


@dataclass
class ServiceModel:
    name: StringValue = tfsdk("name", StringValue)
    metrics: list[MetricModel] = tfsdk("metric", list)
    scrape_interval_seconds: Int64Value = tfsdk("scrape_interval_seconds", Int64Value)
    resource_discovery_tag_filters: list[TagFilterModel] = tfsdk("resource_discovery_tag_filter", list)
    tags_to_add_to_metrics: SetValue = tfsdk("tags_to_add_to_metrics", SetValue)


@dataclass
class CustomNamespaceModel:
    name: StringValue = tfsdk("name", StringValue)
    metrics: list[MetricModel] = tfsdk("metric", list)
    scrape_interval_seconds: Int64Value = tfsdk("scrape_interval_seconds", Int64Value)


@dataclass
class ScrapeJobModel:
    id: StringValue = tfsdk("id", StringValue)
    stack_id: StringValue = tfsdk("stack_id", StringValue)
    name: StringValue = tfsdk("name", StringValue)
    enabled: BoolValue = tfsdk("enabled", BoolValue)
    aws_account_resource_id: StringValue = tfsdk("aws_account_resource_id", StringValue)
    regions: SetValue = tfsdk("regions", SetValue)
    export_tags: BoolValue = tfsdk("export_tags", BoolValue)
    disabled_reason: StringValue = tfsdk("disabled_reason", StringValue)
    services: list[ServiceModel] = tfsdk("service", list)
    custom_namespaces: list[CustomNamespaceModel] = tfsdk("custom_namespace", list)


def _metrics_to_client(metrics: list[MetricModel]) -> list[AWSCloudWatchMetric]:
    return [AWSCloudWatchMetric(name=m.name.value_string(), statistics=m.statistics.elements_as()) for m in metrics]


def _metrics_to_typed(metrics: list[AWSCloudWatchMetric]) -> list[MetricModel]:
    return [MetricModel(StringValue(m.name), SetValue.of(m.statistics)) for m in metrics]


def to_client(model: ScrapeJobModel) -> AWSCloudWatchScrapeJob:
    return AWSCloudWatchScrapeJob(
        name=model.name.value_string(),
        enabled=model.enabled.value_bool(),
        aws_account_resource_id=model.aws_account_resource_id.value_string(),
        regions=model.regions.elements_as(),
        export_tags=model.export_tags.value_bool(),
        disabled_reason=model.disabled_reason.value_string(),
        services=[
            AWSCloudWatchService(
                name=service.name.value_string(),
                metrics=_metrics_to_client(service.metrics),
                scrape_interval_seconds=service.scrape_interval_seconds.value_int64(),
                resource_discovery_tag_filters=[
                    AWSCloudWatchTagFilter(key=f.key.value_string(), value=f.value.value_string())
                    for f in service.resource_discovery_tag_filters
                ],
                tags_to_add_to_metrics=service.tags_to_add_to_metrics.elements_as(),
            )
            for service in model.services
        ],
        custom_namespaces=[
            AWSCloudWatchCustomNamespace(
                name=ns.name.value_string(),
                metrics=_metrics_to_client(ns.metrics),
                scrape_interval_seconds=ns.scrape_interval_seconds.value_int64(),
            )
            for ns in model.custom_namespaces
        ],
    )


def to_typed(stack_id: str, job: AWSCloudWatchScrapeJob) -> ScrapeJobModel:
    return ScrapeJobModel(
        id=StringValue(SCRAPE_JOB_ID.make(stack_id, job.name)),
        stack_id=StringValue(stack_id),
        name=StringValue(job.name),
        enabled=BoolValue(job.enabled),
        aws_account_resource_id=StringValue(job.aws_account_resource_id),
        regions=SetValue.of(job.regions),
        export_tags=BoolValue(job.export_tags),
        disabled_reason=StringValue(job.disabled_reason),
        services=[
            ServiceModel(
                name=StringValue(service.name),
                metrics=_metrics_to_typed(service.metrics),
                scrape_interval_seconds=Int64Value(service.scrape_interval_seconds),
                resource_discovery_tag_filters=[
                    TagFilterModel(StringValue(f.key), StringValue(f.value)) for f in service.resource_discovery_tag_filters
                ],
                tags_to_add_to_metrics=SetValue.of(service.tags_to_add_to_metrics),
            )
            for service in job.services
        ],
        custom_namespaces=[
            CustomNamespaceModel(
                name=StringValue(ns.name),
                metrics=_metrics_to_typed(ns.metrics),
                scrape_interval_seconds=Int64Value(ns.scrape_interval_seconds),
            )
            for ns in job.custom_namespaces
        ],
    )

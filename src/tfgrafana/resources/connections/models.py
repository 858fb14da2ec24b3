"""
Typed model for metrics endpoint scrape jobs and its conversion to and from
the Connections API payload.
"""

from __future__ import annotations

from dataclasses import dataclass

from tfgrafana.clients.connections import MetricsEndpointScrapeJob
from tfgrafana.framework.resource_id import new_resource_id, string_id_field
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import BoolValue, Int64Value, StringValue

METRICS_ENDPOINT_JOB_TYPE_NAME = "grafana_connections_metrics_endpoint_scrape_job"

METRICS_ENDPOINT_JOB_ID = new_resource_id(
    string_id_field("stack_id"),
    string_id_field("job_name"),
    resource_type=METRICS_ENDPOINT_JOB_TYPE_NAME,
)


@dataclass
class MetricsEndpointScrapeJobModel:
    id: StringValue = tfsdk("id", StringValue)
    stack_id: StringValue = tfsdk("stack_id", StringValue)
    name: StringValue = tfsdk("name", StringValue)
    enabled: BoolValue = tfsdk("enabled", BoolValue)
    authentication_method: StringValue = tfsdk("authentication_method", StringValue)
    authentication_bearer_token: StringValue = tfsdk("authentication_bearer_token", StringValue)
    authentication_basic_username: StringValue = tfsdk("authentication_basic_username", StringValue)
    authentication_basic_password: StringValue = tfsdk("authentication_basic_password", StringValue)
    url: StringValue = tfsdk("url", StringValue)
    scrape_interval_seconds: Int64Value = tfsdk("scrape_interval_seconds", Int64Value)


def to_client(model: MetricsEndpointScrapeJobModel) -> MetricsEndpointScrapeJob:
    return MetricsEndpointScrapeJob(
        name=model.name.value_string(),
        enabled=model.enabled.value_bool(),
        authentication_method=model.authentication_method.value_string(),
        authentication_bearer_token=model.authentication_bearer_token.value_string(),
        authentication_basic_username=model.authentication_basic_username.value_string(),
        authentication_basic_password=model.authentication_basic_password.value_string(),
        url=model.url.value_string(),
        scrape_interval_seconds=model.scrape_interval_seconds.value_int64(),
    )


def to_typed(stack_id: str, job: MetricsEndpointScrapeJob) -> MetricsEndpointScrapeJobModel:
    return MetricsEndpointScrapeJobModel(
        id=StringValue(METRICS_ENDPOINT_JOB_ID.make(stack_id, job.name)),
        stack_id=StringValue(stack_id),
        name=StringValue(job.name),
        enabled=BoolValue(job.enabled),
        authentication_method=StringValue(job.authentication_method),
        authentication_bearer_token=StringValue(job.authentication_bearer_token),
        authentication_basic_username=StringValue(job.authentication_basic_username),
        authentication_basic_password=StringValue(job.authentication_basic_password),
        url=StringValue(job.url),
        scrape_interval_seconds=Int64Value(job.scrape_interval_seconds),
    )

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tfgrafana.clients.base import BaseHTTPClient


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")


class AWSCloudWatchMetric(_CamelModel):
    name: str
    statistics: list[str] = Field(default_factory=list)


class AWSCloudWatchTagFilter(_CamelModel):
    key: str
    value: str


class AWSCloudWatchService(_CamelModel):
    name: str
    metrics: list[AWSCloudWatchMetric] = Field(default_factory=list)
    scrape_interval_seconds: int = 0
    resource_discovery_tag_filters: list[AWSCloudWatchTagFilter] = Field(default_factory=list)
    tags_to_add_to_metrics: list[str] = Field(default_factory=list)


class AWSCloudWatchCustomNamespace(_CamelModel):
    name: str
    metrics: list[AWSCloudWatchMetric] = Field(default_factory=list)
    scrape_interval_seconds: int = 0


class AWSCloudWatchScrapeJob(_CamelModel):
    name: str
    enabled: bool = True
    aws_account_resource_id: str = Field(default="", alias="awsAccountResourceID")
    regions: list[str] = Field(default_factory=list)
    export_tags: bool = False
    disabled_reason: str = ""
    services: list[AWSCloudWatchService] = Field(default_factory=list)
    custom_namespaces: list[AWSCloudWatchCustomNamespace] = Field(default_factory=list)


def _unwrap(data: Any) -> Any:
    if isinstance(data, dict) and "data" in data:
        return data["data"]
    return data


class CloudProviderClient(BaseHTTPClient):
    """Grafana Cloud Provider API client (AWS CloudWatch integrations)."""

    def __init__(self, base_url: str, token: str | None = None, **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _jobs_path(self, stack_id: str) -> str:
        return f"/api/v2/stacks/{stack_id}/aws/jobs/cloudwatch"

    async def create_aws_cloudwatch_scrape_job(self, stack_id: str, job: AWSCloudWatchScrapeJob) -> AWSCloudWatchScrapeJob:
        data = await self.post(self._jobs_path(stack_id), json=job.model_dump(by_alias=True))
        return AWSCloudWatchScrapeJob.model_validate(_unwrap(data))

    async def get_aws_cloudwatch_scrape_job(self, stack_id: str, name: str) -> AWSCloudWatchScrapeJob:
        data = await self.get(f"{self._jobs_path(stack_id)}/{name}")
        return AWSCloudWatchScrapeJob.model_validate(_unwrap(data))

    async def update_aws_cloudwatch_scrape_job(self, stack_id: str, name: str, job: AWSCloudWatchScrapeJob) -> AWSCloudWatchScrapeJob:
        data = await self.put(f"{self._jobs_path(stack_id)}/{name}", json=job.model_dump(by_alias=True))
        return AWSCloudWatchScrapeJob.model_validate(_unwrap(data))

    async def delete_aws_cloudwatch_scrape_job(self, stack_id: str, name: str) -> None:
        await self.delete(f"{self._jobs_path(stack_id)}/{name}")

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from tfgrafana.clients.base import BaseHTTPClient


class MetricsEndpointScrapeJob(BaseModel):
    name: str
    enabled: bool = True
    authentication_method: str = ""
    authentication_bearer_token: str = ""
    authentication_basic_username: str = ""
    authentication_basic_password: str = ""
    url: str = ""
    scrape_interval_seconds: int = 0

    model_config = ConfigDict(extra="ignore")


class ConnectionsClient(BaseHTTPClient):
    """Grafana Cloud Connections API client (metrics endpoint scrape jobs)."""

    def __init__(self, base_url: str, token: str | None = None, **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _job_path(self, stack_id: str, name: str) -> str:
        return f"/api/v1/stacks/{stack_id}/metrics-endpoint/jobs/{name}"

    @staticmethod
    def _job(data: Any) -> MetricsEndpointScrapeJob:
        if isinstance(data, dict) and "data" in data:
            data = data["data"]
        return MetricsEndpointScrapeJob.model_validate(data)

    async def create_metrics_endpoint_scrape_job(self, stack_id: str, job: MetricsEndpointScrapeJob) -> MetricsEndpointScrapeJob:
        data = await self.post(self._job_path(stack_id, job.name), json=job.model_dump())
        return self._job(data)

    async def get_metrics_endpoint_scrape_job(self, stack_id: str, name: str) -> MetricsEndpointScrapeJob:
        return self._job(await self.get(self._job_path(stack_id, name)))

    async def update_metrics_endpoint_scrape_job(self, stack_id: str, job: MetricsEndpointScrapeJob) -> MetricsEndpointScrapeJob:
        data = await self.put(self._job_path(stack_id, job.name), json=job.model_dump())
        return self._job(data)

    async def delete_metrics_endpoint_scrape_job(self, stack_id: str, name: str) -> None:
        await self.delete(self._job_path(stack_id, name))

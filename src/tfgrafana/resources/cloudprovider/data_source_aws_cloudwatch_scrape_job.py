"""
grafana_cloud_provider_aws_cloudwatch_scrape_job data source: look up an
existing CloudWatch scrape job by stack and name.
"""

from __future__ import annotations

from tfgrafana.core.errors import ProviderError
from tfgrafana.framework.resource import Category, DataSource, ReadRequest, Response
from tfgrafana.framework.schema import Schema
from tfgrafana.resources.cloudprovider.models import SCRAPE_JOB_TYPE_NAME, to_typed
from tfgrafana.resources.cloudprovider.resource_aws_cloudwatch_scrape_job import (
    CLOUD_PROVIDER_MISSING_CLIENT,
    scrape_job_attributes,
    scrape_job_blocks,
)


class AWSCloudWatchScrapeJobDataSource(DataSource):
    type_name = SCRAPE_JOB_TYPE_NAME
    category = Category.CLOUD_PROVIDER
    client_attr = "cloudprovider_api"
    missing_client_message = CLOUD_PROVIDER_MISSING_CLIENT

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes=scrape_job_attributes(computed_only=True),
            blocks=scrape_job_blocks(computed_only=True),
        )

    async def read(self, req: ReadRequest, resp: Response) -> None:
        stack_id = req.state.get_attribute("stack_id", "")
        name = req.state.get_attribute("name", "")
        try:
            job = await self.client.get_aws_cloudwatch_scrape_job(stack_id, name)
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to read AWS CloudWatch scrape job", str(exc))
            return
        resp.state.set(to_typed(stack_id, job))

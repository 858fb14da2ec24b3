"""
grafana_cloud_provider_aws_cloudwatch_scrape_job: a CloudWatch metrics scrape
job for an AWS account connected to a Grafana Cloud stack.
"""

from __future__ import annotations

import structlog

from tfgrafana.core.errors import ProviderError
from tfgrafana.framework.resource import (
    Category,
    CreateRequest,
    DeleteRequest,
    ReadRequest,
    Resource,
    Response,
    UpdateRequest,
)
from tfgrafana.framework.resource_id import ResourceIDError
from tfgrafana.framework.schema import Attribute, Block, BoolAttribute, Int64Attribute, Schema, SetAttribute, StringAttribute
from tfgrafana.framework.validators import no_duplicate_names, size_at_least
from tfgrafana.resources.cloudprovider.models import (
    SCRAPE_JOB_ID,
    SCRAPE_JOB_TYPE_NAME,
    ScrapeJobModel,
    to_client,
    to_typed,
)
from tfgrafana.resources.common import check_delete_error, check_read_error

logger = structlog.get_logger()

CLOUD_PROVIDER_MISSING_CLIENT = (
    "The Grafana Provider is missing a configuration for the Cloud Provider API. "
    "Please ensure that cloud_provider_url and cloud_provider_access_token are set in the provider configuration."
)

DEFAULT_SCRAPE_INTERVAL_SECONDS = 300

SERVICES_DOC = "https://grafana.com/docs/grafana-cloud/monitor-infrastructure/aws/cloudwatch-metrics/services/"


def _attr(computed_only: bool, attr: Attribute) -> Attribute:
    """Input attribute, or its read-only twin for the data source schema."""
    if computed_only:
        return type(attr)(description=attr.description, computed=True)  # type: ignore[call-arg]
    return attr


def _block(computed_only: bool, block: Block) -> Block:
    if computed_only:
        return Block(
            attributes={k: _attr(True, v) for k, v in block.attributes.items()},
            blocks={k: _block(True, v) for k, v in block.blocks.items()},
            description=block.description,
        )
    return block


def metric_block() -> Block:
    return Block(
        description=(
            "One or more configuration blocks to configure metrics and their statistics to scrape. "
            "Please note that AWS metric names must be supplied, and not their PromQL counterparts. "
            "Each block must represent a distinct metric name. When accessing this as an attribute reference, "
            "it is a list of objects."
        ),
        validators=(
            size_at_least(1),
            no_duplicate_names("Duplicate metric name for service or custom namespace", case_insensitive=True),
        ),
        attributes={
            "name": StringAttribute(required=True, description="The name of the metric to scrape."),
            "statistics": SetAttribute(
                required=True,
                validators=(size_at_least(1),),
                description="A set of statistics to scrape.",
            ),
        },
    )


def scrape_job_blocks(*, computed_only: bool = False) -> dict[str, Block]:
    service = Block(
        description=(
            "One or more configuration blocks to configure AWS services for the CloudWatch Scrape Job to scrape. "
            "Each block must have a distinct `name` attribute. When accessing this as an attribute reference, "
            "it is a list of objects."
        ),
        validators=(size_at_least(1), no_duplicate_names("Duplicate service name")),
        attributes={
            "name": StringAttribute(
                required=True,
                description=f"The name of the service to scrape. See {SERVICES_DOC} for supported services.",
            ),
            "scrape_interval_seconds": Int64Attribute(
                optional=True,
                computed=True,
                default=DEFAULT_SCRAPE_INTERVAL_SECONDS,
                description=f"The interval in seconds to scrape the service. See {SERVICES_DOC} for supported scrape intervals.",
            ),
            "tags_to_add_to_metrics": SetAttribute(
                optional=True,
                description="A set of tags to add to all metrics exported by this scrape job, for use in PromQL queries.",
            ),
        },
        blocks={
            "metric": metric_block(),
            "resource_discovery_tag_filter": Block(
                description=(
                    "One or more configuration blocks to configure tag filters applied to discovery of resource "
                    "entities in the associated AWS account. When accessing this as an attribute reference, it is "
                    "a list of objects."
                ),
                attributes={
                    "key": StringAttribute(required=True, description="The key of the tag filter."),
                    "value": StringAttribute(required=True, description="The value of the tag filter."),
                },
            ),
        },
    )
    custom_namespace = Block(
        description=(
            "Zero or more configuration blocks to configure custom namespaces for the CloudWatch Scrape Job to "
            "scrape. Each block must have a distinct `name` attribute. When accessing this as an attribute "
            "reference, it is a list of objects."
        ),
        validators=(no_duplicate_names("Duplicate custom namespace name"),),
        attributes={
            "name": StringAttribute(required=True, description="The name of the custom namespace to scrape."),
            "scrape_interval_seconds": Int64Attribute(
                optional=True,
                computed=True,
                default=DEFAULT_SCRAPE_INTERVAL_SECONDS,
                description="The interval in seconds to scrape the custom namespace.",
            ),
        },
        blocks={"metric": metric_block()},
    )
    return {
        "service": _block(computed_only, service),
        "custom_namespace": _block(computed_only, custom_namespace),
    }


def scrape_job_attributes(*, computed_only: bool = False) -> dict[str, Attribute]:
    inputs: dict[str, Attribute] = {
        "enabled": BoolAttribute(
            optional=True,
            computed=True,
            default=True,
            description="Whether the CloudWatch Scrape Job is enabled or not.",
        ),
        "aws_account_resource_id": StringAttribute(
            required=True,
            description=(
                "The ID assigned by the Grafana Cloud Provider API to an AWS Account resource that should be "
                "associated with this CloudWatch Scrape Job."
            ),
        ),
        "regions": SetAttribute(
            required=True,
            validators=(size_at_least(1),),
            description="A set of AWS region names that this CloudWatch Scrape Job applies to.",
        ),
        "export_tags": BoolAttribute(
            optional=True,
            computed=True,
            default=True,
            description=(
                "When enabled, AWS resource tags are exported as Prometheus labels to metrics formatted as "
                "`aws_<service_name>_info`."
            ),
        ),
    }
    return {
        "id": StringAttribute(
            computed=True,
            description='The Terraform Resource ID. This has the format "{{ stack_id }}:{{ job_name }}".',
        ),
        "stack_id": StringAttribute(
            required=True,
            force_new=not computed_only,
            description="The Stack ID of the Grafana Cloud instance. Part of the Terraform Resource ID.",
        ),
        "name": StringAttribute(
            required=True,
            force_new=not computed_only,
            description="The name of the CloudWatch Scrape Job. Part of the Terraform Resource ID.",
        ),
        **{name: _attr(computed_only, attr) for name, attr in inputs.items()},
        "disabled_reason": StringAttribute(
            computed=True,
            description="When the CloudWatch Scrape Job is disabled, this will show the reason that it is in that state.",
        ),
    }


class AWSCloudWatchScrapeJobResource(Resource):
    type_name = SCRAPE_JOB_TYPE_NAME
    category = Category.CLOUD_PROVIDER
    resource_id = SCRAPE_JOB_ID
    client_attr = "cloudprovider_api"
    missing_client_message = CLOUD_PROVIDER_MISSING_CLIENT

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes=scrape_job_attributes(),
            blocks=scrape_job_blocks(),
        )

    async def create(self, req: CreateRequest, resp: Response) -> None:
        data, diags = req.plan.get(ScrapeJobModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        stack_id = data.stack_id.value_string()
        try:
            job = await self.client.create_aws_cloudwatch_scrape_job(stack_id, to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to create AWS CloudWatch scrape job", str(exc))
            return

        resp.state.set(to_typed(stack_id, job))
        logger.info("aws_cloudwatch_scrape_job_created", stack_id=stack_id, name=job.name)

    async def read(self, req: ReadRequest, resp: Response) -> None:
        try:
            stack_id, name = SCRAPE_JOB_ID.split(req.state.id or "")
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            job = await self.client.get_aws_cloudwatch_scrape_job(stack_id, name)
        except ProviderError as exc:
            check_read_error(exc, resp, self.type_name, "Failed to read AWS CloudWatch scrape job")
            return
        resp.state.set(to_typed(stack_id, job))

    async def update(self, req: UpdateRequest, resp: Response) -> None:
        data, diags = req.plan.get(ScrapeJobModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        stack_id = data.stack_id.value_string()
        try:
            job = await self.client.update_aws_cloudwatch_scrape_job(stack_id, data.name.value_string(), to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to update AWS CloudWatch scrape job", str(exc))
            return
        resp.state.set(to_typed(stack_id, job))

    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        try:
            stack_id, name = SCRAPE_JOB_ID.split(req.state.id or "")
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            await self.client.delete_aws_cloudwatch_scrape_job(stack_id, name)
        except ProviderError as exc:
            check_delete_error(exc, resp, "Failed to delete AWS CloudWatch scrape job")

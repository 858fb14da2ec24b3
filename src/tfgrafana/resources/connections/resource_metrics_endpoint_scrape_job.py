"""
grafana_connections_metrics_endpoint_scrape_job: a Grafana Cloud job that
scrapes a Prometheus metrics endpoint over HTTP(S).
"""

from __future__ import annotations

import structlog

from tfgrafana.core.errors import ProviderError
from tfgrafana.framework.diagnostics import Diagnostics
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
from tfgrafana.framework.schema import BoolAttribute, Int64Attribute, Schema, StringAttribute
from tfgrafana.framework.validators import one_of, url_with_http_or_https
from tfgrafana.resources.common import check_delete_error, check_read_error
from tfgrafana.resources.connections.models import (
    METRICS_ENDPOINT_JOB_ID,
    METRICS_ENDPOINT_JOB_TYPE_NAME,
    MetricsEndpointScrapeJobModel,
    to_client,
    to_typed,
)

logger = structlog.get_logger()

CONNECTIONS_MISSING_CLIENT = (
    "The Grafana Provider is missing a configuration for the Connections API. "
    "Please ensure that connections_api_url and connections_api_access_token are set in the provider configuration."
)

AUTH_BASIC = "basic"
AUTH_BEARER = "bearer"

DEFAULT_SCRAPE_INTERVAL_SECONDS = 60


def check_authentication(model: MetricsEndpointScrapeJobModel) -> Diagnostics:
    """Credentials must match the chosen authentication method."""
    diags = Diagnostics()
    method = model.authentication_method.value_string()
    if method == AUTH_BASIC and not (
        model.authentication_basic_username.value_string() and model.authentication_basic_password.value_string()
    ):
        diags.add_error(
            "Missing basic authentication credentials",
            'authentication_basic_username and authentication_basic_password are required when authentication_method is "basic"',
            path="authentication_method",
        )
    if method == AUTH_BEARER and not model.authentication_bearer_token.value_string():
        diags.add_error(
            "Missing bearer token",
            'authentication_bearer_token is required when authentication_method is "bearer"',
            path="authentication_method",
        )
    return diags


def keep_secrets(model: MetricsEndpointScrapeJobModel, previous: MetricsEndpointScrapeJobModel) -> None:
    """The API does not echo credentials back; keep the ones already in state."""
    for attr in ("authentication_bearer_token", "authentication_basic_password"):
        if not getattr(model, attr).value_string():
            setattr(model, attr, getattr(previous, attr))


class MetricsEndpointScrapeJobResource(Resource):
    type_name = METRICS_ENDPOINT_JOB_TYPE_NAME
    category = Category.CONNECTIONS
    resource_id = METRICS_ENDPOINT_JOB_ID
    client_attr = "connections_api"
    missing_client_message = CONNECTIONS_MISSING_CLIENT

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes={
                "id": StringAttribute(
                    computed=True,
                    description='The Terraform Resource ID. This has the format "{{ stack_id }}:{{ job_name }}".',
                ),
                "stack_id": StringAttribute(
                    required=True,
                    force_new=True,
                    description="The Stack ID of the Grafana Cloud instance. Part of the Terraform Resource ID.",
                ),
                "name": StringAttribute(
                    required=True,
                    force_new=True,
                    description="The name of the Metrics Endpoint Scrape Job. Part of the Terraform Resource ID.",
                ),
                "enabled": BoolAttribute(
                    optional=True,
                    computed=True,
                    default=True,
                    description="Whether the metrics endpoint scrape job is enabled or not.",
                ),
                "authentication_method": StringAttribute(
                    required=True,
                    validators=(one_of(AUTH_BASIC, AUTH_BEARER),),
                    description="Method to pass authentication credentials: basic or bearer.",
                ),
                "authentication_bearer_token": StringAttribute(
                    optional=True,
                    sensitive=True,
                    description="Bearer token used for authentication, use if authentication_method is bearer",
                ),
                "authentication_basic_username": StringAttribute(
                    optional=True,
                    description="Username for basic authentication, use if authentication_method is basic",
                ),
                "authentication_basic_password": StringAttribute(
                    optional=True,
                    sensitive=True,
                    description="Password for basic authentication, use if authentication_method is basic",
                ),
                "url": StringAttribute(
                    required=True,
                    validators=(url_with_http_or_https(),),
                    description="The url to scrape metrics from; a valid HTTPs URL is required.",
                ),
                "scrape_interval_seconds": Int64Attribute(
                    optional=True,
                    computed=True,
                    default=DEFAULT_SCRAPE_INTERVAL_SECONDS,
                    description="Frequency for scraping the metrics endpoint: 30, 60, or 120 seconds.",
                ),
            },
        )

    async def create(self, req: CreateRequest, resp: Response) -> None:
        data, diags = req.plan.get(MetricsEndpointScrapeJobModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        resp.diagnostics.extend(check_authentication(data))
        if resp.diagnostics.has_error():
            return

        stack_id = data.stack_id.value_string()
        try:
            job = await self.client.create_metrics_endpoint_scrape_job(stack_id, to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to create metrics endpoint scrape job", str(exc))
            return

        created = to_typed(stack_id, job)
        keep_secrets(created, data)
        resp.state.set(created)
        logger.info("metrics_endpoint_scrape_job_created", stack_id=stack_id, name=job.name)

    async def read(self, req: ReadRequest, resp: Response) -> None:
        data, diags = req.state.get(MetricsEndpointScrapeJobModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            stack_id, name = METRICS_ENDPOINT_JOB_ID.split(data.id.value_string())
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            job = await self.client.get_metrics_endpoint_scrape_job(stack_id, name)
        except ProviderError as exc:
            check_read_error(exc, resp, self.type_name, "Failed to read metrics endpoint scrape job")
            return

        current = to_typed(stack_id, job)
        keep_secrets(current, data)
        resp.state.set(current)

    async def update(self, req: UpdateRequest, resp: Response) -> None:
        data, diags = req.plan.get(MetricsEndpointScrapeJobModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        resp.diagnostics.extend(check_authentication(data))
        if resp.diagnostics.has_error():
            return

        stack_id = data.stack_id.value_string()
        try:
            job = await self.client.update_metrics_endpoint_scrape_job(stack_id, to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to update metrics endpoint scrape job", str(exc))
            return

        updated = to_typed(stack_id, job)
        keep_secrets(updated, data)
        resp.state.set(updated)

    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        try:
            stack_id, name = METRICS_ENDPOINT_JOB_ID.split(req.state.id or "")
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            await self.client.delete_metrics_endpoint_scrape_job(stack_id, name)
        except ProviderError as exc:
            check_delete_error(exc, resp, "Failed to delete metrics endpoint scrape job")


"""
grafana_cloud_stack_service_account_token: a token for a service account inside a Grafana Cloud stack.

* [Official documentation](https://grafana.com/docs/grafana/latest/administration/service-accounts/#add-a-token-to-a-service-account-in-grafana)
* [HTTP API](https://grafana.com/docs/grafana/latest/developers/http_api/serviceaccount/#service-account-api)

Tokens cannot be changed once issued; every argument forces a new token.
"""

from __future__ import annotations

from dataclasses import dataclass

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
from tfgrafana.framework.resource_id import (
    ResourceIDError,
    int_id_field,
    new_resource_id,
    string_id_field,
)
from tfgrafana.framework.schema import BoolAttribute, Int64Attribute, Schema, StringAttribute
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import BoolValue, Int64Value, StringValue
from tfgrafana.resources.cloud.resource_access_policy_token import CLOUD_MISSING_CLIENT
from tfgrafana.resources.cloud.resource_stack_service_account import TEMP_SA_PREFIX
from tfgrafana.resources.common import check_delete_error, check_read_error

logger = structlog.get_logger()


@dataclass
class StackServiceAccountTokenModel:
    id: StringValue = tfsdk("id", StringValue)
    stack_slug: StringValue = tfsdk("stack_slug", StringValue)
    service_account_id: StringValue = tfsdk("service_account_id", StringValue)
    name: StringValue = tfsdk("name", StringValue)
    seconds_to_live: Int64Value = tfsdk("seconds_to_live", Int64Value)
    expiration: StringValue = tfsdk("expiration", StringValue)
    has_expired: BoolValue = tfsdk("has_expired", BoolValue)
    key: StringValue = tfsdk("key", StringValue)


def service_account_number(value: str) -> int:
    """Numeric service account ID from either ``<id>`` or a ``<stack>:<id>`` resource ID."""
    raw = value.rsplit(":", 1)[-1]
    try:
        return int(raw)
    except ValueError as exc:
        raise ResourceIDError(f"service_account_id must end in an integer ID, got {value!r}") from exc


class StackServiceAccountTokenResource(Resource):
    type_name = "grafana_cloud_stack_service_account_token"
    category = Category.CLOUD
    resource_id = new_resource_id(
        string_id_field("stackSlug"),
        int_id_field("serviceAccountID"),
        int_id_field("tokenID"),
        resource_type=type_name,
    )
    client_attr = "cloud_api"
    missing_client_message = CLOUD_MISSING_CLIENT

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes={
                "id": StringAttribute(computed=True, description="The ID of this resource."),
                "stack_slug": StringAttribute(
                    required=True,
                    force_new=True,
                    description="The slug of the Grafana Cloud stack.",
                ),
                "service_account_id": StringAttribute(
                    required=True,
                    force_new=True,
                    description="The ID of the service account, or the ID of a `grafana_cloud_stack_service_account` resource.",
                ),
                "name": StringAttribute(required=True, force_new=True, description="The name of the token."),
                "seconds_to_live": Int64Attribute(
                    optional=True,
                    force_new=True,
                    description="Lifetime of the token in seconds. The token does not expire when unset.",
                ),
                "expiration": StringAttribute(computed=True, description="Expiration date of the token."),
                "has_expired": BoolAttribute(computed=True, description="Whether the token has expired."),
                "key": StringAttribute(computed=True, sensitive=True, description="The token value."),
            },
        )

    def _split(self, model: StackServiceAccountTokenModel) -> tuple[str, int, int]:
        slug, sa_id, token_id = self.resource_id.split(model.id.value_string())  # type: ignore[union-attr]
        return slug, sa_id, token_id

    async def create(self, req: CreateRequest, resp: Response) -> None:
        data, diags = req.plan.get(StackServiceAccountTokenModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            sa_id = service_account_number(data.service_account_id.value_string())
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid service account ID", str(exc), path="service_account_id")
            return

        slug = data.stack_slug.value_string()
        try:
            async with self.client.temporary_stack_client(slug, TEMP_SA_PREFIX) as stack:
                token = await stack.new_service_account_token(
                    sa_id, data.name.value_string(), data.seconds_to_live.value
                )
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to create stack service account token", str(exc))
            return

        data.id = StringValue(self.resource_id.make(slug, sa_id, token.id))  # type: ignore[union-attr]
        data.key = StringValue(token.key)
        resp.state.set(data)
        logger.info("stack_service_account_token_created", id=data.id.value, stack=slug)
        await self.read(ReadRequest(resp.state), resp)

    async def read(self, req: ReadRequest, resp: Response) -> None:
        data, diags = req.state.get(StackServiceAccountTokenModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            slug, sa_id, token_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            async with self.client.temporary_stack_client(slug, TEMP_SA_PREFIX) as stack:
                tokens = await stack.service_account_tokens(sa_id)
        except ProviderError as exc:
            check_read_error(exc, resp, self.type_name, "Failed to read stack service account token")
            return

        token = next((t for t in tokens if t.id == token_id), None)
        if token is None:
            logger.warning("resource_not_found_removing_from_state", resource_type=self.type_name, id=data.id.value)
            resp.state.remove()
            return

        data.stack_slug = StringValue(slug)
        data.name = StringValue(token.name)
        data.expiration = StringValue(token.expiration or None)
        data.has_expired = BoolValue(token.has_expired)
        resp.state.set(data)

    async def update(self, req: UpdateRequest, resp: Response) -> None:
        # Every argument forces replacement; only computed values change here.
        data, diags = req.plan.get(StackServiceAccountTokenModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        resp.state.set(data)
        await self.read(ReadRequest(resp.state), resp)

    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        data, diags = req.state.get(StackServiceAccountTokenModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            slug, sa_id, token_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            async with self.client.temporary_stack_client(slug, TEMP_SA_PREFIX) as stack:
                await stack.delete_service_account_token(sa_id, token_id)
        except ProviderError as exc:
            check_delete_error(exc, resp, "Failed to delete stack service account token")

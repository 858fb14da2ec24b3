"""
grafana_cloud_access_policy_token: a token issued for a Grafana Cloud access policy.

* [Official documentation](https://grafana.com/docs/grafana-cloud/account-management/authentication-and-permissions/access-policies/)
* [API documentation](https://grafana.com/docs/grafana-cloud/developer-resources/api-reference/cloud-api/#create-a-token)
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from tfgrafana.clients.cloud import AccessPolicyToken, PostTokensRequest
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
from tfgrafana.framework.resource_id import ResourceIDError, new_resource_id_with_legacy_separator
from tfgrafana.framework.schema import Schema, StringAttribute
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import StringValue
from tfgrafana.framework.validators import format_rfc3339, parse_rfc3339, rfc3339_time
from tfgrafana.resources.common import check_delete_error, check_read_error

logger = structlog.get_logger()

CLOUD_MISSING_CLIENT = (
    "The Grafana Provider is missing a configuration for the Grafana Cloud API. "
    "Please ensure that cloud_access_policy_token is set in the provider configuration."
)


@dataclass
class AccessPolicyTokenModel:
    id: StringValue = tfsdk("id", StringValue)
    access_policy_id: StringValue = tfsdk("access_policy_id", StringValue)
    region: StringValue = tfsdk("region", StringValue)
    name: StringValue = tfsdk("name", StringValue)
    display_name: StringValue = tfsdk("display_name", StringValue)
    expires_at: StringValue = tfsdk("expires_at", StringValue)
    token: StringValue = tfsdk("token", StringValue)
    created_at: StringValue = tfsdk("created_at", StringValue)
    updated_at: StringValue = tfsdk("updated_at", StringValue)


def display_name_of(model: AccessPolicyTokenModel) -> str:
    """Display name, falling back to the token name when blank."""
    return model.display_name.value_string() or model.name.value_string()


def normalize_time(value: str | None) -> str | None:
    if not value:
        return None
    return format_rfc3339(parse_rfc3339(value))


def to_client(model: AccessPolicyTokenModel) -> PostTokensRequest:
    return PostTokensRequest(
        access_policy_id=model.access_policy_id.value_string(),
        name=model.name.value_string(),
        display_name=display_name_of(model),
        expires_at=normalize_time(model.expires_at.value),
    )


def apply_client(model: AccessPolicyTokenModel, region: str, token: AccessPolicyToken) -> None:
    model.access_policy_id = StringValue(token.access_policy_id)
    model.region = StringValue(region)
    model.name = StringValue(token.name)
    model.display_name = StringValue(token.display_name or token.name)
    model.created_at = StringValue(normalize_time(token.created_at))
    if token.expires_at:
        model.expires_at = StringValue(normalize_time(token.expires_at))
    if token.updated_at:
        model.updated_at = StringValue(normalize_time(token.updated_at))


class AccessPolicyTokenResource(Resource):
    type_name = "grafana_cloud_access_policy_token"
    category = Category.CLOUD
    resource_id = new_resource_id_with_legacy_separator(type_name, "/", "region", "tokenId")
    client_attr = "cloud_api"
    missing_client_message = CLOUD_MISSING_CLIENT

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes={
                "id": StringAttribute(computed=True, description="The ID of this resource."),
                "access_policy_id": StringAttribute(
                    required=True,
                    force_new=True,
                    description="ID of the access policy for which to create a token.",
                ),
                "region": StringAttribute(
                    required=True,
                    force_new=True,
                    description=(
                        "Region of the access policy. Should be set to the same region as the access policy. "
                        "Use the region list API to get the list of available regions: "
                        "https://grafana.com/docs/grafana-cloud/developer-resources/api-reference/cloud-api/#list-regions."
                    ),
                ),
                "name": StringAttribute(required=True, force_new=True, description="Name of the access policy token."),
                "display_name": StringAttribute(
                    optional=True,
                    computed=True,
                    description="Display name of the access policy token. Defaults to the name.",
                ),
                "expires_at": StringAttribute(
                    optional=True,
                    force_new=True,
                    validators=(rfc3339_time(),),
                    description="Expiration date of the access policy token. Does not expire by default.",
                ),
                "token": StringAttribute(computed=True, sensitive=True, description="The generated token value."),
                "created_at": StringAttribute(computed=True, description="Creation date of the access policy token."),
                "updated_at": StringAttribute(computed=True, description="Last update date of the access policy token."),
            },
        )

    def _split(self, model: AccessPolicyTokenModel) -> tuple[str, str]:
        region, token_id = self.resource_id.split(model.id.value_string())
        return region, token_id

    async def create(self, req: CreateRequest, resp: Response) -> None:
        data, diags = req.plan.get(AccessPolicyTokenModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        region = data.region.value_string()
        try:
            result = await self.client.create_token(region, to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to create access policy token", str(exc))
            return

        data.id = StringValue(self.resource_id.make(region, result.id))
        data.token = StringValue(result.token)
        resp.state.set(data)
        logger.info("access_policy_token_created", id=data.id.value, access_policy_id=result.access_policy_id)
        await self.read(ReadRequest(resp.state), resp)

    async def read(self, req: ReadRequest, resp: Response) -> None:
        data, diags = req.state.get(AccessPolicyTokenModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            region, token_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            result = await self.client.get_token(region, token_id)
        except ProviderError as exc:
            check_read_error(exc, resp, self.type_name, "Failed to read access policy token")
            return

        apply_client(data, region, result)
        data.id = StringValue(self.resource_id.make(region, result.id))
        resp.state.set(data)

    async def update(self, req: UpdateRequest, resp: Response) -> None:
        data, diags = req.plan.get(AccessPolicyTokenModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            region, token_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            await self.client.update_token(region, token_id, display_name_of(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to update access policy token", str(exc))
            return
        resp.state.set(data)
        await self.read(ReadRequest(resp.state), resp)

    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        data, diags = req.state.get(AccessPolicyTokenModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            region, token_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            await self.client.delete_token(region, token_id)
        except ProviderError as exc:
            check_delete_error(exc, resp, "Failed to delete access policy token")

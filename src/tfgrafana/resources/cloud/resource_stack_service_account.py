"""
grafana_cloud_stack_service_account: a service account inside a Grafana Cloud stack, managed through the Cloud API.

* [Official documentation](https://grafana.com/docs/grafana/latest/administration/service-accounts/)
* [HTTP API](https://grafana.com/docs/grafana/latest/developers/http_api/serviceaccount/#service-account-api)

Only a Cloud access policy token is needed: each operation talks to the
stack through a short-lived admin service account that is created and
deleted around the call.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from tfgrafana.clients.grafana import ServiceAccount
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
from tfgrafana.framework.resource_id import ResourceIDError, int_id_field, new_resource_id, string_id_field
from tfgrafana.framework.schema import BoolAttribute, Schema, StringAttribute
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import BoolValue, StringValue
from tfgrafana.framework.validators import one_of
from tfgrafana.resources.cloud.resource_access_policy_token import CLOUD_MISSING_CLIENT
from tfgrafana.resources.common import check_delete_error, check_read_error

logger = structlog.get_logger()

SERVICE_ACCOUNT_ROLES = ("Viewer", "Editor", "Admin", "None")
TEMP_SA_PREFIX = "terraform-temp-"


@dataclass
class StackServiceAccountModel:
    id: StringValue = tfsdk("id", StringValue)
    stack_slug: StringValue = tfsdk("stack_slug", StringValue)
    name: StringValue = tfsdk("name", StringValue)
    role: StringValue = tfsdk("role", StringValue)
    is_disabled: BoolValue = tfsdk("is_disabled", BoolValue)


def to_client(model: StackServiceAccountModel) -> ServiceAccount:
    return ServiceAccount(
        name=model.name.value_string(),
        role=model.role.value_string(),
        is_disabled=model.is_disabled.value_bool(),
    )


def apply_client(model: StackServiceAccountModel, sa: ServiceAccount) -> None:
    model.name = StringValue(sa.name)
    model.role = StringValue(sa.role)
    model.is_disabled = BoolValue(sa.is_disabled)


class StackServiceAccountResource(Resource):
    type_name = "grafana_cloud_stack_service_account"
    category = Category.CLOUD
    resource_id = new_resource_id(string_id_field("stackSlug"), int_id_field("serviceAccountID"), resource_type=type_name)
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
                "name": StringAttribute(required=True, description="The name of the service account."),
                "role": StringAttribute(
                    required=True,
                    validators=(one_of(*SERVICE_ACCOUNT_ROLES),),
                    description="The basic role of the service account in the organization.",
                ),
                "is_disabled": BoolAttribute(
                    optional=True,
                    default=False,
                    description="The disabled status for the service account.",
                ),
            },
        )

    def _split(self, model: StackServiceAccountModel) -> tuple[str, int]:
        slug, sa_id = self.resource_id.split(model.id.value_string())  # type: ignore[union-attr]
        return slug, sa_id

    async def create(self, req: CreateRequest, resp: Response) -> None:
        data, diags = req.plan.get(StackServiceAccountModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        slug = data.stack_slug.value_string()
        try:
            async with self.client.temporary_stack_client(slug, TEMP_SA_PREFIX) as stack:
                sa = await stack.new_service_account(to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to create stack service account", str(exc))
            return

        data.id = StringValue(self.resource_id.make(slug, sa.id))  # type: ignore[union-attr]
        resp.state.set(data)
        logger.info("stack_service_account_created", id=data.id.value, stack=slug)
        await self.read(ReadRequest(resp.state), resp)

    async def read(self, req: ReadRequest, resp: Response) -> None:
        data, diags = req.state.get(StackServiceAccountModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            slug, sa_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            async with self.client.temporary_stack_client(slug, TEMP_SA_PREFIX) as stack:
                sa = await stack.service_account(sa_id)
        except ProviderError as exc:
            check_read_error(exc, resp, self.type_name, "Failed to read stack service account")
            return

        data.stack_slug = StringValue(slug)
        apply_client(data, sa)
        resp.state.set(data)

    async def update(self, req: UpdateRequest, resp: Response) -> None:
        data, diags = req.plan.get(StackServiceAccountModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            slug, sa_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            async with self.client.temporary_stack_client(slug, TEMP_SA_PREFIX) as stack:
                await stack.update_service_account(sa_id, to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to update stack service account", str(exc))
            return
        resp.state.set(data)
        await self.read(ReadRequest(resp.state), resp)

    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        data, diags = req.state.get(StackServiceAccountModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            slug, sa_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            async with self.client.temporary_stack_client(slug, TEMP_SA_PREFIX) as stack:
                await stack.delete_service_account(sa_id)
        except ProviderError as exc:
            check_delete_error(exc, resp, "Failed to delete stack service account")

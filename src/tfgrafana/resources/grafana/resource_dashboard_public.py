"""
grafana_dashboard_public: a publicly shared view of a dashboard.

* [Official documentation](https://grafana.com/docs/grafana/latest/dashboards/dashboard-public/)
* [HTTP API](https://grafana.com/docs/grafana/next/developers/http_api/dashboard_public/)
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from tfgrafana.clients.grafana import PublicDashboard
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
from tfgrafana.framework.schema import BoolAttribute, Int64Attribute, Schema, StringAttribute
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import BoolValue, Int64Value, StringValue
from tfgrafana.framework.validators import one_of
from tfgrafana.resources.common import check_delete_error, check_read_error, org_id_for

logger = structlog.get_logger()

SHARE_TYPES = ("public", "email")


@dataclass
class PublicDashboardModel:
    id: StringValue = tfsdk("id", StringValue)
    org_id: Int64Value = tfsdk("org_id", Int64Value)
    uid: StringValue = tfsdk("uid", StringValue)
    dashboard_uid: StringValue = tfsdk("dashboard_uid", StringValue)
    access_token: StringValue = tfsdk("access_token", StringValue)
    time_selection_enabled: BoolValue = tfsdk("time_selection_enabled", BoolValue)
    is_enabled: BoolValue = tfsdk("is_enabled", BoolValue)
    annotations_enabled: BoolValue = tfsdk("annotations_enabled", BoolValue)
    share: StringValue = tfsdk("share", StringValue)


def to_client(model: PublicDashboardModel) -> PublicDashboard:
    return PublicDashboard(
        uid=model.uid.value or None,
        dashboard_uid=model.dashboard_uid.value,
        access_token=model.access_token.value or None,
        time_selection_enabled=model.time_selection_enabled.value,
        is_enabled=model.is_enabled.value,
        annotations_enabled=model.annotations_enabled.value,
        share=model.share.value or None,
    )


def apply_client(model: PublicDashboardModel, pd: PublicDashboard) -> None:
    model.uid = StringValue(pd.uid)
    if pd.dashboard_uid:
        model.dashboard_uid = StringValue(pd.dashboard_uid)
    model.access_token = StringValue(pd.access_token)
    model.time_selection_enabled = BoolValue(pd.time_selection_enabled)
    model.is_enabled = BoolValue(pd.is_enabled)
    model.annotations_enabled = BoolValue(pd.annotations_enabled)
    model.share = StringValue(pd.share)


class DashboardPublicResource(Resource):
    type_name = "grafana_dashboard_public"
    category = Category.GRAFANA_OSS
    resource_id = new_resource_id(
        int_id_field("org_id"),
        string_id_field("dashboard_uid"),
        string_id_field("public_dashboard_uid"),
        resource_type=type_name,
    )

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes={
                "id": StringAttribute(computed=True, description="The ID of this resource."),
                "org_id": Int64Attribute(
                    optional=True,
                    computed=True,
                    force_new=True,
                    description="The Organization ID. If not set, the Org ID defined in the provider block will be used.",
                ),
                "uid": StringAttribute(
                    optional=True,
                    computed=True,
                    force_new=True,
                    description="The unique identifier of a public dashboard. It's automatically generated if not provided when creating a public dashboard.",
                ),
                "dashboard_uid": StringAttribute(
                    required=True,
                    force_new=True,
                    description="The unique identifier of the original dashboard.",
                ),
                "access_token": StringAttribute(
                    optional=True,
                    computed=True,
                    description="A public unique identifier of a public dashboard. This is used to construct its URL. It's automatically generated if not provided when creating a public dashboard.",
                ),
                "time_selection_enabled": BoolAttribute(
                    optional=True,
                    description="Set to `true` to enable the time picker in the public dashboard.",
                ),
                "is_enabled": BoolAttribute(
                    optional=True,
                    description="Set to `true` to enable the public dashboard.",
                ),
                "annotations_enabled": BoolAttribute(
                    optional=True,
                    description="Set to `true` to show annotations.",
                ),
                "share": StringAttribute(
                    optional=True,
                    computed=True,
                    validators=(one_of(*SHARE_TYPES),),
                    description="Set the share mode.",
                ),
            },
        )

    def _split(self, model: PublicDashboardModel) -> tuple[int, str, str]:
        org_id, dashboard_uid, uid = self.resource_id.split(model.id.value_string())  # type: ignore[union-attr]
        return org_id, dashboard_uid, uid

    async def create(self, req: CreateRequest, resp: Response) -> None:
        data, diags = req.plan.get(PublicDashboardModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        org_id = org_id_for(self.client, data.org_id)
        dashboard_uid = data.dashboard_uid.value_string()
        try:
            pd = await self.client.for_org(org_id).new_public_dashboard(dashboard_uid, to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to create public dashboard", str(exc))
            return

        data.id = StringValue(self.resource_id.make(org_id, dashboard_uid, pd.uid))  # type: ignore[union-attr]
        data.org_id = Int64Value(org_id)
        apply_client(data, pd)
        resp.state.set(data)
        logger.info("public_dashboard_created", id=data.id.value)
        await self.read(ReadRequest(resp.state), resp)

    async def read(self, req: ReadRequest, resp: Response) -> None:
        data, diags = req.state.get(PublicDashboardModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            org_id, dashboard_uid, _ = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            pd = await self.client.for_org(org_id).public_dashboard(dashboard_uid)
        except ProviderError as exc:
            check_read_error(exc, resp, self.type_name, "Failed to read public dashboard")
            return

        data.org_id = Int64Value(org_id)
        data.dashboard_uid = StringValue(dashboard_uid)
        apply_client(data, pd)
        resp.state.set(data)

    async def update(self, req: UpdateRequest, resp: Response) -> None:
        data, diags = req.plan.get(PublicDashboardModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            org_id, dashboard_uid, uid = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            await self.client.for_org(org_id).update_public_dashboard(dashboard_uid, uid, to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to update public dashboard", str(exc))
            return
        resp.state.set(data)
        await self.read(ReadRequest(resp.state), resp)

    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        data, diags = req.state.get(PublicDashboardModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            org_id, dashboard_uid, uid = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            await self.client.for_org(org_id).delete_public_dashboard(dashboard_uid, uid)
        except ProviderError as exc:
            check_delete_error(exc, resp, "Failed to delete public dashboard")

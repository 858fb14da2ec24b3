"""
grafana_dashboard data source: look up one dashboard by numerical ID or UID.

* [Official documentation](https://grafana.com/docs/grafana/latest/dashboards/)
* [Folder/Dashboard Search HTTP API](https://grafana.com/docs/grafana/latest/http_api/folder_dashboard_search/)
* [Dashboard HTTP API](https://grafana.com/docs/grafana/latest/http_api/dashboard/)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import structlog

from tfgrafana.clients.grafana import GrafanaClient
from tfgrafana.core.errors import ProviderError
from tfgrafana.framework.diagnostics import Diagnostics
from tfgrafana.framework.resource import Category, DataSource, ReadRequest, Response
from tfgrafana.framework.schema import BoolAttribute, Int64Attribute, Schema, StringAttribute
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import BoolValue, Int64Value, StringValue

logger = structlog.get_logger()


@dataclass
class DashboardDataModel:
    id: StringValue = tfsdk("id", StringValue)
    dashboard_id: Int64Value = tfsdk("dashboard_id", Int64Value)
    uid: StringValue = tfsdk("uid", StringValue)
    version: Int64Value = tfsdk("version", Int64Value)
    title: StringValue = tfsdk("title", StringValue)
    folder_id: Int64Value = tfsdk("folder_id", Int64Value)
    folder_uid: StringValue = tfsdk("folder_uid", StringValue)
    is_starred: BoolValue = tfsdk("is_starred", BoolValue)
    model_json: StringValue = tfsdk("model_json", StringValue)


def check_lookup(dashboard_id: int, uid: str, version: int) -> Diagnostics:
    """Reject lookups that cannot identify exactly one dashboard version."""
    diags = Diagnostics()
    if dashboard_id < 1 and not uid:
        diags.add_error("must specify either dashboard id or uid")
    elif dashboard_id > 0 and uid:
        diags.add_error("must specify either dashboard id or uid, but not both")
    if version < 0:
        diags.add_error(f"must specify version >= 0, not {version}", path="version")
    return diags


def model_json(model: dict[str, Any]) -> str:
    return json.dumps(model, sort_keys=True, separators=(",", ":"))


async def find_dashboard_uid(client: GrafanaClient, dashboard_id: int) -> str:
    results = await client.folder_dashboard_search({"type": "dash-db", "dashboardIds": dashboard_id})
    for result in results:
        if result.id == dashboard_id:
            return result.uid
    raise ProviderError(f"no dashboard with id {dashboard_id}")


class DashboardDataSource(DataSource):
    type_name = "grafana_dashboard"
    category = Category.GRAFANA_OSS

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes={
                "id": StringAttribute(computed=True, description="The UID of the dashboard."),
                "dashboard_id": Int64Attribute(
                    optional=True,
                    computed=True,
                    description="The numerical ID of the Grafana dashboard. Specify either this or `uid`.",
                ),
                "uid": StringAttribute(
                    optional=True,
                    computed=True,
                    description="The uid of the Grafana dashboard. Specify either this or `dashboard_id`.",
                ),
                "version": Int64Attribute(
                    optional=True,
                    computed=True,
                    description="The numerical version of the Grafana dashboard. Set to 0 or omit to get the latest version.",
                ),
                "title": StringAttribute(computed=True, description="The title of the Grafana dashboard."),
                "folder_id": Int64Attribute(
                    computed=True,
                    description="The numerical ID of the folder where the Grafana dashboard is found.",
                ),
                "folder_uid": StringAttribute(
                    computed=True,
                    description="The UID of the folder where the Grafana dashboard is found.",
                ),
                "is_starred": BoolAttribute(
                    computed=True,
                    description="Whether or not the Grafana dashboard is starred.",
                ),
                "model_json": StringAttribute(computed=True, description="The complete dashboard model JSON."),
            },
        )

    async def read(self, req: ReadRequest, resp: Response) -> None:
        data, diags = req.state.get(DashboardDataModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        dashboard_id = data.dashboard_id.value_int64()
        uid = data.uid.value_string()
        version = data.version.value_int64()
        lookup_diags = check_lookup(dashboard_id, uid, version)
        if lookup_diags.has_error():
            resp.diagnostics.extend(lookup_diags)
            return

        try:
            if dashboard_id > 0:
                uid = await find_dashboard_uid(self.client, dashboard_id)
            dashboard = await self.client.dashboard_by_uid(uid)
            model = dashboard.model
            if version > 0:
                model = await self.client.dashboard_version(uid, version)
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to read dashboard", str(exc))
            return

        uid = model.get("uid", uid)
        data.id = StringValue(uid)
        data.uid = StringValue(uid)
        data.dashboard_id = Int64Value(int(model.get("id", 0)))
        data.title = StringValue(model.get("title", ""))
        data.version = Int64Value(int(model.get("version", 0)))
        data.folder_id = Int64Value(dashboard.meta.folder_id)
        data.folder_uid = StringValue(dashboard.meta.folder_uid)
        data.is_starred = BoolValue(dashboard.meta.is_starred)
        data.model_json = StringValue(model_json(model))
        resp.state.set(data)
        logger.debug("dashboard_read", uid=uid, version=data.version.value_int64())

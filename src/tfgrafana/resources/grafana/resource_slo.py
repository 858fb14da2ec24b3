"""
grafana_slo: a Service Level Objective managed by the Grafana SLO app.

* [Official documentation](https://grafana.com/docs/grafana-cloud/alerting-and-irm/slo/)
* [API documentation](https://grafana.com/docs/grafana-cloud/alerting-and-irm/slo/api/)

Creating an SLO also generates a drill-down dashboard, exposed as
``dashboard_uid``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

from tfgrafana.clients.grafana import Slo, SloLabel, SloObjective, SloQuery
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
from tfgrafana.framework.resource_id import new_resource_id, string_id_field
from tfgrafana.framework.schema import Block, Float64Attribute, Schema, StringAttribute
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import Float64Value, StringValue
from tfgrafana.framework.validators import matches_regex
from tfgrafana.resources.common import check_delete_error, check_read_error

logger = structlog.get_logger()

LABEL_KEY_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
WINDOW_RE = re.compile(r"^\d+[mhdw]$")


@dataclass
class LabelModel:
    key: StringValue = tfsdk("key", StringValue)
    value: StringValue = tfsdk("value", StringValue)


@dataclass
class ObjectiveModel:
    objective_value: Float64Value = tfsdk("objective_value", Float64Value)
    objective_window: StringValue = tfsdk("objective_window", StringValue)


@dataclass
class SloModel:
    id: StringValue = tfsdk("id", StringValue)
    name: StringValue = tfsdk("name", StringValue)
    description: StringValue = tfsdk("description", StringValue)
    query: StringValue = tfsdk("query", StringValue)
    labels: list[LabelModel] = tfsdk("labels", list)
    objectives: list[ObjectiveModel] = tfsdk("objectives", list)
    dashboard_uid: StringValue = tfsdk("dashboard_uid", StringValue)


def to_client(model: SloModel) -> Slo:
    return Slo(
        name=model.name.value_string(),
        description=model.description.value_string(),
        query=SloQuery.of(model.query.value_string()),
        objectives=[
            SloObjective(value=o.objective_value.value_float64(), window=o.objective_window.value_string())
            for o in model.objectives
        ],
        labels=[SloLabel(key=label.key.value_string(), value=label.value.value_string()) for label in model.labels] or None,
    )


def apply_client(model: SloModel, slo: Slo) -> None:
    model.name = StringValue(slo.name)
    model.description = StringValue(slo.description)
    model.query = StringValue(slo.query.text)
    model.objectives = [
        ObjectiveModel(Float64Value(o.value), StringValue(o.window)) for o in slo.objectives
    ]
    model.labels = [LabelModel(StringValue(label.key), StringValue(label.value)) for label in slo.labels or []]
    if slo.drill_down_dashboard_ref is not None:
        model.dashboard_uid = StringValue(slo.drill_down_dashboard_ref.uid or None)


class SloResource(Resource):
    type_name = "grafana_slo"
    category = Category.SLO
    resource_id = new_resource_id(string_id_field("uuid"), resource_type=type_name)

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes={
                "id": StringAttribute(computed=True, description="The UUID of the SLO."),
                "name": StringAttribute(required=True, description="Name should be a short description of your indicator."),
                "description": StringAttribute(
                    required=True,
                    description="Description is a free-text field that can provide more context to an SLO.",
                ),
                "query": StringAttribute(
                    required=True,
                    description=(
                        "Freeform query: a ratio of good events to total events, for example "
                        "`sum(rate(http_requests_total{code!~\"5..\"}[$__rate_interval])) / "
                        "sum(rate(http_requests_total[$__rate_interval]))`."
                    ),
                ),
                "dashboard_uid": StringAttribute(
                    computed=True,
                    description="UID of the drill-down dashboard generated for the SLO.",
                ),
            },
            blocks={
                "labels": Block(
                    description="Additional labels that will be attached to all metrics generated from the query.",
                    attributes={
                        "key": StringAttribute(
                            required=True,
                            validators=(matches_regex(LABEL_KEY_RE, "must be a valid Prometheus label name"),),
                            description="Key for filtering and identification.",
                        ),
                        "value": StringAttribute(required=True, description="Templatable value."),
                    },
                ),
                "objectives": Block(
                    required=True,
                    description="Over each rolling time window, the remaining error budget is calculated.",
                    attributes={
                        "objective_value": Float64Attribute(
                            required=True,
                            description="Fraction of good events, between 0 and 1, that must be met.",
                        ),
                        "objective_window": StringAttribute(
                            required=True,
                            validators=(matches_regex(WINDOW_RE, "must be a duration such as 28d or 4w"),),
                            description="A Prometheus-parsable time duration string like 24h, 60m.",
                        ),
                    },
                ),
            },
        )

    async def create(self, req: CreateRequest, resp: Response) -> None:
        data, diags = req.plan.get(SloModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        try:
            uuid = await self.client.new_slo(to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to create SLO", str(exc))
            return

        data.id = StringValue(self.resource_id.make(uuid))
        resp.state.set(data)
        logger.info("slo_created", id=uuid, name=data.name.value)
        await self.read(ReadRequest(resp.state), resp)

    async def read(self, req: ReadRequest, resp: Response) -> None:
        data, diags = req.state.get(SloModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        uuid = data.id.value_string()
        try:
            slo = await self.client.slo(uuid)
        except ProviderError as exc:
            check_read_error(exc, resp, self.type_name, "Failed to read SLO")
            return

        apply_client(data, slo)
        resp.state.set(data)

    async def update(self, req: UpdateRequest, resp: Response) -> None:
        data, diags = req.plan.get(SloModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        try:
            await self.client.update_slo(data.id.value_string(), to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to update SLO", str(exc))
            return
        resp.state.set(data)
        await self.read(ReadRequest(resp.state), resp)

    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        data, diags = req.state.get(SloModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        try:
            await self.client.delete_slo(data.id.value_string())
        except ProviderError as exc:
            check_delete_error(exc, resp, "Failed to delete SLO")

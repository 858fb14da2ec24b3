"""
grafana_annotation: an annotation on the organization or on a dashboard panel.

* [Official documentation](https://grafana.com/docs/grafana/latest/dashboards/build-dashboards/annotate-visualizations/)
* [HTTP API](https://grafana.com/docs/grafana/latest/developers/http_api/annotations/)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import structlog

from tfgrafana.clients.grafana import Annotation
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
from tfgrafana.framework.resource_id import ResourceIDError, int_id_field, new_resource_id
from tfgrafana.framework.schema import Int64Attribute, Schema, SetAttribute, StringAttribute
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import Int64Value, SetValue, StringValue
from tfgrafana.framework.validators import format_rfc3339, parse_rfc3339, rfc3339_time
from tfgrafana.resources.common import check_delete_error, check_read_error, org_id_for

logger = structlog.get_logger()

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MILLISECOND = timedelta(milliseconds=1)


@dataclass
class AnnotationModel:
    id: StringValue = tfsdk("id", StringValue)
    org_id: Int64Value = tfsdk("org_id", Int64Value)
    text: StringValue = tfsdk("text", StringValue)
    time: StringValue = tfsdk("time", StringValue)
    time_end: StringValue = tfsdk("time_end", StringValue)
    dashboard_uid: StringValue = tfsdk("dashboard_uid", StringValue)
    panel_id: Int64Value = tfsdk("panel_id", Int64Value)
    tags: SetValue = tfsdk("tags", SetValue)


def to_epoch_millis(value: StringValue) -> int | None:
    if value.is_null or not value.value:
        return None
    return (parse_rfc3339(value.value_string()) - EPOCH) // MILLISECOND


def from_epoch_millis(millis: int | None, current: StringValue) -> StringValue:
    """RFC3339 rendering of ``millis``; keeps ``current`` when it names the same instant."""
    if not millis:
        return StringValue(None)
    if not current.is_null and to_epoch_millis(current) == millis:
        return current
    return StringValue(format_rfc3339(EPOCH + millis * MILLISECOND))


def to_client(model: AnnotationModel) -> Annotation:
    return Annotation(
        dashboard_uid=model.dashboard_uid.value or None,
        panel_id=model.panel_id.value,
        time=to_epoch_millis(model.time),
        time_end=to_epoch_millis(model.time_end),
        tags=None if model.tags.is_null else model.tags.elements_as(),
        text=model.text.value_string(),
    )


def apply_client(model: AnnotationModel, annotation: Annotation) -> None:
    """Copy remote annotation fields onto ``model``."""
    model.text = StringValue(annotation.text)
    model.time = from_epoch_millis(annotation.time, model.time)
    model.time_end = from_epoch_millis(annotation.time_end, model.time_end)
    if annotation.dashboard_uid:
        model.dashboard_uid = StringValue(annotation.dashboard_uid)
    if annotation.panel_id:
        model.panel_id = Int64Value(annotation.panel_id)
    if annotation.tags or not model.tags.is_null:
        model.tags = SetValue.of(annotation.tags or [])


class AnnotationResource(Resource):
    type_name = "grafana_annotation"
    category = Category.GRAFANA_OSS
    resource_id = new_resource_id(int_id_field("org_id"), int_id_field("annotation_id"), resource_type=type_name)

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
                "text": StringAttribute(required=True, description="The text to associate with the annotation."),
                "time": StringAttribute(
                    optional=True,
                    computed=True,
                    validators=(rfc3339_time(),),
                    description="The RFC 3339-formatted time string indicating the annotation's time.",
                ),
                "time_end": StringAttribute(
                    optional=True,
                    computed=True,
                    validators=(rfc3339_time(),),
                    description="The RFC 3339-formatted time string indicating the annotation's end time.",
                ),
                "dashboard_uid": StringAttribute(
                    optional=True,
                    force_new=True,
                    description="The UID of the dashboard on which to create the annotation.",
                ),
                "panel_id": Int64Attribute(
                    optional=True,
                    force_new=True,
                    description="The ID of the dashboard panel on which to create the annotation.",
                ),
                "tags": SetAttribute(optional=True, description="The tags to associate with the annotation."),
            },
        )

    def _split(self, model: AnnotationModel) -> tuple[int, int]:
        org_id, annotation_id = self.resource_id.split(model.id.value_string())  # type: ignore[union-attr]
        return org_id, annotation_id

    async def create(self, req: CreateRequest, resp: Response) -> None:
        data, diags = req.plan.get(AnnotationModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        org_id = org_id_for(self.client, data.org_id)
        try:
            annotation_id = await self.client.for_org(org_id).new_annotation(to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to create annotation", str(exc))
            return

        data.id = StringValue(self.resource_id.make(org_id, annotation_id))  # type: ignore[union-attr]
        data.org_id = Int64Value(org_id)
        resp.state.set(data)
        logger.info("annotation_created", id=data.id.value, org_id=org_id)
        await self.read(ReadRequest(resp.state), resp)

    async def read(self, req: ReadRequest, resp: Response) -> None:
        data, diags = req.state.get(AnnotationModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            org_id, annotation_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            annotation = await self.client.for_org(org_id).annotation(annotation_id)
        except ProviderError as exc:
            check_read_error(exc, resp, self.type_name, "Failed to read annotation")
            return

        data.org_id = Int64Value(org_id)
        apply_client(data, annotation)
        resp.state.set(data)

    async def update(self, req: UpdateRequest, resp: Response) -> None:
        data, diags = req.plan.get(AnnotationModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            org_id, annotation_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            await self.client.for_org(org_id).update_annotation(annotation_id, to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to update annotation", str(exc))
            return
        resp.state.set(data)
        await self.read(ReadRequest(resp.state), resp)

    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        data, diags = req.state.get(AnnotationModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            org_id, annotation_id = self._split(data)
        except ResourceIDError as exc:
            resp.diagnostics.add_error("Invalid ID", str(exc))
            return

        try:
            await self.client.for_org(org_id).delete_annotation(annotation_id)
        except ProviderError as exc:
            check_delete_error(exc, resp, "Failed to delete annotation")

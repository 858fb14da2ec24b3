import json

import pytest
import respx
from httpx import Response

from tfgrafana.framework.lifecycle import InstanceStatus, ResourceInstance
from tfgrafana.framework.types import StringValue
from tfgrafana.resources.grafana.resource_annotation import AnnotationResource, from_epoch_millis, to_epoch_millis

GRAFANA_URL = "https://grafana.example.com"
ANNOTATIONS_URL = f"{GRAFANA_URL}/api/annotations"

# 2024-01-02T03:04:05Z
MILLIS = 1704164645000

REMOTE = {
    "id": 5,
    "dashboardUID": "d1",
    "panelId": 4,
    "time": MILLIS,
    "timeEnd": MILLIS,
    "text": "deploy",
    "tags": ["prod", "deploy"],
}

CONFIG = {
    "text": "deploy",
    "time": "2024-01-02T03:04:05Z",
    "dashboard_uid": "d1",
    "panel_id": 4,
    "tags": ["deploy", "prod"],
}


def test_epoch_conversion_keeps_equivalent_user_format():
    assert to_epoch_millis(StringValue("2024-01-02T03:04:05Z")) == MILLIS
    assert to_epoch_millis(StringValue(None)) is None

    offset = StringValue("2024-01-02T04:04:05+01:00")
    assert from_epoch_millis(MILLIS, offset) is offset
    assert from_epoch_millis(MILLIS, StringValue(None)).value == "2024-01-02T03:04:05Z"
    assert from_epoch_millis(MILLIS + 1000, offset).value == "2024-01-02T03:04:06Z"
    assert from_epoch_millis(0, offset).is_null


def test_epoch_conversion_keeps_milliseconds():
    rendered = from_epoch_millis(1577836800123, StringValue(None))
    assert rendered.value == "2020-01-01T00:00:00.123Z"
    assert to_epoch_millis(rendered) == 1577836800123
    assert to_epoch_millis(StringValue("2020-01-01T01:00:00.123+01:00")) == 1577836800123


def test_invalid_time_rejected_at_plan(configured):
    instance = ResourceInstance(configured(AnnotationResource))
    diags = instance.plan({"text": "deploy", "time": "yesterday"})
    assert [d.path for d in diags.errors] == ["time"]


@pytest.mark.asyncio
async def test_create_update_delete(configured):
    instance = ResourceInstance(configured(AnnotationResource))

    with respx.mock:
        create = respx.post(ANNOTATIONS_URL).mock(return_value=Response(200, json={"id": 5, "message": "Annotation added"}))
        read = respx.get(f"{ANNOTATIONS_URL}/5").mock(return_value=Response(200, json=REMOTE))

        instance.plan(CONFIG)
        diags = await instance.apply()

        assert not diags.has_error(), diags
        request = create.calls.last.request
        assert request.headers["X-Grafana-Org-Id"] == "1"
        assert json.loads(request.content) == {
            "dashboardUID": "d1",
            "panelId": 4,
            "time": MILLIS,
            "tags": ["deploy", "prod"],
            "text": "deploy",
        }
        state = instance.state.raw
        assert instance.id == "1:5"
        assert state["org_id"] == 1
        assert state["time"] == "2024-01-02T03:04:05Z"
        assert state["time_end"] == "2024-01-02T03:04:05Z"
        assert set(state["tags"]) == {"deploy", "prod"}

        update = respx.put(f"{ANNOTATIONS_URL}/5").mock(return_value=Response(200, json={"message": "Annotation patched"}))
        read.mock(return_value=Response(200, json={**REMOTE, "text": "rollback"}))

        instance.plan({**CONFIG, "text": "rollback"})
        assert not instance.requires_replace
        diags = await instance.apply()

        assert not diags.has_error(), diags
        assert json.loads(update.calls.last.request.content)["text"] == "rollback"
        assert instance.state.raw["text"] == "rollback"

        delete = respx.delete(f"{ANNOTATIONS_URL}/5").mock(return_value=Response(200, json={"message": "Annotation deleted"}))
        diags = await instance.destroy()

        assert not diags.has_error()
        assert delete.called
        assert instance.status is InstanceStatus.DELETED


@pytest.mark.asyncio
async def test_moving_to_another_dashboard_replaces(configured):
    instance = ResourceInstance(
        configured(AnnotationResource),
        {"id": "1:5", "org_id": 1, "text": "deploy", "dashboard_uid": "d1", "panel_id": 4},
    )
    instance.plan({**CONFIG, "dashboard_uid": "d2"})
    assert instance.requires_replace


@pytest.mark.asyncio
async def test_import_and_gone(configured):
    instance = ResourceInstance(configured(AnnotationResource))

    with respx.mock:
        route = respx.get(f"{ANNOTATIONS_URL}/5").mock(return_value=Response(200, json=REMOTE))
        diags = await instance.import_("2:5")

        assert not diags.has_error(), diags
        assert instance.state.raw["org_id"] == 2
        assert instance.state.raw["text"] == "deploy"

        route.mock(return_value=Response(404, json={"message": "not found"}))
        diags = await instance.refresh()

    assert not diags.has_error()
    assert instance.status is InstanceStatus.ABSENT


@pytest.mark.asyncio
async def test_import_rejects_malformed_id(configured):
    instance = ResourceInstance(configured(AnnotationResource))
    diags = await instance.import_("5")
    assert diags.errors[0].summary == "Invalid ID"


@pytest.mark.asyncio
async def test_delete_of_missing_annotation_succeeds(configured):
    instance = ResourceInstance(configured(AnnotationResource), {"id": "1:5", "text": "deploy"})

    with respx.mock:
        respx.delete(f"{ANNOTATIONS_URL}/5").mock(return_value=Response(404, json={}))
        diags = await instance.destroy()

    assert not diags.has_error()
    assert instance.state.removed

import json

import pytest
import respx
from httpx import Response

from tfgrafana.framework.lifecycle import ResourceInstance
from tfgrafana.resources.grafana.resource_dashboard_public import DashboardPublicResource

GRAFANA_URL = "https://grafana.example.com"
PUBLIC_URL = f"{GRAFANA_URL}/api/dashboards/uid/d1/public-dashboards"

REMOTE = {
    "uid": "pd1",
    "dashboardUid": "d1",
    "accessToken": "e99e4275da6f410d83760eefa934d8d2",
    "timeSelectionEnabled": True,
    "isEnabled": True,
    "annotationsEnabled": False,
    "share": "public",
}


@pytest.mark.asyncio
async def test_lifecycle(configured):
    instance = ResourceInstance(configured(DashboardPublicResource))

    with respx.mock:
        create = respx.post(PUBLIC_URL).mock(return_value=Response(200, json=REMOTE))
        read = respx.get(PUBLIC_URL).mock(return_value=Response(200, json=REMOTE))

        instance.plan({"dashboard_uid": "d1", "is_enabled": True, "time_selection_enabled": True, "share": "public"})
        diags = await instance.apply()

        assert not diags.has_error(), diags
        assert json.loads(create.calls.last.request.content) == {
            "dashboardUid": "d1",
            "timeSelectionEnabled": True,
            "isEnabled": True,
            "share": "public",
        }
        state = instance.state.raw
        assert instance.id == "1:d1:pd1"
        assert state["uid"] == "pd1"
        assert state["access_token"] == REMOTE["accessToken"]
        assert state["annotations_enabled"] is False

        patch = respx.patch(f"{PUBLIC_URL}/pd1").mock(return_value=Response(200, json={**REMOTE, "isEnabled": False}))
        read.mock(return_value=Response(200, json={**REMOTE, "isEnabled": False}))

        instance.plan({"dashboard_uid": "d1", "is_enabled": False, "time_selection_enabled": True, "share": "public"})
        assert not instance.requires_replace
        diags = await instance.apply()

        assert not diags.has_error(), diags
        sent = json.loads(patch.calls.last.request.content)
        assert sent["isEnabled"] is False
        assert sent["uid"] == "pd1"
        assert instance.state.raw["is_enabled"] is False

        delete = respx.delete(f"{PUBLIC_URL}/pd1").mock(return_value=Response(200, json={}))
        diags = await instance.destroy()

    assert not diags.has_error()
    assert delete.called


def test_invalid_share_mode(configured):
    instance = ResourceInstance(configured(DashboardPublicResource))
    diags = instance.plan({"dashboard_uid": "d1", "share": "everyone"})
    assert [d.path for d in diags.errors] == ["share"]


@pytest.mark.asyncio
async def test_changing_dashboard_replaces(configured):
    instance = ResourceInstance(
        configured(DashboardPublicResource),
        {"id": "1:d1:pd1", "org_id": 1, "uid": "pd1", "dashboard_uid": "d1"},
    )
    instance.plan({"dashboard_uid": "d2"})
    assert instance.requires_replace


@pytest.mark.asyncio
async def test_import_uses_org_from_id(configured):
    instance = ResourceInstance(configured(DashboardPublicResource))

    with respx.mock:
        route = respx.get(PUBLIC_URL).mock(return_value=Response(200, json=REMOTE))
        diags = await instance.import_("4:d1:pd1")

    assert not diags.has_error(), diags
    assert route.calls.last.request.headers["X-Grafana-Org-Id"] == "4"
    assert instance.state.raw["org_id"] == 4
    assert instance.state.raw["dashboard_uid"] == "d1"

import json

import pytest
import respx
from httpx import Response

from tfgrafana.framework.lifecycle import InstanceStatus, ResourceInstance
from tfgrafana.resources.grafana import SloResource

GRAFANA_URL = "https://grafana.example.com"
SLO_URL = f"{GRAFANA_URL}/api/plugins/grafana-slo-app/resources/v1/slo"

QUERY = (
    'sum(rate(apiserver_request_total{code!="500"}[$__rate_interval])) '
    "/ sum(rate(apiserver_request_total[$__rate_interval]))"
)

CONFIG = {
    "name": "Terraform Testing",
    "description": "Terraform Description",
    "query": QUERY,
    "objectives": [{"objective_value": 0.995, "objective_window": "30d"}],
    "labels": [{"key": "custom", "value": "value"}],
}

REMOTE = {
    "uuid": "slo-1",
    "name": "Terraform Testing",
    "description": "Terraform Description",
    "query": {"type": "freeform", "freeform": {"query": QUERY}},
    "objectives": [{"value": 0.995, "window": "30d"}],
    "labels": [{"key": "custom", "value": "value"}],
    "drillDownDashboardRef": {"uid": "dash-1"},
}


@pytest.mark.asyncio
async def test_create_update_delete(configured):
    instance = ResourceInstance(configured(SloResource))

    with respx.mock:
        create = respx.post(SLO_URL).mock(return_value=Response(202, json={"uuid": "slo-1", "message": "SLO created"}))
        read = respx.get(f"{SLO_URL}/slo-1").mock(return_value=Response(200, json=REMOTE))

        assert not instance.plan(CONFIG).has_error()
        diags = await instance.apply()

        assert not diags.has_error(), diags
        assert json.loads(create.calls.last.request.content) == {
            "name": "Terraform Testing",
            "description": "Terraform Description",
            "query": {"type": "freeform", "freeform": {"query": QUERY}},
            "objectives": [{"value": 0.995, "window": "30d"}],
            "labels": [{"key": "custom", "value": "value"}],
        }
        state = instance.state.raw
        assert instance.id == "slo-1"
        assert state["dashboard_uid"] == "dash-1"
        assert state["objectives"] == [{"objective_value": 0.995, "objective_window": "30d"}]
        assert state["labels"] == [{"key": "custom", "value": "value"}]

        update = respx.put(f"{SLO_URL}/slo-1").mock(return_value=Response(200, json={}))
        read.mock(return_value=Response(200, json={**REMOTE, "objectives": [{"value": 0.99, "window": "28d"}]}))

        instance.plan({**CONFIG, "objectives": [{"objective_value": 0.99, "objective_window": "28d"}]})
        assert not instance.requires_replace
        diags = await instance.apply()

        assert not diags.has_error(), diags
        body = json.loads(update.calls.last.request.content)
        assert body["uuid"] == "slo-1"
        assert body["objectives"] == [{"value": 0.99, "window": "28d"}]
        assert instance.state.raw["objectives"] == [{"objective_value": 0.99, "objective_window": "28d"}]

        delete = respx.delete(f"{SLO_URL}/slo-1").mock(return_value=Response(204))
        diags = await instance.destroy()

    assert not diags.has_error()
    assert delete.called
    assert instance.status is InstanceStatus.DELETED


def test_objectives_are_required(configured):
    instance = ResourceInstance(configured(SloResource))
    diags = instance.plan({k: v for k, v in CONFIG.items() if k != "objectives"})
    assert [d.path for d in diags.errors] == ["objectives"]


def test_invalid_label_key_and_window(configured):
    instance = ResourceInstance(configured(SloResource))
    diags = instance.plan(
        {
            **CONFIG,
            "labels": [{"key": "not-a-label", "value": "v"}],
            "objectives": [{"objective_value": 0.9, "objective_window": "thirty days"}],
        }
    )
    assert sorted(d.path for d in diags.errors) == ["labels[0].key", "objectives[0].objective_window"]


@pytest.mark.asyncio
async def test_import_and_gone(configured):
    instance = ResourceInstance(configured(SloResource))

    with respx.mock:
        route = respx.get(f"{SLO_URL}/slo-1").mock(return_value=Response(200, json=REMOTE))
        diags = await instance.import_("slo-1")

        assert not diags.has_error(), diags
        assert instance.state.raw["query"] == QUERY

        route.mock(return_value=Response(404, json={"message": "not found"}))
        diags = await instance.refresh()

    assert not diags.has_error()
    assert instance.status is InstanceStatus.ABSENT

import json

import pytest
import respx
from httpx import Response

from tfgrafana.clients.grafana import TeamLBACRule
from tfgrafana.framework.lifecycle import ResourceInstance
from tfgrafana.resources.grafana.resource_data_source_config_lbac_rules import (
    DataSourceConfigLBACRulesResource,
    parse_rules,
    rules_json,
)

GRAFANA_URL = "https://grafana.example.com"
LBAC_URL = f"{GRAFANA_URL}/api/datasources/uid/loki-uid/lbac/teams"

RULES = json.dumps({"1": ['{ foo != "bar" }'], "2": ['{ env = "prod" }', '{ app =~ "web.*" }']})


class TestParseRules:
    def test_valid(self):
        rules, diags = parse_rules(RULES)
        assert not diags
        assert [r.team_id for r in rules] == ["1", "2"]
        assert rules[1].rules == ['{ env = "prod" }', '{ app =~ "web.*" }']

    def test_non_integer_team_id(self):
        _, diags = parse_rules(json.dumps({"platform": ["{}"]}))
        assert diags.errors[0].summary == "Invalid team ID"

    def test_malformed_json(self):
        _, diags = parse_rules("{not json")
        assert diags.errors[0].summary == "Invalid rules JSON"

    def test_wrong_shape(self):
        _, diags = parse_rules(json.dumps({"1": "not-a-list"}))
        assert diags.errors[0].path == "rules"


def test_rules_json_keeps_equivalent_text():
    rules = [TeamLBACRule(team_id="1", rules=["a"])]
    pretty = '{\n  "1": ["a"]\n}'
    assert rules_json(rules, pretty) == pretty
    assert rules_json(rules, '{"1": ["b"]}') == '{"1":["a"]}'
    assert rules_json(rules) == '{"1":["a"]}'


@pytest.mark.asyncio
async def test_create_and_read(configured):
    instance = ResourceInstance(configured(DataSourceConfigLBACRulesResource))

    with respx.mock:
        put = respx.put(LBAC_URL).mock(return_value=Response(200, json={"message": "Data source updated"}))
        respx.get(LBAC_URL).mock(
            return_value=Response(
                200,
                json={
                    "rules": [
                        {"teamId": 1, "rules": ['{ foo != "bar" }']},
                        {"teamId": "2", "rules": ['{ env = "prod" }', '{ app =~ "web.*" }']},
                    ]
                },
            )
        )

        instance.plan({"datasource_uid": "loki-uid", "rules": RULES})
        diags = await instance.apply()
        assert not diags.has_error(), diags
        assert json.loads(put.calls.last.request.content) == {
            "rules": [
                {"teamId": "1", "rules": ['{ foo != "bar" }']},
                {"teamId": "2", "rules": ['{ env = "prod" }', '{ app =~ "web.*" }']},
            ]
        }
        assert instance.id == "loki-uid"

        await instance.refresh()

    assert instance.state.raw["rules"] == RULES


@pytest.mark.asyncio
async def test_invalid_team_id_fails_before_request(configured):
    instance = ResourceInstance(configured(DataSourceConfigLBACRulesResource))

    with respx.mock() as router:
        instance.plan({"datasource_uid": "loki-uid", "rules": json.dumps({"abc": ["{}"]})})
        diags = await instance.apply()

    assert diags.errors[0].summary == "Invalid team ID"
    assert len(router.calls) == 0
    assert instance.state.removed


@pytest.mark.asyncio
async def test_update_validates_team_ids(configured):
    instance = ResourceInstance(
        configured(DataSourceConfigLBACRulesResource),
        {"id": "loki-uid", "datasource_uid": "loki-uid", "rules": RULES},
    )
    instance.plan({"datasource_uid": "loki-uid", "rules": json.dumps({"x": []})})
    diags = await instance.apply()
    assert diags.errors[0].summary == "Invalid team ID"


@pytest.mark.asyncio
async def test_delete_warns(configured):
    instance = ResourceInstance(
        configured(DataSourceConfigLBACRulesResource),
        {"id": "loki-uid", "datasource_uid": "loki-uid", "rules": RULES},
    )
    diags = await instance.destroy()

    assert not diags.has_error()
    assert diags.warnings[0].summary == "Operation not supported"
    assert instance.state.removed


@pytest.mark.asyncio
async def test_import_sets_datasource_uid(configured):
    instance = ResourceInstance(configured(DataSourceConfigLBACRulesResource))

    with respx.mock:
        respx.get(LBAC_URL).mock(return_value=Response(200, json={"rules": [{"teamId": "1", "rules": ["{}"]}]}))
        diags = await instance.import_("loki-uid")

    assert not diags.has_error(), diags
    assert instance.state.raw["datasource_uid"] == "loki-uid"
    assert json.loads(instance.state.raw["rules"]) == {"1": ["{}"]}

"""
grafana_data_source_config_lbac_rules: manages LBAC rules for a data source.

!> Warning: The resource is experimental and will be subject to change. This
resource manages the entire LBAC rules tree, and will overwrite any existing
rules.

* [Official documentation](https://grafana.com/docs/grafana/latest/administration/data-source-management/teamlbac/)

This resource requires Grafana >=11.0.0.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

import structlog

from tfgrafana.clients.grafana import TeamLBACRule
from tfgrafana.core.errors import ProviderError
from tfgrafana.framework.diagnostics import Diagnostics
from tfgrafana.framework.resource import (
    Category,
    CreateRequest,
    DeleteRequest,
    ImportStateRequest,
    ReadRequest,
    Resource,
    Response,
    UpdateRequest,
)
from tfgrafana.framework.resource_id import new_resource_id, string_id_field
from tfgrafana.framework.schema import Schema, StringAttribute
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import StringValue
from tfgrafana.resources.common import check_read_error

logger = structlog.get_logger()


@dataclass
class LBACRulesModel:
    id: StringValue = tfsdk("id", StringValue)
    datasource_uid: StringValue = tfsdk("datasource_uid", StringValue)
    rules: StringValue = tfsdk("rules", StringValue)


def parse_rules(rules_json: str) -> tuple[list[TeamLBACRule], Diagnostics]:
    """Decode the JSON map of team ID to rule list into client rules."""
    diags = Diagnostics()
    try:
        rules_map = json.loads(rules_json)
    except json.JSONDecodeError as exc:
        diags.add_error("Invalid rules JSON", f"Failed to parse rules: {exc}", path="rules")
        return [], diags
    if not isinstance(rules_map, dict) or not all(isinstance(v, list) for v in rules_map.values()):
        diags.add_error("Invalid rules JSON", "Failed to parse rules: expected a map of team IDs to lists of rules", path="rules")
        return [], diags

    rules = []
    for team_id, team_rules in rules_map.items():
        try:
            int(team_id)
        except ValueError:
            diags.add_error("Invalid team ID", f"Team ID {team_id} is not a valid integer", path="rules")
            continue
        rules.append(TeamLBACRule(team_id=team_id, rules=[str(r) for r in team_rules]))
    return rules, diags


def _decodes_to(text: str, expected: dict) -> bool:
    try:
        return json.loads(text) == expected
    except json.JSONDecodeError:
        return False


def rules_json(rules: list[TeamLBACRule], current: str | None = None) -> str:
    """Encode rules as JSON, keeping ``current`` when it already says the same thing."""
    rules_map = {rule.team_id: rule.rules for rule in rules}
    if current and _decodes_to(current, rules_map):
        return current
    return json.dumps(rules_map, sort_keys=True, separators=(",", ":"))


class DataSourceConfigLBACRulesResource(Resource):
    type_name = "grafana_data_source_config_lbac_rules"
    category = Category.GRAFANA_ENTERPRISE
    resource_id = new_resource_id(string_id_field("datasource_uid"), resource_type=type_name)

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes={
                "id": StringAttribute(computed=True, description="The UID of the datasource."),
                "datasource_uid": StringAttribute(
                    required=True,
                    force_new=True,
                    description="The UID of the datasource.",
                ),
                "rules": StringAttribute(
                    required=True,
                    description="JSON-encoded LBAC rules for the data source. Map of team IDs to lists of rule strings.",
                ),
            },
        )

    async def _write(self, req: CreateRequest | UpdateRequest, resp: Response, action: str) -> None:
        data, diags = req.plan.get(LBACRulesModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        rules, diags = parse_rules(data.rules.value_string())
        resp.diagnostics.extend(diags)
        if diags.has_error():
            return

        datasource_uid = data.datasource_uid.value_string()
        try:
            await self.client.update_team_lbac_rules(datasource_uid, rules)
        except ProviderError as exc:
            resp.diagnostics.add_error(f"Failed to {action} LBAC rules", str(exc))
            return

        logger.info("lbac_rules_written", action=action, datasource_uid=datasource_uid, teams=len(rules))
        data.id = StringValue(datasource_uid)
        resp.state.set(data)

    async def create(self, req: CreateRequest, resp: Response) -> None:
        await self._write(req, resp, "create")

    async def read(self, req: ReadRequest, resp: Response) -> None:
        data, diags = req.state.get(LBACRulesModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return

        datasource_uid = data.id.value_string()
        try:
            rules = await self.client.team_lbac_rules(datasource_uid)
        except ProviderError as exc:
            check_read_error(exc, resp, self.type_name, "Failed to get LBAC rules")
            return

        data.datasource_uid = StringValue(datasource_uid)
        data.rules = StringValue(rules_json(rules, data.rules.value))
        resp.state.set(data)

    async def update(self, req: UpdateRequest, resp: Response) -> None:
        await self._write(req, resp, "update")

    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        logger.warning("lbac_rules_delete_not_supported", id=req.state.id)
        resp.diagnostics.add_warning("Operation not supported", "Delete operation is not supported for LBAC rules")

    async def import_state(self, req: ImportStateRequest, resp: Response) -> None:
        await super().import_state(req, resp)
        if not resp.diagnostics.has_error():
            resp.state.set_attribute("datasource_uid", req.id)

"""
grafana_notification_policy: the alerting notification policy tree.

* [Official documentation](https://grafana.com/docs/grafana/latest/alerting/notifications/)
* [HTTP API](https://grafana.com/docs/grafana/next/developers/http_api/alerting_provisioning/#notification-policies)

There is exactly one policy tree per organization, so this is a singleton
resource with the constant ID ``policy``. Deleting it resets the tree to
Grafana's default.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from tfgrafana.clients.grafana import NotificationPolicy
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
from tfgrafana.framework.schema import Block, BoolAttribute, ListAttribute, Schema, StringAttribute
from tfgrafana.framework.tfsdk import tfsdk
from tfgrafana.framework.types import BoolValue, ListValue, StringValue
from tfgrafana.framework.validators import one_of
from tfgrafana.resources.common import check_read_error

logger = structlog.get_logger()

# Terraform schemas cannot recurse, so nested policies are exposed this many
# levels deep. Raising it is backwards compatible.
SUPPORTED_POLICY_TREE_DEPTH = 1

POLICY_SINGLETON_ID = "policy"

MATCH_OPERATORS = ("=", "!=", "=~", "!~")

_GROUP_BY_DESCRIPTION = (
    "A list of alert labels to group alerts into notifications by. Use the special label `...` "
    "to group alerts by all labels, effectively disabling grouping."
)


@dataclass
class MatcherModel:
    label: StringValue = tfsdk("label", StringValue)
    match: StringValue = tfsdk("match", StringValue)
    value: StringValue = tfsdk("value", StringValue)


@dataclass
class PolicyNode:
    """A routing rule. Child rules nest without limit in the model."""

    contact_point: StringValue = tfsdk("contact_point", StringValue)
    group_by: ListValue = tfsdk("group_by", ListValue)
    matchers: list[MatcherModel] = tfsdk("matcher", list)
    mute_timings: ListValue = tfsdk("mute_timings", ListValue)
    continue_: BoolValue = tfsdk("continue", BoolValue)
    group_wait: StringValue = tfsdk("group_wait", StringValue)
    group_interval: StringValue = tfsdk("group_interval", StringValue)
    repeat_interval: StringValue = tfsdk("repeat_interval", StringValue)
    policies: list[PolicyNode] = tfsdk("policy", list)


@dataclass
class NotificationPolicyModel:
    id: StringValue = tfsdk("id", StringValue)
    contact_point: StringValue = tfsdk("contact_point", StringValue)
    group_by: ListValue = tfsdk("group_by", ListValue)
    group_wait: StringValue = tfsdk("group_wait", StringValue)
    group_interval: StringValue = tfsdk("group_interval", StringValue)
    repeat_interval: StringValue = tfsdk("repeat_interval", StringValue)
    policies: list[PolicyNode] = tfsdk("policy", list)


def policy_schema(depth: int) -> Block:
    """Nested ``policy`` block schema, ``depth`` levels deep."""
    if depth < 1:
        raise ValueError("there is no valid schema for a policy tree with depth 0")

    blocks: dict[str, Block] = {
        "matcher": Block(
            description=(
                "Describes which labels this rule should match. When multiple matchers are supplied, "
                "an alert must match ALL matchers to be accepted by this policy."
            ),
            attributes={
                "label": StringAttribute(required=True, description="The name of the label to match against."),
                "match": StringAttribute(
                    required=True,
                    validators=(one_of(*MATCH_OPERATORS),),
                    description=(
                        "The operator to apply when matching values of the given label. Allowed operators are "
                        "`=` for equality, `!=` for negated equality, `=~` for regex equality, and `!~` for "
                        "negated regex equality."
                    ),
                ),
                "value": StringAttribute(required=True, description="The label value to match against."),
            },
        ),
    }
    if depth > 1:
        blocks["policy"] = policy_schema(depth - 1)

    return Block(
        description="Routing rules for specific label sets.",
        attributes={
            "contact_point": StringAttribute(
                required=True,
                description="The contact point to route notifications that match this rule to.",
            ),
            "group_by": ListAttribute(required=True, description=_GROUP_BY_DESCRIPTION),
            "mute_timings": ListAttribute(
                optional=True,
                description="A list of mute timing names to apply to alerts that match this policy.",
            ),
            "continue": BoolAttribute(
                optional=True,
                description=(
                    "Whether to continue matching subsequent rules if an alert matches the current rule. "
                    "Otherwise, the rule will be 'consumed' by the first policy to match it."
                ),
            ),
            "group_wait": StringAttribute(
                optional=True,
                description="Time to wait to buffer alerts of the same group before sending a notification.",
            ),
            "group_interval": StringAttribute(
                optional=True,
                description="Minimum time interval between two notifications for the same group.",
            ),
            "repeat_interval": StringAttribute(
                optional=True,
                description="Minimum time interval for re-sending a notification if an alert is still firing.",
            ),
        },
        blocks=blocks,
    )


def _list_or_none(value: ListValue) -> list[str] | None:
    return None if value.is_null else value.elements_as()


def node_to_route(node: PolicyNode) -> NotificationPolicy:
    return NotificationPolicy(
        receiver=node.contact_point.value,
        group_by=_list_or_none(node.group_by),
        object_matchers=[(m.label.value_string(), m.match.value_string(), m.value.value_string()) for m in node.matchers] or None,
        mute_time_intervals=_list_or_none(node.mute_timings),
        continue_=node.continue_.value,
        group_wait=node.group_wait.value,
        group_interval=node.group_interval.value,
        repeat_interval=node.repeat_interval.value,
        routes=[node_to_route(child) for child in node.policies] or None,
    )


def route_to_node(route: NotificationPolicy) -> PolicyNode:
    return PolicyNode(
        contact_point=StringValue(route.receiver),
        group_by=ListValue(None if route.group_by is None else tuple(route.group_by)),
        matchers=[
            MatcherModel(StringValue(label), StringValue(match), StringValue(value))
            for label, match, value in route.object_matchers or []
        ],
        mute_timings=ListValue(None if route.mute_time_intervals is None else tuple(route.mute_time_intervals)),
        continue_=BoolValue(route.continue_),
        group_wait=StringValue(route.group_wait),
        group_interval=StringValue(route.group_interval),
        repeat_interval=StringValue(route.repeat_interval),
        policies=[route_to_node(child) for child in route.routes or []],
    )


def to_client(model: NotificationPolicyModel) -> NotificationPolicy:
    return NotificationPolicy(
        receiver=model.contact_point.value,
        group_by=_list_or_none(model.group_by),
        group_wait=model.group_wait.value,
        group_interval=model.group_interval.value,
        repeat_interval=model.repeat_interval.value,
        routes=[node_to_route(p) for p in model.policies] or None,
    )


def to_typed(tree: NotificationPolicy) -> NotificationPolicyModel:
    return NotificationPolicyModel(
        id=StringValue(POLICY_SINGLETON_ID),
        contact_point=StringValue(tree.receiver),
        group_by=ListValue(None if tree.group_by is None else tuple(tree.group_by)),
        group_wait=StringValue(tree.group_wait),
        group_interval=StringValue(tree.group_interval),
        repeat_interval=StringValue(tree.repeat_interval),
        policies=[route_to_node(route) for route in tree.routes or []],
    )


class NotificationPolicyResource(Resource):
    type_name = "grafana_notification_policy"
    category = Category.ALERTING

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes={
                "id": StringAttribute(computed=True, description="The ID of this resource, always `policy`."),
                "contact_point": StringAttribute(
                    required=True,
                    description="The default contact point to route all unmatched notifications to.",
                ),
                "group_by": ListAttribute(required=True, description=_GROUP_BY_DESCRIPTION),
                "group_wait": StringAttribute(
                    optional=True,
                    computed=True,
                    description="Time to wait to buffer alerts of the same group before sending a notification. Default is 30 seconds.",
                ),
                "group_interval": StringAttribute(
                    optional=True,
                    computed=True,
                    description="Minimum time interval between two notifications for the same group. Default is 5 minutes.",
                ),
                "repeat_interval": StringAttribute(
                    optional=True,
                    computed=True,
                    description="Minimum time interval for re-sending a notification if an alert is still firing. Default is 4 hours.",
                ),
            },
            blocks={"policy": policy_schema(SUPPORTED_POLICY_TREE_DEPTH)},
        )

    async def _put_tree(self, req: CreateRequest | UpdateRequest, resp: Response) -> None:
        data, diags = req.plan.get(NotificationPolicyModel)
        resp.diagnostics.extend(diags)
        if data is None:
            return
        try:
            await self.client.set_notification_policy_tree(to_client(data))
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to set notification policy tree", str(exc))
            return
        resp.state.set_attribute("id", POLICY_SINGLETON_ID)
        await self.read(ReadRequest(resp.state), resp)

    async def create(self, req: CreateRequest, resp: Response) -> None:
        await self._put_tree(req, resp)

    async def read(self, req: ReadRequest, resp: Response) -> None:
        try:
            tree = await self.client.notification_policy_tree()
        except ProviderError as exc:
            check_read_error(exc, resp, self.type_name, "Failed to read notification policy tree")
            return
        resp.state.set(to_typed(tree))

    async def update(self, req: UpdateRequest, resp: Response) -> None:
        await self._put_tree(req, resp)

    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        try:
            await self.client.reset_notification_policy_tree()
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to reset notification policy tree", str(exc))
            return
        logger.info("notification_policy_reset")

"""
grafana_oncall_user data source.

* [Official documentation](https://grafana.com/docs/oncall/latest/manage/user-and-team-management/)
* [HTTP API](https://grafana.com/docs/oncall/latest/oncall-api-reference/users/)
"""

from __future__ import annotations

from tfgrafana.core.errors import ProviderError
from tfgrafana.framework.resource import Category, DataSource, ReadRequest, Response
from tfgrafana.framework.schema import Schema, StringAttribute

ONCALL_MISSING_CLIENT = (
    "The Grafana Provider is missing a configuration for the OnCall API. "
    "Please ensure that oncall_access_token (or url and auth) is set in the provider configuration."
)


class OnCallUserDataSource(DataSource):
    type_name = "grafana_oncall_user"
    category = Category.ONCALL
    client_attr = "oncall_api"
    missing_client_message = ONCALL_MISSING_CLIENT

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes={
                "id": StringAttribute(computed=True, description="The OnCall ID of the user."),
                "username": StringAttribute(required=True, description="The username of the user."),
                "email": StringAttribute(computed=True, description="The email of the user."),
                "role": StringAttribute(computed=True, description="The role of the user."),
            },
        )

    async def read(self, req: ReadRequest, resp: Response) -> None:
        username = req.state.get_attribute("username", "")
        try:
            users = await self.client.users(username)
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to look up OnCall user", str(exc))
            return

        if not users:
            resp.diagnostics.add_error(f"couldn't find a user matching: {username}")
            return
        if len(users) > 1:
            resp.diagnostics.add_error(f"more than one user found matching: {username}")
            return

        user = users[0]
        resp.state.set_attribute("id", user.id)
        resp.state.set_attribute("username", user.username or username)
        resp.state.set_attribute("email", user.email)
        resp.state.set_attribute("role", user.role)

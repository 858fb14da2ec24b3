from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from tfgrafana.clients.base import BaseHTTPClient

DEFAULT_ONCALL_URL = "https://oncall-prod-us-central-0.grafana.net/oncall"


class OnCallUser(BaseModel):
    id: str
    email: str = ""
    username: str = ""
    role: str = ""

    model_config = ConfigDict(extra="ignore")


class OnCallClient(BaseHTTPClient):
    """Grafana OnCall API client.

    OnCall expects the raw token in ``Authorization`` (no scheme) and, when
    authenticating through a Grafana stack, the stack URL in ``X-Grafana-Url``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_ONCALL_URL,
        token: str | None = None,
        *,
        grafana_url: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, **kwargs)
        self._token = token
        self._grafana_url = grafana_url

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._token:
            headers["Authorization"] = self._token
        if self._grafana_url:
            headers["X-Grafana-Url"] = self._grafana_url
        return headers

    async def users(self, username: str) -> list[OnCallUser]:
        data = await self.get("/api/v1/users/", params={"username": username})
        return [OnCallUser.model_validate(item) for item in data.get("results") or []]

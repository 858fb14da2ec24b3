from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from tfgrafana.clients.base import BaseHTTPClient

DEFAULT_SM_URL = "https://synthetic-monitoring-api.grafana.net"


class Probe(BaseModel):
    id: int
    name: str
    public: bool = False
    deprecated: bool = False
    region: str = ""

    model_config = ConfigDict(extra="ignore")


class SyntheticMonitoringClient(BaseHTTPClient):
    """Synthetic Monitoring API client."""

    def __init__(self, base_url: str = DEFAULT_SM_URL, token: str | None = None, **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def list_probes(self) -> list[Probe]:
        data = await self.get("/api/v1/probe/list")
        return [Probe.model_validate(item) for item in data or []]

"""
Grafana HTTP API client and payload models.

Covers the endpoints used by the Grafana resources: folder/dashboard search,
dashboards, alerting notification policies, data source LBAC rules,
annotations, public dashboards, SLOs (through the SLO app plugin) and
service accounts.
"""

from __future__ import annotations

import base64
import copy
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tfgrafana.clients.base import BaseHTTPClient

SEARCH_PAGE_LIMIT = 5000
SLO_PATH = "/api/plugins/grafana-slo-app/resources/v1/slo"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")


class FolderDashboardSearchResult(_CamelModel):
    id: int = 0
    uid: str = ""
    title: str = ""
    type: str = ""
    url: str = ""
    tags: list[str] = Field(default_factory=list)
    is_starred: bool = False
    folder_id: int = 0
    folder_uid: str = ""
    folder_title: str = ""


class DashboardMeta(_CamelModel):
    is_starred: bool = False
    folder_id: int = 0
    folder_uid: str = ""
    folder_title: str = ""
    slug: str = ""
    url: str = ""
    version: int = 0


class Dashboard(BaseModel):
    model: dict[str, Any] = Field(default_factory=dict, alias="dashboard")
    meta: DashboardMeta = Field(default_factory=DashboardMeta)

    model_config = ConfigDict(populate_by_name=True)


class NotificationPolicy(BaseModel):
    """One node of the alerting notification policy tree.

    The root node carries the default receiver; ``routes`` nest to any depth.
    """

    receiver: str | None = None
    group_by: list[str] | None = None
    object_matchers: list[tuple[str, str, str]] | None = None
    mute_time_intervals: list[str] | None = None
    continue_: bool | None = Field(default=None, alias="continue")
    group_wait: str | None = None
    group_interval: str | None = None
    repeat_interval: str | None = None
    routes: list[NotificationPolicy] | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TeamLBACRule(_CamelModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    team_id: str
    rules: list[str] = Field(default_factory=list)


class Annotation(_CamelModel):
    id: int | None = None
    dashboard_uid: str | None = Field(default=None, alias="dashboardUID")
    panel_id: int | None = None
    time: int | None = None
    time_end: int | None = None
    tags: list[str] | None = None
    text: str = ""


class PublicDashboard(_CamelModel):
    uid: str | None = None
    dashboard_uid: str | None = None
    access_token: str | None = None
    time_selection_enabled: bool | None = None
    is_enabled: bool | None = None
    annotations_enabled: bool | None = None
    share: str | None = None


class SloQuery(_CamelModel):
    type: str = "freeform"
    freeform: dict[str, str] | None = None

    @classmethod
    def of(cls, query: str) -> SloQuery:
        return cls(freeform={"query": query})

    @property
    def text(self) -> str:
        return (self.freeform or {}).get("query", "")


class SloObjective(_CamelModel):
    value: float
    window: str


class SloLabel(_CamelModel):
    key: str
    value: str


class DashboardRef(_CamelModel):
    uid: str = ""


class Slo(_CamelModel):
    uuid: str | None = None
    name: str
    description: str = ""
    query: SloQuery
    objectives: list[SloObjective] = Field(default_factory=list)
    labels: list[SloLabel] | None = None
    drill_down_dashboard_ref: DashboardRef | None = None


class ServiceAccount(_CamelModel):
    id: int | None = None
    name: str = ""
    role: str = ""
    is_disabled: bool = False
    tokens: int = 0


class ServiceAccountToken(_CamelModel):
    id: int
    name: str = ""
    key: str | None = None
    expiration: str | None = None
    has_expired: bool = False


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, exclude_none=True)


def _service_account_body(sa: ServiceAccount) -> dict[str, Any]:
    return sa.model_dump(by_alias=True, include={"name", "role", "is_disabled"})


class GrafanaClient(BaseHTTPClient):
    """Grafana API client with retry logic and circuit breaker."""

    def __init__(
        self,
        base_url: str,
        auth: str | None = None,
        *,
        org_id: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, **kwargs)
        self._auth = auth
        self._org_id = org_id

    @property
    def org_id(self) -> int | None:
        return self._org_id

    def for_org(self, org_id: int) -> GrafanaClient:
        """Return a client sharing this one's settings, scoped to ``org_id``."""
        scoped = copy.copy(self)
        scoped._org_id = org_id
        return scoped

    @property
    def uses_basic_auth(self) -> bool:
        return bool(self._auth) and ":" in self._auth  # type: ignore[operator]

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._auth and self._auth != "anonymous":
            if self.uses_basic_auth:
                encoded = base64.b64encode(self._auth.encode()).decode()
                headers.setdefault("Authorization", f"Basic {encoded}")
            else:
                headers.setdefault("Authorization", f"Bearer {self._auth}")
        if self._org_id is not None and self.uses_basic_auth:
            headers.setdefault("X-Grafana-Org-Id", str(self._org_id))
        return headers

    async def health(self) -> dict[str, Any]:
        return await self.get("/api/health")

    async def folder_dashboard_search(self, params: dict[str, Any]) -> list[FolderDashboardSearchResult]:
        """Run the folder/dashboard search, following pages until one comes back short."""
        limit = int(params.get("limit", SEARCH_PAGE_LIMIT))
        results: list[FolderDashboardSearchResult] = []
        page = 1
        while True:
            data = await self.get("/api/search", params={**params, "limit": limit, "page": page})
            batch = [FolderDashboardSearchResult.model_validate(item) for item in data or []]
            results.extend(batch)
            if len(batch) < limit:
                return results
            page += 1

    async def dashboard_by_uid(self, uid: str) -> Dashboard:
        data = await self.get(f"/api/dashboards/uid/{uid}")
        return Dashboard.model_validate(data)

    async def dashboard_version(self, uid: str, version: int) -> dict[str, Any]:
        data = await self.get(f"/api/dashboards/uid/{uid}/versions/{version}")
        return data.get("data", {})

    async def notification_policy_tree(self) -> NotificationPolicy:
        data = await self.get("/api/v1/provisioning/policies")
        return NotificationPolicy.model_validate(data)

    async def set_notification_policy_tree(self, tree: NotificationPolicy) -> None:
        await self.put("/api/v1/provisioning/policies", json=_dump(tree))

    async def reset_notification_policy_tree(self) -> None:
        await self.delete("/api/v1/provisioning/policies")

    async def team_lbac_rules(self, datasource_uid: str) -> list[TeamLBACRule]:
        data = await self.get(f"/api/datasources/uid/{datasource_uid}/lbac/teams")
        return [TeamLBACRule.model_validate(rule) for rule in data.get("rules") or []]

    async def update_team_lbac_rules(self, datasource_uid: str, rules: list[TeamLBACRule]) -> None:
        await self.put(
            f"/api/datasources/uid/{datasource_uid}/lbac/teams",
            json={"rules": [_dump(rule) for rule in rules]},
        )

    async def new_annotation(self, annotation: Annotation) -> int:
        data = await self.post("/api/annotations", json=_dump(annotation))
        return int(data["id"])

    async def annotation(self, annotation_id: int) -> Annotation:
        data = await self.get(f"/api/annotations/{annotation_id}")
        return Annotation.model_validate(data)

    async def update_annotation(self, annotation_id: int, annotation: Annotation) -> None:
        await self.put(f"/api/annotations/{annotation_id}", json=_dump(annotation))

    async def delete_annotation(self, annotation_id: int) -> None:
        await self.delete(f"/api/annotations/{annotation_id}")

    async def new_public_dashboard(self, dashboard_uid: str, pd: PublicDashboard) -> PublicDashboard:
        data = await self.post(f"/api/dashboards/uid/{dashboard_uid}/public-dashboards", json=_dump(pd))
        return PublicDashboard.model_validate(data)

    async def public_dashboard(self, dashboard_uid: str) -> PublicDashboard:
        data = await self.get(f"/api/dashboards/uid/{dashboard_uid}/public-dashboards")
        return PublicDashboard.model_validate(data)

    async def update_public_dashboard(self, dashboard_uid: str, uid: str, pd: PublicDashboard) -> PublicDashboard:
        data = await self.patch(f"/api/dashboards/uid/{dashboard_uid}/public-dashboards/{uid}", json=_dump(pd))
        return PublicDashboard.model_validate(data)

    async def delete_public_dashboard(self, dashboard_uid: str, uid: str) -> None:
        await self.delete(f"/api/dashboards/uid/{dashboard_uid}/public-dashboards/{uid}")

    async def new_slo(self, slo: Slo) -> str:
        """Create an SLO and return its UUID."""
        data = await self.post(SLO_PATH, json=_dump(slo))
        return str(data["uuid"])

    async def slo(self, uuid: str) -> Slo:
        data = await self.get(f"{SLO_PATH}/{uuid}")
        return Slo.model_validate(data)

    async def update_slo(self, uuid: str, slo: Slo) -> None:
        await self.put(f"{SLO_PATH}/{uuid}", json=_dump(slo.model_copy(update={"uuid": uuid})))

    async def delete_slo(self, uuid: str) -> None:
        await self.delete(f"{SLO_PATH}/{uuid}")

    async def new_service_account(self, sa: ServiceAccount) -> ServiceAccount:
        data = await self.post("/api/serviceaccounts", json=_service_account_body(sa))
        return ServiceAccount.model_validate(data)

    async def service_account(self, sa_id: int) -> ServiceAccount:
        data = await self.get(f"/api/serviceaccounts/{sa_id}")
        return ServiceAccount.model_validate(data)

    async def update_service_account(self, sa_id: int, sa: ServiceAccount) -> ServiceAccount:
        data = await self.patch(f"/api/serviceaccounts/{sa_id}", json=_service_account_body(sa))
        return ServiceAccount.model_validate(data.get("serviceaccount", data))

    async def delete_service_account(self, sa_id: int) -> None:
        await self.delete(f"/api/serviceaccounts/{sa_id}")

    async def new_service_account_token(
        self, sa_id: int, name: str, seconds_to_live: int | None = None
    ) -> ServiceAccountToken:
        body: dict[str, Any] = {"name": name}
        if seconds_to_live:
            body["secondsToLive"] = seconds_to_live
        data = await self.post(f"/api/serviceaccounts/{sa_id}/tokens", json=body)
        return ServiceAccountToken.model_validate(data)

    async def service_account_tokens(self, sa_id: int) -> list[ServiceAccountToken]:
        data = await self.get(f"/api/serviceaccounts/{sa_id}/tokens")
        return [ServiceAccountToken.model_validate(token) for token in data or []]

    async def delete_service_account_token(self, sa_id: int, token_id: int) -> None:
        await self.delete(f"/api/serviceaccounts/{sa_id}/tokens/{token_id}")

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from tfgrafana.clients.base import BaseHTTPClient
from tfgrafana.clients.grafana import GrafanaClient, ServiceAccount, ServiceAccountToken

logger = structlog.get_logger()

DEFAULT_CLOUD_API_URL = "https://grafana.com"
TEMPORARY_TOKEN_TTL = 60


def client_request_id() -> str:
    """Unique request ID attached to every mutating Grafana Cloud API call."""
    return f"tf-{uuid.uuid4()}"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")


class PostTokensRequest(_CamelModel):
    access_policy_id: str
    name: str
    display_name: str | None = None
    expires_at: str | None = None


class AccessPolicyToken(_CamelModel):
    id: str
    access_policy_id: str = ""
    name: str = ""
    display_name: str | None = None
    expires_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    token: str | None = None


class Stack(_CamelModel):
    id: int = 0
    slug: str = ""
    url: str = ""


class GrafanaCloudClient(BaseHTTPClient):
    """Grafana Cloud (grafana.com) API client."""

    def __init__(self, base_url: str = DEFAULT_CLOUD_API_URL, token: str | None = None, **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def create_token(self, region: str, request: PostTokensRequest) -> AccessPolicyToken:
        data = await self.post(
            "/api/v1/tokens",
            params={"region": region},
            json=request.model_dump(by_alias=True, exclude_none=True),
            headers={"X-Request-Id": client_request_id()},
        )
        return AccessPolicyToken.model_validate(data)

    async def get_token(self, region: str, token_id: str) -> AccessPolicyToken:
        data = await self.get(f"/api/v1/tokens/{token_id}", params={"region": region})
        return AccessPolicyToken.model_validate(data)

    async def update_token(self, region: str, token_id: str, display_name: str) -> AccessPolicyToken:
        data = await self.post(
            f"/api/v1/tokens/{token_id}",
            params={"region": region},
            json={"displayName": display_name},
            headers={"X-Request-Id": client_request_id()},
        )
        return AccessPolicyToken.model_validate(data)

    async def delete_token(self, region: str, token_id: str) -> None:
        await self.delete(
            f"/api/v1/tokens/{token_id}",
            params={"region": region},
            headers={"X-Request-Id": client_request_id()},
        )

    async def stack(self, slug: str) -> Stack:
        data = await self.get(f"/api/instances/{slug}")
        return Stack.model_validate(data)

    async def create_stack_service_account(self, slug: str, sa: ServiceAccount) -> ServiceAccount:
        data = await self.post(
            f"/api/instances/{slug}/api/serviceaccounts",
            json=sa.model_dump(by_alias=True, include={"name", "role", "is_disabled"}),
            headers={"X-Request-Id": client_request_id()},
        )
        return ServiceAccount.model_validate(data)

    async def create_stack_service_account_token(
        self, slug: str, sa_id: int, name: str, seconds_to_live: int
    ) -> ServiceAccountToken:
        data = await self.post(
            f"/api/instances/{slug}/api/serviceaccounts/{sa_id}/tokens",
            json={"name": name, "secondsToLive": seconds_to_live},
            headers={"X-Request-Id": client_request_id()},
        )
        return ServiceAccountToken.model_validate(data)

    @asynccontextmanager
    async def temporary_stack_client(self, slug: str, prefix: str = "terraform-temp-") -> AsyncIterator[GrafanaClient]:
        """Grafana client for stack ``slug``, authenticated by a short-lived admin service account.

        The service account is deleted on exit.
        """
        stack = await self.stack(slug)
        name = f"{prefix}{time.time_ns()}"
        sa = await self.create_stack_service_account(slug, ServiceAccount(name=name, role="Admin"))
        token = await self.create_stack_service_account_token(slug, sa.id or 0, name, TEMPORARY_TOKEN_TTL)
        client = GrafanaClient(
            stack.url,
            token.key,
            retries=self._retries,
            retry_status_codes=self._retry_status_codes,
            retry_wait=self._retry_wait,
        )
        logger.debug("temporary_stack_client_created", stack=slug, service_account=name)
        try:
            yield client
        finally:
            await client.delete_service_account(sa.id or 0)

import base64

import pytest
import respx
from httpx import Response

from tfgrafana.clients.base import NotFoundError, PermanentHTTPError, RetryableHTTPError, status_matches
from tfgrafana.clients.cloud import GrafanaCloudClient, PostTokensRequest
from tfgrafana.clients.grafana import GrafanaClient
from tfgrafana.clients.oncall import OnCallClient
from tfgrafana.version import USER_AGENT

GRAFANA_URL = "https://grafana.example.com"


def test_status_matches_wildcards():
    assert status_matches(503, ["5xx"])
    assert status_matches(429, ["429", "5xx"])
    assert not status_matches(404, ["429", "5xx"])
    assert status_matches(418, ["4X8"])


@pytest.mark.asyncio
async def test_client_retries_on_configured_status():
    client = GrafanaClient(GRAFANA_URL, "token", retries=2)

    with respx.mock:
        route = respx.get(f"{GRAFANA_URL}/api/health")
        route.side_effect = [
            Response(503),
            Response(429),
            Response(200, json={"database": "ok"}),
        ]

        health = await client.health()
        assert health["database"] == "ok"
        assert route.call_count == 3


@pytest.mark.asyncio
async def test_client_gives_up_after_retries():
    client = GrafanaClient(GRAFANA_URL, "token", retries=1)

    with respx.mock:
        route = respx.get(f"{GRAFANA_URL}/api/health").mock(return_value=Response(502))

        with pytest.raises(RetryableHTTPError):
            await client.health()
        assert route.call_count == 2


@pytest.mark.asyncio
async def test_custom_retry_status_codes():
    client = GrafanaClient(GRAFANA_URL, "token", retries=1, retry_status_codes=["409"])

    with respx.mock:
        route = respx.get(f"{GRAFANA_URL}/api/health")
        route.side_effect = [Response(409), Response(200, json={})]
        await client.health()
        assert route.call_count == 2

        route.side_effect = None
        route.mock(return_value=Response(503))
        with pytest.raises(PermanentHTTPError) as excinfo:
            await client.health()
        assert excinfo.value.status_code == 503


@pytest.mark.asyncio
async def test_client_not_found_no_retry():
    client = GrafanaClient(GRAFANA_URL, "token")

    with respx.mock:
        route = respx.get(f"{GRAFANA_URL}/api/annotations/7").mock(return_value=Response(404, text="not found"))

        with pytest.raises(NotFoundError) as excinfo:
            await client.annotation(7)

        assert route.call_count == 1
        assert excinfo.value.status_code == 404
        assert "not found" in str(excinfo.value)


@pytest.mark.asyncio
async def test_grafana_token_auth_headers():
    client = GrafanaClient(GRAFANA_URL, "glsa_token", headers={"X-Custom": "1"})

    with respx.mock:
        route = respx.get(f"{GRAFANA_URL}/api/health").mock(return_value=Response(200, json={}))
        await client.health()

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer glsa_token"
        assert request.headers["User-Agent"] == USER_AGENT
        assert request.headers["X-Custom"] == "1"
        assert "X-Grafana-Org-Id" not in request.headers


@pytest.mark.asyncio
async def test_grafana_basic_auth_is_org_scoped():
    client = GrafanaClient(GRAFANA_URL, "admin:secret", org_id=1)

    with respx.mock:
        route = respx.get(f"{GRAFANA_URL}/api/health").mock(return_value=Response(200, json={}))
        await client.for_org(3).health()

        request = route.calls.last.request
        expected = base64.b64encode(b"admin:secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["X-Grafana-Org-Id"] == "3"

    assert client.org_id == 1


@pytest.mark.asyncio
async def test_anonymous_auth_sends_no_credentials():
    client = GrafanaClient(GRAFANA_URL, "anonymous")

    with respx.mock:
        route = respx.get(f"{GRAFANA_URL}/api/health").mock(return_value=Response(200, json={}))
        await client.health()
        assert "Authorization" not in route.calls.last.request.headers


@pytest.mark.asyncio
async def test_search_follows_pages_until_short_page():
    client = GrafanaClient(GRAFANA_URL, "token")

    with respx.mock:
        route = respx.get(f"{GRAFANA_URL}/api/search")
        route.side_effect = [
            Response(200, json=[{"uid": "a"}, {"uid": "b"}]),
            Response(200, json=[{"uid": "c"}]),
        ]

        results = await client.folder_dashboard_search({"limit": 2, "type": "dash-db", "tag": ["x", "y"]})

        assert [r.uid for r in results] == ["a", "b", "c"]
        first, second = (call.request.url.params for call in route.calls)
        assert first["page"] == "1"
        assert second["page"] == "2"
        assert first.get_list("tag") == ["x", "y"]


@pytest.mark.asyncio
async def test_cloud_mutations_carry_request_id():
    client = GrafanaCloudClient("https://grafana.example.net", "cloud-token")

    with respx.mock:
        route = respx.post("https://grafana.example.net/api/v1/tokens").mock(
            return_value=Response(200, json={"id": "t1", "accessPolicyId": "p1", "name": "n", "token": "secret"})
        )
        token = await client.create_token("us", PostTokensRequest(access_policy_id="p1", name="n"))

        request = route.calls.last.request
        assert request.url.params["region"] == "us"
        assert request.headers["X-Request-Id"].startswith("tf-")
        assert request.headers["Authorization"] == "Bearer cloud-token"
        assert token.token == "secret"


@pytest.mark.asyncio
async def test_oncall_headers():
    client = OnCallClient("https://oncall.example.com", "sa-token", grafana_url=GRAFANA_URL)

    with respx.mock:
        route = respx.get("https://oncall.example.com/api/v1/users/").mock(
            return_value=Response(200, json={"results": [{"id": "U1", "username": "alice"}]})
        )
        users = await client.users("alice")

        request = route.calls.last.request
        assert request.headers["Authorization"] == "sa-token"
        assert request.headers["X-Grafana-Url"] == GRAFANA_URL
        assert users[0].id == "U1"

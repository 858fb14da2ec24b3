import json

import pytest
import respx
from httpx import Response

from tfgrafana.clients.grafana import FolderDashboardSearchResult
from tfgrafana.framework.lifecycle import read_data_source
from tfgrafana.resources.grafana.data_source_dashboard import DashboardDataSource, check_lookup
from tfgrafana.resources.grafana.data_source_dashboards import (
    DashboardsByFolderDataSource,
    DashboardsDataSource,
    group_by_folder,
)

GRAFANA_URL = "https://grafana.example.com"
SEARCH_URL = f"{GRAFANA_URL}/api/search"

DASHBOARD = {
    "dashboard": {"id": 7, "uid": "abc", "title": "Service Health", "version": 3, "panels": []},
    "meta": {"folderId": 2, "folderUid": "ops", "folderTitle": "Ops", "isStarred": True},
}

SEARCH_RESULTS = [
    {"id": 1, "uid": "a", "title": "A", "type": "dash-db", "folderId": 3, "folderUid": "f1", "folderTitle": "One"},
    {"id": 2, "uid": "b", "title": "B", "type": "dash-db"},
    {"id": 3, "uid": "c", "title": "C", "type": "dash-db", "folderId": 3, "folderUid": "f1", "folderTitle": "One"},
]


class TestDashboardLookup:
    def test_check_lookup(self):
        assert check_lookup(0, "", 0)[0].summary == "must specify either dashboard id or uid"
        assert "not both" in check_lookup(1, "abc", 0)[0].summary
        (diag,) = check_lookup(0, "abc", -1)
        assert diag.path == "version"
        assert not check_lookup(0, "abc", 2)

    @pytest.mark.asyncio
    async def test_missing_identifier_makes_no_request(self, configured):
        with respx.mock() as router:
            resp = await read_data_source(configured(DashboardDataSource), {"dashboard_id": 0, "uid": ""})

        assert resp.diagnostics.errors[0].summary == "must specify either dashboard id or uid"
        assert len(router.calls) == 0

    @pytest.mark.asyncio
    async def test_read_by_uid(self, configured):
        with respx.mock:
            respx.get(f"{GRAFANA_URL}/api/dashboards/uid/abc").mock(return_value=Response(200, json=DASHBOARD))
            resp = await read_data_source(configured(DashboardDataSource), {"uid": "abc"})

        assert not resp.diagnostics.has_error(), resp.diagnostics
        state = resp.state.raw
        assert state["id"] == "abc"
        assert state["dashboard_id"] == 7
        assert state["title"] == "Service Health"
        assert state["version"] == 3
        assert state["folder_uid"] == "ops"
        assert state["is_starred"] is True
        assert json.loads(state["model_json"])["title"] == "Service Health"

    @pytest.mark.asyncio
    async def test_read_by_id_resolves_uid(self, configured):
        with respx.mock:
            search = respx.get(SEARCH_URL).mock(
                return_value=Response(200, json=[{"id": 7, "uid": "abc", "title": "Service Health"}])
            )
            respx.get(f"{GRAFANA_URL}/api/dashboards/uid/abc").mock(return_value=Response(200, json=DASHBOARD))
            resp = await read_data_source(configured(DashboardDataSource), {"dashboard_id": 7})

        assert resp.state.raw["uid"] == "abc"
        assert search.calls.last.request.url.params["dashboardIds"] == "7"

    @pytest.mark.asyncio
    async def test_read_specific_version(self, configured):
        old = {"id": 7, "uid": "abc", "title": "Old Title", "version": 2}
        with respx.mock:
            respx.get(f"{GRAFANA_URL}/api/dashboards/uid/abc").mock(return_value=Response(200, json=DASHBOARD))
            respx.get(f"{GRAFANA_URL}/api/dashboards/uid/abc/versions/2").mock(
                return_value=Response(200, json={"version": 2, "data": old})
            )
            resp = await read_data_source(configured(DashboardDataSource), {"uid": "abc", "version": 2})

        assert resp.state.raw["title"] == "Old Title"
        assert resp.state.raw["version"] == 2

    @pytest.mark.asyncio
    async def test_not_found_is_an_error(self, configured):
        with respx.mock:
            respx.get(f"{GRAFANA_URL}/api/dashboards/uid/gone").mock(return_value=Response(404, json={}))
            resp = await read_data_source(configured(DashboardDataSource), {"uid": "gone"})

        assert resp.diagnostics.errors[0].summary == "Failed to read dashboard"


class TestDashboardsSearch:
    @pytest.mark.asyncio
    async def test_lists_all_dashboards(self, configured):
        with respx.mock:
            respx.get(SEARCH_URL).mock(return_value=Response(200, json=SEARCH_RESULTS))
            resp = await read_data_source(configured(DashboardsDataSource), {})

        state = resp.state.raw
        assert state["id"] == "dashboards"
        assert [d["uid"] for d in state["dashboards"]] == ["a", "b", "c"]
        assert state["dashboards"][0] == {"title": "A", "uid": "a", "folder_title": "One", "folder_uid": "f1"}
        assert state["folder_ids"] == [0, 3]
        assert state["folder_uids"] == ["", "f1"]

    @pytest.mark.asyncio
    async def test_filters_are_sent_and_named_in_id(self, configured):
        with respx.mock:
            search = respx.get(SEARCH_URL).mock(return_value=Response(200, json=SEARCH_RESULTS[:1]))
            resp = await read_data_source(
                configured(DashboardsDataSource),
                {"folder_uids": ["f1", "f2"], "tags": ["prod", "web"]},
            )

        params = search.calls.last.request.url.params
        assert params.get_list("folderUIDs") == ["f1", "f2"]
        assert params.get_list("tag") == ["prod", "web"]
        assert params["type"] == "dash-db"
        state = resp.state.raw
        assert state["id"] == "dashboards-folder_uids-tags"
        assert state["folder_uids"] == ["f1", "f2"]
        assert state["folder_ids"] == [3]

    @pytest.mark.asyncio
    async def test_follows_pages(self, configured):
        with respx.mock:
            search = respx.get(SEARCH_URL)
            search.side_effect = [
                Response(200, json=SEARCH_RESULTS[:2]),
                Response(200, json=SEARCH_RESULTS[2:]),
            ]
            resp = await read_data_source(configured(DashboardsDataSource), {"limit": 2})

        assert len(resp.state.raw["dashboards"]) == 3
        assert [c.request.url.params["page"] for c in search.calls] == ["1", "2"]

    def test_limit_is_validated(self, configured):
        diags = configured(DashboardsDataSource).schema().validate({"limit": 0})
        assert diags.errors[0].path == "limit"


class TestDashboardsByFolder:
    def test_group_by_folder_partitions_results(self):
        results = [FolderDashboardSearchResult.model_validate(r) for r in SEARCH_RESULTS]

        by_uid = group_by_folder(results)
        assert list(by_uid) == ["f1", ""]
        assert [d["uid"] for d in by_uid["f1"]] == ["a", "c"]
        assert sum(len(v) for v in by_uid.values()) == len(results)

        by_id = group_by_folder(results, "folder_id")
        assert set(by_id) == {"3", "0"}

    @pytest.mark.asyncio
    async def test_read(self, configured):
        with respx.mock:
            respx.get(SEARCH_URL).mock(return_value=Response(200, json=SEARCH_RESULTS))
            resp = await read_data_source(configured(DashboardsByFolderDataSource), {"key_by": "folder_id"})

        state = resp.state.raw
        assert state["id"] == "dashboards-by-folder_id"
        assert [d["uid"] for d in state["folders"]["3"]] == ["a", "c"]
        assert [d["uid"] for d in state["folders"]["0"]] == ["b"]

    def test_key_by_is_validated(self, configured):
        diags = configured(DashboardsByFolderDataSource).schema().validate({"key_by": "title"})
        assert diags.errors[0].path == "key_by"

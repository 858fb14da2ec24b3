"""
grafana_dashboards and grafana_dashboards_by_folder data sources.

Both run the same paginated folder/dashboard search. The first returns a flat
list; the second groups the same result set by folder.
"""

from __future__ import annotations

from typing import Any, Callable

import structlog

from tfgrafana.clients.grafana import SEARCH_PAGE_LIMIT, FolderDashboardSearchResult, GrafanaClient
from tfgrafana.core.errors import ProviderError
from tfgrafana.framework.resource import Category, DataSource, ReadRequest, Response, State
from tfgrafana.framework.schema import Attribute, Int64Attribute, ListAttribute, MapAttribute, Schema, StringAttribute
from tfgrafana.framework.validators import int_between, one_of

logger = structlog.get_logger()

SEARCH_TYPE_DASHBOARD = "dash-db"

KEY_BY_FOLDER_UID = "folder_uid"
KEY_BY_FOLDER_ID = "folder_id"

# attribute name -> search query parameter
_FILTERS = (
    ("folder_ids", "folderIds"),
    ("folder_uids", "folderUIDs"),
    ("tags", "tag"),
)


def search_params(state: State) -> tuple[dict[str, Any], list[str]]:
    """Build search query parameters from the filters the user set.

    Returns the parameters and the names of the filter attributes used.
    """
    params: dict[str, Any] = {
        "limit": state.get_attribute("limit", SEARCH_PAGE_LIMIT),
        "type": SEARCH_TYPE_DASHBOARD,
    }
    used = []
    for attr, param in _FILTERS:
        values = state.get_attribute(attr)
        if values:
            params[param] = list(values)
            used.append(attr)
    return params, used


def dashboard_entry(result: FolderDashboardSearchResult) -> dict[str, Any]:
    return {
        "title": result.title,
        "uid": result.uid,
        "folder_title": result.folder_title,
        "folder_uid": result.folder_uid,
    }


def folder_key(result: FolderDashboardSearchResult, key_by: str) -> str:
    """Group key for a search result. General-folder dashboards key as "" or "0"."""
    if key_by == KEY_BY_FOLDER_ID:
        return str(result.folder_id)
    return result.folder_uid


def group_by_folder(results: list[FolderDashboardSearchResult], key_by: str = KEY_BY_FOLDER_UID) -> dict[str, list[dict[str, Any]]]:
    """Partition search results into per-folder lists, keeping result order."""
    folders: dict[str, list[dict[str, Any]]] = {}
    for result in results:
        folders.setdefault(folder_key(result, key_by), []).append(dashboard_entry(result))
    return folders


def write_observed_folders(state: State, used: list[str], results: list[FolderDashboardSearchResult]) -> None:
    """Fill unset folder filters with the folders seen in the results."""
    observed: dict[str, Callable[[FolderDashboardSearchResult], Any]] = {
        "folder_ids": lambda r: r.folder_id,
        "folder_uids": lambda r: r.folder_uid,
    }
    for attr, getter in observed.items():
        if attr not in used:
            state.set_attribute(attr, sorted({getter(r) for r in results}))


def _filter_attributes() -> dict[str, Attribute]:
    return {
        "folder_ids": ListAttribute(
            element_type=int,
            optional=True,
            computed=True,
            description=(
                "Numerical IDs of Grafana folders containing dashboards. Specify to filter for dashboards by "
                "folder (eg. `[0]` for General folder), or leave blank to get all dashboards in all folders."
            ),
        ),
        "folder_uids": ListAttribute(
            optional=True,
            computed=True,
            description=(
                "UIDs of Grafana folders containing dashboards. Specify to filter for dashboards by folder, "
                "or leave blank to get all dashboards in all folders."
            ),
        ),
        "tags": ListAttribute(
            optional=True,
            description=(
                'List of string Grafana dashboard tags to search for, eg. `["prod"]`. '
                "Used only as search input, i.e., attribute value will remain unchanged."
            ),
        ),
        "limit": Int64Attribute(
            optional=True,
            default=SEARCH_PAGE_LIMIT,
            validators=(int_between(1, SEARCH_PAGE_LIMIT),),
            description="Maximum number of dashboard search results to return per page.",
        ),
    }


async def search_dashboards(client: GrafanaClient, state: State, resp: Response) -> tuple[list[FolderDashboardSearchResult], list[str]] | None:
    params, used = search_params(state)
    try:
        results = await client.folder_dashboard_search(params)
    except ProviderError as exc:
        resp.diagnostics.add_error("Failed to search dashboards", str(exc))
        return None
    logger.debug("dashboards_searched", count=len(results), filters=used)
    return results, used


class DashboardsDataSource(DataSource):
    type_name = "grafana_dashboards"
    category = Category.GRAFANA_OSS

    def schema(self) -> Schema:
        return Schema(
            description=(
                "Datasource for retrieving all dashboards. Specify list of folder IDs to search in for dashboards.\n\n"
                "* [Official documentation](https://grafana.com/docs/grafana/latest/dashboards/)\n"
                "* [Folder/Dashboard Search HTTP API](https://grafana.com/docs/grafana/latest/http_api/folder_dashboard_search/)\n"
            ),
            attributes={
                "id": StringAttribute(computed=True, description="The ID of this data source."),
                **_filter_attributes(),
                "dashboards": ListAttribute(
                    element_type=dict,
                    computed=True,
                    description="Matching dashboards, each with `title`, `uid`, `folder_title` and `folder_uid`.",
                ),
            },
        )

    async def read(self, req: ReadRequest, resp: Response) -> None:
        found = await search_dashboards(self.client, req.state, resp)
        if found is None:
            return
        results, used = found

        resp.state.set_attribute("id", "-".join(["dashboards", *used]))
        resp.state.set_attribute("dashboards", [dashboard_entry(r) for r in results])
        write_observed_folders(resp.state, used, results)


class DashboardsByFolderDataSource(DataSource):
    type_name = "grafana_dashboards_by_folder"
    category = Category.GRAFANA_OSS

    def schema(self) -> Schema:
        return Schema(
            description="Datasource for retrieving dashboards grouped by the folder they live in.",
            attributes={
                "id": StringAttribute(computed=True, description="The ID of this data source."),
                **_filter_attributes(),
                "key_by": StringAttribute(
                    optional=True,
                    default=KEY_BY_FOLDER_UID,
                    validators=(one_of(KEY_BY_FOLDER_UID, KEY_BY_FOLDER_ID),),
                    description=(
                        "Folder attribute to group by. General-folder dashboards are grouped under `\"\"` "
                        "(folder_uid) or `\"0\"` (folder_id)."
                    ),
                ),
                "folders": MapAttribute(
                    element_type=list,
                    computed=True,
                    description="Map of folder key to the dashboards in that folder.",
                ),
            },
        )

    async def read(self, req: ReadRequest, resp: Response) -> None:
        found = await search_dashboards(self.client, req.state, resp)
        if found is None:
            return
        results, used = found
        key_by = req.state.get_attribute("key_by", KEY_BY_FOLDER_UID)

        resp.state.set_attribute("id", "-".join([f"dashboards-by-{key_by}", *used]))
        resp.state.set_attribute("key_by", key_by)
        resp.state.set_attribute("folders", group_by_folder(results, key_by))
        write_observed_folders(resp.state, used, results)

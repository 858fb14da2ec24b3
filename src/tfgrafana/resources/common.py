"""
Helpers shared by resource handlers for turning client errors into diagnostics.
"""

from __future__ import annotations

import structlog

from tfgrafana.clients.base import NotFoundError
from tfgrafana.clients.grafana import GrafanaClient
from tfgrafana.core.errors import ProviderError
from tfgrafana.framework.resource import Response
from tfgrafana.framework.types import Int64Value

logger = structlog.get_logger()


def check_read_error(exc: ProviderError, resp: Response, resource_type: str, summary: str) -> None:
    """Handle an error raised while reading a resource.

    A missing remote object removes the resource from state so the next plan
    recreates it. Anything else becomes an error diagnostic.
    """
    if isinstance(exc, NotFoundError):
        logger.warning("resource_not_found_removing_from_state", resource_type=resource_type, id=resp.state.id)
        resp.state.remove()
        return
    resp.diagnostics.add_error(summary, str(exc))


def check_delete_error(exc: ProviderError, resp: Response, summary: str) -> None:
    """A missing remote object counts as already deleted."""
    if isinstance(exc, NotFoundError):
        return
    resp.diagnostics.add_error(summary, str(exc))


DEFAULT_ORG_ID = 1


def org_id_for(client: GrafanaClient, org_id: Int64Value) -> int:
    """Organization a resource lives in: its own org_id, else the provider's."""
    if not org_id.is_null and org_id.value_int64() > 0:
        return org_id.value_int64()
    return client.org_id or DEFAULT_ORG_ID

"""
grafana_synthetic_monitoring_probes data source: map of probe names to IDs.

* [Official documentation](https://grafana.com/docs/grafana-cloud/testing/synthetic-monitoring/)
* [API documentation](https://github.com/grafana/synthetic-monitoring-api-go-client/blob/main/docs/API.md#probes)
"""

from __future__ import annotations

from tfgrafana.core.errors import ProviderError
from tfgrafana.framework.resource import Category, DataSource, ReadRequest, Response
from tfgrafana.framework.schema import BoolAttribute, MapAttribute, Schema, StringAttribute

PROBES_ID = "probes"

SM_MISSING_CLIENT = (
    "The Grafana Provider is missing a configuration for the Synthetic Monitoring API. "
    "Please ensure that sm_access_token is set in the provider configuration."
)


class ProbesDataSource(DataSource):
    type_name = "grafana_synthetic_monitoring_probes"
    category = Category.SYNTHETIC_MONITORING
    client_attr = "sm_api"
    missing_client_message = SM_MISSING_CLIENT

    def schema(self) -> Schema:
        return Schema(
            description=__doc__ or "",
            attributes={
                "id": StringAttribute(computed=True, description="The ID of this data source."),
                "filter_deprecated": BoolAttribute(
                    optional=True,
                    default=True,
                    description="If true, only probes that are not deprecated will be returned.",
                ),
                "probes": MapAttribute(
                    element_type=int,
                    computed=True,
                    description="Map of probes with their names as keys and IDs as values.",
                ),
            },
        )

    async def read(self, req: ReadRequest, resp: Response) -> None:
        filter_deprecated = req.state.get_attribute("filter_deprecated", True)
        try:
            probes = await self.client.list_probes()
        except ProviderError as exc:
            resp.diagnostics.add_error("Failed to list probes", str(exc))
            return

        resp.state.set_attribute("id", PROBES_ID)
        resp.state.set_attribute("filter_deprecated", filter_deprecated)
        resp.state.set_attribute(
            "probes",
            {p.name: p.id for p in probes if not (filter_deprecated and p.deprecated)},
        )

"""Provider wiring: configuration, clients and the type registries."""

from tfgrafana.provider.clients import Clients, create_clients
from tfgrafana.provider.provider import GrafanaProvider, provider_schema
from tfgrafana.provider.registry import (
    TypeRegistry,
    TypeSpec,
    create_data_source,
    create_resource,
    data_source_registry,
    list_data_sources,
    list_resources,
    resource_registry,
)

__all__ = [
    "Clients",
    "GrafanaProvider",
    "TypeRegistry",
    "TypeSpec",
    "create_clients",
    "create_data_source",
    "create_resource",
    "data_source_registry",
    "list_data_sources",
    "list_resources",
    "provider_schema",
    "resource_registry",
]

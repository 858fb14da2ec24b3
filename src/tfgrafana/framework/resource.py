"""
Handler contracts for resources and data sources.

Each lifecycle entry point receives a request holding the relevant attribute
trees and writes its outcome to a response: the new state plus diagnostics.
Handlers never raise for expected failures.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from tfgrafana.framework.diagnostics import Diagnostics
from tfgrafana.framework.resource_id import ResourceID, ResourceIDError
from tfgrafana.framework.schema import Schema
from tfgrafana.framework.tfsdk import get_model, to_state

if TYPE_CHECKING:
    from tfgrafana.provider.clients import Clients

M = TypeVar("M")


class Category(StrEnum):
    GRAFANA_OSS = "Grafana OSS"
    GRAFANA_ENTERPRISE = "Grafana Enterprise"
    ALERTING = "Alerting"
    CLOUD = "Cloud"
    CLOUD_PROVIDER = "Cloud Provider"
    CONNECTIONS = "Connections"
    ONCALL = "OnCall"
    SYNTHETIC_MONITORING = "Synthetic Monitoring"
    SLO = "SLO"


class State:
    """Mutable holder for one attribute tree; ``None`` means absent."""

    def __init__(self, raw: dict[str, Any] | None = None) -> None:
        self.raw = dict(raw) if raw is not None else None

    @property
    def removed(self) -> bool:
        return self.raw is None

    @property
    def id(self) -> str | None:
        return None if self.raw is None else self.raw.get("id")

    def get(self, cls: type[M]) -> tuple[M | None, Diagnostics]:
        return get_model(cls, self.raw)

    def set(self, model: Any) -> None:
        self.raw = to_state(model) if dataclasses.is_dataclass(model) else dict(model)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        if self.raw is None:
            return default
        value = self.raw.get(name)
        return default if value is None else value

    def set_attribute(self, name: str, value: Any) -> None:
        if self.raw is None:
            self.raw = {}
        self.raw[name] = value

    def remove(self) -> None:
        self.raw = None


@dataclass
class CreateRequest:
    plan: State
    config: State


@dataclass
class ReadRequest:
    state: State


@dataclass
class UpdateRequest:
    plan: State
    state: State
    config: State


@dataclass
class DeleteRequest:
    state: State


@dataclass
class ImportStateRequest:
    id: str


@dataclass
class Response:
    state: State = field(default_factory=State)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


class _Configurable:
    """Shared client binding for resources and data sources."""

    client_attr: ClassVar[str] = "grafana_api"
    missing_client_message: ClassVar[str] = (
        "The Grafana Provider is missing a configuration for the Grafana API. "
        "Please ensure that url and auth are set in the provider configuration."
    )

    def __init__(self) -> None:
        self.client: Any = None

    def configure(self, clients: Clients) -> Diagnostics:
        diags = Diagnostics()
        client = getattr(clients, self.client_attr, None)
        if client is None:
            diags.add_error("Client not configured", self.missing_client_message)
            return diags
        self.client = client
        return diags


class Resource(_Configurable, ABC):
    type_name: ClassVar[str]
    category: ClassVar[Category]
    resource_id: ClassVar[ResourceID | None] = None

    @abstractmethod
    def schema(self) -> Schema:
        ...

    @abstractmethod
    async def create(self, req: CreateRequest, resp: Response) -> None:
        ...

    @abstractmethod
    async def read(self, req: ReadRequest, resp: Response) -> None:
        ...

    @abstractmethod
    async def update(self, req: UpdateRequest, resp: Response) -> None:
        ...

    @abstractmethod
    async def delete(self, req: DeleteRequest, resp: Response) -> None:
        ...

    async def import_state(self, req: ImportStateRequest, resp: Response) -> None:
        """Validate the import ID against ``resource_id`` and seed state with it."""
        if self.resource_id is not None:
            try:
                self.resource_id.split(req.id)
            except ResourceIDError as exc:
                resp.diagnostics.add_error("Invalid ID", str(exc))
                return
        resp.state.set_attribute("id", req.id)


class DataSource(_Configurable, ABC):
    type_name: ClassVar[str]
    category: ClassVar[Category]

    @abstractmethod
    def schema(self) -> Schema:
        ...

    @abstractmethod
    async def read(self, req: ReadRequest, resp: Response) -> None:
        ...

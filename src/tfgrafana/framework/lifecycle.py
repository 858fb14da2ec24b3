"""
In-process lifecycle driver.

Plays the orchestrator's part for one resource instance: validate and plan a
configuration, then apply, refresh, import or destroy it through the
resource's handlers. The CLI and the tests drive resources through this.
"""

from __future__ import annotations

import copy
from enum import StrEnum
from typing import Any

import structlog

from tfgrafana.framework.diagnostics import Diagnostics
from tfgrafana.framework.resource import (
    CreateRequest,
    DataSource,
    DeleteRequest,
    ImportStateRequest,
    ReadRequest,
    Resource,
    Response,
    State,
    UpdateRequest,
)
from tfgrafana.logging import bind_context

logger = structlog.get_logger()


class InstanceStatus(StrEnum):
    ABSENT = "absent"
    PLANNED = "planned"
    CREATED = "created"
    STALE = "stale"
    UPDATED = "updated"
    DELETED = "deleted"


class ResourceInstance:
    """One managed instance of a resource type and its recorded state."""

    def __init__(self, resource: Resource, state: dict[str, Any] | None = None) -> None:
        self.resource = resource
        self.state = State(state)
        self.status = InstanceStatus.ABSENT if state is None else InstanceStatus.CREATED
        self.config: dict[str, Any] | None = None
        self.planned: dict[str, Any] | None = None
        self.requires_replace = False
        self._previous_status = self.status
        self._log = bind_context(resource_type=resource.type_name)

    @property
    def id(self) -> str | None:
        return self.state.id

    def plan(self, config: dict[str, Any]) -> Diagnostics:
        """Validate ``config`` and compute the planned attribute tree."""
        schema = self.resource.schema()
        diags = schema.validate(config)
        if diags.has_error():
            return diags

        planned = schema.with_defaults(config)
        self.requires_replace = False
        if not self.state.removed:
            self.requires_replace = any(
                attr.force_new
                and not (planned.get(name) is None and attr.computed)
                and planned.get(name) != self.state.get_attribute(name)
                for name, attr in schema.attributes.items()
            )
            # Computed values carry over only when updating in place.
            if not self.requires_replace:
                for name, attr in schema.attributes.items():
                    if planned.get(name) is None and attr.computed:
                        planned[name] = self.state.get_attribute(name)
                planned["id"] = self.state.id

        self.config = dict(config)
        self.planned = planned
        self._previous_status = self.status
        self.status = InstanceStatus.PLANNED
        return diags

    async def apply(self) -> Diagnostics:
        """Create, update or replace the instance according to the last plan."""
        if self.planned is None or self.config is None:
            raise RuntimeError("apply() called before plan()")

        diags = Diagnostics()
        if self.requires_replace:
            self._log.info("resource_replace", id=self.id)
            diags.extend(await self.destroy())
            if diags.has_error():
                return diags

        resp = Response(State(copy.deepcopy(self.planned)))
        if self.state.removed:
            await self.resource.create(CreateRequest(State(self.planned), State(self.config)), resp)
            new_status = InstanceStatus.CREATED
        else:
            await self.resource.update(
                UpdateRequest(State(self.planned), State(copy.deepcopy(self.state.raw)), State(self.config)),
                resp,
            )
            new_status = InstanceStatus.UPDATED

        diags.extend(resp.diagnostics)
        if diags.has_error():
            self.status = self._previous_status
            return diags

        self.state = resp.state
        self.status = new_status
        self.planned = None
        self._log.info("resource_applied", id=self.id, status=str(new_status))
        return diags

    async def refresh(self) -> Diagnostics:
        """Read remote state; mark the instance stale on drift, absent when gone."""
        if self.state.removed:
            return Diagnostics()

        previous = copy.deepcopy(self.state.raw)
        resp = Response(State(copy.deepcopy(previous)))
        await self.resource.read(ReadRequest(State(copy.deepcopy(previous))), resp)
        if resp.diagnostics.has_error():
            return resp.diagnostics

        self.state = resp.state
        if self.state.removed:
            self._log.warning("resource_gone", id=(previous or {}).get("id"))
            self.status = InstanceStatus.ABSENT
        elif self.state.raw != previous:
            self.status = InstanceStatus.STALE
        return resp.diagnostics

    async def destroy(self) -> Diagnostics:
        if self.state.removed:
            return Diagnostics()
        resp = Response(State(copy.deepcopy(self.state.raw)))
        await self.resource.delete(DeleteRequest(State(copy.deepcopy(self.state.raw))), resp)
        if resp.diagnostics.has_error():
            return resp.diagnostics
        self._log.info("resource_deleted", id=self.id)
        self.state = State()
        self.status = InstanceStatus.DELETED
        return resp.diagnostics

    async def import_(self, resource_id: str) -> Diagnostics:
        """Adopt an existing remote object by ID, then read it into state."""
        resp = Response()
        await self.resource.import_state(ImportStateRequest(resource_id), resp)
        if resp.diagnostics.has_error():
            return resp.diagnostics
        self.state = resp.state
        self.status = InstanceStatus.CREATED
        diags = resp.diagnostics
        diags.extend(await self.refresh())
        if self.state.removed:
            diags.add_error(
                "Cannot import non-existent remote object",
                f"No {self.resource.type_name} exists with ID {resource_id!r}",
            )
        else:
            self.status = InstanceStatus.CREATED
        return diags


async def read_data_source(data_source: DataSource, config: dict[str, Any]) -> Response:
    """Validate ``config`` and run a data source read against it."""
    schema = data_source.schema()
    diags = schema.validate(config)
    if diags.has_error():
        return Response(State(), diags)

    resp = Response(State(schema.with_defaults(config)), diags)
    await data_source.read(ReadRequest(State(schema.with_defaults(config))), resp)
    if not resp.diagnostics.has_error():
        logger.debug("data_source_read", data_source=data_source.type_name, id=resp.state.id)
    return resp

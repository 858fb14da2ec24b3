from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger()

DEFAULT_SEPARATOR = ":"


class ResourceIDError(ValueError):
    pass


@dataclass(frozen=True)
class IDField:
    name: str
    kind: type = str

    def parse(self, raw: str) -> Any:
        if self.kind is int:
            try:
                return int(raw)
            except ValueError as exc:
                raise ResourceIDError(f"{self.name} must be an integer, got {raw!r}") from exc
        return raw


def string_id_field(name: str) -> IDField:
    return IDField(name, str)


def int_id_field(name: str) -> IDField:
    return IDField(name, int)


@dataclass(frozen=True)
class ResourceID:
    """Composite resource identifier made of ordered fields joined by a separator."""

    fields: tuple[IDField, ...]
    separator: str = DEFAULT_SEPARATOR
    legacy_separator: str | None = None
    resource_type: str = ""

    @property
    def example(self) -> str:
        return self.separator.join(f"{{{{ {f.name} }}}}" for f in self.fields)

    def make(self, *parts: Any) -> str:
        if len(parts) != len(self.fields):
            raise ResourceIDError(f"expected {len(self.fields)} ID parts, got {len(parts)}")
        return self.separator.join(str(p) for p in parts)

    def split(self, resource_id: str) -> list[Any]:
        """Split ``resource_id`` into typed parts, accepting the legacy separator."""
        if len(self.fields) == 1:
            if not resource_id:
                raise ResourceIDError("resource ID is empty")
            return [self.fields[0].parse(resource_id)]

        for separator in (self.separator, self.legacy_separator):
            if separator is None:
                continue
            parts = resource_id.split(separator)
            if len(parts) == len(self.fields) and all(parts):
                if separator != self.separator:
                    logger.warning(
                        "legacy_resource_id_separator",
                        resource_type=self.resource_type,
                        id=resource_id,
                        expected=self.example,
                    )
                return [f.parse(p) for f, p in zip(self.fields, parts)]

        raise ResourceIDError(f"id {resource_id!r} does not match expected format. Should be in the format: {self.example}")


def new_resource_id(*fields: IDField, resource_type: str = "") -> ResourceID:
    return ResourceID(tuple(fields), resource_type=resource_type)


def new_resource_id_with_legacy_separator(resource_type: str, legacy_separator: str, *names: str) -> ResourceID:
    return ResourceID(
        tuple(string_id_field(n) for n in names),
        legacy_separator=legacy_separator,
        resource_type=resource_type,
    )

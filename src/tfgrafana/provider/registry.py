from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, List, TypeVar

from tfgrafana.framework.resource import Category, DataSource, Resource

T = TypeVar("T", Resource, DataSource)


@dataclass(frozen=True)
class TypeSpec(Generic[T]):
    """Metadata describing a registered resource or data source type."""

    name: str
    factory: Callable[[], T]
    category: Category
    description: str | None = None


class TypeRegistry(Generic[T]):
    """Simple in-memory registry of resource or data source types."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._types: Dict[str, TypeSpec[T]] = {}

    def register(self, cls: Callable[[], T], *, description: str | None = None) -> None:
        name = getattr(cls, "type_name", "")
        if not name:
            raise ValueError(f"{self.kind} type name is required")
        if name in self._types:
            raise ValueError(f"{self.kind} '{name}' is already registered")
        self._types[name] = TypeSpec(
            name=name,
            factory=cls,
            category=cls.category,  # type: ignore[attr-defined]
            description=description or (cls.__doc__ or "").strip() or None,
        )

    def register_all(self, classes: Iterable[Callable[[], T]]) -> None:
        for cls in classes:
            self.register(cls)

    def create(self, name: str, **kwargs: Any) -> T:
        spec = self._types.get(name)
        if spec is None:
            raise KeyError(f"{self.kind} '{name}' is not registered")
        return spec.factory(**kwargs)

    def names(self) -> List[str]:
        return sorted(self._types)

    def list(self) -> List[TypeSpec[T]]:
        return [self._types[name] for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._types


def _build_registries() -> tuple[TypeRegistry[Resource], TypeRegistry[DataSource]]:
    from tfgrafana.resources import DATA_SOURCES, RESOURCES

    resources: TypeRegistry[Resource] = TypeRegistry("Resource")
    resources.register_all(RESOURCES)
    data_sources: TypeRegistry[DataSource] = TypeRegistry("Data source")
    data_sources.register_all(DATA_SOURCES)
    return resources, data_sources


resource_registry, data_source_registry = _build_registries()


def create_resource(name: str) -> Resource:
    return resource_registry.create(name)


def create_data_source(name: str) -> DataSource:
    return data_source_registry.create(name)


def list_resources() -> List[TypeSpec[Resource]]:
    return resource_registry.list()


def list_data_sources() -> List[TypeSpec[DataSource]]:
    return data_source_registry.list()

"""
Typed attribute trees for resources, data sources and the provider itself.

A ``Schema`` declares attributes and nested blocks, checks configuration
against them before any network call, and fills declared defaults into a
plan. Descriptions are rendered through an explicit ``DescriptionConfig``
rather than a process-wide hook.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

from tfgrafana.framework.diagnostics import Diagnostics
from tfgrafana.framework.validators import Validator


@dataclass(frozen=True)
class DescriptionConfig:
    """Controls how field descriptions are rendered in schema dumps."""

    markdown: bool = True
    include_defaults: bool = True

    def describe(self, attr: Attribute | Block) -> str:
        desc = attr.description
        default = getattr(attr, "default", None)
        if self.include_defaults and default is not None:
            rendered = json.dumps(default) if isinstance(default, bool) else str(default)
            if self.markdown:
                desc += f" Defaults to `{rendered}`."
            else:
                desc += f" Defaults to {rendered}."
        return desc.strip()


DEFAULT_DESCRIPTIONS = DescriptionConfig()


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


@dataclass(frozen=True)
class Attribute:
    description: str = ""
    required: bool = False
    optional: bool = False
    computed: bool = False
    sensitive: bool = False
    force_new: bool = False
    deprecated: str | None = None
    default: Any = None
    conflicts_with: tuple[str, ...] = ()
    validators: tuple[Validator, ...] = ()

    type_name: ClassVar[str] = "dynamic"

    @property
    def read_only(self) -> bool:
        return self.computed and not self.optional and not self.required

    def type_error(self, value: Any) -> str | None:
        return None

    def to_dict(self, descriptions: DescriptionConfig) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type_name,
            "description": descriptions.describe(self),
        }
        for flag in ("required", "optional", "computed", "sensitive", "force_new"):
            if getattr(self, flag):
                data[flag] = True
        if self.deprecated:
            data["deprecated"] = self.deprecated
        return data


@dataclass(frozen=True)
class StringAttribute(Attribute):
    type_name: ClassVar[str] = "string"

    def type_error(self, value: Any) -> str | None:
        if not isinstance(value, str):
            return f"expected string, got {type(value).__name__}"
        return None


@dataclass(frozen=True)
class BoolAttribute(Attribute):
    type_name: ClassVar[str] = "bool"

    def type_error(self, value: Any) -> str | None:
        if not isinstance(value, bool):
            return f"expected bool, got {type(value).__name__}"
        return None


@dataclass(frozen=True)
class Int64Attribute(Attribute):
    type_name: ClassVar[str] = "number"

    def type_error(self, value: Any) -> str | None:
        if isinstance(value, bool) or not isinstance(value, int):
            return f"expected number, got {type(value).__name__}"
        return None


@dataclass(frozen=True)
class Float64Attribute(Attribute):
    type_name: ClassVar[str] = "number"

    def type_error(self, value: Any) -> str | None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return f"expected number, got {type(value).__name__}"
        return None


def _element_error(element_type: type, value: Any) -> str | None:
    if element_type is int and isinstance(value, bool):
        return "expected element of type int, got bool"
    if not isinstance(value, element_type):
        return f"expected element of type {element_type.__name__}, got {type(value).__name__}"
    return None


@dataclass(frozen=True)
class ListAttribute(Attribute):
    element_type: type = str

    type_name: ClassVar[str] = "list"

    def type_error(self, value: Any) -> str | None:
        if not isinstance(value, (list, tuple)):
            return f"expected list, got {type(value).__name__}"
        for item in value:
            if err := _element_error(self.element_type, item):
                return err
        return None


@dataclass(frozen=True)
class SetAttribute(ListAttribute):
    type_name: ClassVar[str] = "set"

    def type_error(self, value: Any) -> str | None:
        if not isinstance(value, (list, tuple, set, frozenset)):
            return f"expected set, got {type(value).__name__}"
        for item in value:
            if err := _element_error(self.element_type, item):
                return err
        return None


@dataclass(frozen=True)
class MapAttribute(Attribute):
    element_type: type = str

    type_name: ClassVar[str] = "map"

    def type_error(self, value: Any) -> str | None:
        if not isinstance(value, Mapping):
            return f"expected map, got {type(value).__name__}"
        for item in value.values():
            if err := _element_error(self.element_type, item):
                return err
        return None


@dataclass(frozen=True)
class Block:
    """A repeated nested block, exposed in state as a list of objects."""

    attributes: Mapping[str, Attribute] = field(default_factory=dict)
    blocks: Mapping[str, Block] = field(default_factory=dict)
    description: str = ""
    validators: tuple[Validator, ...] = ()
    required: bool = False

    def validate(self, path: str, value: Any) -> Diagnostics:
        diags = Diagnostics()
        if self.required and not value:
            diags.add_error(
                "Missing required block",
                f"At least one {path.rsplit('.', 1)[-1]} block is required.",
                path=path,
            )
            return diags
        if value is None:
            return diags
        if not isinstance(value, (list, tuple)):
            diags.add_error("Incorrect attribute value type", f"expected list of blocks, got {type(value).__name__}", path=path)
            return diags
        for validator in self.validators:
            diags.extend(validator.validate(path, value))
        for index, element in enumerate(value):
            element_path = f"{path}[{index}]"
            if not isinstance(element, Mapping):
                diags.add_error("Incorrect attribute value type", "expected object", path=element_path)
                continue
            diags.extend(_validate_object(self.attributes, self.blocks, element, element_path))
        return diags

    def with_defaults(self, value: Any) -> list[dict[str, Any]]:
        return [_object_with_defaults(self.attributes, self.blocks, element) for element in value or []]

    def to_dict(self, descriptions: DescriptionConfig) -> dict[str, Any]:
        data: dict[str, Any] = {
            "nesting": "list",
            "description": descriptions.describe(self),
            "attributes": {k: v.to_dict(descriptions) for k, v in self.attributes.items()},
            "blocks": {k: v.to_dict(descriptions) for k, v in self.blocks.items()},
        }
        if self.required:
            data["required"] = True
        return data


def _validate_object(
    attributes: Mapping[str, Attribute],
    blocks: Mapping[str, Block],
    config: Mapping[str, Any],
    path: str = "",
) -> Diagnostics:
    diags = Diagnostics()

    for key in config:
        if key not in attributes and key not in blocks:
            diags.add_error(
                "Unsupported argument",
                f'An argument named "{key}" is not expected here.',
                path=_join(path, key),
            )

    for name, attr in attributes.items():
        attr_path = _join(path, name)
        value = config.get(name)
        if value is None:
            if attr.required:
                diags.add_error(
                    "Missing required argument",
                    f'The argument "{name}" is required, but no definition was found.',
                    path=attr_path,
                )
            continue
        if attr.read_only:
            diags.add_error(
                "Invalid Configuration for Read-Only Attribute",
                f'Cannot set value for attribute "{name}" as it is computed.',
                path=attr_path,
            )
            continue
        if err := attr.type_error(value):
            diags.add_error("Incorrect attribute value type", err, path=attr_path)
            continue
        for other in attr.conflicts_with:
            if config.get(other) is not None:
                diags.add_error(
                    "Conflicting configuration arguments",
                    f'"{name}": conflicts with {other}',
                    path=attr_path,
                )
        for validator in attr.validators:
            diags.extend(validator.validate(attr_path, value))

    for name, block in blocks.items():
        diags.extend(block.validate(_join(path, name), config.get(name)))

    return diags


def _object_with_defaults(
    attributes: Mapping[str, Attribute],
    blocks: Mapping[str, Block],
    config: Mapping[str, Any],
) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for name, attr in attributes.items():
        value = config.get(name)
        if value is None and attr.default is not None:
            value = attr.default
        result[name] = value
    for name, block in blocks.items():
        result[name] = block.with_defaults(config.get(name))
    return result


@dataclass(frozen=True)
class Schema:
    attributes: Mapping[str, Attribute] = field(default_factory=dict)
    blocks: Mapping[str, Block] = field(default_factory=dict)
    description: str = ""
    version: int = 0

    def validate(self, config: Mapping[str, Any]) -> Diagnostics:
        """Check a configuration against the schema without touching the network."""
        return _validate_object(self.attributes, self.blocks, config)

    def with_defaults(self, config: Mapping[str, Any]) -> dict[str, Any]:
        """Return a full attribute tree with every declared key and defaults applied."""
        return _object_with_defaults(self.attributes, self.blocks, config)

    def sensitive_paths(self) -> list[str]:
        return [name for name, attr in self.attributes.items() if attr.sensitive]

    def to_dict(self, descriptions: DescriptionConfig = DEFAULT_DESCRIPTIONS) -> dict[str, Any]:
        return {
            "version": self.version,
            "description": self.description.strip(),
            "attributes": {k: v.to_dict(descriptions) for k, v in self.attributes.items()},
            "blocks": {k: v.to_dict(descriptions) for k, v in self.blocks.items()},
        }

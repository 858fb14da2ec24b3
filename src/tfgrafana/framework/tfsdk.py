"""
Explicit typed decoding between attribute trees and model dataclasses.

Model fields are declared with :func:`tfsdk`, naming the attribute they map
to. :func:`get_model` parses an attribute dict field by field and reports
type mismatches as diagnostics instead of failing on a cast.
"""

from __future__ import annotations

import dataclasses
import typing
from typing import Any, Callable, Mapping, TypeVar

from tfgrafana.framework.diagnostics import Diagnostics
from tfgrafana.framework.types import VALUE_TYPES, ValueConversionError

M = TypeVar("M")

_TFSDK_KEY = "tfsdk"


def tfsdk(name: str, factory: Callable[[], Any]) -> Any:
    """Declare a model field bound to attribute ``name``."""
    return dataclasses.field(default_factory=factory, metadata={_TFSDK_KEY: name})


def _attribute_name(f: dataclasses.Field) -> str:
    return f.metadata.get(_TFSDK_KEY, f.name)


def _nested_model(hint: Any) -> type | None:
    if typing.get_origin(hint) is list:
        (arg,) = typing.get_args(hint)
        if dataclasses.is_dataclass(arg):
            return arg
    return None


def get_model(cls: type[M], attrs: Mapping[str, Any] | None, path: str = "") -> tuple[M | None, Diagnostics]:
    """Decode ``attrs`` into an instance of the model dataclass ``cls``."""
    diags = Diagnostics()
    attrs = attrs or {}
    hints = typing.get_type_hints(cls)
    values: dict[str, Any] = {}

    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        name = _attribute_name(f)
        field_path = f"{path}.{name}" if path else name
        hint = hints[f.name]
        raw = attrs.get(name)

        if hint in VALUE_TYPES:
            try:
                values[f.name] = hint.from_terraform(raw)
            except ValueConversionError as exc:
                diags.add_error("Value Conversion Error", str(exc), path=field_path)
            continue

        nested = _nested_model(hint)
        if nested is None:
            raise TypeError(f"unsupported model field type for {cls.__name__}.{f.name}: {hint!r}")
        if raw is None:
            values[f.name] = []
            continue
        if not isinstance(raw, (list, tuple)):
            diags.add_error("Value Conversion Error", f"expected list of objects, got {type(raw).__name__}", path=field_path)
            continue
        items = []
        for index, element in enumerate(raw):
            item, item_diags = get_model(nested, element, f"{field_path}[{index}]")
            diags.extend(item_diags)
            items.append(item)
        values[f.name] = items

    if diags.has_error():
        return None, diags
    return cls(**values), diags


def to_state(model: Any) -> dict[str, Any]:
    """Encode a model dataclass back into an attribute tree."""
    state: dict[str, Any] = {}
    for f in dataclasses.fields(model):
        value = getattr(model, f.name)
        if isinstance(value, list):
            state[_attribute_name(f)] = [to_state(item) for item in value]
        else:
            state[_attribute_name(f)] = value.to_terraform()
    return state

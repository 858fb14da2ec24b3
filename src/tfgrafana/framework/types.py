"""
Null-aware typed attribute values.

Each value wraps the plain Python value held in an attribute tree. A null
value (``None``) is distinct from the zero value, and accessors such as
``value_string()`` collapse null to the zero value the way client payloads
expect.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable


class ValueConversionError(TypeError):
    """Raised when a raw attribute value does not match the declared type."""


def _type_name(raw: Any) -> str:
    return type(raw).__name__


@dataclass(frozen=True)
class StringValue:
    value: str | None = None

    @property
    def is_null(self) -> bool:
        return self.value is None

    def value_string(self) -> str:
        return self.value if self.value is not None else ""

    def to_terraform(self) -> str | None:
        return self.value

    @classmethod
    def from_terraform(cls, raw: Any) -> StringValue:
        if raw is not None and not isinstance(raw, str):
            raise ValueConversionError(f"expected string, got {_type_name(raw)}")
        return cls(raw)


@dataclass(frozen=True)
class BoolValue:
    value: bool | None = None

    @property
    def is_null(self) -> bool:
        return self.value is None

    def value_bool(self) -> bool:
        return bool(self.value)

    def to_terraform(self) -> bool | None:
        return self.value

    @classmethod
    def from_terraform(cls, raw: Any) -> BoolValue:
        if raw is not None and not isinstance(raw, bool):
            raise ValueConversionError(f"expected bool, got {_type_name(raw)}")
        return cls(raw)


@dataclass(frozen=True)
class Int64Value:
    value: int | None = None

    @property
    def is_null(self) -> bool:
        return self.value is None

    def value_int64(self) -> int:
        return self.value if self.value is not None else 0

    def to_terraform(self) -> int | None:
        return self.value

    @classmethod
    def from_terraform(cls, raw: Any) -> Int64Value:
        # bool is an int subclass but never a valid number here
        if raw is not None and (isinstance(raw, bool) or not isinstance(raw, int)):
            raise ValueConversionError(f"expected number, got {_type_name(raw)}")
        return cls(raw)


@dataclass(frozen=True)
class Float64Value:
    value: float | None = None

    @property
    def is_null(self) -> bool:
        return self.value is None

    def value_float64(self) -> float:
        return self.value if self.value is not None else 0.0

    def to_terraform(self) -> float | None:
        return self.value

    @classmethod
    def from_terraform(cls, raw: Any) -> Float64Value:
        if raw is not None and (isinstance(raw, bool) or not isinstance(raw, (int, float))):
            raise ValueConversionError(f"expected number, got {_type_name(raw)}")
        return cls(None if raw is None else float(raw))


def _string_elements(raw: Any) -> tuple[str, ...] | None:
    if raw is None:
        return None
    if not isinstance(raw, (list, tuple, set, frozenset)):
        raise ValueConversionError(f"expected collection of strings, got {_type_name(raw)}")
    for item in raw:
        if not isinstance(item, str):
            raise ValueConversionError(f"expected string element, got {_type_name(item)}")
    return tuple(raw)


@dataclass(frozen=True)
class ListValue:
    """Ordered list of strings."""

    elements: tuple[str, ...] | None = None

    @classmethod
    def of(cls, items: Iterable[str]) -> ListValue:
        return cls(tuple(items))

    @property
    def is_null(self) -> bool:
        return self.elements is None

    def elements_as(self) -> list[str]:
        return list(self.elements or ())

    def to_terraform(self) -> list[str] | None:
        return None if self.elements is None else list(self.elements)

    @classmethod
    def from_terraform(cls, raw: Any) -> ListValue:
        return cls(_string_elements(raw))


@dataclass(frozen=True, eq=False)
class SetValue:
    """Unordered set of strings.

    Element order is kept so conversions reproduce the input exactly, but
    equality ignores it.
    """

    elements: tuple[str, ...] | None = None

    @classmethod
    def of(cls, items: Iterable[str]) -> SetValue:
        return cls(tuple(dict.fromkeys(items)))

    @property
    def is_null(self) -> bool:
        return self.elements is None

    def elements_as(self) -> list[str]:
        return list(self.elements or ())

    def to_terraform(self) -> list[str] | None:
        return None if self.elements is None else list(self.elements)

    @classmethod
    def from_terraform(cls, raw: Any) -> SetValue:
        elements = _string_elements(raw)
        return cls(None if elements is None else tuple(dict.fromkeys(elements)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SetValue):
            return NotImplemented
        if self.elements is None or other.elements is None:
            return self.elements is other.elements
        return frozenset(self.elements) == frozenset(other.elements)

    def __hash__(self) -> int:
        return hash(None if self.elements is None else frozenset(self.elements))


VALUE_TYPES = (StringValue, BoolValue, Int64Value, Float64Value, ListValue, SetValue)

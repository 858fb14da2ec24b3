"""
Attribute validators.

Validators run against configuration values before any network call and
report problems as diagnostics pinned to the attribute path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol
from urllib.parse import urlparse

from tfgrafana.framework.diagnostics import Diagnostics

_RFC3339_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


class Validator(Protocol):
    @property
    def description(self) -> str:
        ...

    def validate(self, path: str, value: Any) -> Diagnostics:
        ...


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp, raising ValueError on malformed input."""
    if not _RFC3339_RE.match(value):
        raise ValueError(f"{value!r} is not a valid RFC3339 timestamp")
    normalized = value.upper().replace("Z", "+00:00")
    return datetime.fromisoformat(normalized)


def format_rfc3339(value: datetime) -> str:
    """RFC3339 with UTC as ``Z`` and only as much sub-second precision as ``value`` has."""
    if value.microsecond % 1000:
        timespec = "microseconds"
    elif value.microsecond:
        timespec = "milliseconds"
    else:
        timespec = "seconds"
    text = value.isoformat(timespec=timespec)
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


@dataclass(frozen=True)
class SizeAtLeast:
    minimum: int

    @property
    def description(self) -> str:
        return f"must contain at least {self.minimum} elements"

    def validate(self, path: str, value: Any) -> Diagnostics:
        diags = Diagnostics()
        if value is not None and len(value) < self.minimum:
            diags.add_error(
                "Invalid Attribute Value",
                f"Attribute {path} {self.description}, got: {len(value)}",
                path=path,
            )
        return diags


@dataclass(frozen=True)
class RFC3339Time:
    @property
    def description(self) -> str:
        return "must be a valid RFC3339 date"

    def validate(self, path: str, value: Any) -> Diagnostics:
        diags = Diagnostics()
        if value is None:
            return diags
        try:
            parse_rfc3339(value)
        except ValueError as exc:
            diags.add_error("Invalid RFC3339 Time", str(exc), path=path)
        return diags


@dataclass(frozen=True)
class URLWithHTTPOrHTTPS:
    @property
    def description(self) -> str:
        return "must be a URL with an http or https scheme"

    def validate(self, path: str, value: Any) -> Diagnostics:
        diags = Diagnostics()
        if value is None:
            return diags
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            diags.add_error(
                "Invalid URL",
                f"expected {path} to have a url with schema of: \"http,https\", got {value}",
                path=path,
            )
        return diags


@dataclass(frozen=True)
class OneOf:
    values: tuple[str, ...]

    @property
    def description(self) -> str:
        return "value must be one of: " + ", ".join(f'"{v}"' for v in self.values)

    def validate(self, path: str, value: Any) -> Diagnostics:
        diags = Diagnostics()
        if value is not None and value not in self.values:
            diags.add_error(
                "Invalid Attribute Value Match",
                f"Attribute {path} {self.description}, got: {value!r}",
                path=path,
            )
        return diags


@dataclass(frozen=True)
class NoDuplicateNames:
    """Reject sibling nested blocks sharing the same ``key`` value."""

    summary: str
    key: str = "name"
    case_insensitive: bool = False

    @property
    def description(self) -> str:
        if self.case_insensitive:
            return f"{self.key} values must be unique (case-insensitive)."
        return f"No duplicate {self.key} values are allowed."

    def validate(self, path: str, value: Any) -> Diagnostics:
        diags = Diagnostics()
        seen: set[str] = set()
        for index, elem in enumerate(value or []):
            name = (elem or {}).get(self.key)
            if name is None:
                continue
            normalized = name.lower() if self.case_insensitive else name
            if normalized in seen:
                diags.add_error(
                    self.summary,
                    f"{self.key.capitalize()} {name!r} is duplicated.",
                    path=f"{path}[{index}].{self.key}",
                )
            seen.add(normalized)
        return diags


def size_at_least(minimum: int) -> SizeAtLeast:
    return SizeAtLeast(minimum)


def rfc3339_time() -> RFC3339Time:
    return RFC3339Time()


def url_with_http_or_https() -> URLWithHTTPOrHTTPS:
    return URLWithHTTPOrHTTPS()


def one_of(*values: str) -> OneOf:
    return OneOf(tuple(values))


def no_duplicate_names(summary: str, *, key: str = "name", case_insensitive: bool = False) -> NoDuplicateNames:
    return NoDuplicateNames(summary, key=key, case_insensitive=case_insensitive)


@dataclass(frozen=True)
class IntBetween:
    minimum: int
    maximum: int

    @property
    def description(self) -> str:
        return f"value must be between {self.minimum} and {self.maximum}"

    def validate(self, path: str, value: Any) -> Diagnostics:
        diags = Diagnostics()
        if value is not None and not self.minimum <= value <= self.maximum:
            diags.add_error(
                "Invalid Attribute Value",
                f"Attribute {path} {self.description}, got: {value}",
                path=path,
            )
        return diags


def int_between(minimum: int, maximum: int) -> IntBetween:
    return IntBetween(minimum, maximum)


@dataclass(frozen=True)
class MatchesRegex:
    pattern: re.Pattern[str]
    message: str

    @property
    def description(self) -> str:
        return self.message

    def validate(self, path: str, value: Any) -> Diagnostics:
        diags = Diagnostics()
        if isinstance(value, str) and not self.pattern.match(value):
            diags.add_error(
                "Invalid Attribute Value",
                f"Attribute {path} {self.message}, got: {value}",
                path=path,
            )
        return diags


def matches_regex(pattern: str | re.Pattern[str], message: str) -> MatchesRegex:
    return MatchesRegex(re.compile(pattern), message)

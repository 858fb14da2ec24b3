"""
Structured diagnostics returned by handlers instead of raised exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single warning or error, optionally pinned to an attribute path."""

    severity: Severity
    summary: str
    detail: str = ""
    path: str | None = None

    def __str__(self) -> str:
        prefix = f"{self.path}: " if self.path else ""
        if self.detail:
            return f"{prefix}{self.summary}: {self.detail}"
        return f"{prefix}{self.summary}"


class Diagnostics(list[Diagnostic]):
    """Ordered collection of diagnostics."""

    def add_error(self, summary: str, detail: str = "", *, path: str | None = None) -> None:
        self.append(Diagnostic(Severity.ERROR, summary, detail, path))

    def add_warning(self, summary: str, detail: str = "", *, path: str | None = None) -> None:
        self.append(Diagnostic(Severity.WARNING, summary, detail, path))

    def add_exception(self, summary: str, exc: BaseException, *, path: str | None = None) -> None:
        self.add_error(summary, str(exc), path=path)

    def has_error(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self if d.severity is Severity.WARNING]

    @classmethod
    def from_error(cls, summary: str, detail: str = "", *, path: str | None = None) -> Diagnostics:
        diags = cls()
        diags.add_error(summary, detail, path=path)
        return diags

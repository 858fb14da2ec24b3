"""
CLI output helpers built on rich.

Machine-readable output (JSON) goes to stdout. Status lines and
diagnostics go to stderr. NO_COLOR and FORCE_COLOR are honoured.
"""

from __future__ import annotations

import os
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

from tfgrafana.framework.diagnostics import Diagnostics, Severity

TFGRAFANA_THEME = Theme(
    {
        "info": "#88C0D0",
        "success": "#A3BE8C",
        "warning": "#EBCB8B",
        "error": "#BF616A bold",
        "muted": "#D8DEE9",
    }
)

console = Console(
    theme=TFGRAFANA_THEME,
    force_terminal=os.environ.get("FORCE_COLOR") is not None,
    no_color=os.environ.get("NO_COLOR") is not None,
)

err_console = Console(
    theme=TFGRAFANA_THEME,
    stderr=True,
    no_color=os.environ.get("NO_COLOR") is not None,
)


def success(message: str) -> None:
    err_console.print(f"[success]✓ {message}[/success]")


def error(message: str) -> None:
    err_console.print(f"[error]✗ {message}[/error]")


def warning(message: str) -> None:
    err_console.print(f"[warning]⚠ {message}[/warning]")


def info(message: str) -> None:
    err_console.print(f"[info]ℹ {message}[/info]")


def print_json(data: Any) -> None:
    console.print_json(data=data)


def print_diagnostics(diags: Diagnostics) -> None:
    """Print each diagnostic with its severity, path and detail."""
    for diag in diags:
        location = f" [muted]({escape(diag.path)})[/muted]" if diag.path else ""
        text = f"{escape(diag.summary)}{location}"
        if diag.detail:
            text += f": {escape(diag.detail)}"
        if diag.severity is Severity.ERROR:
            error(text)
        else:
            warning(text)

"""
Error types for tfgrafana and their CLI exit codes.

Handlers report problems as Diagnostics. Exceptions are reserved for the
HTTP client layer and for the CLI boundary.

Exit Codes:
- 0: Success
- 10: Configuration error
- 11: Provider error (remote API failure)
- 12: Validation error
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    SUCCESS = 0
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127


class TFGrafanaError(Exception):
    """Base exception carrying an exit code and structured details."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(TFGrafanaError):
    """Provider configuration is missing or invalid."""

    exit_code = ExitCode.CONFIG_ERROR


class ProviderError(TFGrafanaError):
    """A remote API call failed or a handler reported errors."""

    exit_code = ExitCode.PROVIDER_ERROR


class ValidationError(TFGrafanaError):
    """User input (arguments, HCL, JSON) could not be accepted."""

    exit_code = ExitCode.VALIDATION_ERROR


F = TypeVar("F", bound=Callable[..., int])


def format_error_message(error: TFGrafanaError) -> str:
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg


def main_with_error_handling(*, show_traceback: bool = False) -> Callable[[F], F]:
    """
    Wrap a CLI entry point so that exceptions become exit codes.

    TFGrafanaError subclasses are printed and return their own exit_code,
    KeyboardInterrupt returns 130 and anything else returns 127.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            from rich.markup import escape

            from tfgrafana.cli.ux import error as print_error

            try:
                return func(*args, **kwargs)
            except TFGrafanaError as e:
                logger.debug("command_error", error_type=type(e).__name__, exit_code=int(e.exit_code))
                print_error(escape(format_error_message(e)))
                return e.exit_code
            except KeyboardInterrupt:
                logger.info("command_interrupted")
                return 130
            except Exception as e:
                logger.error(
                    "unexpected_error",
                    error_type=type(e).__name__,
                    message=str(e),
                    exit_code=int(ExitCode.UNKNOWN_ERROR),
                )
                print_error(escape(f"Unexpected error: {e}"))
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator

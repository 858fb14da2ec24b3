"""Shared error types and exit codes."""

from tfgrafana.core.errors import (
    ConfigurationError,
    ExitCode,
    ProviderError,
    TFGrafanaError,
    ValidationError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "TFGrafanaError",
    "ConfigurationError",
    "ProviderError",
    "ValidationError",
    "main_with_error_handling",
    "format_error_message",
]

"""
tfgrafana provider configuration.

Provides:
- Pydantic-based settings (explicit values, GRAFANA_* environment variables, .env files)
- YAML provider config files for the CLI
"""

from tfgrafana.config.loader import (
    build_provider_config,
    get_config_path,
    load_provider_config,
)
from tfgrafana.config.settings import ANONYMOUS_AUTH, ProviderConfig

__all__ = [
    "ANONYMOUS_AUTH",
    "ProviderConfig",
    "build_provider_config",
    "get_config_path",
    "load_provider_config",
]

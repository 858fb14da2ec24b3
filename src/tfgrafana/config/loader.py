"""
Provider configuration file loading.

Search order:
1. Explicit path (--config flag)
2. .tfgrafana/provider.yaml (project root)
3. ~/.tfgrafana/provider.yaml (user home)
4. Environment variables only
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pydantic
import structlog
import yaml

from tfgrafana.config.settings import ProviderConfig
from tfgrafana.core.errors import ConfigurationError

logger = structlog.get_logger()


def get_config_path(explicit_path: str | Path | None = None) -> Path | None:
    """Find the provider configuration file to use, or None."""
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigurationError("Config file not found", {"path": str(path)})

    cwd_config = Path.cwd() / ".tfgrafana" / "provider.yaml"
    if cwd_config.exists():
        return cwd_config

    home_config = Path.home() / ".tfgrafana" / "provider.yaml"
    if home_config.exists():
        return home_config

    return None


def build_provider_config(values: dict[str, Any]) -> ProviderConfig:
    """Build a ProviderConfig from explicit values, falling back to the environment."""
    explicit = {k: v for k, v in values.items() if v is not None}
    try:
        return ProviderConfig(**explicit)
    except pydantic.ValidationError as exc:
        raise ConfigurationError("Invalid provider configuration", {"errors": exc.error_count(), "detail": str(exc)}) from exc


def load_provider_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ProviderConfig:
    """Load provider settings from YAML (if any), overrides, then environment."""
    values: dict[str, Any] = {}
    config_path = get_config_path(path)
    if config_path is not None:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError("Provider config file must contain a mapping", {"path": str(config_path)})
        logger.debug("provider_config_loaded", path=str(config_path))
        values.update(data)
    values.update(overrides or {})
    return build_provider_config(values)

"""Runtime settings for mockproxy.

Settings come from an optional YAML file and from environment variables,
with the environment winning::

    # mockproxy.yaml
    surrogate_type: builtins.object
    strict: false
    log_level: INFO

Environment variables:

    MOCKPROXY_CONFIG      path to the YAML file (default: ./mockproxy.yaml)
    MOCKPROXY_SURROGATE   dotted path of the type used to erase TypeVars
    MOCKPROXY_STRICT      "1" makes new substitutes raise on unmatched calls
    MOCKPROXY_LOG_LEVEL   level applied by configure_logging()
"""

from __future__ import annotations

import importlib
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, field_validator

from mockproxy.errors import ProxySetupError

CONFIG_ENV_VAR = "MOCKPROXY_CONFIG"
DEFAULT_CONFIG_FILE = "mockproxy.yaml"

_ENV_FIELDS = {
    "MOCKPROXY_SURROGATE": "surrogate_type",
    "MOCKPROXY_STRICT": "strict",
    "MOCKPROXY_LOG_LEVEL": "log_level",
}


class ProxySettings(BaseModel):
    """Validated engine settings."""

    surrogate_type: str = "builtins.object"
    strict: bool = False
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @field_validator("surrogate_type")
    @classmethod
    def _check_surrogate(cls, value: str) -> str:
        if "." not in value:
            raise ValueError(f"surrogate_type must be a dotted path, got {value!r}")
        return value

    def resolve_surrogate(self) -> type:
        """Import and return the surrogate type named by ``surrogate_type``."""
        module_name, _, attr = self.surrogate_type.rpartition(".")
        try:
            surrogate = getattr(importlib.import_module(module_name), attr)
        except (ImportError, AttributeError) as exc:
            raise ProxySetupError(
                f"Cannot import surrogate type '{self.surrogate_type}'"
            ) from exc
        if not isinstance(surrogate, type):
            raise ProxySetupError(f"'{self.surrogate_type}' is not a type")
        return surrogate

    @classmethod
    def from_env(cls, base: Optional[dict[str, Any]] = None) -> "ProxySettings":
        """Build settings from *base* values overridden by ``MOCKPROXY_*`` env vars."""
        values = dict(base or {})
        for env_var, field_name in _ENV_FIELDS.items():
            raw = os.environ.get(env_var)
            if raw is None or raw == "":
                continue
            if field_name == "strict":
                values[field_name] = raw.strip().lower() in ("1", "true", "yes", "on")
            else:
                values[field_name] = raw
        return cls(**values)


def load_settings(path: Optional[Path | str] = None) -> ProxySettings:
    """Load settings from YAML (if present) and the environment.

    Args:
        path: Explicit YAML file.  Defaults to ``$MOCKPROXY_CONFIG`` or
            ``./mockproxy.yaml``; a missing default file is not an error.
    """
    explicit = path is not None or bool(os.environ.get(CONFIG_ENV_VAR))
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE)

    data: dict[str, Any] = {}
    if config_path.is_file():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ProxySetupError(f"{config_path} must contain a mapping")
        data = loaded
    elif explicit:
        raise ProxySetupError(f"Config file not found: {config_path}")

    return ProxySettings.from_env(data)


@lru_cache(maxsize=1)
def get_settings() -> ProxySettings:
    """Return the process-wide settings (loaded once)."""
    return load_settings()


def configure_logging(settings: Optional[ProxySettings] = None) -> None:
    """Apply ``log_level`` to the ``mockproxy`` logger hierarchy."""
    settings = settings or get_settings()
    logging.getLogger("mockproxy").setLevel(settings.log_level)

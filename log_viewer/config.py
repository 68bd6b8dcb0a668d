"""Configuration: frozen dataclass built from defaults <- YAML <- env vars."""

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Mapping

import yaml

logger = logging.getLogger(__name__)


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    url: str = "ws://localhost:3000"
    reconnect_delay: float = 3.0
    max_reconnect_attempts: int = 0  # 0 = unlimited
    open_timeout: float = 10.0
    max_records: int = 0  # 0 = unbounded
    level_filter: str = "ALL"
    color: bool = False
    dashboard_port: int = 0  # 0 = disabled
    log_level: str = "INFO"


_ENV_VARS = {
    "url": "LOG_SOURCE_URL",
    "reconnect_delay": "RECONNECT_DELAY",
    "max_reconnect_attempts": "MAX_RECONNECT_ATTEMPTS",
    "open_timeout": "OPEN_TIMEOUT",
    "max_records": "MAX_RECORDS",
    "level_filter": "LEVEL_FILTER",
    "color": "COLOR",
    "dashboard_port": "DASHBOARD_PORT",
    "log_level": "LOG_LEVEL",
}

_CASTS = {
    "url": str,
    "reconnect_delay": float,
    "max_reconnect_attempts": int,
    "open_timeout": float,
    "max_records": int,
    "level_filter": str,
    "color": _parse_bool,
    "dashboard_port": int,
    "log_level": str,
}


def load_yaml(path: str) -> dict:
    """Read a YAML mapping from *path*. Missing or invalid files give ``{}``."""
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.debug("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError:
        logger.warning("Invalid YAML in %s, using defaults", path)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def load_config(path: str | None = None, env: Mapping[str, str] | None = None) -> Config:
    """Build Config from defaults <- YAML file <- env vars (highest priority).

    The YAML path falls back to the ``CONFIG_PATH`` environment variable.
    """
    if env is None:
        env = os.environ
    if path is None:
        path = env.get("CONFIG_PATH")

    kwargs: dict = {}
    if path:
        for key, value in load_yaml(path).items():
            if key in _CASTS and value is not None:
                kwargs[key] = _CASTS[key](value)

    for key, var in _ENV_VARS.items():
        if var in env:
            kwargs[key] = _CASTS[key](env[var])

    return Config(**kwargs)


def with_overrides(config: Config, overrides: dict) -> Config:
    """Return a copy of *config* with the non-None *overrides* applied."""
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return dataclasses.replace(config, **changes)

"""
Service Settings

Local runtime settings loaded from a YAML file, with environment
variable overrides for deployment secrets and paths.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError
from .logging_setup import get_service_logger

logger = get_service_logger("settings")

DEFAULT_CONFIG_PATHS = (
    Path("/etc/themesync/config.yaml"),
    Path("config.yaml"),
)

# Environment variable -> settings attribute
ENV_OVERRIDES: dict[str, str] = {
    "THEMESYNC_REMOTE_URL": "remote_url",
    "THEMESYNC_REMOTE_KEY": "remote_key",
    "THEMESYNC_STATE_DIR": "state_dir",
    "THEMESYNC_MIN_FETCH_INTERVAL_MS": "min_fetch_interval_ms",
}


@dataclass
class ServiceSettings:
    """Runtime settings for the theme service"""
    # Remote source
    remote_url: str = ""
    remote_key: str = ""
    remote_table: str = "remote_config"
    theme_key: str = "app_theme"
    min_fetch_interval_ms: int = 0
    fetch_timeout_s: float = 30.0

    # Local cache
    cache_key: str = "theme_cache"
    state_dir: str = "/var/lib/themesync/state"

    # Service
    refresh_interval_s: float = 0.0  # 0 = no periodic refresh
    health_host: str = "127.0.0.1"
    health_port: int = 8090
    log_level: str = "INFO"

    config_path: str | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Settings as a dict with the remote key redacted"""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if data["remote_key"]:
            data["remote_key"] = "***"
        return data


def find_config_path(explicit: str | None = None) -> Path | None:
    """Resolve the settings file: explicit path, THEMESYNC_CONFIG, then defaults"""
    if explicit:
        return Path(explicit)

    env_path = os.environ.get("THEMESYNC_CONFIG")
    if env_path:
        return Path(env_path)

    for path in DEFAULT_CONFIG_PATHS:
        if path.exists():
            return path

    return None


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Config file not found: {path}, using defaults")
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Convert a raw YAML/env value to the type of the field default"""
    if value is None:
        return default
    try:
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from e


def load_settings(path: str | None = None) -> ServiceSettings:
    """
    Load settings from YAML and apply environment overrides.

    YAML layout:

        remote:
          url: https://example.supabase.co
          key: <api key>
          table: remote_config
          min_fetch_interval_ms: 3600000
          fetch_timeout_s: 30
        theme:
          key: app_theme
        cache:
          key: theme_cache
          state_dir: /var/lib/themesync/state
        service:
          refresh_interval_s: 300
          health_host: 127.0.0.1
          health_port: 8090
          log_level: INFO

    Raises:
        ConfigError: if the file is malformed or a value has the wrong type
    """
    config_path = find_config_path(path)
    data = _read_yaml(config_path) if config_path else {}

    remote = data.get("remote") or {}
    theme = data.get("theme") or {}
    cache = data.get("cache") or {}
    service = data.get("service") or {}

    raw = {
        "remote_url": remote.get("url"),
        "remote_key": remote.get("key"),
        "remote_table": remote.get("table"),
        "min_fetch_interval_ms": remote.get("min_fetch_interval_ms"),
        "fetch_timeout_s": remote.get("fetch_timeout_s"),
        "theme_key": theme.get("key"),
        "cache_key": cache.get("key"),
        "state_dir": cache.get("state_dir"),
        "refresh_interval_s": service.get("refresh_interval_s"),
        "health_host": service.get("health_host"),
        "health_port": service.get("health_port"),
        "log_level": service.get("log_level"),
    }

    for env_name, attr in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_name)
        if env_value:
            raw[attr] = env_value

    defaults = ServiceSettings()
    values = {
        name: _coerce(name, value, getattr(defaults, name))
        for name, value in raw.items()
    }

    settings = ServiceSettings(
        **values,
        config_path=str(config_path) if config_path else None,
    )

    if settings.min_fetch_interval_ms < 0:
        raise ConfigError("min_fetch_interval_ms must be non-negative")
    if settings.fetch_timeout_s <= 0:
        raise ConfigError("fetch_timeout_s must be positive")

    return settings

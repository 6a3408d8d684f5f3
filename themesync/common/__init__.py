"""
Common Utilities

Shared modules used across all services:
- theme.py - Theme dataclasses and the built-in default theme
- state.py - Persistent key-value stores
- config.py - Service settings (YAML + environment)
- exceptions.py - Custom exception classes and failure kinds
- logging_setup.py - Structured logging setup
"""

from .theme import (
    Theme,
    ThemeColors,
    Typography,
    FontSizes,
    FontWeights,
    Spacing,
    DEFAULT_THEME,
    load_theme,
)
from .state import PersistentStore, FileStore, MemoryStore
from .config import ServiceSettings, load_settings
from .exceptions import (
    FailureKind,
    ThemeSyncError,
    ConfigError,
    InitializationError,
    NetworkError,
    MalformedPayloadError,
    SchemaViolationError,
    CacheWriteError,
    CacheReadError,
)
from .logging_setup import (
    setup_logging,
    get_service_logger,
    set_log_level,
    log_fetch_result,
)

__all__ = [
    # Theme
    "Theme",
    "ThemeColors",
    "Typography",
    "FontSizes",
    "FontWeights",
    "Spacing",
    "DEFAULT_THEME",
    "load_theme",
    # State
    "PersistentStore",
    "FileStore",
    "MemoryStore",
    # Config
    "ServiceSettings",
    "load_settings",
    # Exceptions
    "FailureKind",
    "ThemeSyncError",
    "ConfigError",
    "InitializationError",
    "NetworkError",
    "MalformedPayloadError",
    "SchemaViolationError",
    "CacheWriteError",
    "CacheReadError",
    # Logging
    "setup_logging",
    "get_service_logger",
    "set_log_level",
    "log_fetch_result",
]

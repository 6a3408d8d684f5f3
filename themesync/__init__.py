"""
themesync - Remote theme configuration with local cache fallback
"""

from .common.theme import DEFAULT_THEME, Theme
from .services.config import ConfigCache, ConfigService
from .services.controller import ConfigController

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_THEME",
    "Theme",
    "ConfigCache",
    "ConfigService",
    "ConfigController",
]

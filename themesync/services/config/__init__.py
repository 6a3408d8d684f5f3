"""
Config Service - Theme Delivery

Responsibilities:
- Fetch the theme document from the remote config source
- Validate it against the theme schema
- Maintain a local cache for offline operation
- Fall back to cached or built-in theme on any failure
"""

from .cache import CachedRecord, ConfigCache
from .service import ConfigService, FetchResult, ThemeSource
from .sync import RemoteSource, RestRemoteSource
from .validator import ThemeValidator

__all__ = [
    "CachedRecord",
    "ConfigCache",
    "ConfigService",
    "FetchResult",
    "ThemeSource",
    "RemoteSource",
    "RestRemoteSource",
    "ThemeValidator",
]

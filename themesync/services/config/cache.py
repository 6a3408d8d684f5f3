"""
Theme Cache

Single-slot local cache of the last theme accepted from the remote
source. Caching is best-effort: write failures are logged and reported
as False, read failures degrade to "no cache".
"""

import asyncio
import json
from dataclasses import dataclass
from datetime import datetime, timezone

from themesync.common.exceptions import CacheReadError, CacheWriteError, FailureKind
from themesync.common.logging_setup import get_service_logger
from themesync.common.state import PersistentStore
from themesync.common.theme import Theme, load_theme

from .validator import ThemeValidator

logger = get_service_logger("config.cache")

DEFAULT_CACHE_KEY = "theme_cache"


@dataclass(frozen=True)
class CachedRecord:
    """The persisted theme and when it was accepted"""
    theme: Theme
    cached_at: str


class ConfigCache:
    """
    Local theme cache.

    Stores one record, `{"theme": {...}, "cached_at": "<iso>"}`, under a
    fixed key in the persistent store.
    """

    def __init__(
        self,
        store: PersistentStore,
        key: str = DEFAULT_CACHE_KEY,
        validator: ThemeValidator | None = None,
    ):
        self.store = store
        self.key = key
        self.validator = validator or ThemeValidator()

    async def write(self, theme: Theme) -> bool:
        """
        Save theme to cache, replacing any previous record.

        Returns:
            True if the theme was persisted
        """
        record = {
            "theme": theme.to_dict(),
            "cached_at": datetime.now(timezone.utc).isoformat(),
        }

        try:
            await asyncio.to_thread(self.store.set, self.key, json.dumps(record))
        except Exception as e:
            error = CacheWriteError(str(e))
            logger.error(
                error.message,
                exc_info=True,
                extra={"failure": FailureKind.CACHE_WRITE_FAILURE.value},
            )
            return False

        logger.info("Theme saved to cache", extra={"cache_key": self.key})
        return True

    async def read(self) -> Theme | None:
        """
        Load theme from cache.

        Returns:
            Cached Theme, or None if nothing was cached or the record is unreadable
        """
        record = await self.read_record()
        return record.theme if record else None

    async def read_record(self) -> CachedRecord | None:
        """Load the full cached record, or None"""
        try:
            raw = await asyncio.to_thread(self.store.get, self.key)
            if raw is None:
                logger.debug("No cached theme found")
                return None
            return self._decode(raw)
        except CacheReadError as e:
            logger.error(
                e.message, extra={"failure": FailureKind.CACHE_READ_FAILURE.value}
            )
        except Exception as e:
            logger.error(
                CacheReadError(str(e)).message,
                exc_info=True,
                extra={"failure": FailureKind.CACHE_READ_FAILURE.value},
            )

        return None

    def _decode(self, raw: str) -> CachedRecord:
        try:
            record = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheReadError(f"cached record is not valid JSON: {e}") from e

        if not isinstance(record, dict) or "theme" not in record:
            raise CacheReadError("cached record has no theme")

        is_valid, errors = self.validator.validate(record["theme"])
        if not is_valid:
            raise CacheReadError(f"cached theme is invalid: {'; '.join(errors)}")

        return CachedRecord(
            theme=load_theme(record["theme"]),
            cached_at=str(record.get("cached_at", "")),
        )

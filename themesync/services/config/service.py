"""
Config Service - Theme Delivery

Responsible for:
- One-time setup of the remote source (staleness policy, default value)
- Fetching and validating the theme from the remote source
- Writing accepted themes through to the local cache
- Falling back to the cached or built-in theme on any failure
"""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from themesync.common.exceptions import (
    FailureKind,
    InitializationError,
    MalformedPayloadError,
    NetworkError,
    ThemeSyncError,
)
from themesync.common.logging_setup import get_service_logger, log_fetch_result
from themesync.common.theme import DEFAULT_THEME, Theme

from .cache import ConfigCache
from .sync import RemoteSource
from .validator import ThemeValidator

logger = get_service_logger("config")

DEFAULT_THEME_KEY = "app_theme"
DEFAULT_FETCH_TIMEOUT_S = 30.0


class ThemeSource(str, Enum):
    """Where a served theme came from"""
    REMOTE = "remote"
    CACHE = "cache"
    DEFAULT = "default"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch_theme() call, for diagnostics"""
    theme: Theme
    source: ThemeSource
    failure: FailureKind | None = None
    detail: str | None = None
    warnings: tuple[FailureKind, ...] = ()
    fetched_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "failure": self.failure.value if self.failure else None,
            "detail": self.detail,
            "warnings": [w.value for w in self.warnings],
            "fetched_at": self.fetched_at,
        }


class ConfigService:
    """
    Config Service

    Produces a validated Theme, preferring fresh remote data and
    degrading to cached data, then to DEFAULT_THEME. fetch_theme() does
    not raise for remote, payload or cache failures.
    """

    def __init__(
        self,
        remote: RemoteSource,
        cache: ConfigCache,
        theme_key: str = DEFAULT_THEME_KEY,
        min_fetch_interval_ms: int = 0,
        fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S,
        validator: ThemeValidator | None = None,
    ):
        if (
            isinstance(min_fetch_interval_ms, bool)
            or not isinstance(min_fetch_interval_ms, int)
            or min_fetch_interval_ms < 0
        ):
            raise ValueError("min_fetch_interval_ms must be a non-negative integer")
        if fetch_timeout_s <= 0:
            raise ValueError("fetch_timeout_s must be positive")

        self.remote = remote
        self.cache = cache
        self.theme_key = theme_key
        self.min_fetch_interval_ms = min_fetch_interval_ms
        self.fetch_timeout_s = fetch_timeout_s
        self.validator = validator or ThemeValidator()

        # Set once by the first successful initialize(), never reset
        self._initialized = False
        self._init_task: asyncio.Task | None = None
        self._init_error: str | None = None

        self._last_result: FetchResult | None = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def last_result(self) -> FetchResult | None:
        """Result of the most recent fetch, or None before the first one"""
        return self._last_result

    async def initialize(self) -> bool:
        """
        Configure and seed the remote source once.

        Concurrent callers share the in-flight attempt. A failed attempt
        leaves the service uninitialized so the next call retries.

        Returns:
            True if the service is initialized
        """
        if self._initialized:
            return True

        if self._init_task is None:
            self._init_task = asyncio.create_task(self._initialize_once())

        task = self._init_task
        try:
            return await asyncio.shield(task)
        finally:
            if task.done() and self._init_task is task:
                self._init_task = None

    async def _initialize_once(self) -> bool:
        cached = await self.cache.read()
        seed = cached or DEFAULT_THEME

        try:
            await asyncio.wait_for(self._seed_remote(seed), timeout=self.fetch_timeout_s)
        except asyncio.TimeoutError:
            error = InitializationError(
                f"remote source did not respond within {self.fetch_timeout_s}s"
            )
            self._init_error = error.message
            logger.error(error.message, extra={"failure": error.kind.value})
            return False
        except Exception as e:
            error = InitializationError(str(e))
            self._init_error = error.message
            logger.error(error.message, exc_info=True, extra={"failure": error.kind.value})
            return False

        self._initialized = True
        self._init_error = None
        logger.info(
            f"Remote source initialized (seeded with {'cached' if cached else 'default'} theme)",
            extra={
                "theme_key": self.theme_key,
                "min_fetch_interval_ms": self.min_fetch_interval_ms,
            },
        )
        return True

    async def _seed_remote(self, seed: Theme) -> None:
        await self.remote.configure({"minFetchIntervalMs": self.min_fetch_interval_ms})
        await self.remote.set_default(self.theme_key, json.dumps(seed.to_dict()))

    async def fetch_theme(self) -> Theme:
        """Fetch the current theme. Always returns a usable Theme."""
        result = await self.fetch_theme_result()
        return result.theme

    async def fetch_theme_result(self) -> FetchResult:
        """Fetch the current theme along with where it came from"""
        if not await self.initialize():
            result = await self._fallback(
                FailureKind.INITIALIZATION_FAILURE,
                self._init_error or "initialization failed",
            )
        else:
            try:
                theme = await self._fetch_remote()
            except ThemeSyncError as e:
                result = await self._fallback(e.kind or FailureKind.NETWORK_FAILURE, e.message)
            except Exception as e:
                logger.error(f"Unexpected error decoding theme: {e}", exc_info=True)
                result = await self._fallback(
                    FailureKind.MALFORMED_PAYLOAD, str(e) or type(e).__name__
                )
            else:
                written = await self.cache.write(theme)
                warnings = () if written else (FailureKind.CACHE_WRITE_FAILURE,)
                result = FetchResult(theme=theme, source=ThemeSource.REMOTE, warnings=warnings)

        self._last_result = result
        log_fetch_result(logger, result)
        return result

    async def _fetch_remote(self) -> Theme:
        """
        Fetch, activate, decode and validate the remote theme.

        Raises:
            NetworkError, MalformedPayloadError, SchemaViolationError
        """
        logger.debug("Fetching theme from remote source")

        try:
            await asyncio.wait_for(self.remote.fetch_and_activate(), timeout=self.fetch_timeout_s)
        except ThemeSyncError:
            raise
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"remote fetch timed out after {self.fetch_timeout_s}s"
            ) from e
        except Exception as e:
            raise NetworkError(str(e)) from e

        try:
            raw = await asyncio.wait_for(
                self.remote.get_string(self.theme_key), timeout=self.fetch_timeout_s
            )
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"reading {self.theme_key} timed out after {self.fetch_timeout_s}s"
            ) from e
        except Exception as e:
            raise MalformedPayloadError(f"could not read {self.theme_key}: {e}") from e

        return self.validator.parse(raw)

    async def _fallback(self, failure: FailureKind, detail: str) -> FetchResult:
        """Serve the cached theme, else the default. Never raises."""
        cached = await self.cache.read()
        if cached is not None:
            return FetchResult(
                theme=cached, source=ThemeSource.CACHE, failure=failure, detail=detail
            )
        return FetchResult(
            theme=DEFAULT_THEME, source=ThemeSource.DEFAULT, failure=failure, detail=detail
        )

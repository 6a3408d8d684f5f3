"""
Remote Config Sync

Remote key-value configuration source. The theme document is one string
value in a PostgREST/Supabase `remote_config` table:

    key        | value
    -----------+------------------------------
    app_theme  | {"colors": {...}, ...}

Fetched values are activated as a whole; keys with no fetched value fall
back to their defaults.
"""

import json
import time
from typing import Any, Protocol

import httpx

from themesync.common.exceptions import MalformedPayloadError, NetworkError
from themesync.common.logging_setup import get_service_logger

logger = get_service_logger("config.sync")


class RemoteSource(Protocol):
    """Remotely updatable key-value configuration source"""

    async def configure(self, options: dict[str, Any]) -> None: ...

    async def set_default(self, key: str, raw_value: str) -> None: ...

    async def fetch_and_activate(self) -> bool: ...

    async def get_string(self, key: str) -> str: ...


def parse_fetch_interval(options: dict[str, Any]) -> int:
    """Read minFetchIntervalMs from configure() options"""
    interval = options.get("minFetchIntervalMs", 0)
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 0:
        raise ValueError(f"minFetchIntervalMs must be a non-negative integer, got {interval!r}")
    return interval


class RestRemoteSource:
    """
    Remote config over a PostgREST endpoint.

    Honours a staleness window: a fetch within `minFetchIntervalMs` of the
    last successful one is skipped and the activated values are reused.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        table: str = "remote_config",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout
        # Reusable HTTP client - avoids connection overhead per request
        self._client = client
        self._owns_client = client is None

        self._min_fetch_interval_ms = 0
        self._defaults: dict[str, str] = {}
        self._active: dict[str, str] = {}
        self._last_fetch_at: float | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    async def configure(self, options: dict[str, Any]) -> None:
        self._min_fetch_interval_ms = parse_fetch_interval(options)
        logger.debug(
            f"Remote source configured (min fetch interval: {self._min_fetch_interval_ms}ms)"
        )

    async def set_default(self, key: str, raw_value: str) -> None:
        self._defaults[key] = raw_value

    def _is_fresh(self) -> bool:
        if self._last_fetch_at is None or self._min_fetch_interval_ms == 0:
            return False
        age_ms = (time.monotonic() - self._last_fetch_at) * 1000
        return age_ms < self._min_fetch_interval_ms

    async def fetch_and_activate(self) -> bool:
        """
        Fetch all values and activate them.

        Returns:
            True if newly fetched values differ from the active ones

        Raises:
            NetworkError: request failed or returned an error status
            MalformedPayloadError: response is not a list of key/value rows
        """
        if self._is_fresh():
            logger.debug("Remote values still fresh, skipping fetch")
            return False

        if not self.url:
            raise NetworkError("remote url is not configured")

        try:
            client = await self._get_client()
            response = await client.get(
                f"{self.url}/rest/v1/{self.table}",
                params={"select": "key,value"},
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"remote config returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"remote config request failed: {e}") from e

        fetched = self._decode_rows(response)

        changed = fetched != self._active
        self._active = fetched
        self._last_fetch_at = time.monotonic()

        logger.info(
            f"Remote config fetched: {len(fetched)} keys",
            extra={"key_count": len(fetched), "changed": changed},
        )
        return changed

    def _decode_rows(self, response: httpx.Response) -> dict[str, str]:
        try:
            rows = response.json()
        except ValueError as e:
            raise MalformedPayloadError(f"remote config response is not JSON: {e}") from e

        if not isinstance(rows, list):
            raise MalformedPayloadError("remote config response must be a list of rows")

        values: dict[str, str] = {}
        for row in rows:
            if not isinstance(row, dict) or not isinstance(row.get("key"), str):
                continue
            value = row.get("value")
            if value is None:
                continue
            # jsonb columns arrive decoded; keep the wire value a string
            values[row["key"]] = value if isinstance(value, str) else json.dumps(value)

        return values

    async def get_string(self, key: str) -> str:
        if key in self._active:
            return self._active[key]
        return self._defaults.get(key, "")

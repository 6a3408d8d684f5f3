#!/usr/bin/env python3
"""
themesync - Main Entry Point

Wires the theme cache, remote source, config service and controller
together and serves the current theme state over a small status server.

Usage:
    themesync                      # Use default config.yaml
    themesync --config my.yaml     # Use custom config file
    themesync --dry-run            # Print settings and cached theme, then exit
"""

import argparse
import asyncio
import json
import os
import signal
import sys
from datetime import datetime, timezone

from aiohttp import web

from themesync.common.config import ServiceSettings, load_settings
from themesync.common.exceptions import ConfigError
from themesync.common.logging_setup import get_service_logger, set_log_level
from themesync.common.state import FileStore, PersistentStore
from themesync.services.config import ConfigCache, ConfigService, RestRemoteSource
from themesync.services.config.sync import RemoteSource
from themesync.services.controller import ConfigController

logger = get_service_logger("main")


class ThemeSyncApp:
    """
    Composition root.

    Owns one ConfigService and one ConfigController for the process,
    plus the status server and the optional periodic refresh loop.
    """

    def __init__(
        self,
        settings: ServiceSettings,
        store: PersistentStore | None = None,
        remote: RemoteSource | None = None,
    ):
        self.settings = settings

        self.store = store or FileStore(settings.state_dir)
        self.remote = remote or RestRemoteSource(
            url=settings.remote_url,
            api_key=settings.remote_key,
            table=settings.remote_table,
            timeout=settings.fetch_timeout_s,
        )
        self.cache = ConfigCache(self.store, key=settings.cache_key)
        self.service = ConfigService(
            remote=self.remote,
            cache=self.cache,
            theme_key=settings.theme_key,
            min_fetch_interval_ms=settings.min_fetch_interval_ms,
            fetch_timeout_s=settings.fetch_timeout_s,
        )
        self.controller = ConfigController(self.service)

        self._start_time = datetime.now(timezone.utc)

        # Status server
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None

        # State
        self._running = False
        self._refresh_task: asyncio.Task | None = None
        self._shutdown_event = asyncio.Event()

    async def start(self) -> None:
        """Start the service and wait for shutdown"""
        logger.info("Starting themesync")
        self._running = True

        await self.controller.activate()
        await self._start_status_server()

        if self.settings.refresh_interval_s > 0:
            self._refresh_task = asyncio.create_task(self._refresh_loop())

        logger.info(
            f"themesync started (state: {self.controller.state.status})",
            extra={"theme_key": self.settings.theme_key},
        )

        self._setup_signal_handlers()
        await self._shutdown_event.wait()

    async def stop(self) -> None:
        """Stop the service"""
        logger.info("Stopping themesync")
        self._running = False

        if self._refresh_task:
            self._refresh_task.cancel()
            try:
                await self._refresh_task
            except asyncio.CancelledError:
                pass

        await self._stop_status_server()

        close = getattr(self.remote, "close", None)
        if close is not None:
            await close()

        logger.info("themesync stopped")

    def request_shutdown(self) -> None:
        """Handle shutdown signal"""
        logger.info("Received shutdown signal")
        self._shutdown_event.set()

    def _setup_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except NotImplementedError:
                # Windows doesn't support add_signal_handler
                signal.signal(sig, lambda s, f: self.request_shutdown())

    async def _refresh_loop(self) -> None:
        """Periodic theme refresh loop"""
        while self._running:
            await asyncio.sleep(self.settings.refresh_interval_s)

            try:
                await self.controller.refresh()
            except Exception as e:
                logger.error(f"Error in refresh loop: {e}")

    def build_status_app(self) -> web.Application:
        """Status server routes"""
        app = web.Application()
        app.router.add_get("/health", self._health_handler)
        app.router.add_get("/theme", self._theme_handler)
        app.router.add_post("/refresh", self._refresh_handler)
        return app

    async def _start_status_server(self) -> None:
        self._app = self.build_status_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self.settings.health_host, self.settings.health_port)
        await site.start()

        logger.info(f"Status server started on port {self.settings.health_port}")

    async def _stop_status_server(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    async def _health_handler(self, request: web.Request) -> web.Response:
        uptime = (datetime.now(timezone.utc) - self._start_time).total_seconds()

        return web.json_response({
            "status": "healthy" if self.service.initialized else "degraded",
            "service": "themesync",
            "uptime": int(uptime),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "controller": self.controller.state.status,
            "initialized": self.service.initialized,
        })

    async def _theme_handler(self, request: web.Request) -> web.Response:
        return web.json_response(await self._state_payload())

    async def _refresh_handler(self, request: web.Request) -> web.Response:
        await self.controller.refresh()
        return web.json_response(await self._state_payload())

    async def _state_payload(self) -> dict:
        payload = self.controller.state.to_dict()
        record = await self.cache.read_record()
        last_result = self.service.last_result

        payload["cached_at"] = record.cached_at if record else None
        payload["last_fetch"] = last_result.to_dict() if last_result else None
        return payload


async def dry_run(settings: ServiceSettings) -> int:
    """Print settings and the cached theme without touching the network"""
    cache = ConfigCache(FileStore(settings.state_dir), key=settings.cache_key)
    record = await cache.read_record()

    print(json.dumps({
        "settings": settings.to_dict(),
        "cached_theme": record.theme.to_dict() if record else None,
        "cached_at": record.cached_at if record else None,
    }, indent=2))
    return 0


async def run(settings: ServiceSettings) -> None:
    app = ThemeSyncApp(settings)

    try:
        await app.start()
    finally:
        await app.stop()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="themesync",
        description="Serve a remotely configured theme with local cache fallback",
    )
    parser.add_argument("--config", help="Path to settings YAML file")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print settings and cached theme, then exit",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Console entry point"""
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        logger.error(e.message)
        return 1

    if "THEMESYNC_LOG_LEVEL" not in os.environ:
        set_log_level(settings.log_level)

    if args.dry_run:
        return asyncio.run(dry_run(settings))

    asyncio.run(run(settings))
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Config Controller

Loading / Ready / Error state machine over ConfigService, fanned out to
any number of subscribers.
"""

import asyncio
from typing import AsyncIterator, Callable

from themesync.common.logging_setup import get_service_logger
from themesync.common.theme import DEFAULT_THEME, Theme
from themesync.services.config.service import ConfigService

from .state import ControllerState, Error, Loading, Ready

logger = get_service_logger("controller")

Subscriber = Callable[[ControllerState], None]


class ConfigController:
    """
    Consumer-facing theme state.

    Every refresh enters Loading, then Ready with whatever theme the
    service returned (fallback themes included). Only a failure of the
    fetch call itself produces Error. When refreshes overlap, the most
    recently started one decides the final state.
    """

    def __init__(self, service: ConfigService):
        self.service = service

        self._state: ControllerState = Loading()
        self._last_theme: Theme | None = None
        self._subscribers: list[Subscriber] = []
        self._watchers: set[asyncio.Queue] = set()
        self._generation = 0
        self._active = False

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def active(self) -> bool:
        return self._active

    @property
    def theme(self) -> Theme:
        """Theme to render right now, whatever the state"""
        if isinstance(self._state, Ready):
            return self._state.theme
        if isinstance(self._state, Error):
            return self._state.last_known_theme
        return self._last_theme or DEFAULT_THEME

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, Loading)

    @property
    def error(self) -> str | None:
        return self._state.message if isinstance(self._state, Error) else None

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for state changes.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def watch(self) -> AsyncIterator[ControllerState]:
        """
        Yield the current state, then state changes as they happen.

        A slow consumer skips intermediate states and resumes at the latest one.
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._watchers.add(queue)
        try:
            yield self._state
            while True:
                yield await queue.get()
        finally:
            self._watchers.discard(queue)

    async def activate(self) -> ControllerState:
        """Mark the controller active and load the theme"""
        if not self._active:
            logger.info("Controller activated, loading theme")
        self._active = True
        return await self.refresh()

    async def refresh(self) -> ControllerState:
        """
        Reload the theme through the config service.

        Returns:
            The state after this refresh resolved (a newer refresh may
            have superseded it)
        """
        self._generation += 1
        generation = self._generation
        self._set_state(Loading())

        try:
            theme = await self.service.fetch_theme()
        except Exception as e:
            if generation != self._generation:
                logger.debug(f"Discarding failure from superseded refresh #{generation}")
                return self._state
            logger.error(f"Error refreshing theme: {e}", exc_info=True)
            self._set_state(Error(
                message=str(e) or "Failed to fetch theme",
                last_known_theme=self._last_theme or DEFAULT_THEME,
            ))
            return self._state

        if generation != self._generation:
            logger.debug(f"Discarding result from superseded refresh #{generation}")
            return self._state

        if theme is None:
            logger.warning("No theme received, using default theme")
            theme = DEFAULT_THEME

        self._last_theme = theme
        self._set_state(Ready(theme))
        return self._state

    def _set_state(self, state: ControllerState) -> None:
        self._state = state
        logger.debug(f"Controller state: {state.status}")

        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception as e:
                logger.error(f"Subscriber failed on {state.status}: {e}", exc_info=True)

        for queue in self._watchers:
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(state)

"""Tests for themesync.services.controller."""

import asyncio

from themesync.common.exceptions import NetworkError
from themesync.common.theme import DEFAULT_THEME
from themesync.services.config.service import ConfigService
from themesync.services.controller import ConfigController, Error, Loading, Ready

from conftest import FakeRemoteSource, make_theme


class ScriptedService:
    """Service double: call N sleeps delays[N] then returns/raises outcomes[N]"""

    def __init__(self, *steps):
        self.steps = list(steps)
        self.calls = 0

    async def fetch_theme(self):
        delay, outcome = self.steps[self.calls]
        self.calls += 1
        await asyncio.sleep(delay)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_initial_state_is_loading():
    controller = ConfigController(ScriptedService())

    assert isinstance(controller.state, Loading)
    assert controller.is_loading
    assert controller.theme == DEFAULT_THEME
    assert controller.error is None
    assert not controller.active


def test_activate_transitions_to_ready():
    theme = make_theme(primary="#111111")
    controller = ConfigController(ScriptedService((0, theme)))

    state = asyncio.run(controller.activate())

    assert state == Ready(theme)
    assert controller.active
    assert controller.theme == theme
    assert not controller.is_loading


def test_fallback_theme_is_still_ready(cache):
    service = ConfigService(FakeRemoteSource(fetch_error=NetworkError("offline")), cache)
    controller = ConfigController(service)

    state = asyncio.run(controller.activate())

    assert state == Ready(DEFAULT_THEME)


def test_fetch_call_failure_enters_error_with_last_known_theme():
    theme = make_theme(primary="#222222")
    controller = ConfigController(ScriptedService(
        (0, theme),
        (0, RuntimeError("service crashed")),
    ))

    async def scenario():
        await controller.activate()
        return await controller.refresh()

    state = asyncio.run(scenario())

    assert isinstance(state, Error)
    assert state.message == "service crashed"
    assert state.last_known_theme == theme
    assert controller.error == "service crashed"
    assert controller.theme == theme


def test_error_before_any_theme_uses_default():
    controller = ConfigController(ScriptedService((0, RuntimeError())))

    state = asyncio.run(controller.activate())

    assert state == Error("Failed to fetch theme", DEFAULT_THEME)


def test_refresh_recovers_from_error():
    theme = make_theme(primary="#333333")
    controller = ConfigController(ScriptedService(
        (0, RuntimeError("boom")),
        (0, theme),
    ))

    async def scenario():
        await controller.activate()
        return await controller.refresh()

    assert asyncio.run(scenario()) == Ready(theme)


def test_none_theme_becomes_default():
    controller = ConfigController(ScriptedService((0, None)))

    assert asyncio.run(controller.activate()) == Ready(DEFAULT_THEME)


def test_subscribers_see_every_transition():
    theme = make_theme(primary="#444444")
    controller = ConfigController(ScriptedService((0, theme), (0, theme)))
    seen = []
    unsubscribe = controller.subscribe(seen.append)

    async def scenario():
        await controller.activate()
        unsubscribe()
        await controller.refresh()

    asyncio.run(scenario())

    assert seen == [Loading(), Ready(theme)]


def test_failing_subscriber_does_not_break_others():
    theme = make_theme(primary="#555555")
    controller = ConfigController(ScriptedService((0, theme)))
    seen = []

    def broken(state):
        raise ValueError("subscriber bug")

    controller.subscribe(broken)
    controller.subscribe(seen.append)

    state = asyncio.run(controller.activate())

    assert state == Ready(theme)
    assert seen == [Loading(), Ready(theme)]


def test_watch_yields_current_then_changes():
    theme = make_theme(primary="#666666")
    controller = ConfigController(ScriptedService((0.01, theme)))

    async def scenario():
        received = []

        async def consume():
            async for state in controller.watch():
                received.append(state)
                if isinstance(state, Ready):
                    break

        consumer = asyncio.create_task(consume())
        await asyncio.sleep(0)
        await controller.activate()
        await asyncio.wait_for(consumer, timeout=1.0)
        return received

    received = asyncio.run(scenario())

    assert received[0] == Loading()
    assert received[-1] == Ready(theme)


def test_slow_watcher_only_keeps_latest_state():
    themes = [make_theme(primary=f"#00000{i}") for i in range(5)]
    controller = ConfigController(ScriptedService(*((0, theme) for theme in themes)))

    async def scenario():
        watcher = controller.watch()
        first = await watcher.__anext__()
        for _ in themes:
            await controller.refresh()
        backlog = [queue.qsize() for queue in controller._watchers]
        latest = await watcher.__anext__()
        await watcher.aclose()
        return first, backlog, latest

    first, backlog, latest = asyncio.run(scenario())

    assert first == Loading()
    assert backlog == [1]
    assert latest == Ready(themes[-1])
    assert not controller._watchers


def test_later_refresh_wins_when_earlier_resolves_last():
    slow = make_theme(primary="#AAAAAA")
    fast = make_theme(primary="#BBBBBB")
    controller = ConfigController(ScriptedService((0.05, slow), (0, fast)))

    async def scenario():
        await asyncio.gather(controller.refresh(), controller.refresh())
        return controller.state

    assert asyncio.run(scenario()) == Ready(fast)


def test_superseded_failure_is_discarded():
    theme = make_theme(primary="#CCCCCC")
    controller = ConfigController(ScriptedService(
        (0.05, RuntimeError("late failure")),
        (0, theme),
    ))

    async def scenario():
        await asyncio.gather(controller.refresh(), controller.refresh())
        return controller.state

    assert asyncio.run(scenario()) == Ready(theme)


def test_overlapping_refreshes_initialize_once(cache, valid_theme_json):
    remote = FakeRemoteSource(value=valid_theme_json, configure_delay=0.02)
    controller = ConfigController(ConfigService(remote, cache))

    async def scenario():
        await asyncio.gather(controller.activate(), controller.refresh(), controller.refresh())
        return controller.state

    state = asyncio.run(scenario())

    assert isinstance(state, Ready)
    assert state.theme.colors.primary == "#6200EE"
    assert remote.configure_calls == 1
    assert remote.set_default_calls == 1


def test_state_to_dict():
    assert Loading().to_dict() == {"status": "loading"}
    assert Ready(DEFAULT_THEME).to_dict() == {"status": "ready", "theme": DEFAULT_THEME.to_dict()}
    assert Error("x", DEFAULT_THEME).to_dict() == {
        "status": "error",
        "message": "x",
        "theme": DEFAULT_THEME.to_dict(),
    }

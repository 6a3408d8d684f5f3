"""Shared fixtures and fakes for themesync tests."""

import asyncio
import copy
import json
from dataclasses import replace

import pytest

from themesync.common.state import MemoryStore
from themesync.common.theme import DEFAULT_THEME, Theme
from themesync.services.config.cache import ConfigCache

THEME_KEY = "app_theme"

VALID_THEME = {
    "colors": {
        "primary": "#6200EE",
        "secondary": "#03DAC6",
        "background": "#121212",
        "surface": "#1E1E1E",
        "text": "#FFFFFF",
        "textSecondary": "rgba(255, 255, 255, 0.6)",
        "error": "#CF6679",
        "success": "#4CAF50",
        "warning": "#FFB300",
    },
    "typography": {
        "fontFamily": "Roboto",
        "fontSize": {"small": 12, "medium": 14.5, "large": 20, "xlarge": 28},
        "fontWeight": {"regular": "400", "medium": "500", "bold": "bold"},
    },
    "spacing": {"xs": 0, "sm": 8, "md": 16, "lg": 24, "xl": 40},
}


class FakeRemoteSource:
    """In-memory RemoteSource with call counters and injectable failures"""

    def __init__(
        self,
        value: str | None = None,
        fetch_error: Exception | None = None,
        configure_error: Exception | None = None,
        fetch_delay: float = 0.0,
        configure_delay: float = 0.0,
    ):
        self.value = value
        self.fetch_error = fetch_error
        self.configure_error = configure_error
        self.fetch_delay = fetch_delay
        self.configure_delay = configure_delay

        self.options: dict | None = None
        self.defaults: dict[str, str] = {}
        self.active: dict[str, str] = {}

        self.configure_calls = 0
        self.set_default_calls = 0
        self.fetch_calls = 0

    async def configure(self, options):
        self.configure_calls += 1
        if self.configure_delay:
            await asyncio.sleep(self.configure_delay)
        if self.configure_error:
            raise self.configure_error
        self.options = dict(options)

    async def set_default(self, key, raw_value):
        self.set_default_calls += 1
        self.defaults[key] = raw_value

    async def fetch_and_activate(self):
        self.fetch_calls += 1
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        if self.fetch_error:
            raise self.fetch_error
        if self.value is None:
            return False
        self.active[THEME_KEY] = self.value
        return True

    async def get_string(self, key):
        if key in self.active:
            return self.active[key]
        return self.defaults.get(key, "")


def make_theme(**colors) -> Theme:
    """DEFAULT_THEME with some colors swapped"""
    return replace(DEFAULT_THEME, colors=replace(DEFAULT_THEME.colors, **colors))


@pytest.fixture
def valid_theme_dict():
    return copy.deepcopy(VALID_THEME)


@pytest.fixture
def valid_theme_json():
    return json.dumps(VALID_THEME)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def cache(store):
    return ConfigCache(store)

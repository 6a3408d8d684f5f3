"""Tests for themesync.services.config.sync."""

import asyncio
import json

import httpx
import pytest

from themesync.common.exceptions import MalformedPayloadError, NetworkError
from themesync.services.config.sync import RestRemoteSource, parse_fetch_interval

URL = "https://config.example.test"


def make_source(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RestRemoteSource(URL, "secret", client=client, **kwargs)


def rows_handler(rows, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(200, json=rows)
    return handler


def test_fetch_activates_values(valid_theme_json):
    calls = []
    source = make_source(rows_handler([{"key": "app_theme", "value": valid_theme_json}], calls))

    async def scenario():
        await source.configure({"minFetchIntervalMs": 0})
        changed = await source.fetch_and_activate()
        return changed, await source.get_string("app_theme")

    changed, value = asyncio.run(scenario())

    assert changed is True
    assert value == valid_theme_json

    request = calls[0]
    assert request.url.path == "/rest/v1/remote_config"
    assert request.url.params["select"] == "key,value"
    assert request.headers["apikey"] == "secret"
    assert request.headers["Authorization"] == "Bearer secret"


def test_get_string_falls_back_to_default_then_empty():
    source = make_source(rows_handler([{"key": "other", "value": "x"}]))

    async def scenario():
        await source.set_default("app_theme", "{\"seed\": true}")
        before = await source.get_string("app_theme")
        await source.fetch_and_activate()
        return before, await source.get_string("app_theme"), await source.get_string("missing")

    before, after, missing = asyncio.run(scenario())

    assert before == "{\"seed\": true}"
    assert after == "{\"seed\": true}"
    assert missing == ""


def test_jsonb_values_are_returned_as_json_strings(valid_theme_dict):
    source = make_source(rows_handler([{"key": "app_theme", "value": valid_theme_dict}]))

    async def scenario():
        await source.fetch_and_activate()
        return await source.get_string("app_theme")

    assert json.loads(asyncio.run(scenario())) == valid_theme_dict


def test_staleness_window_skips_fetch():
    calls = []
    source = make_source(rows_handler([{"key": "app_theme", "value": "v1"}], calls))

    async def scenario():
        await source.configure({"minFetchIntervalMs": 60_000})
        first = await source.fetch_and_activate()
        second = await source.fetch_and_activate()
        return first, second

    first, second = asyncio.run(scenario())

    assert first is True
    assert second is False
    assert len(calls) == 1


def test_zero_interval_always_fetches():
    calls = []
    source = make_source(rows_handler([{"key": "app_theme", "value": "v1"}], calls))

    async def scenario():
        await source.configure({"minFetchIntervalMs": 0})
        await source.fetch_and_activate()
        return await source.fetch_and_activate()

    # Same values as before, so nothing new was activated
    assert asyncio.run(scenario()) is False
    assert len(calls) == 2


def test_http_error_status_raises_network_error():
    source = make_source(lambda request: httpx.Response(503))

    with pytest.raises(NetworkError) as exc_info:
        asyncio.run(source.fetch_and_activate())

    assert exc_info.value.status_code == 503


def test_connection_error_raises_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    source = make_source(handler)

    with pytest.raises(NetworkError):
        asyncio.run(source.fetch_and_activate())


def test_missing_url_raises_network_error():
    source = RestRemoteSource("", "secret")

    with pytest.raises(NetworkError):
        asyncio.run(source.fetch_and_activate())


def test_unexpected_response_shape_raises_malformed_payload():
    source = make_source(lambda request: httpx.Response(200, json={"app_theme": "{}"}))

    with pytest.raises(MalformedPayloadError):
        asyncio.run(source.fetch_and_activate())


def test_non_json_response_raises_malformed_payload():
    source = make_source(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(MalformedPayloadError):
        asyncio.run(source.fetch_and_activate())


@pytest.mark.parametrize("options", [{"minFetchIntervalMs": -1}, {"minFetchIntervalMs": 1.5}, {"minFetchIntervalMs": True}])
def test_parse_fetch_interval_rejects_invalid(options):
    with pytest.raises(ValueError):
        parse_fetch_interval(options)


def test_parse_fetch_interval_defaults_to_zero():
    assert parse_fetch_interval({}) == 0
    assert parse_fetch_interval({"minFetchIntervalMs": 3_600_000}) == 3_600_000


def test_close_leaves_injected_client_open():
    client = httpx.AsyncClient(transport=httpx.MockTransport(rows_handler([])))
    source = RestRemoteSource(URL, "secret", client=client)

    asyncio.run(source.close())

    assert not client.is_closed

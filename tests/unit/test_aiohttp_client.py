"""Unit tests for the shared aiohttp client."""

import pytest

from autopilot.main.aiohttp_client import AioHttpClient


@pytest.fixture
async def http_client():
    client = AioHttpClient()
    client.start()
    yield client
    await client.stop()


async def test_session_uses_configured_user_agent(http_client, test_settings):
    assert http_client.started
    assert http_client.session.headers["User-Agent"] == test_settings.webhook_user_agent


async def test_timeouts_follow_settings(http_client, test_settings):
    timeout = http_client.session.timeout

    assert timeout.connect == test_settings.automation_webhook_timeout_seconds
    assert timeout.total == test_settings.automation_webhook_timeout_seconds * 3


async def test_trace_config_is_installed(http_client):
    trace = http_client.session._trace_configs[0]

    assert trace.on_request_start is not None
    assert trace.on_connection_create_end is not None


async def test_call_starts_lazily():
    client = AioHttpClient()

    try:
        session = client()
        assert session is client.session
        assert client() is session
    finally:
        await client.stop()

    assert not client.started

from __future__ import annotations

import asyncio

import httpx
import pytest

from calls.errors import ControlCommandError
from integrations.call_control import CallControlClient, build_http_client

CONTROL_URL = "https://ex/ctrl"


def test_end_call_posts_end_call_command(endpoint):
    async def _run():
        response = await CallControlClient(endpoint.client()).end_call(CONTROL_URL)
        return response.text

    assert asyncio.run(_run()) == "ok"
    assert endpoint.commands_to(CONTROL_URL) == [{"type": "end-call"}]
    assert endpoint.requests[0].method == "POST"


def test_error_status_raises_with_status_and_body(endpoint):
    endpoint.status_code = 404
    endpoint.text = "no such call"

    with pytest.raises(ControlCommandError) as excinfo:
        asyncio.run(CallControlClient(endpoint.client()).end_call(CONTROL_URL))

    assert excinfo.value.status == 404
    assert excinfo.value.body == "no such call"


def test_transport_error_raises_control_error():
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(_refuse))
    with pytest.raises(ControlCommandError):
        asyncio.run(CallControlClient(client).end_call(CONTROL_URL))


def test_terminate_swallows_failures(endpoint):
    endpoint.status_code = 503

    ok = asyncio.run(
        CallControlClient(endpoint.client()).terminate(CONTROL_URL, closing_message="Bye", delay=0)
    )

    assert ok is False
    # The say command failed, end-call is still attempted.
    assert [command["type"] for command in endpoint.commands] == ["say", "end-call"]


BAD_URL = "https://ex ample/\x7fctrl"


def test_malformed_control_url_raises_control_error(endpoint):
    with pytest.raises(ControlCommandError):
        asyncio.run(CallControlClient(endpoint.client()).end_call(BAD_URL))
    assert endpoint.requests == []


def test_terminate_returns_false_for_malformed_control_url(endpoint):
    ok = asyncio.run(CallControlClient(endpoint.client()).terminate(BAD_URL))
    assert ok is False


def test_http_client_uses_configured_timeout():
    client = build_http_client(7)
    assert client.timeout.connect == 7
    assert client.timeout.read == 7
    asyncio.run(client.aclose())

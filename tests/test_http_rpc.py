"""Tests for the JSON-RPC over HTTP transport."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests

from dappchain_client.exceptions import NetworkError, RpcError
from dappchain_client.rpc.http import HttpRpcClient
from dappchain_client.types import RpcConnectionState

URL = "http://localhost:46658/rpc"


def make_session(body: Any = None, *, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    session = MagicMock(spec=requests.Session)
    session.request.return_value = response
    return session


@pytest.mark.asyncio
async def test_send_posts_json_rpc_payload() -> None:
    session = make_session({"jsonrpc": "2.0", "id": "1", "result": "42"})
    client = HttpRpcClient(URL + "/", session=session)

    assert await client.send("nonce", {"key": "abc"}) == "42"

    session.request.assert_called_once_with(
        "POST",
        URL,
        json={"jsonrpc": "2.0", "id": "1", "method": "nonce", "params": {"key": "abc"}},
        timeout=10.0,
    )


@pytest.mark.asyncio
async def test_request_ids_increase() -> None:
    session = make_session({"result": None})
    client = HttpRpcClient(URL, session=session)

    await client.send("query", {})
    await client.send("query", {})

    ids = [call.kwargs["json"]["id"] for call in session.request.call_args_list]
    assert ids == ["1", "2"]


@pytest.mark.asyncio
async def test_error_member_raises_rpc_error() -> None:
    session = make_session(
        {"error": {"code": -32603, "message": "Internal error", "data": "contract not found"}}
    )
    client = HttpRpcClient(URL, session=session)

    with pytest.raises(RpcError) as excinfo:
        await client.send("resolve", {"name": "foo"})

    assert excinfo.value.code == -32603
    assert excinfo.value.data == "contract not found"
    assert "Internal error" in str(excinfo.value)


@pytest.mark.asyncio
async def test_transport_failure_raises_network_error() -> None:
    session = make_session()
    session.request.side_effect = requests.ConnectionError("connection refused")
    client = HttpRpcClient(URL, session=session)

    with pytest.raises(NetworkError) as excinfo:
        await client.send("nonce", {"key": "abc"})

    assert excinfo.value.endpoint == URL
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


@pytest.mark.asyncio
async def test_http_status_failure_carries_status_code() -> None:
    session = make_session(status_code=502)
    response = session.request.return_value
    response.raise_for_status.side_effect = requests.HTTPError("bad gateway", response=response)
    client = HttpRpcClient(URL, session=session)

    with pytest.raises(NetworkError) as excinfo:
        await client.send("query", {})

    assert excinfo.value.status_code == 502


@pytest.mark.asyncio
async def test_invalid_json_raises_network_error() -> None:
    session = make_session()
    session.request.return_value.json.side_effect = ValueError("Expecting value")
    client = HttpRpcClient(URL, session=session)

    with pytest.raises(NetworkError, match="not valid JSON"):
        await client.send("query", {})


@pytest.mark.asyncio
async def test_send_requires_connection() -> None:
    client = HttpRpcClient(URL)

    assert client.connection_state == RpcConnectionState.DISCONNECTED
    with pytest.raises(NetworkError, match="not connected"):
        await client.send("nonce", {"key": "abc"})


@pytest.mark.asyncio
async def test_concurrent_connects_create_one_session() -> None:
    with patch("dappchain_client.rpc.http.requests.Session") as session_cls:
        client = HttpRpcClient(URL)
        await asyncio.gather(client.connect(), client.connect(), client.connect())

    session_cls.assert_called_once_with()
    assert client.is_connected()

    await client.disconnect()

    session_cls.return_value.close.assert_called_once_with()
    assert client.connection_state == RpcConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_disconnect_leaves_injected_session_open() -> None:
    session = make_session()
    client = HttpRpcClient(URL, session=session)

    await client.disconnect()

    session.close.assert_not_called()
    assert not client.is_connected()


@pytest.mark.asyncio
async def test_subscriptions_are_not_supported() -> None:
    client = HttpRpcClient(URL, session=make_session())

    with pytest.raises(NetworkError):
        await client.subscribe(lambda source, event: None)
    with pytest.raises(NetworkError):
        await client.unsubscribe(lambda source, event: None)

"""Shared fakes for DAppChain client tests."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

import pytest

from dappchain_client.base import EventListener, RpcClient
from dappchain_client.chain.client import DAppChainClient
from dappchain_client.types import RpcConnectionState

LOCAL = "0x" + "ab" * 20
OTHER_LOCAL = "0x" + "cd" * 20


class FakeRpcClient(RpcClient):
    """RPC client returning canned responses per method.

    A response may be a value, an exception instance (raised), or a callable
    taking the params and returning either of those or an awaitable.
    """

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        *,
        state: RpcConnectionState = RpcConnectionState.CONNECTED,
        connect_error: Exception | None = None,
        subscribe_error: Exception | None = None,
        unsubscribe_error: Exception | None = None,
        disconnect_error: Exception | None = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, Any]] = []
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.connect_error = connect_error
        self.subscribe_error = subscribe_error
        self.unsubscribe_error = unsubscribe_error
        self.disconnect_error = disconnect_error
        self.listeners: list[EventListener] = []
        self.subscribed: list[EventListener] = []
        self.unsubscribed: list[EventListener] = []
        self._state = state

    @property
    def connection_state(self) -> RpcConnectionState:
        return self._state

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error
        self._state = RpcConnectionState.CONNECTED

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        if self.disconnect_error is not None:
            raise self.disconnect_error
        self._state = RpcConnectionState.DISCONNECTED

    async def send(self, method: str, params: Any) -> Any:
        self.calls.append((method, params))
        response = self.responses[method]
        if callable(response):
            response = response(params)
        if inspect.isawaitable(response):
            response = await response
        if isinstance(response, BaseException):
            raise response
        return response

    async def subscribe(self, listener: EventListener) -> None:
        if self.subscribe_error is not None:
            raise self.subscribe_error
        self.subscribed.append(listener)
        self.listeners.append(listener)

    async def unsubscribe(self, listener: EventListener) -> None:
        if self.unsubscribe_error is not None:
            raise self.unsubscribe_error
        self.unsubscribed.append(listener)
        self.listeners.remove(listener)

    def emit(self, event: Any) -> None:
        for listener in list(self.listeners):
            listener(self, event)


def sequence(*responses: Any) -> Callable[[Any], Any]:
    """Return the given responses one per call, repeating the last one."""
    remaining = list(responses)

    def next_response(params: Any) -> Any:
        if len(remaining) > 1:
            return remaining.pop(0)
        return remaining[0]

    return next_response


def commit_response(
    check_code: int = 0,
    check_log: str = "",
    deliver_code: int = 0,
    deliver_log: str = "",
) -> dict[str, Any]:
    return {
        "check_tx": {"code": check_code, "log": check_log},
        "deliver_tx": {"code": deliver_code, "log": deliver_log},
        "hash": "A1B2C3",
        "height": "12",
    }


NONCE_CONFLICT = commit_response(check_code=1, check_log="sequence number does not match")


@pytest.fixture
def rpc() -> FakeRpcClient:
    return FakeRpcClient()


@pytest.fixture
def client(rpc: FakeRpcClient) -> DAppChainClient:
    return DAppChainClient(rpc, rpc, nonce_retry_delay=0.0)

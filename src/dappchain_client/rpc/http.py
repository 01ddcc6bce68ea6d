"""JSON-RPC over HTTP client for DAppChain nodes."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any

import requests

from ..base import EventListener, RpcClient
from ..constants import DEFAULT_REQUEST_TIMEOUT
from ..exceptions import NetworkError, RpcError
from ..types import RpcConnectionState

logger = logging.getLogger(__name__)


class HttpRpcClient(RpcClient):
    """RPC client posting JSON-RPC 2.0 requests with a ``requests`` session.

    Blocking HTTP calls run in a worker thread so callers are never blocked.
    HTTP offers no push channel, so event subscriptions are not supported.
    """

    def __init__(
        self,
        url: str,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._request_timeout = request_timeout
        self._session = session
        self._owns_session = session is None
        self._state = RpcConnectionState.DISCONNECTED
        if session is not None:
            self._state = RpcConnectionState.CONNECTED
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()

    @property
    def url(self) -> str:
        return self._url

    @property
    def connection_state(self) -> RpcConnectionState:
        return self._state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def connect(self) -> None:
        async with self._lock:
            if self._state == RpcConnectionState.CONNECTED:
                return

            self._state = RpcConnectionState.CONNECTING
            if self._session is None:
                self._session = requests.Session()
                self._owns_session = True
            self._state = RpcConnectionState.CONNECTED
            logger.info("Connected to DAppChain RPC at %s", self._url)

    async def disconnect(self) -> None:
        async with self._lock:
            session = self._session
            if session is not None and self._owns_session:
                session.close()
                self._session = None
            self._state = RpcConnectionState.DISCONNECTED

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    async def send(self, method: str, params: Any) -> Any:
        session = self._session
        if session is None or self._state != RpcConnectionState.CONNECTED:
            raise NetworkError("RPC client is not connected", endpoint=self._url)

        payload = {
            "jsonrpc": "2.0",
            "id": str(next(self._ids)),
            "method": method,
            "params": params,
        }
        body = await asyncio.to_thread(self._post, session, payload)
        return _parse_response(body, method, self._url)

    def _post(self, session: requests.Session, payload: dict[str, Any]) -> Any:
        method = payload["method"]
        try:
            response = session.request(
                "POST",
                self._url,
                json=payload,
                timeout=self._request_timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise NetworkError(
                f"RPC request {method} failed",
                endpoint=self._url,
                status_code=status,
                details={"error": str(exc)},
            ) from exc
        except requests.RequestException as exc:
            raise NetworkError(
                f"RPC request {method} failed",
                endpoint=self._url,
                details={"error": str(exc)},
            ) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(
                f"RPC response for {method} is not valid JSON",
                endpoint=self._url,
                status_code=response.status_code,
            ) from exc

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    async def subscribe(self, listener: EventListener) -> None:
        raise NetworkError(
            "HTTP RPC client does not support event subscriptions", endpoint=self._url
        )

    async def unsubscribe(self, listener: EventListener) -> None:
        raise NetworkError(
            "HTTP RPC client does not support event subscriptions", endpoint=self._url
        )


def _parse_response(body: Any, method: str, endpoint: str) -> Any:
    if not isinstance(body, dict):
        raise NetworkError(f"Unexpected RPC response for {method}", endpoint=endpoint)

    error = body.get("error")
    if error:
        if isinstance(error, dict):
            message = error.get("message") or "RPC error"
            raise RpcError(
                f"{method}: {message}",
                code=error.get("code"),
                data=error.get("data"),
            )
        raise RpcError(f"{method}: {error}")

    return body.get("result")

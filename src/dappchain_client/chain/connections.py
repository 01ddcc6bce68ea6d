"""Connection guard applied before every remote call."""

from __future__ import annotations

import logging

from ..base import RpcClient
from ..types import RpcConnectionState

logger = logging.getLogger(__name__)


async def ensure_connected(
    rpc_client: RpcClient,
    *,
    auto_reconnect: bool = True,
    log: logging.Logger | None = None,
) -> None:
    """Connect ``rpc_client`` unless it is already connected.

    Does nothing when ``auto_reconnect`` is disabled. Connect failures propagate
    to the caller as raised by the client; nothing is retried here. Messages go
    to ``log`` when given, otherwise to this module's logger.
    """
    if not auto_reconnect:
        return

    # Concurrent callers may both reach connect(); clients coalesce those calls.
    if rpc_client.connection_state != RpcConnectionState.CONNECTED:
        (log or logger).debug(
            "Connecting %s (state=%s)",
            type(rpc_client).__name__,
            rpc_client.connection_state.value,
        )
        await rpc_client.connect()


async def ensure_all_connected(
    *rpc_clients: RpcClient | None,
    auto_reconnect: bool = True,
    log: logging.Logger | None = None,
) -> None:
    """Apply the guard to every configured client, in the given order."""
    if not auto_reconnect:
        return

    for rpc_client in rpc_clients:
        if rpc_client is not None:
            await ensure_connected(rpc_client, auto_reconnect=auto_reconnect, log=log)

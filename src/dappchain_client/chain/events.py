"""Bridge between RPC client notifications and chain event handlers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Mapping
from typing import TYPE_CHECKING, Any

from ..base import EventListener
from ..exceptions import NotConfiguredError, NotFoundError, ValidationError
from ..types import JsonRpcEventData, RawChainEvent

if TYPE_CHECKING:  # pragma: no cover - import-time only
    from .client import DAppChainClient

ChainEventHandler = Callable[[Any, RawChainEvent], None]


class ChainEventBridge:
    """Track one RPC listener per handler so it can be removed later.

    RPC clients remove listeners by identity, so the wrapper registered on
    subscribe is kept and handed back verbatim on unsubscribe. The lock is held
    across each transport call so the map always mirrors what the transport
    has registered. Failures are
    logged, never raised: the registration entry point has no result channel.
    """

    def __init__(self, client: DAppChainClient) -> None:
        self._client = client
        self._subscriptions: dict[ChainEventHandler, EventListener] = {}
        self._lock = asyncio.Lock()

    @property
    def client(self) -> DAppChainClient:
        return self._client

    def listener_for(self, handler: ChainEventHandler) -> EventListener | None:
        return self._subscriptions.get(handler)

    def __contains__(self, handler: object) -> bool:
        return handler in self._subscriptions

    def __len__(self) -> int:
        return len(self._subscriptions)

    async def subscribe(self, handler: ChainEventHandler) -> None:
        client = self._client
        try:
            read_client = client.read_client
            if read_client is None:
                raise NotConfiguredError("read")

            await client.ensure_connected()

            # The map only changes once the transport has accepted the call.
            async with self._lock:
                if handler in self._subscriptions:
                    raise ValidationError(
                        "Handler is already subscribed to chain events",
                        field="handler",
                        value=handler,
                    )
                wrapper = self._wrap(handler)
                await read_client.subscribe(wrapper)
                self._subscriptions[handler] = wrapper
        except Exception as exc:
            client.logger.error("Failed to subscribe to chain events: %s", exc)

    async def unsubscribe(self, handler: ChainEventHandler) -> None:
        client = self._client
        try:
            read_client = client.read_client
            if read_client is None:
                raise NotConfiguredError("read")

            async with self._lock:
                wrapper = self._subscriptions.get(handler)
                if wrapper is None:
                    raise NotFoundError("Handler is not subscribed to chain events")
                await read_client.unsubscribe(wrapper)
                del self._subscriptions[handler]
        except Exception as exc:
            client.logger.error("Failed to unsubscribe from chain events: %s", exc)

    def _wrap(self, handler: ChainEventHandler) -> EventListener:
        source = self._client

        def wrapper(sender: Any, event_data: JsonRpcEventData | Mapping[str, Any]) -> None:
            if isinstance(event_data, Mapping):
                event_data = JsonRpcEventData.from_dict(event_data)
            handler(source, RawChainEvent.from_event_data(event_data))

        return wrapper


class ChainEventSurface:
    """Fire-and-forget ``add``/``remove`` (and ``+=``/``-=``) for chain event handlers.

    Operations are scheduled on the running loop and run in the order they
    were requested, so an ``add`` followed by a ``remove`` cannot overtake it.
    """

    def __init__(self, bridge: ChainEventBridge) -> None:
        self._bridge = bridge
        self._pending: set[asyncio.Task[None]] = set()
        self._last: asyncio.Task[None] | None = None

    def add(self, handler: ChainEventHandler) -> asyncio.Task[None] | None:
        return self._schedule(self._bridge.subscribe, handler)

    def remove(self, handler: ChainEventHandler) -> asyncio.Task[None] | None:
        return self._schedule(self._bridge.unsubscribe, handler)

    def __iadd__(self, handler: ChainEventHandler) -> ChainEventSurface:
        self.add(handler)
        return self

    def __isub__(self, handler: ChainEventHandler) -> ChainEventSurface:
        self.remove(handler)
        return self

    async def drain(self) -> None:
        """Wait until every scheduled add/remove has finished."""
        while self._pending:
            await asyncio.wait(set(self._pending))

    def _schedule(
        self,
        operation: Callable[[ChainEventHandler], Coroutine[Any, Any, None]],
        handler: ChainEventHandler,
    ) -> asyncio.Task[None] | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._bridge.client.logger.error(
                "Cannot update chain event handlers without a running event loop"
            )
            return None

        previous = self._last

        async def run() -> None:
            if previous is not None and not previous.done():
                await asyncio.wait({previous})
            await operation(handler)

        task = loop.create_task(run())
        self._last = task
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

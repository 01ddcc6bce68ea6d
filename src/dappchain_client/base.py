"""RPC client interface consumed by the DAppChain client."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from .types import JsonRpcEventData, RpcConnectionState

EventListener = Callable[[Any, JsonRpcEventData], None]


class RpcClient(ABC):
    """Request/response transport to a DAppChain node."""

    @property
    @abstractmethod
    def connection_state(self) -> RpcConnectionState:
        pass

    @abstractmethod
    async def connect(self) -> None:
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def send(self, method: str, params: Any) -> Any:
        pass

    @abstractmethod
    async def subscribe(self, listener: EventListener) -> None:
        pass

    @abstractmethod
    async def unsubscribe(self, listener: EventListener) -> None:
        pass

    def is_connected(self) -> bool:
        return self.connection_state == RpcConnectionState.CONNECTED

"""DAppChain client: reads from and writes to a DAppChain node."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar, overload

from ..base import RpcClient
from ..constants import (
    DEFAULT_COMMIT_TIMEOUT,
    DEFAULT_NONCE_RETRIES,
    DEFAULT_NONCE_RETRY_DELAY,
    RpcMethod,
)
from ..exceptions import (
    DAppChainError,
    DeserializationError,
    NotConfiguredError,
    NotFoundError,
    ValidationError,
)
from ..middleware import TxMiddleware
from ..types import Address, BroadcastTxResult, VMType
from ..utils import from_base64, parse_uint64, serialize_message, to_base64
from .config import DAppChainClientConfig
from .connections import ensure_all_connected
from .events import ChainEventBridge, ChainEventSurface
from .transactions import TransactionCommitter

T = TypeVar("T")

_package_logger = logging.getLogger("dappchain_client")


class DAppChainClient:
    """Writes to and reads from a DAppChain.

    Transactions are submitted through ``write_client``; nonces, name
    resolution, queries and event subscriptions go through ``read_client``.
    Both may be the same RPC client.
    """

    def __init__(
        self,
        write_client: RpcClient | None,
        read_client: RpcClient | None,
        *,
        tx_middleware: TxMiddleware | None = None,
        auto_reconnect: bool = True,
        nonce_retries: int = DEFAULT_NONCE_RETRIES,
        nonce_retry_delay: float = DEFAULT_NONCE_RETRY_DELAY,
        commit_timeout: float = DEFAULT_COMMIT_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        config = DAppChainClientConfig(
            auto_reconnect=auto_reconnect,
            nonce_retries=nonce_retries,
            nonce_retry_delay=nonce_retry_delay,
            commit_timeout=commit_timeout,
            tx_middleware=tx_middleware,
        )
        self._write_client = write_client
        self._read_client = read_client

        self.tx_middleware = config.tx_middleware
        self.auto_reconnect = config.auto_reconnect
        self.nonce_retries = config.nonce_retries
        self.nonce_retry_delay = config.nonce_retry_delay
        self.commit_timeout = config.commit_timeout
        self._logger = logger or _package_logger

        self._committer = TransactionCommitter(self)
        self._event_bridge = ChainEventBridge(self)
        self._chain_events = ChainEventSurface(self._event_bridge)

    @classmethod
    def from_config(
        cls,
        write_client: RpcClient | None,
        read_client: RpcClient | None,
        config: DAppChainClientConfig,
        *,
        logger: logging.Logger | None = None,
    ) -> DAppChainClient:
        return cls(
            write_client,
            read_client,
            tx_middleware=config.tx_middleware,
            auto_reconnect=config.auto_reconnect,
            nonce_retries=config.nonce_retries,
            nonce_retry_delay=config.nonce_retry_delay,
            commit_timeout=config.commit_timeout,
            logger=logger,
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    @property
    def write_client(self) -> RpcClient | None:
        return self._write_client

    @property
    def read_client(self) -> RpcClient | None:
        return self._read_client

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @logger.setter
    def logger(self, value: logging.Logger | None) -> None:
        self._logger = value or _package_logger

    @property
    def nonce_retries(self) -> int:
        return self._nonce_retries

    @nonce_retries.setter
    def nonce_retries(self, value: int) -> None:
        if value < 0:
            raise ValidationError(
                "nonce_retries cannot be negative", field="nonce_retries", value=value
            )
        self._nonce_retries = value

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def ensure_connected(self) -> None:
        """Connect the read and write clients if auto-reconnect is enabled."""
        await ensure_all_connected(
            self._read_client,
            self._write_client,
            auto_reconnect=self.auto_reconnect,
            log=self._logger,
        )

    async def close(self) -> None:
        """Disconnect and release both RPC clients.

        A handle is only released once its own disconnect has returned, so a
        failed close can be retried.
        """
        write_client, read_client = self._write_client, self._read_client
        try:
            if write_client is not None:
                await write_client.disconnect()
                self._write_client = None
        finally:
            if read_client is not None:
                if read_client is not write_client:
                    await read_client.disconnect()
                self._read_client = None

    async def __aenter__(self) -> DAppChainClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get_nonce(self, key: str) -> int:
        """Return the current nonce of a hex-encoded public key."""
        read_client = self._require_read_client()

        await self.ensure_connected()
        nonce = await read_client.send(RpcMethod.NONCE.value, {"key": key})
        return parse_uint64(nonce, field="nonce")

    async def resolve_contract_address(self, contract_name: str) -> Address:
        """Resolve a contract name to its address."""
        read_client = self._require_read_client()

        await self.ensure_connected()
        address = await read_client.send(RpcMethod.RESOLVE.value, {"name": contract_name})
        if not address:
            raise NotFoundError(
                "Unable to find a contract with a matching name", name=contract_name
            )

        return Address.from_string(address)

    @overload
    async def query(
        self,
        contract: Address,
        query: Any,
        caller: Address | None = ...,
        vm_type: VMType = ...,
        result_type: None = ...,
    ) -> Any: ...

    @overload
    async def query(
        self,
        contract: Address,
        query: Any,
        caller: Address | None = ...,
        vm_type: VMType = ...,
        result_type: Callable[[Any], T] = ...,
    ) -> T: ...

    async def query(
        self,
        contract: Address,
        query: Any,
        caller: Address | None = None,
        vm_type: VMType = VMType.PLUGIN,
        result_type: Callable[[Any], Any] | None = None,
    ) -> Any:
        """Query the current state of a contract.

        ``query`` is raw bytes or a serializable message. The caller address is
        only sent when both its chain id and local part are set. When
        ``result_type`` is given the response is converted with it; passing
        ``bytes`` decodes a base64 payload.
        """
        read_client = self._require_read_client()

        params: dict[str, Any] = {
            "contract": contract.local_address,
            "query": to_base64(serialize_message(query)),
            "vmType": int(vm_type),
        }
        if caller is not None and caller.is_qualified:
            params["caller"] = caller.qualified_address

        await self.ensure_connected()
        response = await read_client.send(RpcMethod.QUERY.value, params)

        if result_type is None:
            return response
        return _deserialize(response, result_type)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def commit_tx(self, tx: Any, timeout: float | None = None) -> BroadcastTxResult:
        """Commit a transaction, retrying on nonce conflicts.

        Raises InvalidTxNonceError once ``nonce_retries`` is exhausted,
        TxCommitError when a stage fails and CommitTimeoutError when an attempt
        outlasts ``timeout`` seconds.
        """
        return await self._committer.commit(
            tx, self.commit_timeout if timeout is None else timeout
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    @property
    def chain_event_received(self) -> ChainEventSurface:
        """Events emitted by the DAppChain; use ``+=``/``-=`` or add/remove."""
        return self._chain_events

    @chain_event_received.setter
    def chain_event_received(self, value: ChainEventSurface) -> None:
        # Only reached through += / -=, which hand back the same surface.
        if value is not self._chain_events:
            raise AttributeError("chain_event_received cannot be reassigned")

    async def subscribe_chain_events(self, handler: Callable[[Any, Any], None]) -> None:
        await self._event_bridge.subscribe(handler)

    async def unsubscribe_chain_events(self, handler: Callable[[Any, Any], None]) -> None:
        await self._event_bridge.unsubscribe(handler)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _require_read_client(self) -> RpcClient:
        if self._read_client is None:
            raise NotConfiguredError("read")
        return self._read_client


def _deserialize(response: Any, result_type: Callable[[Any], T]) -> T:
    try:
        if result_type is bytes:
            if isinstance(response, bytes):
                return response  # type: ignore[return-value]
            return from_base64(response)  # type: ignore[return-value]
        return result_type(response)
    except (DAppChainError, TypeError, ValueError, KeyError, AttributeError) as exc:
        target = getattr(result_type, "__name__", repr(result_type))
        raise DeserializationError(
            f"Unable to convert query response to {target}",
            target=target,
            value=response,
            details={"error": str(exc)},
        ) from exc

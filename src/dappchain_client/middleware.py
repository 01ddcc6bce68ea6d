"""Transaction middleware applied to payloads before they are broadcast."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from eth_abi import encode as abi_encode
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from .exceptions import ValidationError

_module_logger = logging.getLogger(__name__)


@runtime_checkable
class TxMiddlewareHandler(Protocol):
    """A single transform stage, e.g. nonce injection or signing."""

    async def handle(self, tx_bytes: bytes) -> bytes: ...


class NonceSource(Protocol):
    async def get_nonce(self, key: str) -> int: ...


class TxMiddleware:
    """Ordered, immutable chain of middleware handlers.

    Each handler receives the output of the previous one. An empty chain
    returns its input unchanged. Handler failures propagate as raised.
    """

    def __init__(self, handlers: Iterable[TxMiddlewareHandler] = ()) -> None:
        self._handlers: tuple[TxMiddlewareHandler, ...] = tuple(handlers)
        for handler in self._handlers:
            if not isinstance(handler, TxMiddlewareHandler):
                raise ValidationError(
                    "Middleware handlers must define an async handle(bytes) method",
                    field="handlers",
                    value=handler,
                )

    @property
    def handlers(self) -> tuple[TxMiddlewareHandler, ...]:
        return self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    async def handle(self, tx_bytes: bytes) -> bytes:
        for handler in self._handlers:
            tx_bytes = await handler.handle(tx_bytes)
        return tx_bytes


class NonceTxMiddleware:
    """Wrap the payload with the next sequence number of the sending key."""

    def __init__(
        self,
        public_key: bytes | str,
        client: NonceSource,
        logger: logging.Logger | None = None,
    ) -> None:
        if isinstance(public_key, bytes):
            public_key = public_key.hex()
        if not public_key:
            raise ValidationError("public_key must be non-empty", field="public_key")
        self._public_key = public_key
        self._client = client
        self._logger = logger

    @property
    def public_key(self) -> str:
        return self._public_key

    @property
    def logger(self) -> logging.Logger:
        """The injected logger, else the nonce source's own, else this module's."""
        return self._logger or getattr(self._client, "logger", None) or _module_logger

    async def handle(self, tx_bytes: bytes) -> bytes:
        nonce = await self._client.get_nonce(self._public_key)
        self.logger.debug("Using sequence %d for key %s", nonce + 1, self._public_key)
        return abi_encode(["bytes", "uint64"], [tx_bytes, nonce + 1])


class SignedTxMiddleware:
    """Sign the payload with a local account and attach signature and signer."""

    def __init__(self, account: LocalAccount) -> None:
        self._account = account

    @property
    def signer_address(self) -> str:
        return self._account.address

    async def handle(self, tx_bytes: bytes) -> bytes:
        signed = self._account.sign_message(encode_defunct(primitive=tx_bytes))
        return abi_encode(
            ["bytes", "bytes", "address"],
            [tx_bytes, bytes(signed.signature), self._account.address],
        )

"""DAppChain client - commit transactions, query state and follow chain events.

This library provides an asyncio client for DAppChain nodes: transactions are
passed through a middleware chain (nonce, signing) and committed with bounded
nonce-conflict retries, contract state is queried over a read client, and
contract events are relayed to local handlers.
"""

import logging

from .base import RpcClient
from .chain import (
    DAppChainClient,
    DAppChainClientConfig,
    ensure_connected,
)
from .exceptions import (
    CommitError,
    CommitTimeoutError,
    DAppChainError,
    DeserializationError,
    InvalidTxNonceError,
    NetworkError,
    NotConfiguredError,
    NotFoundError,
    RpcError,
    TxCommitError,
    ValidationError,
)
from .middleware import (
    NonceTxMiddleware,
    SignedTxMiddleware,
    TxMiddleware,
    TxMiddlewareHandler,
)
from .rpc import HttpRpcClient
from .types import (
    Address,
    BroadcastTxResult,
    JsonRpcEventData,
    RawChainEvent,
    RpcConnectionState,
    TxStageResult,
    VMType,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Client
    "DAppChainClient",
    "DAppChainClientConfig",
    "ensure_connected",
    # RPC clients
    "RpcClient",
    "HttpRpcClient",
    # Middleware
    "TxMiddleware",
    "TxMiddlewareHandler",
    "NonceTxMiddleware",
    "SignedTxMiddleware",
    # Types and enums
    "Address",
    "VMType",
    "RpcConnectionState",
    "TxStageResult",
    "BroadcastTxResult",
    "JsonRpcEventData",
    "RawChainEvent",
    # Exceptions
    "DAppChainError",
    "NotConfiguredError",
    "NotFoundError",
    "CommitError",
    "TxCommitError",
    "InvalidTxNonceError",
    "CommitTimeoutError",
    "DeserializationError",
    "NetworkError",
    "RpcError",
    "ValidationError",
]

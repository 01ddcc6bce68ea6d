"""DAppChain client and its commit, query and event components."""

from .client import DAppChainClient
from .config import DAppChainClientConfig
from .connections import ensure_all_connected, ensure_connected
from .events import ChainEventBridge, ChainEventSurface
from .transactions import TransactionCommitter, check_commit_result

__all__ = [
    "DAppChainClient",
    "DAppChainClientConfig",
    "ChainEventBridge",
    "ChainEventSurface",
    "TransactionCommitter",
    "check_commit_result",
    "ensure_connected",
    "ensure_all_connected",
]

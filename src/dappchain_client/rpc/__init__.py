"""RPC client implementations."""

from .http import HttpRpcClient

__all__ = ["HttpRpcClient"]

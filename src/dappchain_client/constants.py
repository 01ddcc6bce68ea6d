"""Constants shared by the DAppChain client."""

from enum import Enum


class RpcMethod(str, Enum):
    """JSON-RPC methods exposed by a DAppChain node."""

    NONCE = "nonce"
    RESOLVE = "resolve"
    QUERY = "query"
    BROADCAST_TX_COMMIT = "broadcast_tx_commit"


# A check-tx failure is only a nonce conflict when both of these match.
NONCE_CONFLICT_CODE = 1
NONCE_CONFLICT_ERROR = "sequence number does not match"

DEFAULT_CHAIN_ID = "default"
DEFAULT_COMMIT_TIMEOUT = 5.0
DEFAULT_NONCE_RETRIES = 5
DEFAULT_NONCE_RETRY_DELAY = 0.5
DEFAULT_REQUEST_TIMEOUT = 10.0

UINT64_MAX = 2**64 - 1

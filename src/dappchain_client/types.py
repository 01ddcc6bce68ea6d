"""Type definitions and data models for the DAppChain client."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from web3 import Web3

from .constants import DEFAULT_CHAIN_ID, NONCE_CONFLICT_CODE, NONCE_CONFLICT_ERROR
from .exceptions import DeserializationError, ValidationError
from .utils import coerce_bytes, parse_uint64


class VMType(IntEnum):
    """Virtual machine that should interpret a contract call or query."""

    PLUGIN = 0
    EVM = 1


class RpcConnectionState(str, Enum):
    """Connection state reported by an RPC client."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class Address:
    """An account or contract address scoped to a chain."""

    local_address: str
    chain_id: str = DEFAULT_CHAIN_ID

    @property
    def is_qualified(self) -> bool:
        """Whether both the chain id and the local part are present."""
        return bool(self.local_address) and bool(self.chain_id)

    @property
    def qualified_address(self) -> str:
        return f"{self.chain_id}:{self.local_address}"

    @classmethod
    def from_string(cls, address: str, chain_id: str = DEFAULT_CHAIN_ID) -> Address:
        """Parse ``chain:0x...`` or a bare ``0x...`` local address."""

        if not address:
            raise ValidationError("Address must not be empty", field="address", value=address)

        if ":" in address:
            chain_id, local = address.split(":", 1)
        else:
            local = address

        if not chain_id:
            raise ValidationError("Address is missing a chain id", field="address", value=address)

        if not Web3.is_address(local):
            raise ValidationError("Invalid local address", field="address", value=address)

        return cls(local_address=local.lower(), chain_id=chain_id)

    @classmethod
    def from_wire(cls, value: Any) -> Address:
        """Build an address from the shapes a node uses in event payloads."""

        if isinstance(value, Address):
            return value

        if isinstance(value, str):
            return cls.from_string(value)

        if isinstance(value, Mapping):
            chain_id = value.get("chain_id") or value.get("chainId") or DEFAULT_CHAIN_ID
            local = value.get("local") or value.get("local_address") or ""
            if isinstance(local, str) and local.lower().startswith("0x"):
                return cls.from_string(local, chain_id=chain_id)
            raw = coerce_bytes(local)
            return cls(local_address="0x" + raw.hex(), chain_id=chain_id)

        raise ValidationError("Unsupported address value", field="address", value=value)

    def __str__(self) -> str:
        return self.qualified_address


@dataclass(frozen=True)
class TxStageResult:
    """Outcome of a single commit stage (check or deliver)."""

    code: int = 0
    error: str | None = None
    data: bytes = b""
    info: str | None = None

    @property
    def ok(self) -> bool:
        return self.code == 0

    @property
    def is_nonce_conflict(self) -> bool:
        return self.code == NONCE_CONFLICT_CODE and self.error == NONCE_CONFLICT_ERROR

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TxStageResult:
        if data is None:
            return cls()

        error = data.get("log")
        if error is None:
            error = data.get("error")

        return cls(
            code=int(data.get("code") or 0),
            error=error,
            data=coerce_bytes(data.get("data")),
            info=data.get("info"),
        )


@dataclass(frozen=True)
class BroadcastTxResult:
    """Result of ``broadcast_tx_commit``: check and deliver stage outcomes."""

    check_tx: TxStageResult
    deliver_tx: TxStageResult
    hash: str | None = None
    height: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> BroadcastTxResult:
        """Parse a node response, raising DeserializationError on bad shapes."""

        if not isinstance(data, Mapping):
            raise DeserializationError(
                "Commit response is not an object", target="BroadcastTxResult", value=data
            )

        try:
            height = data.get("height")
            return cls(
                check_tx=TxStageResult.from_dict(data.get("check_tx")),
                deliver_tx=TxStageResult.from_dict(data.get("deliver_tx")),
                hash=data.get("hash"),
                height=parse_uint64(height, field="height") if height is not None else 0,
            )
        except (TypeError, ValueError, AttributeError, ValidationError) as exc:
            raise DeserializationError(
                "Malformed commit response",
                target="BroadcastTxResult",
                value=data,
                details={"error": str(exc)},
            ) from exc


@dataclass(frozen=True)
class JsonRpcEventData:
    """Event as delivered by an RPC client, before translation."""

    contract_address: Any
    caller_address: Any
    block_height: str
    data: bytes = b""
    topics: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> JsonRpcEventData:
        topics = data.get("topics") or []
        return cls(
            contract_address=data.get("contract_address") or data.get("address"),
            caller_address=data.get("caller_address") or data.get("caller"),
            block_height=str(data.get("block_height", data.get("blockHeight", ""))),
            data=coerce_bytes(data.get("encoded_body") or data.get("data")),
            topics=list(_iterable(topics)),
        )


@dataclass(frozen=True)
class RawChainEvent:
    """Event emitted by a contract, as seen by client handlers."""

    contract_address: Address
    caller_address: Address
    block_height: int
    data: bytes
    topics: tuple[str, ...] = ()

    @classmethod
    def from_event_data(cls, event: JsonRpcEventData) -> RawChainEvent:
        return cls(
            contract_address=Address.from_wire(event.contract_address),
            caller_address=Address.from_wire(event.caller_address),
            block_height=parse_uint64(event.block_height, field="block_height"),
            data=coerce_bytes(event.data),
            topics=tuple(event.topics),
        )


def _iterable(value: Any) -> Iterable:
    if isinstance(value, list | tuple | set):
        return value

    if value is None:
        return []

    return [value]

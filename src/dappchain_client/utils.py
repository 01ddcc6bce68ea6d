"""Utility functions for the DAppChain client."""

import base64
import binascii
from collections.abc import Iterable
from typing import Any

from eth_typing import HexStr
from web3 import Web3

from .constants import UINT64_MAX
from .exceptions import ValidationError


def serialize_message(message: Any) -> bytes:
    """Return the wire encoding of a transaction or query message.

    Raw byte buffers pass through untouched. Protobuf messages are encoded with
    ``SerializeToString`` and other objects may provide ``to_bytes``.
    """
    if isinstance(message, bytes):
        return message

    if isinstance(message, bytearray | memoryview):
        return bytes(message)

    # int.to_bytes is not a message encoder
    serializer = None
    if not isinstance(message, int | str):
        serializer = getattr(message, "SerializeToString", None) or getattr(
            message, "to_bytes", None
        )
    if callable(serializer):
        encoded = serializer()
        if isinstance(encoded, bytes | bytearray):
            return bytes(encoded)

    raise ValidationError(
        f"Cannot serialize message of type {type(message).__name__}",
        field="message",
        value=message,
    )


def to_base64(data: bytes) -> str:
    """Encode bytes as standard base64 text."""
    return base64.b64encode(data).decode("ascii")


def from_base64(text: str) -> bytes:
    """Decode standard base64 text, raising ValidationError on bad input."""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Invalid base64 payload", field="data", value=text) from exc


def coerce_bytes(value: Any) -> bytes:
    """Normalise payload values from transport events into bytes.

    Strings prefixed with ``0x`` are treated as hex, any other string as base64.
    """
    if value is None:
        return b""

    if isinstance(value, bytes):
        return value

    if isinstance(value, bytearray | memoryview):
        return bytes(value)

    if isinstance(value, str):
        if value.lower().startswith("0x"):
            return Web3.to_bytes(hexstr=HexStr(value))
        return from_base64(value)

    if isinstance(value, Iterable):
        return bytes(value)

    raise ValidationError(
        f"Unsupported type for payload coercion: {type(value)!r}", field="data", value=value
    )


def parse_uint64(value: Any, field: str = "value") -> int:
    """Parse a decimal string (or int) as an unsigned 64-bit integer."""
    if isinstance(value, bool):
        raise ValidationError("Expected an unsigned integer", field=field, value=value)

    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        parsed = int(value.strip())
    else:
        raise ValidationError("Expected an unsigned integer", field=field, value=value)

    if parsed < 0 or parsed > UINT64_MAX:
        raise ValidationError("Value exceeds uint64 range", field=field, value=value)

    return parsed

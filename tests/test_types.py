"""Tests for dappchain_client.types."""

import pytest
from conftest import LOCAL

from dappchain_client.exceptions import DeserializationError, ValidationError
from dappchain_client.types import (
    Address,
    BroadcastTxResult,
    JsonRpcEventData,
    RawChainEvent,
    TxStageResult,
)


def test_address_qualification() -> None:
    assert Address(LOCAL, "default").is_qualified
    assert not Address("", "default").is_qualified
    assert not Address(LOCAL, "").is_qualified
    assert Address(LOCAL, "default").qualified_address == f"default:{LOCAL}"
    assert str(Address(LOCAL, "eth")) == f"eth:{LOCAL}"


def test_address_from_string_with_chain() -> None:
    address = Address.from_string("eth:0x" + "AB" * 20)
    assert address == Address(LOCAL, "eth")


def test_address_from_string_bare_local() -> None:
    assert Address.from_string(LOCAL, chain_id="loom") == Address(LOCAL, "loom")


@pytest.mark.parametrize("value", ["", "default:", ":" + LOCAL, "default:0x1234", "not-an-address"])
def test_address_from_string_rejects_invalid(value: str) -> None:
    with pytest.raises(ValidationError):
        Address.from_string(value)


def test_address_from_wire_base64_local() -> None:
    address = Address.from_wire({"chain_id": "default", "local": "A" * 27 + "="})
    assert address == Address("0x" + "00" * 20, "default")


def test_broadcast_result_from_dict() -> None:
    result = BroadcastTxResult.from_dict(
        {
            "check_tx": {"log": "", "info": "checked"},
            "deliver_tx": {"code": 0, "data": "AQI="},
            "hash": "ABCD",
            "height": "17",
        }
    )

    assert result.check_tx == TxStageResult(code=0, error="", info="checked")
    assert result.deliver_tx.data == b"\x01\x02"
    assert result.hash == "ABCD"
    assert result.height == 17


def test_stage_result_error_field_fallback() -> None:
    stage = TxStageResult.from_dict({"code": 1, "error": "sequence number does not match"})
    assert stage.is_nonce_conflict
    assert not stage.ok


@pytest.mark.parametrize(
    "payload",
    [None, [], {"check_tx": {"code": "x"}}, {"height": "tall"}],
)
def test_broadcast_result_rejects_malformed(payload: object) -> None:
    with pytest.raises(DeserializationError):
        BroadcastTxResult.from_dict(payload)


def test_raw_chain_event_from_event_data() -> None:
    event = RawChainEvent.from_event_data(
        JsonRpcEventData.from_dict(
            {
                "contract_address": f"default:{LOCAL}",
                "caller_address": f"default:{LOCAL}",
                "block_height": "99",
                "encoded_body": "0x0102",
                "topics": "only-topic",
            }
        )
    )

    assert event.block_height == 99
    assert event.data == b"\x01\x02"
    assert event.topics == ("only-topic",)


def test_raw_chain_event_rejects_bad_height() -> None:
    data = JsonRpcEventData(
        contract_address=f"default:{LOCAL}",
        caller_address=f"default:{LOCAL}",
        block_height="-3",
    )

    with pytest.raises(ValidationError):
        RawChainEvent.from_event_data(data)

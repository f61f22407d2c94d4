"""
Tests for type-2 transaction encoding.
"""

import base64

import pytest
import rlp

from ten_session_keys.core.errors import EncodingFailureError
from ten_session_keys.core.execution import (
    EIP1559_TX_TYPE,
    FeeMarketTransaction,
    TransactionBuilder,
)
from ten_session_keys.core.execution.tx_builder import data_to_bytes, value_to_int


RECIPIENT = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"


def make_tx(**overrides) -> FeeMarketTransaction:
    fields = dict(
        chain_id=443,
        nonce=7,
        max_priority_fee_per_gas=1_500_000_000,
        max_fee_per_gas=3_000_000_000,
        gas_limit=21_000,
        to=RECIPIENT,
        value=0,
        data="0xa9059cbb",
    )
    fields.update(overrides)
    return FeeMarketTransaction(**fields)


class TestEncoding:
    def test_type_prefix(self):
        assert TransactionBuilder.encode(make_tx())[:1] == EIP1559_TX_TYPE == b"\x02"

    def test_fields_decode_in_order(self):
        encoded = TransactionBuilder.encode(make_tx())

        decoded = rlp.decode(encoded[1:])

        assert len(decoded) == 12
        assert int.from_bytes(decoded[0], "big") == 443
        assert int.from_bytes(decoded[1], "big") == 7
        assert int.from_bytes(decoded[2], "big") == 1_500_000_000
        assert int.from_bytes(decoded[3], "big") == 3_000_000_000
        assert int.from_bytes(decoded[4], "big") == 21_000
        assert decoded[5] == bytes.fromhex(RECIPIENT[2:].lower())
        assert decoded[6] == b""
        assert decoded[7] == bytes.fromhex("a9059cbb")
        assert decoded[8] == []
        assert decoded[9:] == [b"", b"", b""]

    def test_zero_integers_encode_empty(self):
        decoded = rlp.decode(TransactionBuilder.encode(make_tx(nonce=0, value=0))[1:])
        assert decoded[1] == b""
        assert decoded[6] == b""

    def test_deterministic(self):
        assert TransactionBuilder.encode(make_tx()) == TransactionBuilder.encode(make_tx())

    def test_casing_insensitive(self):
        upper = make_tx(to=RECIPIENT.upper().replace("0X", "0x"), data="0xA9059CBB")
        lower = make_tx(to=RECIPIENT.lower(), data="0xa9059cbb")
        assert TransactionBuilder.encode(upper) == TransactionBuilder.encode(lower)

    def test_base64_payload(self):
        tx = make_tx()
        payload = TransactionBuilder.encode_base64(tx)
        assert base64.b64decode(payload) == TransactionBuilder.encode(tx)

    def test_empty_data(self):
        decoded = rlp.decode(TransactionBuilder.encode(make_tx(data="0x"))[1:])
        assert decoded[7] == b""


class TestEncodingFailures:
    def test_short_address(self):
        with pytest.raises(EncodingFailureError):
            TransactionBuilder.encode(make_tx(to="0x1234"))

    def test_non_hex_address(self):
        with pytest.raises(EncodingFailureError):
            TransactionBuilder.encode(make_tx(to="0x" + "zz" * 20))

    def test_odd_length_data(self):
        with pytest.raises(EncodingFailureError):
            TransactionBuilder.encode(make_tx(data="0xabc"))

    def test_negative_integer(self):
        with pytest.raises(EncodingFailureError):
            TransactionBuilder.encode(make_tx(gas_limit=-1))


class TestFieldHelpers:
    @pytest.mark.parametrize(
        "value, expected",
        [(None, 0), ("", 0), ("0x0", 0), ("0xDE0B6B3A7640000", 10**18), ("1000", 1000), (5, 5)],
    )
    def test_value_to_int(self, value, expected):
        assert value_to_int(value) == expected

    def test_value_to_int_rejects_garbage(self):
        with pytest.raises(EncodingFailureError):
            value_to_int("0xnope")

    def test_data_without_prefix(self):
        assert data_to_bytes("ABCD") == b"\xab\xcd"
        assert data_to_bytes(None) == b""

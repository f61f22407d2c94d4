"""
Transaction builder for session key execution.

Assembles an unsigned EIP-1559 (type 2) transaction and encodes it the way
the TEN gateway expects it on the execution channel:
base64(0x02 || rlp([chainId, nonce, maxPriorityFeePerGas, maxFeePerGas,
gasLimit, to, value, data, accessList, v, r, s])).
"""

import base64
import binascii
from typing import List, Optional, Union

import rlp
from eth_utils import decode_hex

from ...services.encoding import parse_quantity
from ..errors import EncodingFailureError
from .models import FeeMarketTransaction


EIP1559_TX_TYPE = b"\x02"
ADDRESS_LENGTH = 20


def address_to_bytes(address: str) -> bytes:
    """Decode a hex address (any casing) to its 20 raw bytes."""
    try:
        raw = decode_hex(address.lower())
    except (binascii.Error, ValueError, TypeError, AttributeError) as e:
        raise EncodingFailureError(f"Invalid recipient address {address!r}: {e}") from e
    if len(raw) != ADDRESS_LENGTH:
        raise EncodingFailureError(f"Recipient address must be {ADDRESS_LENGTH} bytes, got {len(raw)}")
    return raw


def data_to_bytes(data: Optional[str]) -> bytes:
    """Decode calldata; ``None``, ``""`` and ``"0x"`` are empty."""
    if not data:
        return b""
    text = data.lower()
    digits = text[2:] if text.startswith("0x") else text
    if not digits:
        return b""
    if len(digits) % 2:
        raise EncodingFailureError(f"Calldata has an odd number of hex digits: {data!r}")
    try:
        return decode_hex(digits)
    except (binascii.Error, ValueError) as e:
        raise EncodingFailureError(f"Calldata is not valid hex: {data!r}") from e


def value_to_int(value: Optional[Union[int, str]]) -> int:
    """Wei amount from an int or a hex/decimal string; missing means zero."""
    if value is None or value == "":
        return 0
    try:
        amount = parse_quantity(value.lower() if isinstance(value, str) else value)
    except (ValueError, TypeError) as e:
        raise EncodingFailureError(f"Invalid transaction value {value!r}: {e}") from e
    if amount < 0:
        raise EncodingFailureError("Transaction value must be non-negative")
    return amount


class TransactionBuilder:
    """Serializes resolved transactions for the execution channel."""

    @staticmethod
    def rlp_fields(tx: FeeMarketTransaction) -> List[object]:
        """Field sequence for ``rlp.encode``; integers encode minimally, signature slots empty."""
        return [
            tx.chain_id,
            tx.nonce,
            tx.max_priority_fee_per_gas,
            tx.max_fee_per_gas,
            tx.gas_limit,
            address_to_bytes(tx.to),
            tx.value,
            data_to_bytes(tx.data),
            [],     # access list
            b"",    # v
            b"",    # r
            b"",    # s
        ]

    @classmethod
    def encode(cls, tx: FeeMarketTransaction) -> bytes:
        """Typed envelope: ``0x02 || rlp(fields)``."""
        for name in ("chain_id", "nonce", "max_priority_fee_per_gas", "max_fee_per_gas", "gas_limit", "value"):
            field_value = getattr(tx, name)
            if isinstance(field_value, bool) or not isinstance(field_value, int) or field_value < 0:
                raise EncodingFailureError(f"{name} must be a non-negative integer, got {field_value!r}")

        try:
            encoded = rlp.encode(cls.rlp_fields(tx))
        except EncodingFailureError:
            raise
        except Exception as e:
            raise EncodingFailureError(f"RLP encoding failed: {e}") from e

        if not isinstance(encoded, (bytes, bytearray)):
            raise EncodingFailureError(f"RLP encoding returned {type(encoded).__name__}, expected bytes")
        return EIP1559_TX_TYPE + bytes(encoded)

    @classmethod
    def encode_base64(cls, tx: FeeMarketTransaction) -> str:
        """Payload submitted to the execute address."""
        return base64.b64encode(cls.encode(tx)).decode("ascii")

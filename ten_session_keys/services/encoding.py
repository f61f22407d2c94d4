"""Numeric, hex and ether unit conversions."""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, InvalidOperation, localcontext
from typing import Union

from eth_utils import decode_hex

WEI_PER_ETHER = 10**18
ETHER_DECIMALS = 18

# Enough digits for any uint256 amount without rounding
_PRECISION = 100

# Rough estimate: each session transaction costs ~0.005 ETH
DEFAULT_TRANSACTION_COST_ETH = Decimal("0.005")


def _strip_0x(value: str) -> str:
    return value[2:] if value[:2].lower() == "0x" else value


def to_hex(value: Union[int, str]) -> str:
    """Minimal ``0x``-prefixed hex for an integer (``0`` becomes ``0x0``)."""
    if isinstance(value, str):
        value = parse_quantity(value)
    if value < 0:
        raise ValueError("Value must be non-negative")
    return hex(value)


def parse_quantity(value: Union[int, str]) -> int:
    """Parse an RPC quantity: ``0x`` hex, a decimal string or an int."""
    if isinstance(value, bool):
        raise ValueError(f"Not a quantity: {value!r}")
    if isinstance(value, int):
        return value
    text = value.strip()
    if text[:2].lower() == "0x":
        digits = text[2:]
        return int(digits, 16) if digits else 0
    return int(text, 10)


def hex_to_bytes(value: str) -> bytes:
    cleaned = _strip_0x(value)
    if len(cleaned) % 2:
        cleaned = "0" + cleaned
    return decode_hex(cleaned)


def parse_ether(value: Union[str, Decimal, int]) -> int:
    """
    Convert a decimal ether amount to wei.

    Digits past the 18th fractional place are truncated, as a wallet would.
    """
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid ether amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid ether amount: {value!r}")
    if amount < 0:
        raise ValueError(f"Ether amount must be non-negative: {value!r}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        wei = amount.scaleb(ETHER_DECIMALS).to_integral_value(rounding=ROUND_FLOOR)
    return int(wei)


def format_ether(wei: int) -> Decimal:
    """Convert wei to an exact decimal ether amount."""
    if wei < 0:
        raise ValueError("Wei amount must be non-negative")
    if wei == 0:
        return Decimal(0)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        ether = Decimal(wei).scaleb(-ETHER_DECIMALS).normalize()
        if ether == ether.to_integral_value():
            ether = ether.quantize(Decimal(1))
    return ether


def estimate_transactions(
    eth_balance: Union[Decimal, int, str],
    cost_per_transaction: Decimal = DEFAULT_TRANSACTION_COST_ETH,
) -> int:
    """How many session transactions a balance roughly covers."""
    balance = Decimal(str(eth_balance))
    if balance <= 0:
        return 0
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        count = (balance / cost_per_transaction).to_integral_value(rounding=ROUND_FLOOR)
    return int(count)


__all__ = [
    "WEI_PER_ETHER",
    "to_hex",
    "parse_quantity",
    "hex_to_bytes",
    "parse_ether",
    "format_ether",
    "estimate_transactions",
]

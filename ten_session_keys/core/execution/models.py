"""
Transaction execution models and types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class FeePriority(str, Enum):
    """How aggressively to bid for inclusion."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def index(self) -> int:
        """Position in the fee history percentile list."""
        return _PRIORITY_INDEX[self]


_PRIORITY_INDEX = {
    FeePriority.LOW: 0,
    FeePriority.MEDIUM: 1,
    FeePriority.HIGH: 2,
}


@dataclass(frozen=True)
class TransactionParams:
    """Caller input for a session key transaction. Omitted fields are resolved from the chain."""
    to: str
    data: str = "0x"
    value: Optional[Union[int, str]] = None     # Wei, int or hex string
    nonce: Optional[int] = None
    gas_limit: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None


@dataclass(frozen=True)
class GasFees:
    """EIP-1559 fee pair."""
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    from_fallback: bool = False


@dataclass(frozen=True)
class FeeMarketTransaction:
    """A fully resolved type-2 transaction, unsigned."""
    chain_id: int
    nonce: int
    max_priority_fee_per_gas: int
    max_fee_per_gas: int
    gas_limit: int
    to: str
    value: int
    data: str


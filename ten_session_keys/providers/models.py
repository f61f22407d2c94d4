"""
Response models for the RPC methods the session key subsystem consumes.

Each provider answer is validated here before any other component sees it,
so malformed data surfaces as a ``ProviderError`` at the boundary.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..services.encoding import parse_quantity


def _quantity(value: Any) -> int:
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        result = parse_quantity(value)
        if result < 0:
            raise ValueError("Quantity must be non-negative")
        return result
    raise ValueError(f"Expected a hex quantity, got {value!r}")


class FeeHistory(BaseModel):
    """Result of ``eth_feeHistory``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    oldest_block: Optional[int] = Field(default=None, alias="oldestBlock")
    base_fee_per_gas: List[int] = Field(alias="baseFeePerGas")
    reward: List[List[int]] = Field(default_factory=list)

    @field_validator("oldest_block", mode="before")
    @classmethod
    def _parse_oldest(cls, value: Any) -> Optional[int]:
        return None if value is None else _quantity(value)

    @field_validator("base_fee_per_gas", mode="before")
    @classmethod
    def _parse_base_fees(cls, value: Any) -> List[int]:
        if not isinstance(value, list) or not value:
            raise ValueError("baseFeePerGas must be a non-empty list")
        return [_quantity(v) for v in value]

    @field_validator("reward", mode="before")
    @classmethod
    def _parse_rewards(cls, value: Any) -> List[List[int]]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("reward must be a list of lists")
        rows = []
        for row in value:
            if not isinstance(row, list):
                raise ValueError("reward must be a list of lists")
            rows.append([_quantity(v) for v in row])
        return rows

    @property
    def latest_base_fee(self) -> int:
        return self.base_fee_per_gas[-1]

    def latest_reward(self, index: int) -> Optional[int]:
        """Reward of the most recent block at a percentile index, if reported."""
        if not self.reward:
            return None
        row = self.reward[-1]
        if index >= len(row):
            return None
        return row[index]


class TransactionReceipt(BaseModel):
    """Subset of ``eth_getTransactionReceipt`` the subsystem cares about."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    transaction_hash: str = Field(alias="transactionHash")
    block_number: Optional[int] = Field(default=None, alias="blockNumber")
    status: Optional[int] = None

    @field_validator("block_number", "status", mode="before")
    @classmethod
    def _parse_quantities(cls, value: Any) -> Optional[int]:
        return None if value is None else _quantity(value)

    @property
    def succeeded(self) -> bool:
        return self.status is None or self.status == 1

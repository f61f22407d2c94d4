"""
Typed RPC client over a wallet provider.

One method per RPC call the subsystem makes. Every call goes through
``_call``, which turns provider exceptions into ``ProviderError`` with the
original message, and every result is validated before it is returned.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from ..core.errors import ProviderError, WrongNetworkError
from ..services.chains import ACTUATION_SLOT
from ..services.encoding import parse_quantity, to_hex
from .base import EIP1193Provider, RpcMethod
from .models import FeeHistory, TransactionReceipt


logger = logging.getLogger(__name__)


class RpcClient:
    """Validating wrapper around an ``EIP1193Provider``."""

    def __init__(self, provider: EIP1193Provider):
        self.provider = provider

    async def _call(self, method: RpcMethod, params: Optional[List[Any]] = None) -> Any:
        try:
            return await self.provider.request(method.value, params or [])
        except ProviderError:
            raise
        except Exception as e:
            logger.debug(f"RPC {method.value} failed: {e}")
            raise ProviderError(str(e) or e.__class__.__name__, method=method.value) from e

    @staticmethod
    def _quantity(method: RpcMethod, result: Any) -> int:
        try:
            if isinstance(result, bool) or not isinstance(result, (int, str)):
                raise ValueError(f"expected a quantity, got {result!r}")
            value = parse_quantity(result)
        except ValueError as e:
            raise ProviderError(f"Malformed {method.value} response: {e}", method=method.value) from e
        if value < 0:
            raise ProviderError(f"Malformed {method.value} response: negative quantity", method=method.value)
        return value

    async def chain_id(self) -> int:
        result = await self._call(RpcMethod.CHAIN_ID)
        return self._quantity(RpcMethod.CHAIN_ID, result)

    async def ensure_chain(self, expected_chain_id: int) -> int:
        """Return the chain id, or raise ``WrongNetworkError`` if it is not the expected one."""
        chain_id = await self.chain_id()
        if chain_id != expected_chain_id:
            raise WrongNetworkError(expected_chain_id, chain_id)
        return chain_id

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        result = await self._call(RpcMethod.GET_TRANSACTION_COUNT, [address, block])
        return self._quantity(RpcMethod.GET_TRANSACTION_COUNT, result)

    async def fee_history(
        self,
        block_count: int,
        percentiles: Sequence[int],
        newest_block: str = "latest",
    ) -> FeeHistory:
        result = await self._call(
            RpcMethod.FEE_HISTORY,
            [block_count, newest_block, list(percentiles)],
        )
        if not isinstance(result, dict):
            raise ProviderError(
                f"Malformed {RpcMethod.FEE_HISTORY.value} response: {result!r}",
                method=RpcMethod.FEE_HISTORY.value,
            )
        try:
            return FeeHistory.model_validate(result)
        except ValidationError as e:
            raise ProviderError(
                f"Malformed {RpcMethod.FEE_HISTORY.value} response: {e}",
                method=RpcMethod.FEE_HISTORY.value,
            ) from e

    async def estimate_gas(self, call: Dict[str, Any]) -> int:
        result = await self._call(RpcMethod.ESTIMATE_GAS, [call])
        return self._quantity(RpcMethod.ESTIMATE_GAS, result)

    async def get_balance(self, address: str, block: str = "latest") -> int:
        result = await self._call(RpcMethod.GET_BALANCE, [address, block])
        return self._quantity(RpcMethod.GET_BALANCE, result)

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        result = await self._call(RpcMethod.GET_TRANSACTION_RECEIPT, [tx_hash])
        if result is None:
            return None
        if not isinstance(result, dict):
            raise ProviderError(
                f"Malformed {RpcMethod.GET_TRANSACTION_RECEIPT.value} response: {result!r}",
                method=RpcMethod.GET_TRANSACTION_RECEIPT.value,
            )
        try:
            return TransactionReceipt.model_validate(result)
        except ValidationError as e:
            raise ProviderError(
                f"Malformed {RpcMethod.GET_TRANSACTION_RECEIPT.value} response: {e}",
                method=RpcMethod.GET_TRANSACTION_RECEIPT.value,
            ) from e

    async def send_transaction(self, from_address: str, to_address: str, value_wei: int) -> str:
        """Plain value transfer signed by the wallet itself."""
        result = await self._call(
            RpcMethod.SEND_TRANSACTION,
            [{"to": to_address, "value": to_hex(value_wei), "from": from_address}],
        )
        return self._hash(RpcMethod.SEND_TRANSACTION, result)

    async def actuate(self, address: str, payload: str = ACTUATION_SLOT) -> Optional[str]:
        """
        Trigger a session key action through ``eth_getStorageAt``.

        The address selects the action; the slot argument carries the payload
        (``0x0`` for lifecycle calls, the encoded transaction for execution).
        """
        result = await self._call(RpcMethod.GET_STORAGE_AT, [address, payload, "latest"])
        if result is not None and not isinstance(result, str):
            raise ProviderError(
                f"Malformed {RpcMethod.GET_STORAGE_AT.value} response: {result!r}",
                method=RpcMethod.GET_STORAGE_AT.value,
            )
        return result

    @staticmethod
    def _hash(method: RpcMethod, result: Any) -> str:
        if not isinstance(result, str) or not result:
            raise ProviderError(f"Malformed {method.value} response: {result!r}", method=method.value)
        return result

"""
Session transaction executor.

Sends a contract call through the active session key:
- Network and session key checks
- Nonce and gas resolution (caller values win)
- Fee calculation per priority tier
- Type-2 encoding and submission on the execute address
"""

import logging
from typing import Optional

from ...config import Settings, settings as default_settings
from ...providers.base import EIP1193Provider
from ...providers.rpc import RpcClient
from ...services.chains import Actuation
from ...services.encoding import to_hex
from ..errors import EncodingFailureError, NoSessionKeyError
from ..state.store import StateStore, track_operation
from .gas import GasFeeCalculator
from .models import FeeMarketTransaction, FeePriority, GasFees, TransactionParams
from .tx_builder import TransactionBuilder, value_to_int


logger = logging.getLogger(__name__)


class SessionTransactionExecutor:
    """
    Builds and submits transactions signed by the TEN session key.

    The gateway holds the session key, so the transaction goes out unsigned:
    the encoded payload is read from the execute address and the gateway
    signs and broadcasts it.
    """

    def __init__(
        self,
        store: StateStore,
        config: Optional[Settings] = None,
        gas_calculator: Optional[GasFeeCalculator] = None,
    ):
        self.store = store
        self.settings = config or default_settings
        self.gas = gas_calculator or GasFeeCalculator(self.settings)

    async def build_transaction(
        self,
        rpc: RpcClient,
        chain_id: int,
        session_key: str,
        params: TransactionParams,
        priority: FeePriority = FeePriority.MEDIUM,
    ) -> FeeMarketTransaction:
        """Resolve every field the caller left out."""
        value = value_to_int(params.value)

        if params.nonce is not None:
            nonce = params.nonce
        else:
            nonce = await rpc.get_transaction_count(session_key, "pending")

        if params.max_fee_per_gas is not None and params.max_priority_fee_per_gas is not None:
            fees = GasFees(
                max_fee_per_gas=params.max_fee_per_gas,
                max_priority_fee_per_gas=params.max_priority_fee_per_gas,
            )
        else:
            fees = await self.gas.get_fees(rpc, priority)
            if fees.from_fallback:
                logger.info(f"Using fallback fees for {priority.value} priority")

        if params.gas_limit is not None:
            gas_limit = params.gas_limit
        else:
            gas_limit = await rpc.estimate_gas({
                "to": params.to,
                "data": params.data or "0x",
                "value": to_hex(value),
                "from": session_key,
            })

        return FeeMarketTransaction(
            chain_id=chain_id,
            nonce=nonce,
            max_priority_fee_per_gas=fees.max_priority_fee_per_gas,
            max_fee_per_gas=fees.max_fee_per_gas,
            gas_limit=gas_limit,
            to=params.to,
            value=value,
            data=params.data or "0x",
        )

    async def send_transaction(
        self,
        params: TransactionParams,
        provider: EIP1193Provider,
        priority: FeePriority = FeePriority.MEDIUM,
    ) -> Optional[str]:
        """
        Execute a transaction with the active session key.

        Args:
            params: Recipient, calldata and optional overrides
            provider: Provider attached to TEN
            priority: Fee tier used when fees are not given

        Returns:
            Whatever the gateway answers on the execute address, unmodified

        Raises:
            WrongNetworkError: Provider is not on TEN
            NoSessionKeyError: No session key, or it is not active
            ProviderError: RPC failure
            EncodingFailureError: Transaction could not be encoded
        """
        async with track_operation(self.store, "send_transaction", fallback=EncodingFailureError):
            rpc = RpcClient(provider)
            chain_id = await rpc.ensure_chain(self.settings.target_chain_id)

            state = self.store.get_state()
            if state.session_key is None or not state.is_active:
                raise NoSessionKeyError()

            tx = await self.build_transaction(rpc, chain_id, state.session_key, params, priority)
            payload = TransactionBuilder.encode_base64(tx)

            logger.info(
                f"Executing session transaction to {tx.to} "
                f"(nonce={tx.nonce}, gas={tx.gas_limit}, maxFee={tx.max_fee_per_gas})"
            )
            execute_address = self.settings.actuation_addresses[Actuation.EXECUTE.value]
            result = await rpc.actuate(execute_address, payload)

        logger.info(f"Session transaction submitted: {result}")
        return result

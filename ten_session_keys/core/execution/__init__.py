"""
Session Transaction Execution

Sends contract calls through the active session key:
- SessionTransactionExecutor: resolves nonce, gas and fees, then submits
- GasFeeCalculator: EIP-1559 fees per priority tier, with fallback values
- TransactionBuilder: type-2 RLP encoding for the execution channel

Usage:
    from ten_session_keys.core.execution import (
        FeePriority,
        SessionTransactionExecutor,
        TransactionParams,
    )

    executor = SessionTransactionExecutor(store)
    result = await executor.send_transaction(
        TransactionParams(to="0x...", data="0xa9059cbb..."),
        provider,
        priority=FeePriority.HIGH,
    )
"""

from .models import (
    FeeMarketTransaction,
    FeePriority,
    GasFees,
    TransactionParams,
)

from .gas import GasFeeCalculator

from .tx_builder import (
    EIP1559_TX_TYPE,
    TransactionBuilder,
)

from .executor import SessionTransactionExecutor

__all__ = [
    # Models
    "FeeMarketTransaction",
    "FeePriority",
    "GasFees",
    "TransactionParams",
    # Fees
    "GasFeeCalculator",
    # Transaction Builder
    "EIP1559_TX_TYPE",
    "TransactionBuilder",
    # Executor
    "SessionTransactionExecutor",
]

"""
EIP-1559 fee calculation from ``eth_feeHistory``.
"""

import logging
from decimal import ROUND_FLOOR, Decimal, localcontext
from typing import Optional

from ...config import Settings, settings as default_settings
from ...providers.rpc import RpcClient
from .models import FeePriority, GasFees


logger = logging.getLogger(__name__)


class GasFeeCalculator:
    """
    Derives ``maxPriorityFeePerGas`` / ``maxFeePerGas`` for a priority tier.

    The priority fee is the latest block's reward at the tier's percentile;
    the max fee adds headroom on top of the latest base fee. When fee history
    is unavailable or incomplete the configured fallback fees are used, so
    ``get_fees`` never raises for data problems.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or default_settings

    def multiplier(self, priority: FeePriority) -> Decimal:
        return self.settings.base_fee_multipliers[priority.value]

    def max_fee(self, base_fee: int, priority_fee: int, priority: FeePriority) -> int:
        """floor(base_fee * multiplier) + priority_fee"""
        with localcontext() as ctx:
            ctx.prec = 100
            scaled = (Decimal(base_fee) * self.multiplier(priority)).to_integral_value(rounding=ROUND_FLOOR)
        return int(scaled) + priority_fee

    def fallback_fees(self, priority: FeePriority) -> GasFees:
        priority_fee = self.settings.fallback_priority_fee_wei
        return GasFees(
            max_fee_per_gas=self.max_fee(self.settings.fallback_base_fee_wei, priority_fee, priority),
            max_priority_fee_per_gas=priority_fee,
            from_fallback=True,
        )

    async def get_fees(self, rpc: RpcClient, priority: FeePriority = FeePriority.MEDIUM) -> GasFees:
        try:
            history = await rpc.fee_history(
                self.settings.fee_history_blocks,
                self.settings.priority_fee_percentiles,
            )
            priority_fee = history.latest_reward(priority.index)
            if priority_fee is None:
                logger.warning("Fee history has no reward data, using fallback fees")
                return self.fallback_fees(priority)

            return GasFees(
                max_fee_per_gas=self.max_fee(history.latest_base_fee, priority_fee, priority),
                max_priority_fee_per_gas=priority_fee,
            )
        except Exception as e:
            logger.warning(f"Fee history unavailable, using fallback fees: {e}")
            return self.fallback_fees(priority)

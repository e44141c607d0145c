"""Variance swap settlement.

Provides asset balances, the variance swap market and its settlement
math.
"""

from surge_oracle.swap.balance import Balance
from surge_oracle.swap.market import (
    MarketState,
    Settlement,
    TokenPair,
    VarianceSwapMarket,
    compute_bucket_payouts,
    holder_payout,
    settle,
)

__all__ = [
    "Balance",
    "MarketState",
    "Settlement",
    "TokenPair",
    "VarianceSwapMarket",
    "compute_bucket_payouts",
    "holder_payout",
    "settle",
]

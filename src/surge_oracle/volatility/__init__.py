"""Volatility estimation components.

Provides the streaming estimator, the price feed guard and the tick
file loader.
"""

from surge_oracle.volatility.estimator import (
    VolatilityEstimator,
    annualize,
    percent_change,
    update_stats,
)
from surge_oracle.volatility.feed import PriceFeedGuard
from surge_oracle.volatility.loader import PriceTickLoader

__all__ = [
    "PriceFeedGuard",
    "PriceTickLoader",
    "VolatilityEstimator",
    "annualize",
    "percent_change",
    "update_stats",
]

"""Domain models for the oracle and settlement engine.

This package contains the value objects, events and errors shared by
the volatility estimator and the variance swap market.
"""

from surge_oracle.domain.errors import (
    ConfigurationError,
    FeedMismatchError,
    InsufficientBalanceError,
    MarketExpiredError,
    MarketNotExpiredError,
    ObjectNotFoundError,
    OracleError,
    PaymentMismatchError,
    SettlementError,
    StalePriceError,
    SupplyOverflowError,
    SupplyUnderflowError,
    TokenPairConsumedError,
    TokenPairMismatchError,
    UnauthorizedUpdateError,
)
from surge_oracle.domain.events import (
    Event,
    EventType,
    MarketRedeemed,
    StatsUpdated,
    TokensMinted,
)
from surge_oracle.domain.stats import VolatilityStats
from surge_oracle.domain.types import (
    PRICE_SCALE,
    STRIKE_SCALE,
    U64_MAX,
    U128_MAX,
    PriceUpdate,
    Side,
)

__all__ = [
    # Types
    "PRICE_SCALE",
    "STRIKE_SCALE",
    "U64_MAX",
    "U128_MAX",
    "PriceUpdate",
    "Side",
    "VolatilityStats",
    # Events
    "Event",
    "EventType",
    "MarketRedeemed",
    "StatsUpdated",
    "TokensMinted",
    # Errors
    "ConfigurationError",
    "FeedMismatchError",
    "InsufficientBalanceError",
    "MarketExpiredError",
    "MarketNotExpiredError",
    "ObjectNotFoundError",
    "OracleError",
    "PaymentMismatchError",
    "SettlementError",
    "StalePriceError",
    "SupplyOverflowError",
    "SupplyUnderflowError",
    "TokenPairConsumedError",
    "TokenPairMismatchError",
    "UnauthorizedUpdateError",
]

"""Core value objects and numeric conventions.

All fixed-point values in the system are plain integers with an implied
scale. Prices, means and annualized volatility use 6 decimals; strike,
start volatility and realized variance use 2 decimals. Monetary amounts
are integer minor units of the underlying asset.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import field_validator
from pydantic.dataclasses import dataclass

U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1

# 1_000_000 == 1.0 (or 100% for percent changes)
PRICE_SCALE = 1_000_000
# 100 == 1.0 for strike and start volatility
STRIKE_SCALE = 100


def check_u64(value: int) -> int:
    """Raise ValueError unless value fits an unsigned 64-bit field."""
    if value < 0 or value > U64_MAX:
        raise ValueError(f"value {value} out of u64 range")
    return value


def check_u128(value: int) -> int:
    """Raise ValueError unless value fits an unsigned 128-bit field."""
    if value < 0 or value > U128_MAX:
        raise ValueError(f"value {value} out of u128 range")
    return value


def from_u6(value: int) -> Decimal:
    """Convert a 6-decimal fixed-point integer to real units."""
    return Decimal(value) / Decimal(PRICE_SCALE)


def to_u6(value: Decimal | int | str) -> int:
    """Convert real units to a 6-decimal fixed-point integer (truncating)."""
    return int(Decimal(value) * Decimal(PRICE_SCALE))


class Side(str, Enum):
    """Claim side of a variance swap.

    LONG is paid the realized variance in excess of the strike; SHORT
    receives the remainder of the pool.
    """

    LONG = "long"
    SHORT = "short"

    def opposite(self) -> Side:
        """Return the opposite side."""
        return Side.SHORT if self == Side.LONG else Side.LONG

    @classmethod
    def from_flag(cls, want_long: bool) -> Side:
        """Map a mint-time ``want_long`` flag to a side."""
        return cls.LONG if want_long else cls.SHORT


@dataclass(frozen=True)
class PriceUpdate:
    """A verified price observation delivered by the oracle collaborator.

    The price is assumed to be authenticated already. Feed identity and
    freshness are checked by PriceFeedGuard before it reaches the
    estimator.
    """

    feed_id: str
    price_u6: int
    publish_time: int  # unix seconds

    @field_validator("price_u6")
    @classmethod
    def validate_price(cls, v: int) -> int:
        """Ensure the price fits the u64 price field."""
        return check_u64(v)

    @field_validator("publish_time")
    @classmethod
    def validate_publish_time(cls, v: int) -> int:
        """Ensure the publish time is a non-negative unix timestamp."""
        if v < 0:
            raise ValueError("publish_time must be non-negative")
        return v

    def age(self, now: int) -> int:
        """Return the age of this observation in seconds at ``now``."""
        return now - self.publish_time

    def price(self) -> Decimal:
        """Return the price in real units."""
        return from_u6(self.price_u6)

    def __repr__(self) -> str:
        return f"PriceUpdate({self.feed_id!r}, {self.price_u6}, t={self.publish_time})"

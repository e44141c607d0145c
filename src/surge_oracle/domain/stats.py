"""Volatility statistics snapshot.

The estimator's running state is an immutable value. Each update
produces a new snapshot rather than mutating the old one.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import field_validator, model_validator
from pydantic.dataclasses import dataclass

from surge_oracle.domain.types import check_u64, check_u128, from_u6


@dataclass(frozen=True)
class VolatilityStats:
    """Running statistics over observed price ticks.

    Attributes:
        last_price_u6: Most recent price, 6-decimal fixed point
        mean_fp: Running mean of per-tick absolute percent change
            (1_000_000 == 100%)
        m2_fp: Running sum of squared percent changes (u128)
        count: Number of ticks observed
        ann_vol_fp: Annualized volatility estimate, 6-decimal fixed point
    """

    last_price_u6: int = 0
    mean_fp: int = 0
    m2_fp: int = 0
    count: int = 0
    ann_vol_fp: int = 0

    @field_validator("last_price_u6", "mean_fp", "count", "ann_vol_fp")
    @classmethod
    def validate_u64(cls, v: int) -> int:
        """Ensure the field fits an unsigned 64-bit value."""
        return check_u64(v)

    @field_validator("m2_fp")
    @classmethod
    def validate_u128(cls, v: int) -> int:
        """Ensure the accumulator fits an unsigned 128-bit value."""
        return check_u128(v)

    @model_validator(mode="after")
    def validate_empty(self) -> VolatilityStats:
        """No tick observed means no statistics."""
        if self.count == 0 and (
            self.last_price_u6 or self.mean_fp or self.m2_fp or self.ann_vol_fp
        ):
            raise ValueError("stats with count == 0 must be all zero")
        return self

    @classmethod
    def empty(cls) -> VolatilityStats:
        """Return stats for an estimator that has seen no ticks."""
        return cls()

    def is_empty(self) -> bool:
        """Return True if no tick has been observed."""
        return self.count == 0

    def annualized_volatility(self) -> Decimal:
        """Return the annualized volatility in real units."""
        return from_u6(self.ann_vol_fp)

    def mean_change(self) -> Decimal:
        """Return the mean absolute percent change as a fraction."""
        return from_u6(self.mean_fp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "last_price_u6": self.last_price_u6,
            "mean_fp": self.mean_fp,
            "m2_fp": self.m2_fp,
            "count": self.count,
            "ann_vol_fp": self.ann_vol_fp,
        }

"""Fixed-point numeric helpers.

Provides saturating unsigned arithmetic and the bounded square root
used by the volatility estimator.
"""

from surge_oracle.numeric.saturating import (
    mul_div,
    sat_add_u64,
    sat_add_u128,
    sat_mul_u64,
    saturate,
)
from surge_oracle.numeric.sqrt import CEILING_ROOT, VARIANCE_CEILING, sqrt_fp

__all__ = [
    "CEILING_ROOT",
    "VARIANCE_CEILING",
    "mul_div",
    "sat_add_u64",
    "sat_add_u128",
    "sat_mul_u64",
    "saturate",
    "sqrt_fp",
]

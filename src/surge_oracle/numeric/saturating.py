"""Saturating unsigned integer arithmetic.

Python integers never overflow, so the fixed-width fields of the
estimator and the market are bounded with explicit clamps. An
operation that would exceed a field's maximum returns the maximum.
"""

from __future__ import annotations

from surge_oracle.domain.types import U64_MAX, U128_MAX


def saturate(value: int, maximum: int) -> int:
    """Clamp a non-negative value to ``maximum``."""
    return maximum if value > maximum else value


def sat_add_u64(a: int, b: int) -> int:
    """Add two u64 values, clamping to U64_MAX."""
    return saturate(a + b, U64_MAX)


def sat_add_u128(a: int, b: int) -> int:
    """Add two u128 values, clamping to U128_MAX."""
    return saturate(a + b, U128_MAX)


def sat_mul_u64(a: int, b: int) -> int:
    """Multiply two u64 values, clamping to U64_MAX."""
    if a != 0 and b > U64_MAX // a:
        return U64_MAX
    return a * b


def mul_div(a: int, b: int, divisor: int, maximum: int = U64_MAX) -> int:
    """Compute ``a * b // divisor`` with an unbounded intermediate.

    The truncating quotient is clamped to ``maximum``. A zero divisor
    yields zero.
    """
    if divisor == 0:
        return 0
    return saturate(a * b // divisor, maximum)

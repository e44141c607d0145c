"""Bounded integer square root.

Newton's method with a fixed seed and a hard iteration cap, so the cost
of a call is at most MAX_ITERATIONS integer divisions. The result is a
best-effort root, not a guaranteed floor(sqrt(x)).
"""

from __future__ import annotations

SQRT_SEED = 1000
MAX_ITERATIONS = 10

# Inputs at or above the variance ceiling map straight to CEILING_ROOT.
# This is a calibrated shortcut, not the true root of the ceiling.
VARIANCE_CEILING = 10**18
CEILING_ROOT = 1_000_000


def sqrt_fp(x: int) -> int:
    """Return the bounded Newton square root of ``x``.

    Args:
        x: Non-negative integer, typically a clamped variance

    Returns:
        0 for 0, CEILING_ROOT for x >= VARIANCE_CEILING, otherwise the
        guess reached after at most MAX_ITERATIONS refinements
    """
    if x == 0:
        return 0
    if x >= VARIANCE_CEILING:
        return CEILING_ROOT

    guess = SQRT_SEED
    for _ in range(MAX_ITERATIONS):
        next_guess = (guess + x // guess) // 2
        if next_guess == guess:
            break
        guess = next_guess
    return guess

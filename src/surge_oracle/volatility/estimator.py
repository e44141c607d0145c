"""Streaming volatility estimator.

Folds one price tick at a time into running statistics and derives an
annualized volatility figure. All arithmetic saturates: no price input,
however extreme, makes an update fail.

The accumulator is a simplified Welford variant. Each tick adds the
squared percent change itself to M2, not its deviation from the mean:

    pct_t  = |p_t - p_{t-1}| / p_{t-1}          (scale 1_000_000)
    mean_t = mean_{t-1} + pct_t / n
    M2_t   = M2_{t-1} + pct_t²
    var_t  = min(M2_t / (n - 1), 1e18)
    vol_t  = sqrt(var_t) * 1.5874
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from surge_oracle.domain.events import EventType, StatsUpdated
from surge_oracle.domain.stats import VolatilityStats
from surge_oracle.domain.types import PRICE_SCALE, U64_MAX
from surge_oracle.numeric.saturating import mul_div, sat_add_u64, sat_add_u128
from surge_oracle.numeric.sqrt import VARIANCE_CEILING, sqrt_fp

if TYPE_CHECKING:
    from surge_oracle.core.dispatcher import EventDispatcher

logger = logging.getLogger(__name__)

# Annualization multiplier, applied as daily_vol * 15874 / 10000
ANNUALIZATION_NUMERATOR = 15874
ANNUALIZATION_DENOMINATOR = 10000

# Ticks required before a variance exists
MIN_READY_COUNT = 2


def percent_change(last_price_u6: int, new_price_u6: int) -> int:
    """Return the absolute percent change between two prices.

    Args:
        last_price_u6: Previous price, 6-decimal fixed point
        new_price_u6: New price, 6-decimal fixed point

    Returns:
        |new - last| / last at scale 1_000_000, clamped to U64_MAX;
        0 if the previous price is 0
    """
    if last_price_u6 == 0:
        return 0
    diff = abs(new_price_u6 - last_price_u6)
    return mul_div(diff, PRICE_SCALE, last_price_u6)


def annualize(daily_vol: int) -> int:
    """Scale a per-period volatility to an annualized figure, saturating."""
    if daily_vol > U64_MAX // ANNUALIZATION_NUMERATOR:
        return U64_MAX
    return daily_vol * ANNUALIZATION_NUMERATOR // ANNUALIZATION_DENOMINATOR


def update_stats(stats: VolatilityStats, new_price_u6: int) -> VolatilityStats:
    """Fold one price tick into the running statistics.

    Args:
        stats: Current statistics
        new_price_u6: Observed price, 6-decimal fixed point

    Returns:
        New statistics snapshot
    """
    if stats.count == 0:
        # A single observation has no variance
        return VolatilityStats(last_price_u6=new_price_u6, count=1)

    pct = percent_change(stats.last_price_u6, new_price_u6)

    count = sat_add_u64(stats.count, 1)
    mean = sat_add_u64(stats.mean_fp, pct // count)
    m2 = sat_add_u128(stats.m2_fp, pct * pct)

    ann_vol = stats.ann_vol_fp
    if count > 1:
        variance = min(m2 // (count - 1), VARIANCE_CEILING)
        ann_vol = annualize(sqrt_fp(variance))

    return VolatilityStats(
        last_price_u6=new_price_u6,
        mean_fp=mean,
        m2_fp=m2,
        count=count,
        ann_vol_fp=ann_vol,
    )


class VolatilityEstimator:
    """Stateful estimator over a single stats object.

    Wraps update_stats with identity and notification: each update
    replaces the held snapshot and publishes a StatsUpdated event.

    Thread-safety: This class is NOT thread-safe. The caller serializes
    updates to the same estimator.
    """

    def __init__(
        self,
        stats_id: str,
        dispatcher: EventDispatcher | None = None,
        stats: VolatilityStats | None = None,
    ) -> None:
        """Initialize the estimator.

        Args:
            stats_id: Identifier of the stats object this estimator owns
            dispatcher: Optional event dispatcher for notifications
            stats: Existing statistics to resume from
        """
        self._stats_id = stats_id
        self._dispatcher = dispatcher
        self._stats = stats or VolatilityStats.empty()

    @property
    def stats_id(self) -> str:
        """Return the stats object identifier."""
        return self._stats_id

    @property
    def stats(self) -> VolatilityStats:
        """Return the current statistics snapshot."""
        return self._stats

    @property
    def sample_count(self) -> int:
        """Return the number of ticks observed."""
        return self._stats.count

    def update(self, price_u6: int) -> VolatilityStats:
        """Incorporate a new price tick.

        Args:
            price_u6: Observed price, 6-decimal fixed point

        Returns:
            The updated statistics
        """
        self._stats = update_stats(self._stats, price_u6)
        logger.debug(
            f"Stats {self._stats_id}: count={self._stats.count} "
            f"ann_vol={self._stats.ann_vol_fp}"
        )

        if self._dispatcher is not None:
            self._dispatcher.publish(
                StatsUpdated(
                    event_type=EventType.STATS_UPDATED,
                    timestamp=datetime.now(UTC),
                    stats_id=self._stats_id,
                    stats=self._stats,
                )
            )
        return self._stats

    def get_volatility(self) -> int:
        """Return the annualized volatility, 6-decimal fixed point."""
        return self._stats.ann_vol_fp

    def reset(self) -> None:
        """Reset to an empty state."""
        self._stats = VolatilityStats.empty()

    def is_ready(self) -> bool:
        """Check if enough ticks have been observed for a variance.

        Returns:
            True once at least two ticks have been observed
        """
        return self._stats.count >= MIN_READY_COUNT

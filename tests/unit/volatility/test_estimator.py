"""Tests for the streaming volatility estimator."""

import random

import pytest

from surge_oracle.core.dispatcher import EventDispatcher
from surge_oracle.domain.events import Event, EventType, StatsUpdated
from surge_oracle.domain.stats import VolatilityStats
from surge_oracle.domain.types import U64_MAX, U128_MAX
from surge_oracle.numeric.sqrt import sqrt_fp
from surge_oracle.volatility.estimator import (
    VolatilityEstimator,
    annualize,
    percent_change,
    update_stats,
)


def fold(prices: list[int]) -> VolatilityStats:
    """Fold a price sequence into fresh stats."""
    stats = VolatilityStats.empty()
    for price in prices:
        stats = update_stats(stats, price)
    return stats


class TestPercentChange:
    """Tests for percent_change."""

    def test_ten_percent(self) -> None:
        """A 10% move is 100_000 at scale 1_000_000."""
        assert percent_change(100_000_000, 110_000_000) == 100_000

    def test_absolute(self) -> None:
        """Down-moves count the same as up-moves."""
        assert percent_change(110_000_000, 99_000_000) == 100_000

    def test_zero_last_price(self) -> None:
        """A zero previous price yields no change."""
        assert percent_change(0, 100_000_000) == 0

    def test_saturates(self) -> None:
        """Huge relative moves clamp at U64_MAX."""
        assert percent_change(1, U64_MAX) == U64_MAX


class TestAnnualize:
    """Tests for annualize."""

    def test_scales(self) -> None:
        """Per-period volatility is multiplied by 1.5874."""
        assert annualize(100_000) == 158_740
        assert annualize(1_000_000) == 1_587_400

    def test_saturates(self) -> None:
        """Products above u64 clamp to U64_MAX."""
        assert annualize(U64_MAX) == U64_MAX
        assert annualize(U64_MAX // 15874 + 1) == U64_MAX
        assert annualize(U64_MAX // 15874) < U64_MAX


class TestUpdateStats:
    """Tests for update_stats."""

    def test_first_tick(self) -> None:
        """The first tick only records the price."""
        stats = update_stats(VolatilityStats.empty(), 100_000_000)
        assert stats == VolatilityStats(last_price_u6=100_000_000, count=1)

    def test_first_tick_zero_price(self) -> None:
        """A zero first price is accepted."""
        stats = update_stats(VolatilityStats.empty(), 0)
        assert stats.count == 1
        assert stats.last_price_u6 == 0
        assert stats.ann_vol_fp == 0

    def test_two_ticks(self) -> None:
        """A 10% move produces the documented figures."""
        stats = fold([100_000_000, 110_000_000])

        assert stats.last_price_u6 == 110_000_000
        assert stats.count == 2
        assert stats.mean_fp == 50_000
        assert stats.m2_fp == 10_000_000_000
        assert stats.ann_vol_fp == 158_740

    def test_three_ticks(self) -> None:
        """The accumulator sums squared changes, not deviations."""
        stats = fold([100_000_000, 110_000_000, 104_500_000])

        assert stats.count == 3
        assert stats.mean_fp == 50_000 + 50_000 // 3
        assert stats.m2_fp == 10_000_000_000 + 2_500_000_000
        assert stats.ann_vol_fp == annualize(sqrt_fp(12_500_000_000 // 2))

    def test_zero_last_price_contributes_nothing(self) -> None:
        """A tick after a zero price adds no change."""
        stats = fold([0, 100_000_000])

        assert stats.count == 2
        assert stats.mean_fp == 0
        assert stats.m2_fp == 0
        assert stats.ann_vol_fp == 0
        assert stats.last_price_u6 == 100_000_000

    def test_flat_prices(self) -> None:
        """Unchanged prices give zero volatility."""
        stats = fold([5_000_000] * 10)
        assert stats.count == 10
        assert stats.ann_vol_fp == 0

    def test_input_not_mutated(self) -> None:
        """Updates return a new snapshot."""
        before = fold([100_000_000])
        after = update_stats(before, 110_000_000)
        assert before.count == 1
        assert after is not before

    def test_extreme_move_hits_variance_ceiling(self) -> None:
        """A jump from 1 to U64_MAX saturates and clamps the variance."""
        stats = fold([1, U64_MAX])

        assert stats.count == 2
        assert stats.mean_fp == U64_MAX // 2
        assert stats.m2_fp == U64_MAX * U64_MAX
        assert stats.ann_vol_fp == 1_587_400

    def test_m2_saturates(self) -> None:
        """The u128 accumulator clamps at its maximum."""
        stats = VolatilityStats(
            last_price_u6=1, mean_fp=0, m2_fp=U128_MAX - 5, count=10, ann_vol_fp=0
        )
        updated = update_stats(stats, U64_MAX)
        assert updated.m2_fp == U128_MAX
        assert updated.count == 11

    def test_mean_saturates(self) -> None:
        """The u64 mean clamps at its maximum."""
        stats = VolatilityStats(last_price_u6=1, mean_fp=U64_MAX - 1, count=1)
        updated = update_stats(stats, U64_MAX)
        assert updated.mean_fp == U64_MAX

    def test_count_saturates(self) -> None:
        """The tick counter clamps at its maximum."""
        stats = VolatilityStats(last_price_u6=100, count=U64_MAX)
        updated = update_stats(stats, 100)
        assert updated.count == U64_MAX

    def test_random_extremes_never_fail(self) -> None:
        """Arbitrary u64 prices always produce in-range stats."""
        rng = random.Random(42)
        choices = [0, 1, 2, U64_MAX, U64_MAX - 1]

        stats = VolatilityStats.empty()
        for i in range(500):
            if rng.random() < 0.5:
                price = rng.choice(choices)
            else:
                price = rng.randint(0, U64_MAX)
            stats = update_stats(stats, price)
            assert stats.count == i + 1
            assert stats.last_price_u6 == price
            assert 0 <= stats.m2_fp <= U128_MAX
            assert 0 <= stats.ann_vol_fp <= U64_MAX
            assert 0 <= stats.mean_fp <= U64_MAX


class TestVolatilityEstimator:
    """Tests for VolatilityEstimator."""

    def test_initial_state(self) -> None:
        """A new estimator holds empty stats."""
        estimator = VolatilityEstimator("s1")
        assert estimator.stats_id == "s1"
        assert estimator.stats.is_empty()
        assert estimator.sample_count == 0
        assert not estimator.is_ready()

    def test_update(self) -> None:
        """Updates replace the held snapshot."""
        estimator = VolatilityEstimator("s1")
        estimator.update(100_000_000)
        assert not estimator.is_ready()

        stats = estimator.update(110_000_000)
        assert estimator.is_ready()
        assert estimator.stats == stats
        assert estimator.get_volatility() == 158_740

    def test_resume_from_stats(self) -> None:
        """An estimator can resume from persisted stats."""
        existing = fold([100_000_000, 110_000_000])
        estimator = VolatilityEstimator("s1", stats=existing)
        assert estimator.sample_count == 2
        assert estimator.get_volatility() == 158_740

    def test_reset(self) -> None:
        """Reset discards all observations."""
        estimator = VolatilityEstimator("s1")
        estimator.update(100_000_000)
        estimator.update(110_000_000)
        estimator.reset()
        assert estimator.stats.is_empty()

    def test_publishes_event(
        self, dispatcher: EventDispatcher, captured_events: list[Event]
    ) -> None:
        """Each update publishes the post-update snapshot."""
        estimator = VolatilityEstimator("s1", dispatcher=dispatcher)
        estimator.update(100_000_000)
        stats = estimator.update(110_000_000)

        assert len(captured_events) == 2
        event = captured_events[-1]
        assert isinstance(event, StatsUpdated)
        assert event.event_type == EventType.STATS_UPDATED
        assert event.stats_id == "s1"
        assert event.stats == stats
        assert event.payload()["ann_vol_fp"] == 158_740

    def test_failing_subscriber_does_not_block_update(self) -> None:
        """A raising subscriber never fails the update."""
        dispatcher = EventDispatcher()

        def explode(event: Event) -> None:
            raise RuntimeError("boom")

        dispatcher.subscribe(explode)
        estimator = VolatilityEstimator("s1", dispatcher=dispatcher)
        estimator.update(100_000_000)

        assert estimator.sample_count == 1
        assert dispatcher.failure_count == 1

    def test_rejects_out_of_range_price(self) -> None:
        """Prices outside u64 cannot form a snapshot."""
        estimator = VolatilityEstimator("s1")
        estimator.update(100)
        with pytest.raises(ValueError):
            estimator.update(U64_MAX + 1)

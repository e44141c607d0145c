"""Tests for oracle repository."""

import pytest

from surge_oracle.db.repository import OracleRepository
from surge_oracle.domain.stats import VolatilityStats
from surge_oracle.domain.types import U64_MAX, U128_MAX
from surge_oracle.swap.market import MarketState, settle


class TestOracleRepository:
    """Tests for OracleRepository."""

    @pytest.fixture
    def repo(self) -> OracleRepository:
        """Create repository with in-memory database."""
        return OracleRepository(db_url="sqlite:///:memory:")

    @pytest.fixture
    def sample_state(self) -> MarketState:
        """Create sample market state."""
        return MarketState(
            market_id="m1",
            asset="SUI",
            epoch=100,
            strike=500,
            timestamp=1_700_000_000,
            start_volatility=2000,
            vault_value=1500,
            long_supply=1000,
            short_supply=500,
            total_deposits=1500,
        )

    def test_save_and_get_stats(self, repo: OracleRepository) -> None:
        """Should round-trip stats, including u128 accumulators."""
        stats = VolatilityStats(
            last_price_u6=U64_MAX,
            mean_fp=U64_MAX // 2,
            m2_fp=U128_MAX,
            count=2,
            ann_vol_fp=1_587_400,
        )
        repo.save_stats("s1", "alice", stats)

        assert repo.get_stats("s1") == stats

    def test_get_stats_not_found(self, repo: OracleRepository) -> None:
        """Should return None for unknown stats."""
        assert repo.get_stats("missing") is None

    def test_save_stats_updates(self, repo: OracleRepository) -> None:
        """Should keep only the latest snapshot per stats ID."""
        repo.save_stats("s1", "alice", VolatilityStats.empty())
        latest = VolatilityStats(last_price_u6=100, count=1)
        repo.save_stats("s1", "alice", latest)

        all_stats = repo.get_all_stats()
        assert all_stats == [("s1", "alice", latest)]

    def test_save_and_get_market(
        self, repo: OracleRepository, sample_state: MarketState
    ) -> None:
        """Should round-trip market state."""
        repo.save_market(sample_state)

        assert repo.get_market("m1") == sample_state
        assert repo.get_markets() == [sample_state]
        assert repo.get_market("m2") is None

    def test_update_market(self, repo: OracleRepository, sample_state: MarketState) -> None:
        """Should overwrite mutable fields on save."""
        repo.save_market(sample_state)
        expired = MarketState(
            market_id="m1",
            asset="SUI",
            epoch=100,
            strike=500,
            timestamp=1_700_000_000,
            start_volatility=2000,
            vault_value=1000,
            long_supply=1000,
            short_supply=0,
            realized_variance=0,
            total_deposits=1500,
            is_expired=True,
        )
        repo.save_market(expired)

        assert repo.get_market("m1") == expired

    def test_redemptions(self, repo: OracleRepository) -> None:
        """Should store redemptions in order and sum payouts."""
        repo.save_redemption("m1", 1000, 0, settle(2510, 2000, 500, 1500, 1000, 0))
        repo.save_redemption("m1", 0, 500, settle(2510, 2000, 500, 1500, 0, 500))

        redemptions = repo.get_redemptions("m1")
        assert [r["payout"] for r in redemptions] == [100, 450]
        assert redemptions[0]["realized_variance"] == 510
        assert redemptions[1]["short_amount"] == 500
        assert repo.get_total_paid("m1") == 550
        assert repo.get_redemptions("m2") == []

"""Tests for the object store."""

import pytest

from surge_oracle.domain.errors import ObjectNotFoundError, UnauthorizedUpdateError
from surge_oracle.state.store import ObjectStore
from surge_oracle.swap.market import VarianceSwapMarket
from surge_oracle.volatility.estimator import VolatilityEstimator


class TestObjectStore:
    """Tests for ObjectStore."""

    @pytest.fixture
    def store(self) -> ObjectStore:
        store = ObjectStore()
        store.add_estimator(VolatilityEstimator("s1"), owner="alice")
        return store

    def test_new_ids_unique(self) -> None:
        """Allocated identifiers do not repeat."""
        assert len({ObjectStore.new_id() for _ in range(100)}) == 100

    def test_get_estimator(self, store: ObjectStore) -> None:
        """Registered estimators are returned with their owner."""
        assert store.get_estimator("s1").stats_id == "s1"
        assert store.get_owner("s1") == "alice"
        assert store.stats_ids == ["s1"]

    def test_duplicate_estimator(self, store: ObjectStore) -> None:
        """A stats ID can only be registered once."""
        with pytest.raises(ValueError):
            store.add_estimator(VolatilityEstimator("s1"), owner="bob")
        assert store.get_owner("s1") == "alice"

    def test_missing_estimator(self, store: ObjectStore) -> None:
        """Unknown stats IDs raise ObjectNotFoundError."""
        with pytest.raises(ObjectNotFoundError):
            store.get_estimator("missing")
        with pytest.raises(ObjectNotFoundError):
            store.get_owner("missing")

    def test_authorize_owner(self, store: ObjectStore) -> None:
        """The creator is authorized."""
        assert store.authorize_update("s1", "alice") is store.get_estimator("s1")

    def test_authorize_other_caller(self, store: ObjectStore) -> None:
        """Anyone else is rejected."""
        with pytest.raises(UnauthorizedUpdateError) as exc_info:
            store.authorize_update("s1", "bob")
        assert exc_info.value.caller == "bob"
        assert exc_info.value.owner == "alice"

    def test_markets(self, store: ObjectStore) -> None:
        """Markets are stored by ID."""
        market = VarianceSwapMarket("SUI", 10, 500, 0, 2000, market_id="m1")
        store.add_market(market)

        assert store.get_market("m1") is market
        assert store.market_ids == ["m1"]
        with pytest.raises(ValueError):
            store.add_market(market)
        with pytest.raises(ObjectNotFoundError):
            store.get_market("m2")

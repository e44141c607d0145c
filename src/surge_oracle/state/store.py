"""Object store for stats and markets.

Allocates identifiers, tracks which identity created each stats object,
and hands out the live estimator and market objects.
"""

from __future__ import annotations

import uuid

from surge_oracle.domain.errors import ObjectNotFoundError, UnauthorizedUpdateError
from surge_oracle.swap.market import VarianceSwapMarket
from surge_oracle.volatility.estimator import VolatilityEstimator


class ObjectStore:
    """Registry of live estimators and markets.

    Tracks:
    - Estimators by stats ID, with the identity that created each one
    - Markets by market ID

    Thread-safety: This class is NOT thread-safe. External synchronization
    is required if accessed from multiple threads.
    """

    def __init__(self) -> None:
        self._estimators: dict[str, VolatilityEstimator] = {}
        self._owners: dict[str, str] = {}
        self._markets: dict[str, VarianceSwapMarket] = {}

    @staticmethod
    def new_id() -> str:
        """Allocate a fresh object identifier."""
        return uuid.uuid4().hex

    @property
    def stats_ids(self) -> list[str]:
        """Return all registered stats IDs."""
        return list(self._estimators)

    @property
    def market_ids(self) -> list[str]:
        """Return all registered market IDs."""
        return list(self._markets)

    # --- Stats ---

    def add_estimator(self, estimator: VolatilityEstimator, owner: str) -> None:
        """Register an estimator and record its creator.

        Args:
            estimator: Estimator to register under its stats ID
            owner: Identity allowed to update it

        Raises:
            ValueError: If the stats ID is already registered
        """
        if estimator.stats_id in self._estimators:
            raise ValueError(f"Stats {estimator.stats_id} already registered")
        self._estimators[estimator.stats_id] = estimator
        self._owners[estimator.stats_id] = owner

    def get_estimator(self, stats_id: str) -> VolatilityEstimator:
        """Get the estimator for a stats ID.

        Raises:
            ObjectNotFoundError: If no such stats object exists
        """
        estimator = self._estimators.get(stats_id)
        if estimator is None:
            raise ObjectNotFoundError(stats_id)
        return estimator

    def get_owner(self, stats_id: str) -> str:
        """Get the identity that created a stats object.

        Raises:
            ObjectNotFoundError: If no such stats object exists
        """
        owner = self._owners.get(stats_id)
        if owner is None:
            raise ObjectNotFoundError(stats_id)
        return owner

    def authorize_update(self, stats_id: str, caller: str) -> VolatilityEstimator:
        """Return the estimator if ``caller`` created it.

        Args:
            stats_id: Stats object to update
            caller: Identity requesting the update

        Returns:
            The estimator

        Raises:
            ObjectNotFoundError: If no such stats object exists
            UnauthorizedUpdateError: If caller is not the creator
        """
        estimator = self.get_estimator(stats_id)
        owner = self._owners[stats_id]
        if caller != owner:
            raise UnauthorizedUpdateError(
                f"{caller} may not update stats {stats_id}",
                caller=caller,
                owner=owner,
            )
        return estimator

    # --- Markets ---

    def add_market(self, market: VarianceSwapMarket) -> None:
        """Register a market under its market ID.

        Raises:
            ValueError: If the market ID is already registered
        """
        if market.market_id in self._markets:
            raise ValueError(f"Market {market.market_id} already registered")
        self._markets[market.market_id] = market

    def get_market(self, market_id: str) -> VarianceSwapMarket:
        """Get a market by ID.

        Raises:
            ObjectNotFoundError: If no such market exists
        """
        market = self._markets.get(market_id)
        if market is None:
            raise ObjectNotFoundError(market_id)
        return market

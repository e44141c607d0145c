"""Oracle controller.

Orchestrates the price feed guard, the object store, the volatility
estimators and the variance swap markets, and attaches the ambient
components (metrics, recording, persistence) around them.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from surge_oracle.core.config import MarketConfig, OracleConfig
from surge_oracle.core.dispatcher import EventDispatcher
from surge_oracle.db.repository import OracleRepository
from surge_oracle.domain.errors import ConfigurationError, OracleError, SettlementError
from surge_oracle.domain.stats import VolatilityStats
from surge_oracle.domain.types import PRICE_SCALE, STRIKE_SCALE, PriceUpdate, Side
from surge_oracle.monitoring.metrics import MetricsCollector
from surge_oracle.recording.events import RecordingEventType
from surge_oracle.recording.recorder import SessionRecorder
from surge_oracle.state.store import ObjectStore
from surge_oracle.swap.balance import Balance
from surge_oracle.swap.market import TokenPair, VarianceSwapMarket
from surge_oracle.volatility.estimator import VolatilityEstimator
from surge_oracle.volatility.feed import PriceFeedGuard

logger = logging.getLogger(__name__)


class OracleController:
    """Main oracle controller.

    Manages the lifecycle of one oracle session:
    1. Validate price updates against the configured feed
    2. Check the caller created the stats object being updated
    3. Fold the price into the estimator
    4. Mint and redeem against variance swap markets
    5. Publish notifications to recorder and metrics
    6. Persist state when a database is configured

    Thread-safety: This class is NOT thread-safe. Calls touching the same
    stats object or market must be serialized by the caller.
    """

    def __init__(
        self,
        config: OracleConfig,
        metrics: MetricsCollector | None = None,
        repository: OracleRepository | None = None,
        recorder: SessionRecorder | None = None,
    ) -> None:
        """Initialize the oracle controller.

        Args:
            config: Oracle configuration
            metrics: Metrics collector (created from config if not given)
            repository: Repository (created from config if not given and
                the database is enabled)
            recorder: Session recorder (created from config if not given
                and recording is enabled)
        """
        self._config = config
        self._dispatcher = EventDispatcher()
        self._store = ObjectStore()
        self._guard = PriceFeedGuard(
            config.feed.feed_id,
            max_age_seconds=config.feed.max_age_seconds,
        )

        self._metrics = metrics or MetricsCollector(
            prefix=config.metrics.prefix,
            enabled=config.metrics.enabled,
        )

        self._repository = repository
        if self._repository is None and config.database.enabled:
            self._repository = OracleRepository(db_url=config.database.url)

        self._recorder = recorder
        if self._recorder is None and config.recording.enabled:
            self._recorder = SessionRecorder(
                output_dir=config.recording.output_dir,
                flush_interval=config.recording.flush_interval,
            )
        if self._recorder is not None:
            self._recorder.start(config=config.model_dump(mode="json"))
            self._dispatcher.subscribe(self._recorder.handle_event)

        if self._repository is not None:
            self._restore()

        for market_config in config.markets:
            if market_config.market_id and self._has_market(market_config.market_id):
                continue
            self.create_market(market_config)

    # --- Properties ---

    @property
    def config(self) -> OracleConfig:
        return self._config

    @property
    def dispatcher(self) -> EventDispatcher:
        """Return the event dispatcher, for additional subscribers."""
        return self._dispatcher

    @property
    def store(self) -> ObjectStore:
        return self._store

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def repository(self) -> OracleRepository | None:
        return self._repository

    @property
    def recorder(self) -> SessionRecorder | None:
        return self._recorder

    # --- Stats ---

    def create_stats(self, owner: str, stats_id: str | None = None) -> str:
        """Create an empty stats object owned by ``owner``.

        Args:
            owner: Identity allowed to submit prices to it
            stats_id: Identifier (allocated if not given)

        Returns:
            The stats ID
        """
        stats_id = stats_id or self._store.new_id()
        estimator = VolatilityEstimator(stats_id, dispatcher=self._dispatcher)
        self._store.add_estimator(estimator, owner)

        if self._repository is not None:
            self._repository.save_stats(stats_id, owner, estimator.stats)

        logger.info(f"Created stats {stats_id} for {owner}")
        return stats_id

    def get_stats(self, stats_id: str) -> VolatilityStats:
        """Return the current stats snapshot."""
        return self._store.get_estimator(stats_id).stats

    def submit_price(
        self,
        stats_id: str,
        caller: str,
        update: PriceUpdate,
        now: int,
    ) -> VolatilityStats:
        """Validate a price update and fold it into a stats object.

        Args:
            stats_id: Stats object to update
            caller: Identity submitting the update
            update: Verified price update
            now: Current unix time in seconds

        Returns:
            Updated stats

        Raises:
            ConfigurationError: If no feed is configured
            ObjectNotFoundError: If the stats object doesn't exist
            UnauthorizedUpdateError: If caller did not create the stats object
            FeedMismatchError: If the update is from another feed
            StalePriceError: If the update is too old
        """
        if not self._guard.feed_id:
            raise ConfigurationError("No price feed configured", field="feed.feed_id")

        try:
            estimator = self._store.authorize_update(stats_id, caller)
            self._guard.check(update, now)
        except OracleError as e:
            reason = type(e).__name__
            logger.warning(f"Rejected price for {stats_id}: {e}")
            self._metrics.inc_price_rejections(reason)
            if self._recorder is not None:
                self._recorder.record_rejection(
                    RecordingEventType.PRICE_REJECTED, stats_id, e
                )
            raise

        with self._metrics.time_update():
            stats = estimator.update(update.price_u6)

        self._metrics.inc_price_updates(stats_id)
        self._metrics.set_stats(
            stats_id, float(stats.annualized_volatility()), stats.count
        )
        self._metrics.set_notification_failures(self._dispatcher.failure_count)

        if self._repository is not None:
            self._repository.save_stats(stats_id, caller, stats)

        return stats

    def settlement_volatility(self, stats_id: str) -> int:
        """Return a stats object's annualized volatility at strike scale.

        Converts the 6-decimal estimator output to the 2-decimal scale
        used by strike and start volatility.
        """
        ann_vol = self.get_stats(stats_id).ann_vol_fp
        return ann_vol * STRIKE_SCALE // PRICE_SCALE

    # --- Markets ---

    def create_market(self, market_config: MarketConfig) -> VarianceSwapMarket:
        """Create and register a market.

        Args:
            market_config: Market parameters

        Returns:
            The new market
        """
        market = VarianceSwapMarket(
            asset=market_config.asset,
            epoch=market_config.epoch,
            strike=market_config.strike,
            timestamp=market_config.timestamp,
            start_volatility=market_config.start_volatility,
            market_id=market_config.market_id,
            dispatcher=self._dispatcher,
        )
        self._store.add_market(market)
        self._save_market(market)

        logger.info(
            f"Created market {market.market_id}: strike={market.strike} "
            f"expiry={market.expiry_boundary}"
        )
        return market

    def get_market(self, market_id: str) -> VarianceSwapMarket:
        """Return a registered market."""
        return self._store.get_market(market_id)

    def mint(
        self,
        market_id: str,
        amount: int,
        want_long: bool,
        payment: Balance,
        now: int,
    ) -> TokenPair:
        """Mint claim tokens against a market.

        Raises:
            ObjectNotFoundError: If the market doesn't exist
            SettlementError: If the market rejects the mint
        """
        market = self._store.get_market(market_id)
        try:
            pair = market.mint(amount, want_long, payment, now)
        except SettlementError as e:
            logger.warning(f"Rejected mint on {market_id}: {e}")
            self._metrics.inc_settlement_rejections("mint", type(e).__name__)
            self._record_settlement_rejection(market_id, e)
            raise

        self._metrics.inc_mints(market_id, Side.from_flag(want_long).value)
        self._metrics.set_market(market_id, market.total_deposits, market.vault_value)
        self._save_market(market)
        return pair

    def redeem(
        self,
        market_id: str,
        pair: TokenPair,
        realized_volatility: int,
        now: int,
    ) -> Balance:
        """Redeem a token pair against a market.

        Raises:
            ObjectNotFoundError: If the market doesn't exist
            SettlementError: If the market rejects the redemption
        """
        market = self._store.get_market(market_id)
        long_amount = pair.long_amount
        short_amount = pair.short_amount
        try:
            settlement = market.quote(pair, realized_volatility)
            payout = market.redeem(pair, realized_volatility, now)
        except SettlementError as e:
            logger.warning(f"Rejected redemption on {market_id}: {e}")
            self._metrics.inc_settlement_rejections("redeem", type(e).__name__)
            self._record_settlement_rejection(market_id, e)
            raise

        self._metrics.add_redemption(market_id, payout.value)
        self._metrics.set_market(market_id, market.total_deposits, market.vault_value)
        self._save_market(market)
        if self._repository is not None:
            self._repository.save_redemption(
                market_id, long_amount, short_amount, settlement
            )
        return payout

    def _record_settlement_rejection(self, market_id: str, error: SettlementError) -> None:
        if self._recorder is not None:
            self._recorder.record_rejection(
                RecordingEventType.SETTLEMENT_REJECTED, market_id, error
            )

    # --- Lifecycle ---

    def summary(self) -> dict[str, Any]:
        """Return a summary of all stats objects and markets."""
        return {
            "stats": {
                stats_id: self._store.get_estimator(stats_id).stats.to_dict()
                for stats_id in self._store.stats_ids
            },
            "markets": {
                market_id: asdict(self._store.get_market(market_id).snapshot())
                for market_id in self._store.market_ids
            },
            "notifications": {
                "published": self._dispatcher.published_count,
                "failed": self._dispatcher.failure_count,
            },
        }

    def close(self) -> None:
        """Stop recording and release the database."""
        if self._recorder is not None:
            self._recorder.stop()
        if self._repository is not None:
            self._repository.close()
        logger.info("Oracle controller closed")

    def __enter__(self) -> OracleController:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _has_market(self, market_id: str) -> bool:
        return market_id in self._store.market_ids

    def _save_market(self, market: VarianceSwapMarket) -> None:
        if self._repository is not None:
            self._repository.save_market(market.snapshot())

    def _restore(self) -> None:
        """Load persisted stats objects and markets into the store."""
        if self._repository is None:
            return

        for stats_id, owner, stats in self._repository.get_all_stats():
            estimator = VolatilityEstimator(
                stats_id, dispatcher=self._dispatcher, stats=stats
            )
            self._store.add_estimator(estimator, owner)

        for state in self._repository.get_markets():
            market = VarianceSwapMarket.from_state(state, dispatcher=self._dispatcher)
            self._store.add_market(market)

        logger.info(
            f"Restored {len(self._store.stats_ids)} stats objects and "
            f"{len(self._store.market_ids)} markets"
        )

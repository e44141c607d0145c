"""Repository for oracle data access.

Provides a clean interface for persisting and querying stats snapshots,
market state and redemptions.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from surge_oracle.db.models import Base, MarketRecord, RedemptionRecord, StatsRecord
from surge_oracle.domain.stats import VolatilityStats
from surge_oracle.swap.market import MarketState, Settlement

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class OracleRepository:
    """Repository for persisting oracle data.

    Handles stats snapshots, market state and redemption history.
    Uses a session-per-operation pattern.
    """

    def __init__(self, db_url: str = "sqlite:///surge_oracle.db") -> None:
        """Initialize repository.

        Args:
            db_url: SQLAlchemy database URL
        """
        self._engine: Engine = create_engine(db_url, echo=False)
        self._session_factory = sessionmaker(bind=self._engine)

        # Create tables if they don't exist
        Base.metadata.create_all(self._engine)
        logger.info(f"Repository initialized at {db_url}")

    def _get_session(self) -> Session:
        """Create a new database session."""
        return self._session_factory()

    # --- Stats Operations ---

    def save_stats(self, stats_id: str, owner: str, stats: VolatilityStats) -> None:
        """Save or update the latest stats snapshot.

        Args:
            stats_id: Stats object identifier
            owner: Identity that created the stats object
            stats: Snapshot to persist
        """
        now = datetime.now(UTC)
        with self._get_session() as session:
            record = session.get(StatsRecord, stats_id)
            if record is None:
                record = StatsRecord(id=stats_id, owner=owner)
                session.add(record)
            record.last_price_u6 = str(stats.last_price_u6)
            record.mean_fp = str(stats.mean_fp)
            record.m2_fp = str(stats.m2_fp)
            record.count = str(stats.count)
            record.ann_vol_fp = str(stats.ann_vol_fp)
            record.updated_at = now
            session.commit()

    def get_stats(self, stats_id: str) -> VolatilityStats | None:
        """Get the latest stats snapshot.

        Args:
            stats_id: Stats object identifier

        Returns:
            VolatilityStats or None if not found
        """
        with self._get_session() as session:
            record = session.get(StatsRecord, stats_id)
            if record is None:
                return None
            return self._stats_from_record(record)

    def get_all_stats(self) -> list[tuple[str, str, VolatilityStats]]:
        """Get every persisted stats snapshot.

        Returns:
            List of (stats_id, owner, stats) tuples
        """
        with self._get_session() as session:
            records = session.execute(select(StatsRecord)).scalars().all()
            return [(r.id, r.owner, self._stats_from_record(r)) for r in records]

    def _stats_from_record(self, record: StatsRecord) -> VolatilityStats:
        """Convert database record to domain VolatilityStats."""
        return VolatilityStats(
            last_price_u6=int(record.last_price_u6),
            mean_fp=int(record.mean_fp),
            m2_fp=int(record.m2_fp),
            count=int(record.count),
            ann_vol_fp=int(record.ann_vol_fp),
        )

    # --- Market Operations ---

    def save_market(self, state: MarketState) -> None:
        """Save or update market state.

        Args:
            state: Market snapshot to persist
        """
        now = datetime.now(UTC)
        with self._get_session() as session:
            record = session.get(MarketRecord, state.market_id)
            if record is None:
                record = MarketRecord(
                    id=state.market_id,
                    asset=state.asset,
                    epoch=str(state.epoch),
                    strike=str(state.strike),
                    timestamp=str(state.timestamp),
                    start_volatility=str(state.start_volatility),
                )
                session.add(record)
            record.vault_value = str(state.vault_value)
            record.long_supply = str(state.long_supply)
            record.short_supply = str(state.short_supply)
            record.realized_variance = str(state.realized_variance)
            record.total_deposits = str(state.total_deposits)
            record.is_expired = state.is_expired
            record.updated_at = now
            session.commit()

    def get_market(self, market_id: str) -> MarketState | None:
        """Get market state by ID.

        Args:
            market_id: Market ID

        Returns:
            MarketState or None if not found
        """
        with self._get_session() as session:
            record = session.get(MarketRecord, market_id)
            if record is None:
                return None
            return self._market_from_record(record)

    def get_markets(self) -> list[MarketState]:
        """Get all persisted markets."""
        with self._get_session() as session:
            records = session.execute(select(MarketRecord)).scalars().all()
            return [self._market_from_record(r) for r in records]

    def _market_from_record(self, record: MarketRecord) -> MarketState:
        """Convert database record to domain MarketState."""
        return MarketState(
            market_id=record.id,
            asset=record.asset,
            epoch=int(record.epoch),
            strike=int(record.strike),
            timestamp=int(record.timestamp),
            start_volatility=int(record.start_volatility),
            vault_value=int(record.vault_value),
            long_supply=int(record.long_supply),
            short_supply=int(record.short_supply),
            realized_variance=int(record.realized_variance),
            total_deposits=int(record.total_deposits),
            is_expired=record.is_expired,
        )

    # --- Redemption Operations ---

    def save_redemption(
        self,
        market_id: str,
        long_amount: int,
        short_amount: int,
        settlement: Settlement,
    ) -> None:
        """Append a redemption record.

        Args:
            market_id: Market the pair was redeemed against
            long_amount: LONG tokens burned
            short_amount: SHORT tokens burned
            settlement: Computed settlement
        """
        with self._get_session() as session:
            record = RedemptionRecord(
                market_id=market_id,
                long_amount=str(long_amount),
                short_amount=str(short_amount),
                realized_variance=str(settlement.realized_variance),
                long_bucket_payout=str(settlement.long_bucket_payout),
                short_bucket_payout=str(settlement.short_bucket_payout),
                payout=str(settlement.payout),
                timestamp=datetime.now(UTC),
            )
            session.add(record)
            session.commit()

    def get_redemptions(self, market_id: str) -> list[dict[str, Any]]:
        """Get redemption history for a market.

        Args:
            market_id: Market ID

        Returns:
            List of redemption dicts, oldest first
        """
        with self._get_session() as session:
            stmt = (
                select(RedemptionRecord)
                .where(RedemptionRecord.market_id == market_id)
                .order_by(RedemptionRecord.id)
            )
            records = session.execute(stmt).scalars().all()
            return [
                {
                    "timestamp": r.timestamp,
                    "long_amount": int(r.long_amount),
                    "short_amount": int(r.short_amount),
                    "realized_variance": int(r.realized_variance),
                    "long_bucket_payout": int(r.long_bucket_payout),
                    "short_bucket_payout": int(r.short_bucket_payout),
                    "payout": int(r.payout),
                }
                for r in records
            ]

    def get_total_paid(self, market_id: str) -> int:
        """Return the sum of all payouts made by a market."""
        return sum(r["payout"] for r in self.get_redemptions(market_id))

    # --- Utility Methods ---

    def close(self) -> None:
        """Close database connection."""
        self._engine.dispose()
        logger.info("Repository closed")

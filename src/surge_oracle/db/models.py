"""SQLAlchemy models for oracle data persistence.

Stores stats snapshots, market state and redemptions in SQLite.
Unsigned 64/128-bit values exceed SQLite's signed INTEGER range, so
they are stored as decimal strings.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Wide enough for U128_MAX in decimal
UINT_DIGITS = 40


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class StatsRecord(Base):
    """Persisted volatility stats snapshot (latest per stats ID)."""

    __tablename__ = "volatility_stats"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    owner: Mapped[str] = mapped_column(String(128), index=True)
    last_price_u6: Mapped[str] = mapped_column(String(UINT_DIGITS))
    mean_fp: Mapped[str] = mapped_column(String(UINT_DIGITS))
    m2_fp: Mapped[str] = mapped_column(String(UINT_DIGITS))
    count: Mapped[str] = mapped_column(String(UINT_DIGITS))
    ann_vol_fp: Mapped[str] = mapped_column(String(UINT_DIGITS))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return (
            f"StatsRecord(id={self.id!r}, count={self.count}, "
            f"ann_vol={self.ann_vol_fp})"
        )


class MarketRecord(Base):
    """Persisted variance swap market state."""

    __tablename__ = "markets"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    asset: Mapped[str] = mapped_column(String(64))
    epoch: Mapped[str] = mapped_column(String(UINT_DIGITS))
    strike: Mapped[str] = mapped_column(String(UINT_DIGITS))
    timestamp: Mapped[str] = mapped_column(String(UINT_DIGITS))
    start_volatility: Mapped[str] = mapped_column(String(UINT_DIGITS))
    vault_value: Mapped[str] = mapped_column(String(UINT_DIGITS))
    long_supply: Mapped[str] = mapped_column(String(UINT_DIGITS))
    short_supply: Mapped[str] = mapped_column(String(UINT_DIGITS))
    realized_variance: Mapped[str] = mapped_column(String(UINT_DIGITS))
    total_deposits: Mapped[str] = mapped_column(String(UINT_DIGITS))
    is_expired: Mapped[bool] = mapped_column(default=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return (
            f"MarketRecord(id={self.id!r}, strike={self.strike}, "
            f"deposits={self.total_deposits}, expired={self.is_expired})"
        )


class RedemptionRecord(Base):
    """Persisted redemption of one token pair."""

    __tablename__ = "redemptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    market_id: Mapped[str] = mapped_column(String(64), index=True)
    long_amount: Mapped[str] = mapped_column(String(UINT_DIGITS))
    short_amount: Mapped[str] = mapped_column(String(UINT_DIGITS))
    realized_variance: Mapped[str] = mapped_column(String(UINT_DIGITS))
    long_bucket_payout: Mapped[str] = mapped_column(String(UINT_DIGITS))
    short_bucket_payout: Mapped[str] = mapped_column(String(UINT_DIGITS))
    payout: Mapped[str] = mapped_column(String(UINT_DIGITS))
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)

    def __repr__(self) -> str:
        return (
            f"RedemptionRecord(market={self.market_id!r}, payout={self.payout}, "
            f"timestamp={self.timestamp})"
        )

"""Database module.

Provides SQLite persistence for stats snapshots, markets and redemptions.
"""

from surge_oracle.db.models import Base, MarketRecord, RedemptionRecord, StatsRecord
from surge_oracle.db.repository import OracleRepository

__all__ = [
    "Base",
    "MarketRecord",
    "OracleRepository",
    "RedemptionRecord",
    "StatsRecord",
]

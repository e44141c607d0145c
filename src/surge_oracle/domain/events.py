"""Domain event types.

Events are read-only snapshots published after each successful
operation. They are used for observability only: delivery is
fire-and-forget and never affects the state they describe.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic.dataclasses import dataclass

from surge_oracle.domain.stats import VolatilityStats
from surge_oracle.domain.types import Side


class EventType(str, Enum):
    """Types of events in the system."""

    STATS_UPDATED = "stats_updated"
    TOKENS_MINTED = "tokens_minted"
    MARKET_REDEEMED = "market_redeemed"


@dataclass(frozen=True)
class Event:
    """Base class for all events.

    All events have a type and timestamp.
    """

    event_type: EventType
    timestamp: datetime

    def payload(self) -> dict[str, Any]:
        """Return the event-specific fields as a dictionary."""
        return {}


@dataclass(frozen=True)
class StatsUpdated(Event):
    """Emitted after a price tick has been folded into a stats object."""

    stats_id: str
    stats: VolatilityStats

    def payload(self) -> dict[str, Any]:
        return {"stats_id": self.stats_id, **self.stats.to_dict()}


@dataclass(frozen=True)
class TokensMinted(Event):
    """Emitted after a deposit has been converted into claim tokens.

    Carries the running deposit total of the market after the mint.
    """

    market_id: str
    side: Side
    amount: int
    total_deposits: int
    long_supply: int
    short_supply: int

    def payload(self) -> dict[str, Any]:
        return {
            "market_id": self.market_id,
            "side": self.side.value,
            "amount": self.amount,
            "total_deposits": self.total_deposits,
            "long_supply": self.long_supply,
            "short_supply": self.short_supply,
        }


@dataclass(frozen=True)
class MarketRedeemed(Event):
    """Emitted after a token pair has been redeemed for its payout."""

    market_id: str
    realized_variance: int
    strike: int
    long_bucket_payout: int
    short_bucket_payout: int
    total_deposits: int
    payout: int

    def payload(self) -> dict[str, Any]:
        return {
            "market_id": self.market_id,
            "realized_variance": self.realized_variance,
            "strike": self.strike,
            "long_bucket_payout": self.long_bucket_payout,
            "short_bucket_payout": self.short_bucket_payout,
            "total_deposits": self.total_deposits,
            "payout": self.payout,
        }

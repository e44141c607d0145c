"""Recording event types.

Defines event types for session recording and replay.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class RecordingEventType(str, Enum):
    """Types of events that can be recorded."""

    # Domain notifications
    STATS_UPDATED = "stats_updated"
    TOKENS_MINTED = "tokens_minted"
    MARKET_REDEEMED = "market_redeemed"

    # Rejected inputs
    PRICE_REJECTED = "price_rejected"
    SETTLEMENT_REJECTED = "settlement_rejected"

    # Session markers
    SESSION_START = "session_start"
    SESSION_END = "session_end"


@dataclass(frozen=True)
class RecordingEvent:
    """Event for session recording.

    All notifications are recorded as events for replay and analysis.
    """

    event_type: RecordingEventType
    timestamp: datetime
    object_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "object_id": self.object_id,
            "data": self._serialize_data(self.data),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RecordingEvent:
        """Create from dictionary."""
        return cls(
            event_type=RecordingEventType(d["event_type"]),
            timestamp=datetime.fromisoformat(d["timestamp"]),
            object_id=d.get("object_id"),
            data=d.get("data", {}),
        )

    def _serialize_data(self, data: dict[str, Any]) -> dict[str, Any]:
        """Serialize data values for JSON."""
        result = {}
        for key, value in data.items():
            if isinstance(value, Decimal):
                result[key] = str(value)
            elif isinstance(value, datetime):
                result[key] = value.isoformat()
            elif isinstance(value, Enum):
                result[key] = value.value
            elif isinstance(value, dict):
                result[key] = self._serialize_data(value)
            else:
                result[key] = value
        return result

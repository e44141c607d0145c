"""Session recorder for oracle activity.

Every notification published by the controller, plus every price update
or settlement request it rejects, is appended to a gzip JSONL file named
after the session. SessionPlayer reads such a file back.
"""

from __future__ import annotations

import gzip
import json
import logging
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Iterator

from surge_oracle.domain.errors import OracleError
from surge_oracle.domain.events import (
    Event,
    MarketRedeemed,
    StatsUpdated,
    TokensMinted,
)
from surge_oracle.recording.events import RecordingEvent, RecordingEventType

logger = logging.getLogger(__name__)

# Notification class -> (recorded type, attribute naming the object)
_NOTIFICATIONS: dict[type[Event], tuple[RecordingEventType, str]] = {
    StatsUpdated: (RecordingEventType.STATS_UPDATED, "stats_id"),
    TokensMinted: (RecordingEventType.TOKENS_MINTED, "market_id"),
    MarketRedeemed: (RecordingEventType.MARKET_REDEEMED, "market_id"),
}

_REJECTIONS = frozenset(
    {RecordingEventType.PRICE_REJECTED, RecordingEventType.SETTLEMENT_REJECTED}
)


class SessionRecorder:
    """Appends one oracle session to a JSONL.gz file.

    Nothing is written outside start()/stop(). Use as a context manager
    or subscribe handle_event to an EventDispatcher.
    """

    def __init__(
        self,
        output_dir: str | Path = "recordings",
        session_id: str | None = None,
        flush_interval: int = 100,
    ) -> None:
        """Initialize recorder.

        Args:
            output_dir: Directory for session files, created if missing
            session_id: Session identifier (UTC start time if not given)
            flush_interval: Flush to disk every N lines
        """
        self._output_dir = Path(output_dir)
        self._output_dir.mkdir(parents=True, exist_ok=True)

        self._session_id = session_id or datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
        self._file_path = self._output_dir / f"session_{self._session_id}.jsonl.gz"

        self._file: Any = None
        self._line_count = 0
        self._flush_interval = flush_interval

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def event_count(self) -> int:
        """Lines written so far, session markers included."""
        return self._line_count

    @property
    def is_recording(self) -> bool:
        return self._file is not None

    def start(self, config: dict[str, Any] | None = None) -> None:
        """Open the session file and write the session start marker.

        Args:
            config: Configuration snapshot stored with the marker
        """
        if self.is_recording:
            return

        self._file = gzip.open(self._file_path, "at", encoding="utf-8")
        self._write(
            RecordingEventType.SESSION_START,
            datetime.now(UTC),
            data={"session_id": self._session_id, "config": config or {}},
        )
        logger.info(f"Recording started: {self._file_path}")

    def stop(self) -> None:
        """Write the session end marker and close the file."""
        if not self.is_recording:
            return

        self._write(
            RecordingEventType.SESSION_END,
            datetime.now(UTC),
            data={"session_id": self._session_id, "event_count": self._line_count},
        )
        self._file.close()
        self._file = None
        logger.info(f"Recording stopped: {self._line_count} events")

    def handle_event(self, event: Event) -> None:
        """Record a domain notification. Suitable as a dispatcher callback."""
        entry = _NOTIFICATIONS.get(type(event))
        if entry is None:
            logger.debug(f"Ignoring unrecorded event {event.event_type.value}")
            return

        event_type, id_attr = entry
        self._write(
            event_type,
            event.timestamp,
            object_id=getattr(event, id_attr),
            data=event.payload(),
        )

    def record_rejection(
        self,
        event_type: RecordingEventType,
        object_id: str,
        error: OracleError,
    ) -> None:
        """Record an input the controller refused.

        Args:
            event_type: PRICE_REJECTED or SETTLEMENT_REJECTED
            object_id: Stats or market the input targeted
            error: The raised error; its class name becomes the reason
        """
        if event_type not in _REJECTIONS:
            raise ValueError(f"{event_type.value} is not a rejection type")

        self._write(
            event_type,
            datetime.now(UTC),
            object_id=object_id,
            data={
                "reason": type(error).__name__,
                "message": str(error),
                "context": error.context,
            },
        )

    def _write(
        self,
        event_type: RecordingEventType,
        timestamp: datetime,
        object_id: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        if self._file is None:
            return

        event = RecordingEvent(
            event_type=event_type,
            timestamp=timestamp,
            object_id=object_id,
            data=data or {},
        )
        self._file.write(json.dumps(event.to_dict()) + "\n")
        self._line_count += 1

        if self._line_count % self._flush_interval == 0:
            self._file.flush()

    def __enter__(self) -> SessionRecorder:
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()


class SessionPlayer:
    """Reads a recorded session back in write order."""

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)

    def events(self) -> Iterator[RecordingEvent]:
        """Yield recorded events, skipping blank lines."""
        with gzip.open(self._file_path, "rt", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    yield RecordingEvent.from_dict(json.loads(line))

    def count_by_type(self) -> dict[str, int]:
        """Return the number of recorded events per event type value."""
        return dict(Counter(event.event_type.value for event in self.events()))

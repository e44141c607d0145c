"""Loader for recorded price ticks."""

from __future__ import annotations

import json
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from surge_oracle.domain.types import PriceUpdate, to_u6


class PriceTickLoader:
    """Loads recorded price ticks from JSON files.

    The file format is:

        {
            "feed_id": "0x...",
            "ticks": [
                {"price_u6": 100000000, "publish_time": 1700000000},
                {"price": "110.5", "publish_time": "2024-01-01T00:00:00Z"}
            ]
        }

    A tick carries either ``price_u6`` (fixed point) or ``price`` (real
    units). ``publish_time`` is unix seconds or an ISO timestamp. A tick
    may override the file-level ``feed_id``.
    """

    def load_feed_id(self, file_path: str | Path) -> str:
        """Load just the feed identifier from a tick file.

        Args:
            file_path: Path to the tick JSON file

        Returns:
            Feed identifier
        """
        data = self._read(file_path)
        return str(data["feed_id"])

    def load_ticks(
        self,
        file_path: str | Path,
        start_tick: int = 0,
        end_tick: int | None = None,
    ) -> Iterator[PriceUpdate]:
        """Load ticks from a tick file.

        Args:
            file_path: Path to the tick JSON file
            start_tick: First tick to return (0-indexed)
            end_tick: Last tick to return (exclusive), None for all

        Yields:
            PriceUpdate objects in file order
        """
        data = self._read(file_path)
        feed_id = str(data.get("feed_id", ""))

        for i, tick_data in enumerate(data.get("ticks", [])):
            if i < start_tick:
                continue
            if end_tick is not None and i >= end_tick:
                break

            yield self._parse_tick(tick_data, feed_id)

    def _read(self, file_path: str | Path) -> dict[str, Any]:
        with open(file_path) as f:
            data: dict[str, Any] = json.load(f)
        return data

    def _parse_tick(self, tick_data: dict[str, Any], feed_id: str) -> PriceUpdate:
        """Parse a tick from JSON data.

        Args:
            tick_data: Raw tick dictionary
            feed_id: File-level feed identifier

        Returns:
            PriceUpdate object
        """
        if "price_u6" in tick_data:
            price_u6 = int(tick_data["price_u6"])
        else:
            price_u6 = to_u6(str(tick_data["price"]))

        return PriceUpdate(
            feed_id=str(tick_data.get("feed_id", feed_id)),
            price_u6=price_u6,
            publish_time=self._parse_timestamp(tick_data["publish_time"]),
        )

    def _parse_timestamp(self, value: int | str) -> int:
        """Parse unix seconds or an ISO format timestamp.

        Args:
            value: Unix seconds or ISO format timestamp string

        Returns:
            Unix seconds
        """
        if isinstance(value, int):
            return value

        # Handle various ISO formats
        timestamp_str = value.replace("Z", "+00:00")
        dt = datetime.fromisoformat(timestamp_str)

        # Ensure UTC
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)

        return int(dt.timestamp())

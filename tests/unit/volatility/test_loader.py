"""Tests for the price tick loader."""

import json
from pathlib import Path

import pytest

from surge_oracle.volatility.loader import PriceTickLoader


class TestPriceTickLoader:
    """Tests for PriceTickLoader."""

    def test_load_feed_id(self, tick_file: Path, feed_id: str) -> None:
        """The file-level feed identifier is returned."""
        assert PriceTickLoader().load_feed_id(tick_file) == feed_id

    def test_load_ticks(self, tick_file: Path, feed_id: str) -> None:
        """Fixed point and real-unit prices are both accepted."""
        ticks = list(PriceTickLoader().load_ticks(tick_file))

        assert [t.price_u6 for t in ticks] == [100_000_000, 110_000_000, 104_500_000]
        assert all(t.feed_id == feed_id for t in ticks)

    def test_iso_timestamp(self, tick_file: Path) -> None:
        """ISO timestamps are converted to unix seconds."""
        ticks = list(PriceTickLoader().load_ticks(tick_file))
        assert ticks[2].publish_time == 1_700_000_120

    def test_tick_range(self, tick_file: Path) -> None:
        """start_tick and end_tick select a slice."""
        ticks = list(PriceTickLoader().load_ticks(tick_file, start_tick=1, end_tick=2))
        assert len(ticks) == 1
        assert ticks[0].price_u6 == 110_000_000

    def test_tick_feed_override(self, tmp_path: Path) -> None:
        """A tick may carry its own feed identifier."""
        path = tmp_path / "ticks.json"
        path.write_text(
            json.dumps(
                {
                    "feed_id": "0xaa",
                    "ticks": [
                        {"price_u6": 1, "publish_time": 1},
                        {"price_u6": 2, "publish_time": 2, "feed_id": "0xbb"},
                    ],
                }
            )
        )
        ticks = list(PriceTickLoader().load_ticks(path))
        assert [t.feed_id for t in ticks] == ["0xaa", "0xbb"]

    def test_empty_file(self, tmp_path: Path) -> None:
        """A file without ticks yields nothing."""
        path = tmp_path / "ticks.json"
        path.write_text(json.dumps({"feed_id": "0xaa"}))
        assert list(PriceTickLoader().load_ticks(path)) == []

    def test_missing_price_raises(self, tmp_path: Path) -> None:
        """A tick without a price is malformed."""
        path = tmp_path / "ticks.json"
        path.write_text(json.dumps({"feed_id": "0xaa", "ticks": [{"publish_time": 1}]}))
        with pytest.raises(KeyError):
            list(PriceTickLoader().load_ticks(path))

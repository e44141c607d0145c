"""Pytest configuration and shared fixtures."""

import json
from collections.abc import Iterator
from pathlib import Path

import pytest

from surge_oracle.core.config import OracleConfig
from surge_oracle.core.controller import OracleController
from surge_oracle.core.dispatcher import EventDispatcher
from surge_oracle.domain.events import Event
from surge_oracle.monitoring.metrics import MetricsCollector

SUI_USD_FEED = "0x23d7315113f5b1d3ba7a83604c44b94d79f4fd69af77f804fc7f920a6dc65744"


@pytest.fixture
def feed_id() -> str:
    """Configured price feed identifier."""
    return SUI_USD_FEED


@pytest.fixture
def captured_events() -> list[Event]:
    """List that collects events published to the ``dispatcher`` fixture."""
    return []


@pytest.fixture
def dispatcher(captured_events: list[Event]) -> EventDispatcher:
    """Dispatcher that appends every event to ``captured_events``."""
    d = EventDispatcher()
    d.subscribe(captured_events.append)
    return d


@pytest.fixture
def oracle_config(feed_id: str) -> OracleConfig:
    """Configuration with one feed and one market, no I/O components."""
    return OracleConfig.from_dict(
        {
            "feed": {"feed_id": feed_id, "max_age_seconds": 60},
            "markets": [
                {
                    "market_id": "sui-vol",
                    "asset": "SUI",
                    "epoch": 100,
                    "strike": 500,
                    "timestamp": 1_700_000_000,
                    "start_volatility": 2000,
                }
            ],
        }
    )


@pytest.fixture
def controller(oracle_config: OracleConfig) -> Iterator[OracleController]:
    """Controller with its own metrics registry."""
    ctrl = OracleController(oracle_config, metrics=MetricsCollector())
    yield ctrl
    ctrl.close()


@pytest.fixture
def tick_file(tmp_path: Path, feed_id: str) -> Path:
    """Tick file with a 10% up-move followed by a 5% down-move."""
    path = tmp_path / "ticks.json"
    path.write_text(
        json.dumps(
            {
                "feed_id": feed_id,
                "ticks": [
                    {"price_u6": 100_000_000, "publish_time": 1_700_000_000},
                    {"price_u6": 110_000_000, "publish_time": 1_700_000_060},
                    {"price": "104.5", "publish_time": "2023-11-14T22:15:20Z"},
                ],
            }
        )
    )
    return path

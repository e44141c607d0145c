"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from surge_oracle.core.config import MarketConfig, OracleConfig, load_config
from surge_oracle.domain.types import U64_MAX


class TestOracleConfig:
    """Tests for OracleConfig."""

    def test_defaults(self) -> None:
        """An empty config is valid."""
        config = OracleConfig()
        assert config.feed.feed_id == ""
        assert config.feed.max_age_seconds == 60
        assert config.markets == []
        assert not config.recording.enabled
        assert not config.database.enabled
        assert config.metrics.prefix == "surge_oracle"
        assert config.log_level == "INFO"

    def test_from_dict(self, oracle_config: OracleConfig, feed_id: str) -> None:
        """Nested sections are parsed."""
        assert oracle_config.feed.feed_id == feed_id
        assert len(oracle_config.markets) == 1
        market = oracle_config.markets[0]
        assert market.market_id == "sui-vol"
        assert market.strike == 500
        assert market.start_volatility == 2000

    def test_yaml_round_trip(self, oracle_config: OracleConfig, tmp_path: Path) -> None:
        """to_yaml output loads back to an equal config."""
        path = tmp_path / "nested" / "oracle.yaml"
        oracle_config.to_yaml(path)
        assert OracleConfig.from_yaml(path) == oracle_config

    def test_from_yaml_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            OracleConfig.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields the defaults."""
        path = tmp_path / "oracle.yaml"
        path.write_text("")
        assert OracleConfig.from_yaml(path) == OracleConfig()

    def test_market_requires_epoch_and_strike(self) -> None:
        """Markets must name their epoch and strike."""
        with pytest.raises(ValidationError):
            MarketConfig.model_validate({"asset": "SUI"})

    def test_market_rejects_out_of_range(self) -> None:
        """Market parameters are unsigned 64-bit."""
        with pytest.raises(ValidationError):
            MarketConfig(epoch=1, strike=U64_MAX + 1)
        with pytest.raises(ValidationError):
            MarketConfig(epoch=-1, strike=1)


class TestLoadConfig:
    """Tests for load_config."""

    def test_explicit_path(self, oracle_config: OracleConfig, tmp_path: Path) -> None:
        """An explicit path is loaded."""
        path = tmp_path / "custom.yaml"
        oracle_config.to_yaml(path)
        assert load_config(path) == oracle_config

    def test_default_location(
        self, oracle_config: OracleConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """./config/oracle.yaml is picked up when present."""
        oracle_config.to_yaml(tmp_path / "config" / "oracle.yaml")
        monkeypatch.chdir(tmp_path)
        assert load_config() == oracle_config

    def test_fallback_to_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without any file the defaults are used."""
        monkeypatch.chdir(tmp_path)
        assert load_config() == OracleConfig()

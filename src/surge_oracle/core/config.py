"""Configuration models for the oracle application.

Loads and validates configuration from YAML files using pydantic.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from surge_oracle.domain.types import check_u64


class FeedConfig(BaseModel):
    """Price feed configuration."""

    feed_id: str = ""
    max_age_seconds: int = 60


class MarketConfig(BaseModel):
    """Variance swap market configuration.

    ``strike`` and ``start_volatility`` are 2-decimal fixed point.
    ``timestamp + epoch`` is the expiry boundary.
    """

    market_id: str | None = None
    asset: str = "SUI"
    epoch: int
    strike: int
    timestamp: int = 0
    start_volatility: int = 0

    @field_validator("epoch", "strike", "timestamp", "start_volatility")
    @classmethod
    def validate_u64(cls, v: int) -> int:
        """Ensure the value fits an unsigned 64-bit field."""
        return check_u64(v)


class RecordingConfig(BaseModel):
    """Event recording configuration."""

    enabled: bool = False
    output_dir: str = "./data/sessions"
    flush_interval: int = 100


class DatabaseConfig(BaseModel):
    """Persistence configuration."""

    enabled: bool = False
    url: str = "sqlite:///surge_oracle.db"


class MetricsConfig(BaseModel):
    """Prometheus metrics configuration."""

    enabled: bool = True
    prefix: str = "surge_oracle"


class OracleConfig(BaseModel):
    """Root configuration for the oracle application."""

    feed: FeedConfig = Field(default_factory=FeedConfig)
    markets: list[MarketConfig] = Field(default_factory=list)
    recording: RecordingConfig = Field(default_factory=RecordingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_yaml(cls, path: str | Path) -> OracleConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Validated OracleConfig

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValidationError: If the config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.model_validate(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OracleConfig:
        """Load configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Validated OracleConfig
        """
        return cls.model_validate(data)

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file.

        Args:
            path: Path to write the configuration
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)


def load_config(path: str | Path | None = None) -> OracleConfig:
    """Load oracle configuration.

    Looks for config in the following order:
    1. Provided path argument
    2. ./config/oracle.yaml
    3. ./oracle.yaml
    4. Default configuration

    Args:
        path: Optional explicit path to config file

    Returns:
        Validated OracleConfig
    """
    if path:
        return OracleConfig.from_yaml(path)

    default_paths = [
        Path("./config/oracle.yaml"),
        Path("./oracle.yaml"),
    ]

    for default_path in default_paths:
        if default_path.exists():
            return OracleConfig.from_yaml(default_path)

    return OracleConfig()

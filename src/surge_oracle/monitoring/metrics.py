"""Prometheus metrics for oracle monitoring.

Provides metrics for:
- Price ingestion (updates, rejections, volatility)
- Settlement (mints, deposits, redemptions, payouts)
- System health (latency, notification failures, errors)
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Collects and exposes Prometheus metrics.

    Each collector owns its registry, so several collectors can coexist
    in one process.
    """

    def __init__(
        self,
        prefix: str = "surge_oracle",
        registry: CollectorRegistry | None = None,
        enabled: bool = True,
    ) -> None:
        """Initialize metrics collector.

        Args:
            prefix: Metric name prefix
            registry: Registry to register metrics in (new one if not given)
            enabled: If False, every recording call is a no-op
        """
        self._prefix = prefix
        self._enabled = enabled
        self._registry = registry or CollectorRegistry()

        # Info metrics
        self._info = Info(
            f"{prefix}_info",
            "Oracle information",
            registry=self._registry,
        )

        # Price metrics
        self._price_updates = Counter(
            f"{prefix}_price_updates_total",
            "Total price updates applied",
            ["stats_id"],
            registry=self._registry,
        )

        self._price_rejections = Counter(
            f"{prefix}_price_rejections_total",
            "Total price updates rejected",
            ["reason"],
            registry=self._registry,
        )

        self._annualized_volatility = Gauge(
            f"{prefix}_annualized_volatility",
            "Current annualized volatility (real units)",
            ["stats_id"],
            registry=self._registry,
        )

        self._tick_count = Gauge(
            f"{prefix}_tick_count",
            "Ticks observed by a stats object",
            ["stats_id"],
            registry=self._registry,
        )

        # Settlement metrics
        self._mints = Counter(
            f"{prefix}_mints_total",
            "Total mints",
            ["market_id", "side"],
            registry=self._registry,
        )

        self._total_deposits = Gauge(
            f"{prefix}_total_deposits",
            "Total deposits of a market",
            ["market_id"],
            registry=self._registry,
        )

        self._vault_value = Gauge(
            f"{prefix}_vault_value",
            "Collateral held in a market vault",
            ["market_id"],
            registry=self._registry,
        )

        self._redemptions = Counter(
            f"{prefix}_redemptions_total",
            "Total token pairs redeemed",
            ["market_id"],
            registry=self._registry,
        )

        self._payouts = Counter(
            f"{prefix}_payouts_total",
            "Total value paid out",
            ["market_id"],
            registry=self._registry,
        )

        self._settlement_rejections = Counter(
            f"{prefix}_settlement_rejections_total",
            "Total mint/redeem calls rejected",
            ["operation", "reason"],
            registry=self._registry,
        )

        # Latency metrics
        self._update_latency = Histogram(
            f"{prefix}_update_latency_seconds",
            "Price update processing latency",
            buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1],
            registry=self._registry,
        )

        # Health metrics
        self._notification_failures = Gauge(
            f"{prefix}_notification_failures",
            "Failed event deliveries",
            registry=self._registry,
        )

        self._errors = Counter(
            f"{prefix}_errors_total",
            "Total errors",
            ["error_type"],
            registry=self._registry,
        )

    @property
    def enabled(self) -> bool:
        """Check if metrics are enabled."""
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry:
        """Return the registry holding this collector's metrics."""
        return self._registry

    def set_info(self, **kwargs: str) -> None:
        """Set info metric values."""
        if self._enabled:
            self._info.info(kwargs)

    # --- Price Metrics ---

    def inc_price_updates(self, stats_id: str) -> None:
        """Increment applied price updates counter."""
        if self._enabled:
            self._price_updates.labels(stats_id=stats_id).inc()

    def inc_price_rejections(self, reason: str) -> None:
        """Increment rejected price updates counter."""
        if self._enabled:
            self._price_rejections.labels(reason=reason).inc()

    def set_stats(self, stats_id: str, annualized_volatility: float, count: int) -> None:
        """Update volatility gauges."""
        if self._enabled:
            self._annualized_volatility.labels(stats_id=stats_id).set(
                annualized_volatility
            )
            self._tick_count.labels(stats_id=stats_id).set(count)

    # --- Settlement Metrics ---

    def inc_mints(self, market_id: str, side: str) -> None:
        """Increment mints counter."""
        if self._enabled:
            self._mints.labels(market_id=market_id, side=side).inc()

    def set_market(self, market_id: str, total_deposits: int, vault_value: int) -> None:
        """Update market gauges."""
        if self._enabled:
            self._total_deposits.labels(market_id=market_id).set(total_deposits)
            self._vault_value.labels(market_id=market_id).set(vault_value)

    def add_redemption(self, market_id: str, payout: int) -> None:
        """Count a redemption and its payout."""
        if self._enabled:
            self._redemptions.labels(market_id=market_id).inc()
            self._payouts.labels(market_id=market_id).inc(payout)

    def inc_settlement_rejections(self, operation: str, reason: str) -> None:
        """Increment rejected mint/redeem counter."""
        if self._enabled:
            self._settlement_rejections.labels(
                operation=operation, reason=reason
            ).inc()

    # --- Latency Metrics ---

    def observe_update_latency(self, seconds: float) -> None:
        """Record price update latency."""
        if self._enabled:
            self._update_latency.observe(seconds)

    @contextmanager
    def time_update(self) -> Generator[None, None, None]:
        """Context manager to time a price update."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe_update_latency(time.perf_counter() - start)

    # --- Health Metrics ---

    def set_notification_failures(self, count: int) -> None:
        """Update failed event deliveries gauge."""
        if self._enabled:
            self._notification_failures.set(count)

    def inc_error(self, error_type: str) -> None:
        """Increment error counter."""
        if self._enabled:
            self._errors.labels(error_type=error_type).inc()

    # --- Export ---

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format.

        Returns:
            Metrics as bytes in Prometheus exposition format
        """
        if self._enabled:
            return generate_latest(self._registry)
        return b""


# Global metrics collector instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector.

    Returns:
        Global MetricsCollector instance
    """
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def init_metrics(prefix: str = "surge_oracle", enabled: bool = True) -> MetricsCollector:
    """Initialize global metrics collector.

    Args:
        prefix: Metric name prefix
        enabled: If False, the collector records nothing

    Returns:
        Initialized MetricsCollector
    """
    global _metrics
    _metrics = MetricsCollector(prefix=prefix, enabled=enabled)
    return _metrics

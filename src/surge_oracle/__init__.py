"""Streaming volatility oracle and variance swap settlement engine."""

__version__ = "0.1.0"

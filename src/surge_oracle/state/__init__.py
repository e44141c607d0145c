"""State management module.

Provides identity and ownership tracking for stats objects and markets.
"""

from surge_oracle.state.store import ObjectStore

__all__ = ["ObjectStore"]

"""Core oracle application components."""

from surge_oracle.core.config import OracleConfig
from surge_oracle.core.controller import OracleController
from surge_oracle.core.dispatcher import EventDispatcher

__all__ = [
    "EventDispatcher",
    "OracleConfig",
    "OracleController",
]

"""Event dispatcher.

Fans out domain events to subscribers. Delivery is fire-and-forget: a
failing subscriber is logged and skipped, and never affects the
operation that produced the event.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from surge_oracle.domain.events import Event, EventType

logger = logging.getLogger(__name__)

EventCallback = Callable[[Event], None]


class EventDispatcher:
    """Delivers events to subscribed callbacks in subscription order."""

    def __init__(self) -> None:
        self._subscribers: list[tuple[EventCallback, frozenset[EventType] | None]] = []
        self._published = 0
        self._failures = 0

    @property
    def published_count(self) -> int:
        """Return the number of events published."""
        return self._published

    @property
    def failure_count(self) -> int:
        """Return the number of failed deliveries."""
        return self._failures

    def subscribe(
        self,
        callback: EventCallback,
        event_types: set[EventType] | None = None,
    ) -> None:
        """Subscribe a callback.

        Args:
            callback: Function called with each matching event
            event_types: Event types to receive, None for all
        """
        types = frozenset(event_types) if event_types is not None else None
        self._subscribers.append((callback, types))

    def unsubscribe(self, callback: EventCallback) -> None:
        """Remove every subscription of ``callback``."""
        self._subscribers = [s for s in self._subscribers if s[0] != callback]

    def publish(self, event: Event) -> None:
        """Deliver an event to all matching subscribers.

        Args:
            event: Event to deliver
        """
        self._published += 1
        for callback, types in list(self._subscribers):
            if types is not None and event.event_type not in types:
                continue
            try:
                callback(event)
            except Exception as e:
                self._failures += 1
                logger.error(
                    f"Error delivering {event.event_type.value} event: {e}",
                    exc_info=True,
                )

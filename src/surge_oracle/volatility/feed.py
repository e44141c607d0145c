"""Price feed guard.

Checks feed identity and freshness of verified price updates before
they reach the estimator.
"""

from __future__ import annotations

import logging

from surge_oracle.domain.errors import FeedMismatchError, StalePriceError
from surge_oracle.domain.types import PriceUpdate

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_SECONDS = 60


class PriceFeedGuard:
    """Accepts price updates from one configured feed only.

    An update is rejected when it comes from a different feed or when it
    is older than ``max_age_seconds`` at the time it is submitted.
    """

    def __init__(
        self,
        feed_id: str,
        max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
    ) -> None:
        """Initialize the guard.

        Args:
            feed_id: Identifier of the only accepted price feed
            max_age_seconds: Updates older than this are considered stale
        """
        self._feed_id = self._normalize(feed_id)
        self._max_age_seconds = max_age_seconds

    @property
    def feed_id(self) -> str:
        """Return the configured feed identifier."""
        return self._feed_id

    @property
    def max_age_seconds(self) -> int:
        """Return the maximum accepted age in seconds."""
        return self._max_age_seconds

    def check(self, update: PriceUpdate, now: int) -> None:
        """Validate an update against the configured feed.

        Args:
            update: Verified price update
            now: Current unix time in seconds

        Raises:
            FeedMismatchError: If the update is from another feed
            StalePriceError: If the update is too old
        """
        actual = self._normalize(update.feed_id)
        if actual != self._feed_id:
            raise FeedMismatchError(
                f"Price feed {update.feed_id} does not match configured feed",
                expected=self._feed_id,
                actual=actual,
            )

        age = update.age(now)
        if age > self._max_age_seconds:
            raise StalePriceError(
                f"Price from feed {self._feed_id} is {age}s old",
                age_seconds=age,
                max_age_seconds=self._max_age_seconds,
                context={"publish_time": update.publish_time, "now": now},
            )

    def is_fresh(self, update: PriceUpdate, now: int) -> bool:
        """Return True if the update would pass the staleness check."""
        return update.age(now) <= self._max_age_seconds

    @staticmethod
    def _normalize(feed_id: str) -> str:
        """Normalize hex feed identifiers for comparison."""
        feed_id = feed_id.strip().lower()
        if feed_id.startswith("0x"):
            feed_id = feed_id[2:]
        return feed_id

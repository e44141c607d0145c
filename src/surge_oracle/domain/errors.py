"""Exception hierarchy for oracle and settlement errors.

All errors inherit from OracleError, allowing code to catch broad
categories of errors. Each error type includes relevant context for
debugging and logging.

Only contractual preconditions raise. Numeric edge cases in the
volatility estimator are handled by saturation and never raise.

Error categories:
- ConfigurationError: Invalid configuration
- ObjectNotFoundError: Unknown stats or market identifier
- UnauthorizedUpdateError: Stats update from someone other than its creator
- FeedMismatchError / StalePriceError: Price input rejected before update
- SettlementError: Variance swap precondition violations
"""

from __future__ import annotations

from typing import Any


class OracleError(Exception):
    """Base exception for all oracle and settlement errors.

    All errors in the system inherit from this class, allowing
    code to catch broad categories of errors when needed.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional structured data for logging/debugging
        """
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(OracleError):
    """Invalid configuration.

    Raised when:
    - Configuration file is malformed
    - Required configuration values are missing
    - Configuration values fail validation
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with field information.

        Args:
            message: Human-readable error description
            field: Name of the configuration field with the issue
            context: Additional structured data
        """
        super().__init__(message, context)
        self.field = field


class ObjectNotFoundError(OracleError):
    """No stats object or market is registered under the given ID."""

    def __init__(self, object_id: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(f"Object not found: {object_id}", context)
        self.object_id = object_id


class UnauthorizedUpdateError(OracleError):
    """A stats object was updated by someone other than its creator."""

    def __init__(
        self,
        message: str,
        caller: str | None = None,
        owner: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with caller and owner identities.

        Args:
            message: Human-readable error description
            caller: Identity that attempted the update
            owner: Identity that created the stats object
            context: Additional structured data
        """
        super().__init__(message, context)
        self.caller = caller
        self.owner = owner


class FeedMismatchError(OracleError):
    """Price update came from a feed other than the configured one."""

    def __init__(
        self,
        message: str,
        expected: str | None = None,
        actual: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context)
        self.expected = expected
        self.actual = actual


class StalePriceError(OracleError):
    """Price update is older than the configured maximum age.

    Feeding stale observations into the estimator would distort the
    realized volatility used for settlement.
    """

    def __init__(
        self,
        message: str,
        age_seconds: int | None = None,
        max_age_seconds: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with data age information.

        Args:
            message: Human-readable error description
            age_seconds: How old the observation actually is
            max_age_seconds: Maximum acceptable age
            context: Additional structured data
        """
        super().__init__(message, context)
        self.age_seconds = age_seconds
        self.max_age_seconds = max_age_seconds


class SettlementError(OracleError):
    """Variance swap precondition violation.

    Base class for market errors. Stores market_id when available.
    Raised before any state mutation, so the market is left unchanged.
    """

    def __init__(
        self,
        message: str,
        market_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context)
        self.market_id = market_id


class MarketExpiredError(SettlementError):
    """Mint attempted at or after the market's expiry boundary."""


class MarketNotExpiredError(SettlementError):
    """Redeem attempted before the market's expiry boundary."""


class PaymentMismatchError(SettlementError):
    """Mint payment does not match the requested amount or asset.

    Deposits are exact: no partial fills and no change is returned.
    """

    def __init__(
        self,
        message: str,
        market_id: str | None = None,
        expected: int | str | None = None,
        actual: int | str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, market_id, context)
        self.expected = expected
        self.actual = actual


class SupplyOverflowError(SettlementError):
    """Deposit would push a u64 supply counter past its maximum."""


class SupplyUnderflowError(SettlementError):
    """Token pair holds more tokens than the market has outstanding."""


class TokenPairMismatchError(SettlementError):
    """Token pair was minted against a different market."""


class TokenPairConsumedError(SettlementError):
    """Token pair has already been redeemed."""


class InsufficientBalanceError(SettlementError):
    """Balance cannot cover a requested split.

    Raised when:
    - The vault cannot cover a computed payout
    - A balance split exceeds the balance value
    """

    def __init__(
        self,
        message: str,
        required: int | None = None,
        available: int | None = None,
        market_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with balance information.

        Args:
            message: Human-readable error description
            required: Amount required for the operation
            available: Amount currently available
            market_id: Market whose vault was involved, if any
            context: Additional structured data
        """
        super().__init__(message, market_id, context)
        self.required = required
        self.available = available

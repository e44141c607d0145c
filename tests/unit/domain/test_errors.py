"""Tests for domain error types."""


from surge_oracle.domain.errors import (
    ConfigurationError,
    FeedMismatchError,
    InsufficientBalanceError,
    MarketExpiredError,
    ObjectNotFoundError,
    OracleError,
    PaymentMismatchError,
    SettlementError,
    StalePriceError,
    SupplyUnderflowError,
    TokenPairConsumedError,
    UnauthorizedUpdateError,
)


class TestOracleError:
    """Tests for base OracleError."""

    def test_oracle_error_is_exception(self) -> None:
        """OracleError inherits from Exception."""
        error = OracleError("Something went wrong")
        assert isinstance(error, Exception)

    def test_oracle_error_message(self) -> None:
        """OracleError stores message."""
        error = OracleError("Test message")
        assert str(error) == "Test message"

    def test_oracle_error_with_context(self) -> None:
        """OracleError can include context dictionary."""
        error = OracleError("Failed operation", context={"stats_id": "123"})
        assert error.context == {"stats_id": "123"}

    def test_oracle_error_default_context(self) -> None:
        """OracleError has empty context by default."""
        assert OracleError("Test").context == {}


class TestInputErrors:
    """Tests for errors raised before an update is applied."""

    def test_configuration_error_field(self) -> None:
        """ConfigurationError names the offending field."""
        error = ConfigurationError("Missing feed", field="feed.feed_id")
        assert isinstance(error, OracleError)
        assert error.field == "feed.feed_id"

    def test_object_not_found_message(self) -> None:
        """ObjectNotFoundError includes the ID in its message."""
        error = ObjectNotFoundError("abc")
        assert error.object_id == "abc"
        assert "abc" in str(error)

    def test_unauthorized_identities(self) -> None:
        """UnauthorizedUpdateError stores both identities."""
        error = UnauthorizedUpdateError("nope", caller="bob", owner="alice")
        assert (error.caller, error.owner) == ("bob", "alice")

    def test_feed_mismatch(self) -> None:
        """FeedMismatchError stores both feed IDs."""
        error = FeedMismatchError("wrong feed", expected="aa", actual="bb")
        assert (error.expected, error.actual) == ("aa", "bb")

    def test_stale_price(self) -> None:
        """StalePriceError stores the age and the limit."""
        error = StalePriceError("stale", age_seconds=90, max_age_seconds=60)
        assert error.age_seconds == 90
        assert error.max_age_seconds == 60


class TestSettlementErrors:
    """Tests for market precondition errors."""

    def test_hierarchy(self) -> None:
        """All market errors are SettlementErrors and OracleErrors."""
        for cls in (
            MarketExpiredError,
            TokenPairConsumedError,
            PaymentMismatchError,
            SupplyUnderflowError,
        ):
            error = cls("failed", market_id="m1")
            assert isinstance(error, SettlementError)
            assert isinstance(error, OracleError)
            assert error.market_id == "m1"

    def test_payment_mismatch_values(self) -> None:
        """PaymentMismatchError stores expected and actual values."""
        error = PaymentMismatchError("bad", expected=10, actual=9)
        assert (error.expected, error.actual) == (10, 9)
        assert error.market_id is None

    def test_insufficient_balance(self) -> None:
        """InsufficientBalanceError stores required and available amounts."""
        error = InsufficientBalanceError("short", required=10, available=3, market_id="m1")
        assert error.required == 10
        assert error.available == 3
        assert error.market_id == "m1"

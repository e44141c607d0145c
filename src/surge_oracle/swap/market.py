"""Variance swap market.

A market pools deposits from two opposing sides. Depositors mint LONG
or SHORT claim tokens one-for-one against the deposited amount. After
maturity, each token pair is redeemed against the realized variance:

    realized_variance = max(0, realized_volatility - start_volatility)
    long_bucket  = min((realized_variance - strike) * total_deposits / 100,
                       total_deposits)            if realized_variance > strike
    short_bucket = total_deposits - long_bucket
    payout       = long_amount  * long_bucket  / total_deposits
                 + short_amount * short_bucket / total_deposits

Every division truncates, so the sum of payouts never exceeds the pool
and rounding dust stays in the vault.

Lifecycle: minting is allowed strictly before ``timestamp + epoch``,
redemption at or after it. The first redemption marks the market
expired and the transition is never reversed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import field_validator
from pydantic.dataclasses import dataclass

from surge_oracle.domain.errors import (
    InsufficientBalanceError,
    MarketExpiredError,
    MarketNotExpiredError,
    PaymentMismatchError,
    SupplyOverflowError,
    SupplyUnderflowError,
    TokenPairConsumedError,
    TokenPairMismatchError,
)
from surge_oracle.domain.events import EventType, MarketRedeemed, TokensMinted
from surge_oracle.domain.types import STRIKE_SCALE, U64_MAX, Side, check_u64
from surge_oracle.swap.balance import Balance

if TYPE_CHECKING:
    from surge_oracle.core.dispatcher import EventDispatcher

logger = logging.getLogger(__name__)


def compute_bucket_payouts(
    realized_variance: int,
    strike: int,
    total_deposits: int,
) -> tuple[int, int]:
    """Split the pool between the long and short buckets.

    Args:
        realized_variance: Realized variance, 2-decimal fixed point
        strike: Strike, 2-decimal fixed point
        total_deposits: Total pooled deposits

    Returns:
        Tuple of (long_bucket_payout, short_bucket_payout) summing to
        total_deposits
    """
    long_bucket = 0
    if realized_variance > strike:
        long_bucket = (realized_variance - strike) * total_deposits // STRIKE_SCALE
        long_bucket = min(long_bucket, total_deposits)
    return long_bucket, total_deposits - long_bucket


def holder_payout(amount: int, bucket_payout: int, total_deposits: int) -> int:
    """Prorate a bucket payout to one holder's token amount.

    The share is taken over total_deposits, not over the side's supply.
    Zero when either the amount or the bucket is zero.
    """
    if amount == 0 or bucket_payout == 0:
        return 0
    return amount * bucket_payout // total_deposits


@dataclass(frozen=True)
class Settlement:
    """Computed outcome of redeeming one token pair."""

    realized_variance: int
    long_bucket_payout: int
    short_bucket_payout: int
    long_payout: int
    short_payout: int

    @property
    def payout(self) -> int:
        """Return the total payout to the holder."""
        return self.long_payout + self.short_payout


def settle(
    realized_volatility: int,
    start_volatility: int,
    strike: int,
    total_deposits: int,
    long_amount: int,
    short_amount: int,
) -> Settlement:
    """Compute the settlement of a token pair without touching any state.

    Args:
        realized_volatility: Realized volatility supplied at redemption
        start_volatility: Volatility at market creation
        strike: Strike, 2-decimal fixed point
        total_deposits: Total pooled deposits
        long_amount: LONG tokens in the pair
        short_amount: SHORT tokens in the pair

    Returns:
        Settlement with bucket and holder payouts
    """
    realized_variance = max(0, realized_volatility - start_volatility)
    long_bucket, short_bucket = compute_bucket_payouts(
        realized_variance, strike, total_deposits
    )
    return Settlement(
        realized_variance=realized_variance,
        long_bucket_payout=long_bucket,
        short_bucket_payout=short_bucket,
        long_payout=holder_payout(long_amount, long_bucket, total_deposits),
        short_payout=holder_payout(short_amount, short_bucket, total_deposits),
    )


class TokenPair:
    """LONG and SHORT claim balances minted against one market.

    Owned by the depositor until redeemed. Redemption consumes the pair
    and it cannot be redeemed again.
    """

    def __init__(self, market_id: str, long: Balance, short: Balance) -> None:
        self._market_id = market_id
        self._long = long
        self._short = short
        self._consumed = False

    @classmethod
    def for_side(cls, market_id: str, side: Side, amount: int) -> TokenPair:
        """Create a pair holding ``amount`` on one side and zero on the other."""
        long = Balance(f"{market_id}/{Side.LONG.value}", 0)
        short = Balance(f"{market_id}/{Side.SHORT.value}", 0)
        if side == Side.LONG:
            long = Balance(long.asset, amount)
        else:
            short = Balance(short.asset, amount)
        return cls(market_id, long, short)

    @property
    def market_id(self) -> str:
        """Return the market this pair belongs to."""
        return self._market_id

    @property
    def long_amount(self) -> int:
        """Return the LONG token amount."""
        return self._long.value

    @property
    def short_amount(self) -> int:
        """Return the SHORT token amount."""
        return self._short.value

    @property
    def consumed(self) -> bool:
        """Return True if the pair has been redeemed."""
        return self._consumed

    def _consume(self) -> tuple[Balance, Balance]:
        """Empty the pair and hand back its balances for burning."""
        self._consumed = True
        return self._long.withdraw_all(), self._short.withdraw_all()

    def __repr__(self) -> str:
        return (
            f"TokenPair(market={self._market_id!r}, long={self.long_amount}, "
            f"short={self.short_amount}, consumed={self._consumed})"
        )


@dataclass(frozen=True)
class MarketState:
    """Immutable snapshot of a market, used for persistence and reporting."""

    market_id: str
    asset: str
    epoch: int
    strike: int
    timestamp: int
    start_volatility: int
    vault_value: int = 0
    long_supply: int = 0
    short_supply: int = 0
    realized_variance: int = 0
    total_deposits: int = 0
    is_expired: bool = False

    @field_validator(
        "epoch",
        "strike",
        "timestamp",
        "start_volatility",
        "vault_value",
        "long_supply",
        "short_supply",
        "realized_variance",
        "total_deposits",
    )
    @classmethod
    def validate_u64(cls, v: int) -> int:
        """Ensure the field fits an unsigned 64-bit value."""
        return check_u64(v)

    @property
    def expiry_boundary(self) -> int:
        """Return the time at which minting stops and redemption starts."""
        return self.timestamp + self.epoch


class VarianceSwapMarket:
    """Settlement engine for one strike and maturity.

    Holds the pooled vault and the LONG/SHORT supply counters. Expiry is
    checked lazily against the caller-supplied ``now`` on every call.

    Thread-safety: This class is NOT thread-safe. The caller serializes
    access to the same market.
    """

    def __init__(
        self,
        asset: str,
        epoch: int,
        strike: int,
        timestamp: int,
        start_volatility: int,
        market_id: str | None = None,
        dispatcher: EventDispatcher | None = None,
    ) -> None:
        """Initialize a market in the pre-expiry state.

        Args:
            asset: Asset accepted as collateral
            epoch: Duration added to timestamp to form the expiry boundary
            strike: Strike, 2-decimal fixed point
            timestamp: Creation time, same unit as the ``now`` of later calls
            start_volatility: Volatility at creation, 2-decimal fixed point
            market_id: Market identifier (generated if not provided)
            dispatcher: Optional event dispatcher for notifications
        """
        self._market_id = market_id or uuid.uuid4().hex
        self._asset = asset
        self._epoch = check_u64(epoch)
        self._strike = check_u64(strike)
        self._timestamp = check_u64(timestamp)
        self._start_volatility = check_u64(start_volatility)
        self._dispatcher = dispatcher

        self._vault = Balance.zero(asset)
        self._long_supply = 0
        self._short_supply = 0
        self._realized_variance = 0
        self._total_deposits = 0
        self._is_expired = False

    @classmethod
    def from_state(
        cls,
        state: MarketState,
        dispatcher: EventDispatcher | None = None,
    ) -> VarianceSwapMarket:
        """Rebuild a market from a snapshot.

        Args:
            state: Snapshot produced by snapshot()
            dispatcher: Optional event dispatcher for notifications

        Returns:
            Market with the snapshot's counters and vault value
        """
        market = cls(
            asset=state.asset,
            epoch=state.epoch,
            strike=state.strike,
            timestamp=state.timestamp,
            start_volatility=state.start_volatility,
            market_id=state.market_id,
            dispatcher=dispatcher,
        )
        market._vault = Balance(state.asset, state.vault_value)
        market._long_supply = state.long_supply
        market._short_supply = state.short_supply
        market._realized_variance = state.realized_variance
        market._total_deposits = state.total_deposits
        market._is_expired = state.is_expired
        return market

    # --- Properties ---

    @property
    def market_id(self) -> str:
        """Return the market identifier."""
        return self._market_id

    @property
    def asset(self) -> str:
        """Return the collateral asset."""
        return self._asset

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def strike(self) -> int:
        return self._strike

    @property
    def timestamp(self) -> int:
        return self._timestamp

    @property
    def start_volatility(self) -> int:
        return self._start_volatility

    @property
    def vault_value(self) -> int:
        """Return the collateral currently held in the vault."""
        return self._vault.value

    @property
    def long_supply(self) -> int:
        return self._long_supply

    @property
    def short_supply(self) -> int:
        return self._short_supply

    @property
    def realized_variance(self) -> int:
        """Return the realized variance of the most recent redemption."""
        return self._realized_variance

    @property
    def total_deposits(self) -> int:
        return self._total_deposits

    @property
    def is_expired(self) -> bool:
        """Return True once a redemption has happened."""
        return self._is_expired

    @property
    def expiry_boundary(self) -> int:
        """Return the time at which minting stops and redemption starts."""
        # NOTE: epoch is a configured duration while ``now`` is whatever
        # clock the caller uses; the two are compared literally.
        return self._timestamp + self._epoch

    def has_reached_expiry(self, now: int) -> bool:
        """Return True if the market is expired or ``now`` is past maturity."""
        return self._is_expired or now >= self.expiry_boundary

    def supply(self, side: Side) -> int:
        """Return the outstanding supply of one side."""
        return self._long_supply if side == Side.LONG else self._short_supply

    # --- Operations ---

    def mint(
        self,
        amount: int,
        want_long: bool,
        payment: Balance,
        now: int,
    ) -> TokenPair:
        """Deposit ``payment`` and mint ``amount`` claim tokens on one side.

        Args:
            amount: Number of tokens to mint, equal to the payment value
            want_long: True to mint LONG tokens, False for SHORT
            payment: Collateral; emptied into the vault on success
            now: Current time, compared against the expiry boundary

        Returns:
            TokenPair holding ``amount`` on the chosen side

        Raises:
            MarketExpiredError: If the market has reached expiry
            PaymentMismatchError: If the payment is not exactly ``amount``
                of the market's asset
            SupplyOverflowError: If a counter would exceed U64_MAX
        """
        if self.has_reached_expiry(now):
            raise MarketExpiredError(
                f"Market {self._market_id} expired at {self.expiry_boundary}",
                market_id=self._market_id,
                context={"now": now, "expiry": self.expiry_boundary},
            )
        if payment.asset != self._asset:
            raise PaymentMismatchError(
                f"Payment asset {payment.asset} does not match {self._asset}",
                market_id=self._market_id,
                expected=self._asset,
                actual=payment.asset,
            )
        if payment.value != amount:
            raise PaymentMismatchError(
                f"Payment of {payment.value} does not match amount {amount}",
                market_id=self._market_id,
                expected=amount,
                actual=payment.value,
            )

        side = Side.from_flag(want_long)
        if self._total_deposits + amount > U64_MAX:
            raise SupplyOverflowError(
                f"Deposit of {amount} overflows market {self._market_id}",
                market_id=self._market_id,
                context={"total_deposits": self._total_deposits},
            )

        self._vault.join(payment)
        if side == Side.LONG:
            self._long_supply += amount
        else:
            self._short_supply += amount
        self._total_deposits += amount

        logger.info(
            f"Minted {amount} {side.value} on {self._market_id} "
            f"(total deposits {self._total_deposits})"
        )

        if self._dispatcher is not None:
            self._dispatcher.publish(
                TokensMinted(
                    event_type=EventType.TOKENS_MINTED,
                    timestamp=datetime.now(UTC),
                    market_id=self._market_id,
                    side=side,
                    amount=amount,
                    total_deposits=self._total_deposits,
                    long_supply=self._long_supply,
                    short_supply=self._short_supply,
                )
            )

        return TokenPair.for_side(self._market_id, side, amount)

    def quote(self, pair: TokenPair, realized_volatility: int) -> Settlement:
        """Compute what ``pair`` would receive, without redeeming it."""
        return settle(
            realized_volatility,
            self._start_volatility,
            self._strike,
            self._total_deposits,
            pair.long_amount,
            pair.short_amount,
        )

    def redeem(
        self,
        pair: TokenPair,
        realized_volatility: int,
        now: int,
    ) -> Balance:
        """Burn a token pair and pay out its share of the vault.

        Args:
            pair: Token pair minted against this market
            realized_volatility: Realized volatility, 2-decimal fixed point
            now: Current time, compared against the expiry boundary

        Returns:
            Balance holding the payout

        Raises:
            TokenPairMismatchError: If the pair belongs to another market
            TokenPairConsumedError: If the pair was already redeemed
            MarketNotExpiredError: If the market has not reached expiry
            SupplyUnderflowError: If the pair holds more tokens than are
                outstanding
            InsufficientBalanceError: If the vault cannot cover the payout
        """
        check_u64(realized_volatility)

        if pair.market_id != self._market_id:
            raise TokenPairMismatchError(
                f"Token pair belongs to market {pair.market_id}",
                market_id=self._market_id,
            )
        if pair.consumed:
            raise TokenPairConsumedError(
                "Token pair has already been redeemed",
                market_id=self._market_id,
            )
        if not self.has_reached_expiry(now):
            raise MarketNotExpiredError(
                f"Market {self._market_id} expires at {self.expiry_boundary}",
                market_id=self._market_id,
                context={"now": now, "expiry": self.expiry_boundary},
            )
        if (
            pair.long_amount > self._long_supply
            or pair.short_amount > self._short_supply
        ):
            raise SupplyUnderflowError(
                f"Token pair exceeds outstanding supply of {self._market_id}",
                market_id=self._market_id,
                context={
                    "long_amount": pair.long_amount,
                    "short_amount": pair.short_amount,
                    "long_supply": self._long_supply,
                    "short_supply": self._short_supply,
                },
            )

        settlement = self.quote(pair, realized_volatility)
        if settlement.payout > self._vault.value:
            raise InsufficientBalanceError(
                f"Vault of {self._market_id} cannot cover payout",
                required=settlement.payout,
                available=self._vault.value,
                market_id=self._market_id,
            )

        self._is_expired = True
        self._realized_variance = settlement.realized_variance

        long_tokens, short_tokens = pair._consume()
        self._long_supply = self._burn(long_tokens, self._long_supply)
        self._short_supply = self._burn(short_tokens, self._short_supply)

        payout = self._vault.split(settlement.payout)

        logger.info(
            f"Redeemed pair on {self._market_id}: payout={payout.value} "
            f"realized_variance={settlement.realized_variance} strike={self._strike}"
        )

        if self._dispatcher is not None:
            self._dispatcher.publish(
                MarketRedeemed(
                    event_type=EventType.MARKET_REDEEMED,
                    timestamp=datetime.now(UTC),
                    market_id=self._market_id,
                    realized_variance=settlement.realized_variance,
                    strike=self._strike,
                    long_bucket_payout=settlement.long_bucket_payout,
                    short_bucket_payout=settlement.short_bucket_payout,
                    total_deposits=self._total_deposits,
                    payout=payout.value,
                )
            )

        return payout

    @staticmethod
    def _burn(tokens: Balance, supply: int) -> int:
        """Burn claim tokens and return the reduced supply."""
        if tokens.value == 0:
            tokens.destroy_zero()
            return supply
        return supply - tokens.value

    def snapshot(self) -> MarketState:
        """Return an immutable snapshot of the market."""
        return MarketState(
            market_id=self._market_id,
            asset=self._asset,
            epoch=self._epoch,
            strike=self._strike,
            timestamp=self._timestamp,
            start_volatility=self._start_volatility,
            vault_value=self._vault.value,
            long_supply=self._long_supply,
            short_supply=self._short_supply,
            realized_variance=self._realized_variance,
            total_deposits=self._total_deposits,
            is_expired=self._is_expired,
        )

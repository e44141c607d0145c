"""Asset balances.

A Balance is an amount of one asset held by some party or pooled in a
market vault. Value moves between balances only through join and split,
so the total amount of an asset is conserved.
"""

from __future__ import annotations

from surge_oracle.domain.errors import InsufficientBalanceError
from surge_oracle.domain.types import check_u64


class Balance:
    """An amount of a single asset, in integer minor units."""

    __slots__ = ("_asset", "_value")

    def __init__(self, asset: str, value: int = 0) -> None:
        """Initialize a balance.

        Args:
            asset: Asset identifier (e.g. "SUI")
            value: Amount in minor units
        """
        self._asset = asset
        self._value = check_u64(value)

    @classmethod
    def zero(cls, asset: str) -> Balance:
        """Create an empty balance of ``asset``."""
        return cls(asset, 0)

    @property
    def asset(self) -> str:
        """Return the asset identifier."""
        return self._asset

    @property
    def value(self) -> int:
        """Return the amount held."""
        return self._value

    def join(self, other: Balance) -> int:
        """Move all of ``other`` into this balance.

        Args:
            other: Balance of the same asset; left empty afterwards

        Returns:
            The new value of this balance

        Raises:
            ValueError: If the assets differ
        """
        if other.asset != self._asset:
            raise ValueError(f"Cannot join {other.asset} into {self._asset}")
        self._value = check_u64(self._value + other._value)
        other._value = 0
        return self._value

    def split(self, amount: int) -> Balance:
        """Take ``amount`` out of this balance.

        Args:
            amount: Amount to take

        Returns:
            New balance holding ``amount``

        Raises:
            InsufficientBalanceError: If this balance holds less than amount
        """
        if amount > self._value:
            raise InsufficientBalanceError(
                f"Cannot split {amount} from balance of {self._value}",
                required=amount,
                available=self._value,
            )
        self._value -= amount
        return Balance(self._asset, amount)

    def withdraw_all(self) -> Balance:
        """Take the whole value out of this balance."""
        return self.split(self._value)

    def destroy_zero(self) -> None:
        """Discard an empty balance.

        Raises:
            ValueError: If the balance is not empty
        """
        if self._value != 0:
            raise ValueError(f"Cannot destroy non-zero balance of {self._value}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Balance):
            return NotImplemented
        return self._asset == other._asset and self._value == other._value

    def __repr__(self) -> str:
        return f"Balance({self._asset!r}, {self._value})"

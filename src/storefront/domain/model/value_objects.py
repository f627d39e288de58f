"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from storefront.domain.exceptions import ValidationError

CURRENCY_SYMBOLS = {"NGN": "₦", "USD": "$"}


@dataclass(frozen=True)
class Money:
    """Monetary amount in whole currency units.

    The store prices everything in whole Naira, so amounts are plain
    integers: no fractional units, no floating point.
    """

    amount: int
    currency: str = "NGN"

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValidationError(
                f"Money amount must be an integer, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < 0:
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(result, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def less(self, other: Money) -> Money:
        """Subtract, flooring the result at zero instead of raising."""
        self._assert_same_currency(other)
        return Money(max(0, self.amount - other.amount), self.currency)

    def percent(self, rate: int) -> Money:
        """``floor(amount * rate / 100)``."""
        if rate < 0:
            raise ValidationError(f"Percentage cannot be negative, got {rate}")
        return Money(self.amount * rate // 100, self.currency)

    def cap(self, limit: Money) -> Money:
        """Return the smaller of this amount and ``limit``."""
        return limit if limit < self else self

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        symbol = CURRENCY_SYMBOLS.get(self.currency, f"{self.currency} ")
        return f"{symbol}{self.amount:,}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def zero(currency: str = "NGN") -> Money:
        return Money(0, currency)

    @staticmethod
    def of(amount: str | int, currency: str = "NGN") -> Money:
        """Convenient factory that coerces strings like ``"50,000"``."""
        if isinstance(amount, str):
            cleaned = amount.strip().replace(",", "").replace("_", "")
            if not cleaned.lstrip("-").isdigit():
                raise ValidationError(f"Invalid money amount: {amount!r}")
            amount = int(cleaned)
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationError(f"Invalid money amount: {amount!r}")
        return Money(amount, currency)


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def normalize_code(code: str | None) -> str:
    """Zone and coupon codes compare trimmed and case-insensitively."""
    return (code or "").strip().lower()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)

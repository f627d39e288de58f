"""Coupon aggregate and its usage ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money, normalize_code


class DiscountType(Enum):
    FIXED = "fixed"
    PERCENT = "percent"

    @staticmethod
    def parse(raw: str) -> DiscountType:
        try:
            return DiscountType((raw or "").strip().lower())
        except ValueError:
            raise ValidationError(f"Unsupported discount type: {raw!r}") from None

    def discount_for(self, value: int, base: Money) -> Money:
        """Raw discount before any caps: flat amount or floor percentage."""
        if self is DiscountType.FIXED:
            return Money(value, base.currency)
        return base.percent(value)


@dataclass
class Coupon:
    """A redeemable discount code.

    Invariants:
    - ``code`` is unique case-insensitively (stored as entered)
    - ``used_count`` never exceeds ``usage_limit`` when one is set
    """

    id: int | None
    code: str
    discount_type: DiscountType
    discount_value: int
    description: str = ""
    min_order_amount: Money | None = None
    max_discount_amount: Money | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    usage_limit: int | None = None
    used_count: int = 0
    per_customer_limit: int | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        code: str,
        discount_type: DiscountType,
        discount_value: int,
        **options,
    ) -> Coupon:
        """Create a new coupon, enforcing all invariants."""
        code = (code or "").strip().upper()
        if not code:
            raise ValidationError("Coupon code is required")
        if discount_value <= 0:
            raise ValidationError("Discount value must be positive")
        if discount_type is DiscountType.PERCENT and discount_value > 100:
            raise ValidationError("Percent discount cannot exceed 100")

        coupon = Coupon(
            id=None,
            code=code,
            discount_type=discount_type,
            discount_value=discount_value,
            **options,
        )
        if coupon.usage_limit is not None and coupon.usage_limit <= 0:
            raise ValidationError("Usage limit must be positive")
        if coupon.per_customer_limit is not None and coupon.per_customer_limit <= 0:
            raise ValidationError("Per-customer limit must be positive")
        if coupon.starts_at and coupon.ends_at and coupon.ends_at < coupon.starts_at:
            raise ValidationError("Coupon end date is before its start date")
        return coupon

    @property
    def lookup_key(self) -> str:
        return normalize_code(self.code)

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    def has_started(self, now: datetime) -> bool:
        return self.starts_at is None or now >= self.starts_at

    def has_expired(self, now: datetime) -> bool:
        return self.ends_at is not None and now > self.ends_at

    def discount_for(self, subtotal: Money) -> Money:
        """Discount for ``subtotal``: capped by max_discount, then by the subtotal."""
        discount = self.discount_type.discount_for(self.discount_value, subtotal)
        if self.max_discount_amount is not None:
            discount = discount.cap(self.max_discount_amount)
        return discount.cap(subtotal)

    def redeem(self) -> None:
        """Count one use, refusing to go past the usage limit."""
        if self.is_exhausted:
            raise ValidationError(f"Coupon {self.code} usage limit reached")
        self.used_count += 1


@dataclass(frozen=True)
class CouponUsage:
    coupon_id: int
    order_id: int
    customer_email: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

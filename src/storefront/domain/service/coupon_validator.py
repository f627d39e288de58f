"""Domain service: Coupon validation.

Validation is read-only.  Redeeming a coupon (bumping its usage count
and recording who used it) belongs to the checkout transaction, which
does it through the repository's conditional increment so two
concurrent checkouts can never both take the last use.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from storefront.domain.model.coupon import Coupon
from storefront.domain.model.value_objects import Money, normalize_code, normalize_email, utc_now
from storefront.domain.repository.coupon_repository import CouponRepository


@dataclass(frozen=True)
class CouponValidation:
    valid: bool
    discount_amount: Money
    coupon: Coupon | None = None
    error: str | None = None

    @staticmethod
    def rejected(subtotal: Money, error: str, coupon: Coupon | None = None) -> CouponValidation:
        return CouponValidation(
            valid=False,
            discount_amount=Money.zero(subtotal.currency),
            coupon=coupon,
            error=error,
        )


class CouponValidator:

    def __init__(
        self,
        coupon_repo: CouponRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._coupon_repo = coupon_repo
        self._clock = clock

    def validate(
        self,
        code: str | None,
        subtotal: Money,
        customer_email: str | None = None,
    ) -> CouponValidation:
        """Check ``code`` against ``subtotal`` and return the discount it earns.

        Checks run in a fixed order and the first failure wins:
        not found, inactive, not started, expired, usage limit,
        per-customer limit, minimum order amount.
        """
        if not normalize_code(code):
            return CouponValidation(valid=True, discount_amount=Money.zero(subtotal.currency))

        coupon = self._coupon_repo.get_by_code(code)
        if coupon is None:
            return CouponValidation.rejected(subtotal, "Invalid coupon code")

        now = self._clock()
        if not coupon.is_active:
            return CouponValidation.rejected(subtotal, "Coupon is inactive", coupon)
        if not coupon.has_started(now):
            return CouponValidation.rejected(subtotal, "Coupon is not active yet", coupon)
        if coupon.has_expired(now):
            return CouponValidation.rejected(subtotal, "Coupon has expired", coupon)
        if coupon.is_exhausted:
            return CouponValidation.rejected(subtotal, "Coupon usage limit reached", coupon)

        email = normalize_email(customer_email)
        if coupon.per_customer_limit is not None and email:
            used = self._coupon_repo.count_usages_by_email(coupon.id, email)
            if used >= coupon.per_customer_limit:
                return CouponValidation.rejected(
                    subtotal, "You have already used this coupon", coupon
                )

        if coupon.min_order_amount is not None and subtotal < coupon.min_order_amount:
            return CouponValidation.rejected(
                subtotal,
                f"Order must be at least {coupon.min_order_amount} to use this coupon",
                coupon,
            )

        return CouponValidation(
            valid=True,
            discount_amount=coupon.discount_for(subtotal),
            coupon=coupon,
        )

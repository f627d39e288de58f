"""Application service: Add Coupon use case (admin)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.coupon import Coupon, DiscountType
from storefront.domain.model.value_objects import Money, utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork


class AddCouponHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utc_now,
        currency: str = "NGN",
    ) -> None:
        self._uow = uow
        self._clock = clock
        self._currency = currency

    def handle(
        self,
        code: str,
        discount_type: str,
        discount_value: int,
        description: str = "",
        min_order_amount: str | int | None = None,
        max_discount_amount: str | int | None = None,
        starts_at: datetime | None = None,
        ends_at: datetime | None = None,
        usage_limit: int | None = None,
        per_customer_limit: int | None = None,
        is_active: bool = True,
    ) -> Coupon:
        coupon = Coupon.create(
            code,
            DiscountType.parse(discount_type),
            discount_value,
            description=(description or "").strip(),
            min_order_amount=self._money(min_order_amount),
            max_discount_amount=self._money(max_discount_amount),
            starts_at=starts_at,
            ends_at=ends_at,
            usage_limit=usage_limit,
            per_customer_limit=per_customer_limit,
            is_active=is_active,
            created_at=self._clock(),
        )

        with self._uow as uow:
            if uow.coupons.get_by_code(coupon.code) is not None:
                raise ValidationError(f"Coupon '{coupon.code}' already exists")
            uow.coupons.save(coupon)
            uow.commit()
        return coupon

    def _money(self, raw: str | int | None) -> Money | None:
        if raw is None or raw == "":
            return None
        return Money.of(raw, self._currency)

"""Application services: checkout previews (delivery quote, coupon check).

Both are read-only: they never redeem a coupon or touch an order.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from storefront.domain.model.delivery_zone import DeliveryQuote
from storefront.domain.model.value_objects import Money, utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.coupon_validator import CouponValidation, CouponValidator
from storefront.domain.service.delivery_zone_calculator import DeliveryZoneCalculator


class QuoteDeliveryHandler:

    def __init__(self, uow: UnitOfWork, currency: str = "NGN") -> None:
        self._uow = uow
        self._currency = currency

    def handle(self, zone_code: str, subtotal: str | int) -> DeliveryQuote:
        """Price delivery for ``subtotal``; uncovered zones come back as a quote, not an error."""
        amount = Money.of(subtotal, self._currency)
        with self._uow as uow:
            return DeliveryZoneCalculator(uow.zones).calculate(zone_code, amount)


class CheckCouponHandler:

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
        subtotal: str | int,
        customer_email: str | None = None,
    ) -> CouponValidation:
        amount = Money.of(subtotal, self._currency)
        with self._uow as uow:
            return CouponValidator(uow.coupons, self._clock).validate(
                code, amount, customer_email
            )

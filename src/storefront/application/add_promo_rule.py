"""Application service: Add Promo Rule use case (admin)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.coupon import DiscountType
from storefront.domain.model.product import ProductCategory
from storefront.domain.model.promo_rule import PromoRule, PromoRuleType
from storefront.domain.model.value_objects import Money, utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork


class AddPromoRuleHandler:

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
        name: str,
        rule_type: str,
        min_cart_amount: str | int = 0,
        category: str | None = None,
        discount_type: str = "fixed",
        discount_value: int = 0,
        bogo_product_id: int | None = None,
        bogo_buy_qty: int = 1,
        bogo_get_qty: int = 1,
        starts_at: datetime | None = None,
        ends_at: datetime | None = None,
        is_active: bool = True,
    ) -> PromoRule:
        rule = PromoRule.create(
            name,
            PromoRuleType.parse(rule_type),
            min_cart_amount=Money.of(min_cart_amount, self._currency),
            category=ProductCategory.parse(category) if category else None,
            discount_type=DiscountType.parse(discount_type),
            discount_value=discount_value,
            bogo_product_id=bogo_product_id,
            bogo_buy_qty=bogo_buy_qty,
            bogo_get_qty=bogo_get_qty,
            starts_at=starts_at,
            ends_at=ends_at,
            is_active=is_active,
            created_at=self._clock(),
        )

        with self._uow as uow:
            if rule.bogo_product_id is not None:
                if uow.products.get_by_id(rule.bogo_product_id) is None:
                    raise EntityNotFoundError(f"Product #{rule.bogo_product_id} not found")
            uow.promo_rules.save(rule)
            uow.commit()
        return rule

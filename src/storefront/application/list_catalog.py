"""Application services: catalog listings (queries)."""

from __future__ import annotations

from storefront.domain.model.coupon import Coupon
from storefront.domain.model.delivery_zone import DeliveryZone
from storefront.domain.model.product import Product, ProductCategory
from storefront.domain.model.promo_rule import PromoRule
from storefront.domain.repository.unit_of_work import UnitOfWork


class ListProductsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        category: str | None = None,
        low_stock_only: bool = False,
    ) -> list[Product]:
        kind = ProductCategory.parse(category) if category else None
        with self._uow as uow:
            products = uow.products.list_all()
        if kind is not None:
            products = [p for p in products if p.category is kind]
        if low_stock_only:
            products = [p for p in products if p.is_low_stock]
        return sorted(products, key=lambda p: p.id)


class ListZonesHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[DeliveryZone]:
        with self._uow as uow:
            zones = uow.zones.list_active()
        return sorted(zones, key=lambda z: z.name)


class ListCouponsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[Coupon]:
        with self._uow as uow:
            coupons = uow.coupons.list_all()
        return sorted(coupons, key=lambda c: c.created_at, reverse=True)


class ListPromoRulesHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[PromoRule]:
        with self._uow as uow:
            rules = uow.promo_rules.list_all()
        return sorted(rules, key=lambda r: (r.created_at, r.id or 0), reverse=True)

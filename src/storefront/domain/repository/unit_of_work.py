"""Abstract unit of work: the transaction scope around repositories.

Use as a context manager.  Changes become visible only when ``commit()``
is called inside the block; leaving the block any other way discards
them, so a failure halfway through order creation writes nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.repository.coupon_repository import CouponRepository
from storefront.domain.repository.delivery_zone_repository import DeliveryZoneRepository
from storefront.domain.repository.notification_log_repository import (
    NotificationLogRepository,
)
from storefront.domain.repository.order_repository import OrderRepository, TimelineRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.repository.promo_rule_repository import PromoRuleRepository


class UnitOfWork(ABC):

    products: ProductRepository
    zones: DeliveryZoneRepository
    coupons: CouponRepository
    promo_rules: PromoRuleRepository
    orders: OrderRepository
    timeline: TimelineRepository
    notification_logs: NotificationLogRepository

    def __enter__(self) -> UnitOfWork:
        self._begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end()

    @abstractmethod
    def commit(self) -> None:
        """Make every change since the block started durable."""

    @abstractmethod
    def _begin(self) -> None:
        """Open the transaction (acquire locks, load state)."""

    @abstractmethod
    def _end(self) -> None:
        """Close the transaction, discarding anything not committed."""

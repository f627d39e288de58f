"""Unit of work over the JSON document store.

Entering the block takes the store lock and loads the document; the
repositories then work on that in-memory copy.  ``commit()`` writes it
back atomically.  Leaving without a commit drops every change.  The
lock is held for the whole block, so concurrent checkouts (even from
separate processes) run one after the other.
"""

from __future__ import annotations

from contextlib import ExitStack
from pathlib import Path

from storefront.domain.exceptions import DomainException
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.infrastructure.persistence.json_coupon_repository import JsonCouponRepository
from storefront.infrastructure.persistence.json_delivery_zone_repository import (
    JsonDeliveryZoneRepository,
)
from storefront.infrastructure.persistence.json_notification_log_repository import (
    JsonNotificationLogRepository,
)
from storefront.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
    JsonTimelineRepository,
)
from storefront.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from storefront.infrastructure.persistence.json_promo_rule_repository import (
    JsonPromoRuleRepository,
)
from storefront.infrastructure.persistence.json_store import JsonDocumentStore


class JsonUnitOfWork(UnitOfWork):

    def __init__(self, data_dir: Path) -> None:
        self._store = JsonDocumentStore(data_dir)
        self._stack: ExitStack | None = None
        self._doc: dict | None = None

    def _begin(self) -> None:
        if self._stack is not None:
            raise DomainException("Unit of work is already in progress")

        stack = ExitStack()
        stack.enter_context(self._store.lock())
        try:
            doc = self._store.load()
        except BaseException:
            stack.close()
            raise
        self._stack = stack
        self._doc = doc

        self.products = JsonProductRepository(doc)
        self.zones = JsonDeliveryZoneRepository(doc)
        self.coupons = JsonCouponRepository(doc)
        self.promo_rules = JsonPromoRuleRepository(doc)
        self.orders = JsonOrderRepository(doc)
        self.timeline = JsonTimelineRepository(doc)
        self.notification_logs = JsonNotificationLogRepository(doc)

    def commit(self) -> None:
        if self._doc is None:
            raise DomainException("commit() called outside a unit of work")
        self._store.save(self._doc)

    def _end(self) -> None:
        stack, self._stack, self._doc = self._stack, None, None
        if stack is not None:
            stack.close()

"""Application service: Low-Stock Summary use case.

Collects every product at or below its low-stock threshold and mails
the store admins a digest.  Meant to run once a day from a scheduler.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from storefront.application.ports import DeliveryReport, StockAlertService
from storefront.domain.model.product import LowStockSummary
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LowStockRun:
    summary: LowStockSummary
    delivery: DeliveryReport


class LowStockSummaryHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        alerts: StockAlertService,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._alerts = alerts
        self._clock = clock

    def handle(self) -> LowStockRun:
        with self._uow as uow:
            products = uow.products.list_all()

        summary = LowStockSummary.build(products, self._clock())
        logger.info(
            "Low-stock summary: {} alert(s) out of {} in-stock products",
            summary.low_stock_count,
            summary.total_in_stock_products,
        )
        delivery = self._alerts.notify_low_stock_summary(summary)
        return LowStockRun(summary=summary, delivery=delivery)

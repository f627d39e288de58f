"""Application service: Update Order Status use case (admin)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from storefront.application.dto import OrderDTO
from storefront.application.ports import NotificationService
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import OrderStatus
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.order_lifecycle import OrderLifecycle
from storefront.logging import get_logger

logger = get_logger(__name__)


class UpdateOrderStatusHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: NotificationService,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._notifier = notifier
        self._lifecycle = OrderLifecycle(clock)

    def handle(self, order_id: int, status: OrderStatus | str, actor: str) -> OrderDTO:
        """Move an order to ``status``, record it, then notify the customer.

        The status change and its timeline event commit together; the
        notification is dispatched only once both are durable.
        """
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            previous = order.status
            event = self._lifecycle.transition(order, status, actor)
            uow.orders.save(order)
            uow.timeline.append(event)
            uow.commit()

        logger.info(
            "Order {} moved {} -> {} by {}",
            order.reference,
            previous.value,
            order.status.value,
            actor,
        )
        self._notifier.notify_status_changed(order, previous, order.status)
        return OrderDTO.from_order(order)

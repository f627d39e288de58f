"""Application service: Add Order Note use case (admin)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.order_lifecycle import OrderLifecycle


class AddOrderNoteHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._lifecycle = OrderLifecycle(clock)

    def handle(self, order_id: int, note: str, actor: str) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            event = self._lifecycle.add_note(order, note, actor)
            uow.orders.save(order)
            uow.timeline.append(event)
            uow.commit()

        return OrderDTO.from_order(order)

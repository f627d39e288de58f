"""Application service: Show Order use case (query).

Totals come straight from the stored order; they are never recomputed
from today's catalog prices or promotions.
"""

from __future__ import annotations

from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.repository.unit_of_work import UnitOfWork


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return OrderDTO.from_order(order)

    def handle_by_reference(self, reference: str) -> OrderDTO:
        reference = (reference or "").strip()
        with self._uow as uow:
            order = uow.orders.get_by_reference(reference)
        if order is None:
            raise EntityNotFoundError(f"Order {reference} not found")
        return OrderDTO.from_order(order)

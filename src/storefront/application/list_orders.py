"""Application services: order listings for the admin dashboard (queries)."""

from __future__ import annotations

from storefront.application.dto import OrderDTO, TimelineEventDTO
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import OrderStatus
from storefront.domain.repository.unit_of_work import UnitOfWork


class ListOrdersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        status: OrderStatus | str | None = None,
        user_id: int | None = None,
    ) -> list[OrderDTO]:
        """Newest first, optionally filtered by status and by customer account.

        Guest checkouts carry no ``user_id`` and never match the account filter.
        """
        if status is not None and not isinstance(status, OrderStatus):
            status = OrderStatus.parse(status)
        with self._uow as uow:
            orders = uow.orders.list(status)
        if user_id is not None:
            orders = [o for o in orders if o.customer.user_id == user_id]
        orders.sort(key=lambda o: (o.created_at, o.id or 0), reverse=True)
        return [OrderDTO.from_order(o) for o in orders]


class RiskQueueHandler:
    """Orders the risk scorer queued for manual review, riskiest first."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[OrderDTO]:
        with self._uow as uow:
            orders = [o for o in uow.orders.list() if o.risk.needs_review]
        orders.sort(key=lambda o: (-o.risk_score, o.created_at))
        return [OrderDTO.from_order(o) for o in orders]


class ShowTimelineHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> list[TimelineEventDTO]:
        with self._uow as uow:
            if uow.orders.get_by_id(order_id) is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")
            events = uow.timeline.list_for_order(order_id)
        return [TimelineEventDTO.from_event(e) for e in events]

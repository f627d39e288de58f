"""Application service: Verify Payment use case.

Asks the gateway about a payment reference and, on success, moves the
matching order from ``pending_payment`` to ``paid``, notifying the
customer once the change is committed.  Safe to call more than once for
the same reference.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from storefront.application.ports import (
    NotificationService,
    PaymentGateway,
    PaymentVerification,
)
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.order_lifecycle import SYSTEM_ACTOR, OrderLifecycle
from storefront.logging import get_logger

logger = get_logger(__name__)


class VerifyPaymentHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        gateway: PaymentGateway,
        notifier: NotificationService,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._gateway = gateway
        self._notifier = notifier
        self._lifecycle = OrderLifecycle(clock)

    def handle(self, reference: str) -> PaymentVerification:
        reference = (reference or "").strip()
        with self._uow as uow:
            if uow.orders.get_by_reference(reference) is None:
                raise EntityNotFoundError(f"Order {reference} not found")

        outcome = self._gateway.verify_transaction(reference)
        logger.info("Payment {} verified as {}", reference, outcome.value)
        if outcome is not PaymentVerification.SUCCESS:
            return outcome

        with self._uow as uow:
            order = uow.orders.get_by_reference(reference)
            previous = order.status
            event = self._lifecycle.confirm_payment(order, SYSTEM_ACTOR)
            if event is None:
                return outcome
            uow.orders.save(order)
            uow.timeline.append(event)
            uow.commit()

        logger.info("Order {} marked paid", reference)
        self._notifier.notify_status_changed(order, previous, order.status)
        return outcome

"""Domain service: Order lifecycle state machine.

    pending_payment -> paid -> processing -> delivered
    (any of the first three) -> cancelled

Card orders start in ``pending_payment`` and only a verified payment
moves them to ``paid``.  WhatsApp orders settle payment out of band and
start straight in ``processing``.  Admins may move a live order to any
other status; ``delivered`` and ``cancelled`` are terminal.

Every change produces an OrderTimelineEvent for the caller to append.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from storefront.domain.model.order import CheckoutChannel, Order, OrderStatus
from storefront.domain.model.timeline import OrderTimelineEvent, TimelineEventType
from storefront.domain.model.value_objects import utc_now

SYSTEM_ACTOR = "system"


class OrderLifecycle:

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    @staticmethod
    def initial_status(channel: CheckoutChannel) -> OrderStatus:
        if channel is CheckoutChannel.WHATSAPP:
            return OrderStatus.PROCESSING
        return OrderStatus.PENDING_PAYMENT

    def open_order(self, order: Order, actor: str = SYSTEM_ACTOR) -> OrderTimelineEvent:
        """Stamp the starting status of a freshly created order.

        Must be called after the order has an ID.
        """
        if order.status is OrderStatus.PROCESSING and order.processing_at is None:
            order.processing_at = order.created_at

        return OrderTimelineEvent(
            order_id=order.id,
            event_type=TimelineEventType.ORDER_CREATED,
            message=f"Order {order.reference} created via {order.channel.value}",
            actor=actor,
            payload={
                "status": order.status.value,
                "grand_total": order.grand_total.amount,
                "risk_level": order.risk.level.value,
            },
            created_at=self._clock(),
        )

    def transition(
        self,
        order: Order,
        next_status: OrderStatus | str,
        actor: str,
    ) -> OrderTimelineEvent:
        if not isinstance(next_status, OrderStatus):
            next_status = OrderStatus.parse(next_status)

        now = self._clock()
        previous = order.change_status(next_status, now)
        return OrderTimelineEvent(
            order_id=order.id,
            event_type=TimelineEventType.STATUS_CHANGED,
            message=f"Status changed from {previous.label} to {next_status.label}",
            actor=actor,
            payload={
                "previous_status": previous.value,
                "next_status": next_status.value,
            },
            created_at=now,
        )

    def confirm_payment(
        self, order: Order, actor: str = SYSTEM_ACTOR
    ) -> OrderTimelineEvent | None:
        """Mark a card order paid after the gateway verified the charge.

        Gateways retry callbacks, so a repeat confirmation is a no-op and
        returns None.  Orders that already moved past payment are left alone.
        """
        if order.status is not OrderStatus.PENDING_PAYMENT:
            return None

        now = self._clock()
        previous = order.change_status(OrderStatus.PAID, now)
        return OrderTimelineEvent(
            order_id=order.id,
            event_type=TimelineEventType.PAYMENT_CONFIRMED,
            message=f"Payment confirmed for {order.reference}",
            actor=actor,
            payload={
                "previous_status": previous.value,
                "next_status": OrderStatus.PAID.value,
            },
            created_at=now,
        )

    def add_note(self, order: Order, note: str, actor: str) -> OrderTimelineEvent:
        now = self._clock()
        order.add_note(note, now)
        return OrderTimelineEvent(
            order_id=order.id,
            event_type=TimelineEventType.NOTE_ADDED,
            message=order.internal_notes[-1],
            actor=actor,
            created_at=now,
        )

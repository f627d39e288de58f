"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.  Amounts are whole
Naira integers; formatting is left to the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from storefront.domain.model.order import Order
from storefront.domain.model.timeline import OrderTimelineEvent


@dataclass(frozen=True)
class CartItemSpec:
    """Input: what the customer asked for (product id + quantity)."""

    product_id: int
    quantity: int


@dataclass(frozen=True)
class CustomerSpec:
    """Input: customer contact details as submitted at checkout."""

    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    notes: str = ""
    user_id: int | None = None


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: int
    product_name: str
    quantity: int
    unit_price: int
    line_total: int


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete priced order."""

    id: int
    reference: str
    channel: str
    status: str
    customer_name: str
    customer_email: str
    customer_phone: str
    items: list[OrderLineItemDTO]
    subtotal_amount: int
    discount_amount: int
    promo_discount_amount: int
    delivery_fee: int
    grand_total: int
    delivery_zone_code: str
    delivery_zone_name: str
    coupon_code: str | None
    promo_rule_ids: list[int]
    risk_score: int
    risk_level: str
    risk_flags: list[str]
    manual_review_status: str
    internal_notes: list[str]
    created_at: str
    paid_at: str | None = None
    processing_at: str | None = None
    delivered_at: str | None = None
    cancelled_at: str | None = None
    currency: str = "NGN"

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            reference=order.reference,
            channel=order.channel.value,
            status=order.status.value,
            customer_name=order.customer.name,
            customer_email=order.customer.email,
            customer_phone=order.customer.phone,
            items=[
                OrderLineItemDTO(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity.value,
                    unit_price=item.unit_price.amount,
                    line_total=item.line_total.amount,
                )
                for item in order.items
            ],
            subtotal_amount=order.subtotal_amount.amount,
            discount_amount=order.discount_amount.amount,
            promo_discount_amount=order.promo_discount_amount.amount,
            delivery_fee=order.delivery_fee.amount,
            grand_total=order.grand_total.amount,
            delivery_zone_code=order.delivery_zone_code,
            delivery_zone_name=order.delivery_zone_name,
            coupon_code=order.coupon_code,
            promo_rule_ids=list(order.promo_rule_ids),
            risk_score=order.risk.score,
            risk_level=order.risk.level.value,
            risk_flags=list(order.risk.flags),
            manual_review_status=order.risk.manual_review_status.value,
            internal_notes=list(order.internal_notes),
            created_at=_fmt(order.created_at),
            paid_at=_fmt(order.paid_at),
            processing_at=_fmt(order.processing_at),
            delivered_at=_fmt(order.delivered_at),
            cancelled_at=_fmt(order.cancelled_at),
            currency=order.grand_total.currency,
        )


@dataclass(frozen=True)
class TimelineEventDTO:
    event_type: str
    message: str
    actor: str
    created_at: str
    payload: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_event(event: OrderTimelineEvent) -> TimelineEventDTO:
        return TimelineEventDTO(
            event_type=event.event_type.value,
            message=event.message,
            actor=event.actor,
            created_at=_fmt(event.created_at),
            payload=dict(event.payload),
        )


@dataclass(frozen=True)
class CardCheckoutDTO:
    order: OrderDTO
    authorization_url: str


def _fmt(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    return moment.strftime("%Y-%m-%d %H:%M UTC")

"""JSON-document-backed implementations of OrderRepository and TimelineRepository."""

from __future__ import annotations

import dataclasses

from storefront.domain.model.order import (
    CheckoutChannel,
    Customer,
    Order,
    OrderLineItem,
    OrderStatus,
)
from storefront.domain.model.product import ProductCategory
from storefront.domain.model.risk import RiskAssessment, RiskLevel, ReviewStatus
from storefront.domain.model.timeline import OrderTimelineEvent, TimelineEventType
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository, TimelineRepository
from storefront.infrastructure.persistence.json_store import (
    dump_datetime,
    load_datetime,
    next_id,
    upsert,
)


class JsonOrderRepository(OrderRepository):

    def __init__(self, doc: dict) -> None:
        self._rows: list[dict] = doc["orders"]

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        return next_id(self._rows)

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._rows:
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_reference(self, reference: str) -> Order | None:
        for raw in self._rows:
            if raw["reference"] == reference:
                return self._to_domain(raw)
        return None

    def list(self, status: OrderStatus | None = None) -> list[Order]:
        return [
            self._to_domain(raw)
            for raw in self._rows
            if status is None or raw["status"] == status.value
        ]

    def save(self, order: Order) -> None:
        if order.id is None:
            order.id = self.next_id()
        upsert(self._rows, self._to_raw(order))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "reference": order.reference,
            "channel": order.channel.value,
            "status": order.status.value,
            "customer": {
                "name": order.customer.name,
                "email": order.customer.email,
                "phone": order.customer.phone,
                "address": order.customer.address,
                "notes": order.customer.notes,
                "user_id": order.customer.user_id,
            },
            "items": [
                {
                    "product_id": item.product_id,
                    "product_name": item.product_name,
                    "category": item.category.value,
                    "quantity": item.quantity.value,
                    "unit_price": item.unit_price.amount,
                    "line_total": item.line_total.amount,
                }
                for item in order.items
            ],
            "currency": order.grand_total.currency,
            "subtotal_amount": order.subtotal_amount.amount,
            "delivery_fee": order.delivery_fee.amount,
            "discount_amount": order.discount_amount.amount,
            "promo_discount_amount": order.promo_discount_amount.amount,
            "grand_total": order.grand_total.amount,
            "delivery_zone_code": order.delivery_zone_code,
            "delivery_zone_name": order.delivery_zone_name,
            "coupon_code": order.coupon_code,
            "coupon_id": order.coupon_id,
            "promo_rule_ids": list(order.promo_rule_ids),
            "risk": {
                "score": order.risk.score,
                "level": order.risk.level.value,
                "flags": list(order.risk.flags),
                "manual_review_status": order.risk.manual_review_status.value,
            },
            "internal_notes": list(order.internal_notes),
            "payment_access_code": order.payment_access_code,
            "created_at": dump_datetime(order.created_at),
            "updated_at": dump_datetime(order.updated_at),
            "paid_at": dump_datetime(order.paid_at),
            "processing_at": dump_datetime(order.processing_at),
            "delivered_at": dump_datetime(order.delivered_at),
            "cancelled_at": dump_datetime(order.cancelled_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "NGN")
        items = [
            OrderLineItem(
                product_id=i["product_id"],
                product_name=i["product_name"],
                category=ProductCategory(i["category"]),
                quantity=Quantity(i["quantity"]),
                unit_price=Money(i["unit_price"], currency),
            )
            for i in raw["items"]
        ]
        risk = raw["risk"]
        return Order(
            id=raw["id"],
            reference=raw["reference"],
            channel=CheckoutChannel(raw["channel"]),
            customer=Customer(**raw["customer"]),
            items=items,
            subtotal_amount=Money(raw["subtotal_amount"], currency),
            delivery_fee=Money(raw["delivery_fee"], currency),
            discount_amount=Money(raw["discount_amount"], currency),
            promo_discount_amount=Money(raw["promo_discount_amount"], currency),
            grand_total=Money(raw["grand_total"], currency),
            delivery_zone_code=raw["delivery_zone_code"],
            delivery_zone_name=raw["delivery_zone_name"],
            risk=RiskAssessment(
                score=risk["score"],
                level=RiskLevel(risk["level"]),
                flags=tuple(risk["flags"]),
                manual_review_status=ReviewStatus(risk["manual_review_status"]),
            ),
            status=OrderStatus(raw["status"]),
            coupon_code=raw.get("coupon_code"),
            coupon_id=raw.get("coupon_id"),
            promo_rule_ids=list(raw.get("promo_rule_ids", [])),
            internal_notes=list(raw.get("internal_notes", [])),
            payment_access_code=raw.get("payment_access_code"),
            created_at=load_datetime(raw["created_at"]),
            updated_at=load_datetime(raw.get("updated_at")),
            paid_at=load_datetime(raw.get("paid_at")),
            processing_at=load_datetime(raw.get("processing_at")),
            delivered_at=load_datetime(raw.get("delivered_at")),
            cancelled_at=load_datetime(raw.get("cancelled_at")),
        )


class JsonTimelineRepository(TimelineRepository):
    """Append-only: events are never rewritten once stored."""

    def __init__(self, doc: dict) -> None:
        self._rows: list[dict] = doc["timeline"]

    def append(self, event: OrderTimelineEvent) -> OrderTimelineEvent:
        stored = dataclasses.replace(event, id=next_id(self._rows))
        self._rows.append(
            {
                "id": stored.id,
                "order_id": stored.order_id,
                "event_type": stored.event_type.value,
                "message": stored.message,
                "actor": stored.actor,
                "payload": dict(stored.payload),
                "created_at": dump_datetime(stored.created_at),
            }
        )
        return stored

    def list_for_order(self, order_id: int) -> list[OrderTimelineEvent]:
        return [
            OrderTimelineEvent(
                id=raw["id"],
                order_id=raw["order_id"],
                event_type=TimelineEventType(raw["event_type"]),
                message=raw["message"],
                actor=raw["actor"],
                payload=raw.get("payload", {}),
                created_at=load_datetime(raw["created_at"]),
            )
            for raw in self._rows
            if raw["order_id"] == order_id
        ]

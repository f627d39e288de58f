"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items and its
timeline. Amounts are computed once at checkout and stored; they are
never recomputed from the catalog afterwards.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from storefront.domain.exceptions import InvalidStatusTransitionError, ValidationError
from storefront.domain.model.product import ProductCategory
from storefront.domain.model.risk import RiskAssessment, RiskLevel, ReviewStatus
from storefront.domain.model.value_objects import Money, Quantity, normalize_email


class OrderStatus(Enum):
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"
    PROCESSING = "processing"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @staticmethod
    def parse(raw: str) -> OrderStatus:
        try:
            return OrderStatus((raw or "").strip().lower())
        except ValueError:
            raise InvalidStatusTransitionError(f"Invalid order status: {raw!r}") from None


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


class CheckoutChannel(Enum):
    CARD = "card"
    WHATSAPP = "whatsapp"

    @staticmethod
    def parse(raw: str) -> CheckoutChannel:
        try:
            return CheckoutChannel((raw or "").strip().lower())
        except ValueError:
            raise ValidationError("channel must be 'card' or 'whatsapp'") from None


@dataclass(frozen=True)
class Customer:
    """Contact details captured with an order."""

    name: str
    email: str
    phone: str = ""
    address: str = ""
    notes: str = ""
    user_id: int | None = None

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    def validated(self) -> Customer:
        """Return a trimmed copy, enforcing the required contact fields."""
        name = (self.name or "").strip()
        email = normalize_email(self.email)
        if not name:
            raise ValidationError("Customer name is required")
        if not email:
            raise ValidationError("Customer email is required")
        return Customer(
            name=name,
            email=email,
            phone=(self.phone or "").strip(),
            address=(self.address or "").strip(),
            notes=(self.notes or "").strip(),
            user_id=self.user_id,
        )


@dataclass(frozen=True)
class CartItem:
    """What the client says is in the cart. Re-validated at pricing time."""

    product_id: int
    quantity: int


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the price snapshot of a product at order-creation time."""

    product_id: int
    product_name: str
    category: ProductCategory
    quantity: Quantity
    unit_price: Money  # locked at order-creation time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_LINE_ITEMS = 50
REFERENCE_PREFIX = "VB"


def generate_reference(now: datetime | None = None) -> str:
    """Human-shareable order reference, e.g. ``VB-1739190000000-K3F9QZ``."""
    now = now or datetime.now(timezone.utc)
    alphabet = string.ascii_uppercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(6))
    return f"{REFERENCE_PREFIX}-{int(now.timestamp() * 1000)}-{suffix}"


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    reference: str
    channel: CheckoutChannel
    customer: Customer
    items: list[OrderLineItem]
    subtotal_amount: Money
    delivery_fee: Money
    discount_amount: Money
    promo_discount_amount: Money
    grand_total: Money
    delivery_zone_code: str
    delivery_zone_name: str
    risk: RiskAssessment
    status: OrderStatus = OrderStatus.PENDING_PAYMENT
    coupon_code: str | None = None
    coupon_id: int | None = None
    promo_rule_ids: list[int] = field(default_factory=list)
    internal_notes: list[str] = field(default_factory=list)
    payment_access_code: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime | None = None
    paid_at: datetime | None = None
    processing_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        reference: str,
        channel: CheckoutChannel,
        customer: Customer,
        items: list[OrderLineItem],
        subtotal_amount: Money,
        delivery_fee: Money,
        discount_amount: Money,
        promo_discount_amount: Money,
        grand_total: Money,
        delivery_zone_code: str,
        delivery_zone_name: str,
        risk: RiskAssessment,
        status: OrderStatus,
        coupon_code: str | None = None,
        coupon_id: int | None = None,
        promo_rule_ids: list[int] | None = None,
        now: datetime | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not items:
            raise ValidationError("Order must contain at least one item")

        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        if status.is_terminal:
            raise ValidationError(f"An order cannot start in {status.value} status")

        subtotal = Money.zero(subtotal_amount.currency)
        for item in items:
            subtotal = subtotal + item.line_total
        if subtotal != subtotal_amount:
            raise ValidationError(
                f"Subtotal {subtotal_amount} does not match line items ({subtotal})"
            )

        expected_total = (subtotal_amount + delivery_fee).less(
            discount_amount + promo_discount_amount
        )
        if grand_total != expected_total:
            raise ValidationError(
                f"Grand total {grand_total} does not match amounts ({expected_total})"
            )

        now = now or datetime.now(timezone.utc)
        return Order(
            id=None,
            reference=reference,
            channel=channel,
            customer=customer,
            items=list(items),
            subtotal_amount=subtotal_amount,
            delivery_fee=delivery_fee,
            discount_amount=discount_amount,
            promo_discount_amount=promo_discount_amount,
            grand_total=grand_total,
            delivery_zone_code=delivery_zone_code,
            delivery_zone_name=delivery_zone_name,
            risk=risk,
            status=status,
            coupon_code=coupon_code,
            coupon_id=coupon_id,
            promo_rule_ids=list(promo_rule_ids or []),
            created_at=now,
            updated_at=now,
        )

    # --- State transitions ----------------------------------------------------

    def change_status(self, next_status: OrderStatus, now: datetime) -> OrderStatus:
        """Move to ``next_status`` and stamp the matching lifecycle timestamp.

        Any non-terminal status may move to any other status.  Returns the
        previous status.
        """
        if self.status.is_terminal:
            raise InvalidStatusTransitionError(
                f"Order {self.reference} is {self.status.value} and can no longer change status"
            )
        if next_status == self.status:
            raise InvalidStatusTransitionError(
                f"Order {self.reference} is already {self.status.value}"
            )

        previous = self.status
        self.status = next_status
        self._stamp(next_status, now)
        self.updated_at = now
        return previous

    def add_note(self, note: str, now: datetime) -> None:
        """Internal notes are the one thing terminal orders still accept."""
        note = (note or "").strip()
        if not note:
            raise ValidationError("Note cannot be empty")
        self.internal_notes.append(note)
        self.updated_at = now

    # --- Computed properties --------------------------------------------------

    @property
    def total_discount(self) -> Money:
        return self.discount_amount + self.promo_discount_amount

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def risk_score(self) -> int:
        return self.risk.score

    @property
    def risk_level(self) -> RiskLevel:
        return self.risk.level

    @property
    def manual_review_status(self) -> ReviewStatus:
        return self.risk.manual_review_status

    # --- Internal helpers -----------------------------------------------------

    def _stamp(self, status: OrderStatus, now: datetime) -> None:
        if status is OrderStatus.PAID:
            if self.paid_at is None:
                self.paid_at = now
        elif status is OrderStatus.PROCESSING:
            self.processing_at = now
        elif status is OrderStatus.DELIVERED:
            self.delivered_at = now
        elif status is OrderStatus.CANCELLED:
            self.cancelled_at = now

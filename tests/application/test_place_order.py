"""Integration tests for the PlaceOrder use case.

Uses in-memory fake repositories — no file I/O.
"""

import pytest

from storefront.application.dto import CartItemSpec, CustomerSpec
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.ports import RateLimiter
from storefront.domain.exceptions import (
    CouponExhaustedError,
    DeliveryZoneUncoveredError,
    EmptyCartError,
    InvalidCouponError,
    RateLimitExceededError,
    ValidationError,
)
from storefront.domain.model.coupon import Coupon, DiscountType
from storefront.domain.model.timeline import TimelineEventType
from storefront.domain.model.value_objects import Money
from tests.fakes import FakeUnitOfWork, FixedClock, RecordingNotifier, seeded_uow

ADA = CustomerSpec(name="Ada", email="Ada@Example.com", phone="0800", address="Yaba", user_id=3)


class DenyAfter(RateLimiter):

    def __init__(self, allowed: int) -> None:
        self.allowed = allowed
        self.keys: list[str] = []

    def allow(self, key: str) -> bool:
        self.keys.append(key)
        return len(self.keys) <= self.allowed


def _save10(**options) -> Coupon:
    return Coupon.create("SAVE10", DiscountType.PERCENT, 10,
                         max_discount_amount=Money(4_000), **options)


def _setup(
    uow: FakeUnitOfWork | None = None,
    rate_limiter: RateLimiter | None = None,
) -> tuple[PlaceOrderHandler, FakeUnitOfWork, RecordingNotifier]:
    """Build handler with a seeded fake unit of work."""
    uow = uow or seeded_uow()
    notifier = RecordingNotifier()
    handler = PlaceOrderHandler(uow, notifier, rate_limiter=rate_limiter, clock=FixedClock())
    return handler, uow, notifier


class TestPlaceOrderHappyPath:

    def test_card_order_totals(self):
        handler, _, _ = _setup()
        dto = handler.handle(ADA, [CartItemSpec(1, 2)], "lagos_mainland")
        assert dto.status == "pending_payment"
        assert dto.channel == "card"
        assert dto.subtotal_amount == 50_000
        assert dto.delivery_fee == 3_000
        assert dto.grand_total == 53_000
        assert dto.customer_email == "ada@example.com"
        assert dto.delivery_zone_name == "Lagos Mainland"

    def test_whatsapp_order_starts_processing(self):
        handler, _, _ = _setup()
        dto = handler.handle(ADA, [CartItemSpec(1, 1)], "abuja", channel="whatsapp")
        assert dto.status == "processing"
        assert dto.processing_at == "2026-02-10 12:00 UTC"

    def test_order_is_persisted_with_creation_event(self):
        handler, uow, _ = _setup()
        dto = handler.handle(ADA, [CartItemSpec(1, 1)], "lagos_mainland")
        assert uow.orders.get_by_id(dto.id) is not None
        assert [e.event_type for e in uow.timeline.events] == [TimelineEventType.ORDER_CREATED]
        assert uow.commits == 1

    def test_reference_lookup_returns_same_totals(self):
        handler, uow, _ = _setup(seeded_uow(coupons=[_save10()]))
        dto = handler.handle(ADA, [CartItemSpec(1, 2)], "lagos_mainland", coupon_code="save10")
        stored = uow.orders.get_by_reference(dto.reference)
        assert stored.grand_total.amount == dto.grand_total == 49_000
        assert stored.discount_amount.amount == dto.discount_amount == 4_000
        assert stored.coupon_code == "SAVE10"

    def test_notifier_called_once_after_commit(self):
        handler, _, notifier = _setup()
        dto = handler.handle(ADA, [CartItemSpec(1, 1)], "lagos_mainland")
        assert len(notifier.new_orders) == 1
        assert notifier.new_orders[0].id == dto.id

    def test_catalog_price_changes_do_not_touch_existing_orders(self):
        handler, uow, _ = _setup()
        dto = handler.handle(ADA, [CartItemSpec(1, 1)], "lagos_mainland")
        rice = uow.products.get_by_id(1)
        rice.update_price(Money(99_000))
        uow.products.save(rice)
        assert uow.orders.get_by_id(dto.id).subtotal_amount.amount == 25_000


class TestCouponRedemption:

    def test_used_count_incremented_and_usage_recorded(self):
        handler, uow, _ = _setup(seeded_uow(coupons=[_save10()]))
        dto = handler.handle(ADA, [CartItemSpec(1, 2)], "lagos_mainland", "SAVE10")
        assert uow.coupons.get_by_code("SAVE10").used_count == 1
        assert len(uow.coupons.usages) == 1
        assert uow.coupons.usages[0].order_id == dto.id
        assert uow.coupons.usages[0].customer_email == "ada@example.com"

    def test_invalid_coupon_aborts_checkout(self):
        handler, uow, notifier = _setup()
        with pytest.raises(InvalidCouponError, match="Invalid coupon code"):
            handler.handle(ADA, [CartItemSpec(1, 1)], "lagos_mainland", "NOPE")
        assert uow.orders.list() == []
        assert notifier.new_orders == []

    def test_exhausted_at_redemption_rolls_back_everything(self, monkeypatch):
        uow = seeded_uow(coupons=[_save10(usage_limit=1)])
        handler, _, notifier = _setup(uow)

        # Another checkout takes the last use between validation and redemption.
        monkeypatch.setattr(uow.coupons, "redeem", lambda coupon_id: False)
        with pytest.raises(CouponExhaustedError, match="usage limit reached"):
            handler.handle(ADA, [CartItemSpec(1, 1)], "lagos_mainland", "SAVE10")

        assert uow.orders.list() == []
        assert uow.timeline.events == []
        assert uow.coupons.usages == []
        assert uow.commits == 0
        assert notifier.new_orders == []

    def test_second_checkout_past_limit_rejected(self):
        handler, uow, _ = _setup(seeded_uow(coupons=[_save10(usage_limit=1)]))
        handler.handle(ADA, [CartItemSpec(1, 1)], "lagos_mainland", "SAVE10")
        with pytest.raises(InvalidCouponError, match="usage limit reached"):
            handler.handle(ADA, [CartItemSpec(1, 1)], "lagos_mainland", "SAVE10")
        assert uow.coupons.get_by_code("SAVE10").used_count == 1
        assert len(uow.orders.list()) == 1


class TestPlaceOrderRejections:

    def test_missing_name_rejected(self):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError, match="name is required"):
            handler.handle(CustomerSpec(email="a@b.c"), [CartItemSpec(1, 1)], "abuja")

    def test_signed_in_customer_still_needs_email(self):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError, match="email is required"):
            handler.handle(CustomerSpec(name="Ada", user_id=3), [CartItemSpec(1, 1)], "abuja")

    def test_empty_cart_rejected(self):
        handler, _, _ = _setup()
        with pytest.raises(EmptyCartError):
            handler.handle(ADA, [CartItemSpec(2, 50)], "abuja")

    def test_uncovered_zone_writes_nothing(self):
        handler, uow, _ = _setup()
        with pytest.raises(DeliveryZoneUncoveredError):
            handler.handle(ADA, [CartItemSpec(1, 1)], "outside_coverage")
        assert uow.orders.list() == []

    def test_unknown_channel_rejected(self):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError, match="channel"):
            handler.handle(ADA, [CartItemSpec(1, 1)], "abuja", channel="cash")


class TestCheckoutThrottling:

    def test_rate_limited_client_rejected(self):
        limiter = DenyAfter(1)
        handler, uow, _ = _setup(rate_limiter=limiter)
        handler.handle(ADA, [CartItemSpec(1, 1)], "abuja", client_id="10.0.0.1")
        with pytest.raises(RateLimitExceededError, match="Too many checkout attempts"):
            handler.handle(ADA, [CartItemSpec(1, 1)], "abuja", client_id="10.0.0.1")
        assert limiter.keys == ["10.0.0.1:checkout", "10.0.0.1:checkout"]
        assert len(uow.orders.list()) == 1

    def test_no_client_id_skips_throttle(self):
        limiter = DenyAfter(0)
        handler, _, _ = _setup(rate_limiter=limiter)
        handler.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        assert limiter.keys == []

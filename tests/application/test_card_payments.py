"""Integration tests for card checkout and payment verification.

Uses in-memory fake repositories and a fake payment gateway.
"""

import pytest

from storefront.application.dto import CartItemSpec, CustomerSpec
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.ports import PaymentVerification
from storefront.application.start_card_checkout import StartCardCheckoutHandler
from storefront.application.verify_payment import VerifyPaymentHandler
from storefront.domain.exceptions import EntityNotFoundError, PaymentGatewayError
from storefront.domain.model.order import OrderStatus
from storefront.domain.model.timeline import TimelineEventType
from storefront.domain.model.value_objects import Money
from tests.fakes import FakePaymentGateway, FixedClock, RecordingNotifier, seeded_uow

ADA = CustomerSpec(name="Ada", email="ada@example.com", phone="0800", user_id=3)


def _setup(
    gateway: FakePaymentGateway | None = None,
    notifier: RecordingNotifier | None = None,
):
    uow = seeded_uow()
    clock = FixedClock()
    gateway = gateway or FakePaymentGateway()
    notifier = notifier or RecordingNotifier()
    place = PlaceOrderHandler(uow, notifier, clock=clock)
    checkout = StartCardCheckoutHandler(place, gateway, uow, "http://shop.test/")
    verify = VerifyPaymentHandler(uow, gateway, notifier, clock)
    return checkout, verify, uow, gateway


class TestStartCardCheckout:

    def test_opens_payment_for_grand_total(self):
        checkout, _, _, gateway = _setup()
        result = checkout.handle(ADA, [CartItemSpec(1, 2)], "lagos_mainland")

        ref = result.order.reference
        assert result.authorization_url == f"https://checkout.example/{ref}"
        call = gateway.initialized[0]
        assert call["amount"] == Money(53_000)
        assert call["email"] == "ada@example.com"
        assert call["callback_url"] == f"http://shop.test/checkout/success?reference={ref}"
        assert call["metadata"] == {"order_id": result.order.id, "user_id": 3,
                                    "customer_name": "Ada"}

    def test_access_code_stored_on_order(self):
        checkout, _, uow, _ = _setup()
        result = checkout.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        stored = uow.orders.get_by_id(result.order.id)
        assert stored.payment_access_code == f"AC-{result.order.reference}"
        assert stored.status is OrderStatus.PENDING_PAYMENT

    def test_gateway_failure_leaves_pending_order(self):
        checkout, _, uow, _ = _setup(FakePaymentGateway(fail_initialize=True))
        with pytest.raises(PaymentGatewayError, match="init failed"):
            checkout.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        [order] = uow.orders.list()
        assert order.status is OrderStatus.PENDING_PAYMENT
        assert order.payment_access_code is None


class TestVerifyPayment:

    def test_success_marks_order_paid(self):
        checkout, verify, uow, _ = _setup()
        ref = checkout.handle(ADA, [CartItemSpec(1, 1)], "abuja").order.reference

        assert verify.handle(ref) is PaymentVerification.SUCCESS

        order = uow.orders.get_by_reference(ref)
        assert order.status is OrderStatus.PAID
        assert order.paid_at is not None
        types = [e.event_type for e in uow.timeline.list_for_order(order.id)]
        assert types == [TimelineEventType.ORDER_CREATED, TimelineEventType.PAYMENT_CONFIRMED]

    def test_repeat_verification_is_idempotent(self):
        checkout, verify, uow, _ = _setup()
        ref = checkout.handle(ADA, [CartItemSpec(1, 1)], "abuja").order.reference
        verify.handle(ref)
        commits = uow.commits

        assert verify.handle(ref) is PaymentVerification.SUCCESS
        assert uow.commits == commits
        assert len(uow.timeline.events) == 2

    @pytest.mark.parametrize("outcome", [PaymentVerification.PENDING, PaymentVerification.FAILED])
    def test_unsuccessful_payment_leaves_order_pending(self, outcome):
        checkout, verify, uow, _ = _setup(FakePaymentGateway(outcome=outcome))
        ref = checkout.handle(ADA, [CartItemSpec(1, 1)], "abuja").order.reference
        assert verify.handle(ref) is outcome
        assert uow.orders.get_by_reference(ref).status is OrderStatus.PENDING_PAYMENT

    def test_unknown_reference_rejected_before_gateway_call(self):
        _, verify, _, gateway = _setup()
        with pytest.raises(EntityNotFoundError, match="VB-0-NOPE"):
            verify.handle("VB-0-NOPE")
        assert gateway.verified == []

    def test_payment_confirmation_notifies_customer(self):
        notifier = RecordingNotifier()
        checkout, verify, uow, _ = _setup(notifier=notifier)
        ref = checkout.handle(ADA, [CartItemSpec(1, 1)], "abuja").order.reference

        verify.handle(ref)
        verify.handle(ref)

        [(order, previous, current)] = notifier.status_changes
        assert order.reference == ref
        assert previous is OrderStatus.PENDING_PAYMENT
        assert current is OrderStatus.PAID

    def test_failed_payment_sends_nothing(self):
        notifier = RecordingNotifier()
        checkout, verify, _, _ = _setup(FakePaymentGateway(outcome=PaymentVerification.FAILED), notifier)
        verify.handle(checkout.handle(ADA, [CartItemSpec(1, 1)], "abuja").order.reference)
        assert notifier.status_changes == []

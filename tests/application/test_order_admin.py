"""Integration tests for the admin order use cases.

Status changes, notes, listings, the risk queue and the timeline.
"""

import pytest

from storefront.application.add_order_note import AddOrderNoteHandler
from storefront.application.dto import CartItemSpec, CustomerSpec
from storefront.application.list_orders import (
    ListOrdersHandler,
    RiskQueueHandler,
    ShowTimelineHandler,
)
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import (
    EntityNotFoundError,
    InvalidStatusTransitionError,
    ValidationError,
)
from storefront.domain.model.order import OrderStatus
from tests.fakes import FixedClock, RecordingNotifier, seeded_uow

ADA = CustomerSpec(name="Ada", email="ada@example.com", phone="0800", user_id=3)
GUEST = CustomerSpec(name="Guest", email="guest@example.com")


def _setup():
    uow = seeded_uow()
    clock = FixedClock()
    notifier = RecordingNotifier()
    place = PlaceOrderHandler(uow, notifier, clock=clock)
    return place, uow, notifier, clock


class TestUpdateOrderStatus:

    def test_one_event_and_one_notification(self):
        place, uow, notifier, clock = _setup()
        dto = place.handle(ADA, [CartItemSpec(1, 1)], "abuja", channel="whatsapp")
        before = len(uow.timeline.events)

        result = UpdateOrderStatusHandler(uow, notifier, clock).handle(
            dto.id, "delivered", actor="admin"
        )

        assert result.status == "delivered"
        assert result.delivered_at is not None
        assert len(uow.timeline.events) == before + 1
        assert uow.timeline.events[-1].actor == "admin"
        [(order, previous, nxt)] = notifier.status_changes
        assert (previous, nxt) == (OrderStatus.PROCESSING, OrderStatus.DELIVERED)
        assert order.id == dto.id

    def test_rejected_transition_writes_nothing(self):
        place, uow, notifier, clock = _setup()
        dto = place.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        handler = UpdateOrderStatusHandler(uow, notifier, clock)
        handler.handle(dto.id, OrderStatus.CANCELLED, actor="admin")
        events = len(uow.timeline.events)

        with pytest.raises(InvalidStatusTransitionError, match="can no longer change"):
            handler.handle(dto.id, "processing", actor="admin")

        assert len(uow.timeline.events) == events
        assert len(notifier.status_changes) == 1

    def test_unknown_order(self):
        _, uow, notifier, clock = _setup()
        with pytest.raises(EntityNotFoundError, match="#42"):
            UpdateOrderStatusHandler(uow, notifier, clock).handle(42, "paid", actor="admin")


class TestAddOrderNote:

    def test_note_stored_and_recorded(self):
        place, uow, _, clock = _setup()
        dto = place.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        result = AddOrderNoteHandler(uow, clock).handle(dto.id, " call first ", actor="admin")
        assert result.internal_notes == ["call first"]
        assert uow.timeline.events[-1].message == "call first"

    def test_blank_note_rejected(self):
        place, uow, _, clock = _setup()
        dto = place.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        with pytest.raises(ValidationError, match="cannot be empty"):
            AddOrderNoteHandler(uow, clock).handle(dto.id, "  ", actor="admin")
        assert uow.orders.get_by_id(dto.id).internal_notes == []


class TestOrderQueries:

    def test_show_by_id_and_reference(self):
        place, uow, _, _ = _setup()
        dto = place.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        handler = ShowOrderHandler(uow)
        assert handler.handle(dto.id) == dto
        assert handler.handle_by_reference(f" {dto.reference} ") == dto

    def test_show_unknown_reference(self):
        _, uow, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="VB-nope"):
            ShowOrderHandler(uow).handle_by_reference("VB-nope")

    def test_list_newest_first_and_by_status(self):
        place, uow, _, clock = _setup()
        first = place.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        clock.advance(minutes=5)
        second = place.handle(ADA, [CartItemSpec(1, 1)], "abuja", channel="whatsapp")

        listed = ListOrdersHandler(uow).handle()
        assert [o.id for o in listed] == [second.id, first.id]
        assert [o.id for o in ListOrdersHandler(uow).handle("processing")] == [second.id]

    def test_list_by_customer_account(self):
        place, uow, _, clock = _setup()
        mine = place.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        place.handle(GUEST, [CartItemSpec(1, 1)], "abuja")
        clock.advance(minutes=5)
        latest = place.handle(ADA, [CartItemSpec(2, 1)], "abuja", channel="whatsapp")

        handler = ListOrdersHandler(uow)
        assert [o.id for o in handler.handle(user_id=3)] == [latest.id, mine.id]
        assert [o.id for o in handler.handle("pending_payment", user_id=3)] == [mine.id]
        assert handler.handle(user_id=99) == []

    def test_risk_queue_riskiest_first(self):
        place, uow, _, _ = _setup()
        place.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        car = place.handle(GUEST, [CartItemSpec(3, 1)], "abuja")
        queued = RiskQueueHandler(uow).handle()
        assert [o.id for o in queued] == [car.id]
        assert queued[0].risk_level == "high"
        assert queued[0].manual_review_status == "queued"

    def test_timeline_in_order(self):
        place, uow, notifier, clock = _setup()
        dto = place.handle(ADA, [CartItemSpec(1, 1)], "abuja")
        UpdateOrderStatusHandler(uow, notifier, clock).handle(dto.id, "paid", actor="admin")
        events = ShowTimelineHandler(uow).handle(dto.id)
        assert [e.event_type for e in events] == ["order_created", "status_changed"]
        assert events[1].payload == {"previous_status": "pending_payment", "next_status": "paid"}

    def test_timeline_unknown_order(self):
        _, uow, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            ShowTimelineHandler(uow).handle(7)

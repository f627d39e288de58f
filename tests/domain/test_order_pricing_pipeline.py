"""Unit tests for the OrderPricingPipeline domain service.

Uses in-memory fake repositories — no file I/O.
"""

from datetime import timedelta

import pytest

from storefront.domain.exceptions import (
    DeliveryZoneUncoveredError,
    EmptyCartError,
    InvalidCouponError,
    InvalidDeliveryZoneError,
)
from storefront.domain.model.coupon import Coupon, DiscountType
from storefront.domain.model.delivery_zone import DeliveryZone
from storefront.domain.model.order import CartItem, Customer
from storefront.domain.model.product import Product, ProductCategory
from storefront.domain.model.promo_rule import PromoRule, PromoRuleType
from storefront.domain.model.risk import RiskLevel
from storefront.domain.model.value_objects import Money
from storefront.domain.service.coupon_validator import CouponValidator
from storefront.domain.service.delivery_zone_calculator import DeliveryZoneCalculator
from storefront.domain.service.order_pricing_pipeline import (
    PRICING_STAGES,
    OrderPricingPipeline,
)
from storefront.domain.service.promo_rule_engine import PromoRuleEngine
from storefront.domain.service.risk_scorer import RiskScorer
from tests.fakes import (
    NOW,
    FakeCouponRepository,
    FakeDeliveryZoneRepository,
    FakeProductRepository,
    FakePromoRuleRepository,
    FixedClock,
)

CUSTOMER = Customer(name="Ada", email="ada@example.com", phone="0800", user_id=3)


def _products() -> list[Product]:
    return [
        Product(id=1, name="Rice", category=ProductCategory.GROCERY,
                price=Money(25_000), stock_quantity=10),
        Product(id=2, name="Beef", category=ProductCategory.GROCERY,
                price=Money(4_500), stock_quantity=1),
        Product(id=3, name="Camry", category=ProductCategory.CAR,
                price=Money(18_500_000), stock_quantity=3),
    ]


def _zones() -> list[DeliveryZone]:
    return [
        DeliveryZone(code="lagos_mainland", name="Lagos Mainland", flat_fee=Money(3_000)),
        DeliveryZone(code="outside_coverage", name="Outside Coverage",
                     flat_fee=Money(0), is_covered=False),
    ]


def _pipeline(coupons=(), rules=()) -> OrderPricingPipeline:
    clock = FixedClock()
    return OrderPricingPipeline(
        product_repo=FakeProductRepository(_products()),
        coupon_validator=CouponValidator(FakeCouponRepository(list(coupons)), clock),
        promo_engine=PromoRuleEngine(FakePromoRuleRepository(list(rules)), clock),
        delivery_calculator=DeliveryZoneCalculator(FakeDeliveryZoneRepository(_zones())),
        risk_scorer=RiskScorer(),
    )


def _save10() -> Coupon:
    return Coupon.create("SAVE10", DiscountType.PERCENT, 10,
                         max_discount_amount=Money(4_000))


class TestPricingHappyPath:

    def test_no_coupon_no_promo(self):
        priced = _pipeline().price(CUSTOMER, [CartItem(1, 2)], "lagos_mainland")
        assert priced.subtotal_amount == Money(50_000)
        assert priced.discount_amount == Money(0)
        assert priced.promo_discount_amount == Money(0)
        assert priced.delivery_fee == Money(3_000)
        assert priced.grand_total == Money(53_000)
        assert priced.coupon is None

    def test_coupon_discount_before_delivery(self):
        priced = _pipeline(coupons=[_save10()]).price(
            CUSTOMER, [CartItem(1, 2)], "lagos_mainland", coupon_code="save10"
        )
        assert priced.discount_amount == Money(4_000)
        assert priced.discounted_subtotal == Money(46_000)
        assert priced.grand_total == Money(49_000)
        assert priced.coupon.code == "SAVE10"

    def test_stages_run_in_fixed_order(self):
        priced = _pipeline().price(CUSTOMER, [CartItem(1, 1)], "lagos_mainland")
        assert priced.stage_log == PRICING_STAGES

    def test_prices_come_from_catalog(self):
        priced = _pipeline().price(CUSTOMER, [CartItem(3, 1)], "lagos_mainland")
        assert priced.items[0].unit_price == Money(18_500_000)
        assert priced.items[0].category is ProductCategory.CAR

    def test_duplicate_lines_are_merged(self):
        priced = _pipeline().price(CUSTOMER, [CartItem(1, 1), CartItem(1, 2)], "lagos_mainland")
        assert len(priced.items) == 1
        assert priced.items[0].quantity.value == 3

    def test_risk_is_scored_on_grand_total(self):
        guest = Customer(name="Ada", email="ada@example.com")
        priced = _pipeline().price(guest, [CartItem(3, 1)], "lagos_mainland")
        assert priced.risk.level is RiskLevel.HIGH
        assert priced.risk.flags == ("guest_checkout", "missing_phone", "high_amount")


class TestPromotionsInPipeline:

    def test_promo_stacks_with_coupon(self):
        rule = PromoRule.create("Grocery week", PromoRuleType.DISCOUNT,
                                discount_type=DiscountType.FIXED, discount_value=1_000,
                                created_at=NOW)
        priced = _pipeline(coupons=[_save10()], rules=[rule]).price(
            CUSTOMER, [CartItem(1, 2)], "lagos_mainland", "SAVE10"
        )
        assert priced.promo_discount_amount == Money(1_000)
        assert priced.promotions.applied_rule_ids == (1,)
        assert priced.grand_total == Money(48_000)

    def test_promo_limited_to_what_coupon_left(self):
        coupon = Coupon.create("HALF", DiscountType.PERCENT, 50)
        rule = PromoRule.create("Huge", PromoRuleType.DISCOUNT,
                                discount_value=40_000, created_at=NOW)
        priced = _pipeline(coupons=[coupon], rules=[rule]).price(
            CUSTOMER, [CartItem(1, 2)], "lagos_mainland", "HALF"
        )
        assert priced.discount_amount == Money(25_000)
        assert priced.promo_discount_amount == Money(25_000)
        assert priced.grand_total == Money(3_000)

    def test_rules_squeezed_out_by_coupon_are_not_recorded(self):
        coupon = Coupon.create("FREE", DiscountType.PERCENT, 100)
        rule = PromoRule.create("Grocery week", PromoRuleType.DISCOUNT,
                                discount_value=1_000, created_at=NOW)
        priced = _pipeline(coupons=[coupon], rules=[rule]).price(
            CUSTOMER, [CartItem(1, 2)], "lagos_mainland", "FREE"
        )
        assert priced.promo_discount_amount == Money(0)
        assert priced.promotions.applied_rule_ids == ()
        assert priced.promotions.breakdown == ()

    def test_older_rule_keeps_only_what_is_left(self):
        coupon = Coupon.create("HALF", DiscountType.PERCENT, 50)
        older = PromoRule.create("Older", PromoRuleType.DISCOUNT,
                                 discount_value=10_000, created_at=NOW - timedelta(days=1))
        newer = PromoRule.create("Newer", PromoRuleType.DISCOUNT,
                                 discount_value=20_000, created_at=NOW)
        oldest = PromoRule.create("Oldest", PromoRuleType.DISCOUNT,
                                  discount_value=5_000, created_at=NOW - timedelta(days=2))
        priced = _pipeline(coupons=[coupon], rules=[older, newer, oldest]).price(
            CUSTOMER, [CartItem(1, 2)], "lagos_mainland", "HALF"
        )
        assert priced.promo_discount_amount == Money(25_000)
        assert priced.promotions.applied_rule_ids == (2, 1)
        assert [line.discount for line in priced.promotions.breakdown] == [
            Money(20_000), Money(5_000),
        ]


class TestPricingFailures:

    def test_unknown_and_overstocked_lines_dropped(self):
        priced = _pipeline().price(
            CUSTOMER, [CartItem(1, 1), CartItem(2, 5), CartItem(99, 1)], "lagos_mainland"
        )
        assert [i.product_id for i in priced.items] == [1]

    def test_nothing_sellable_raises(self):
        with pytest.raises(EmptyCartError, match="No valid cart items"):
            _pipeline().price(CUSTOMER, [CartItem(2, 5), CartItem(1, 0)], "lagos_mainland")

    def test_invalid_coupon_raises(self):
        with pytest.raises(InvalidCouponError, match="Invalid coupon code") as exc:
            _pipeline().price(CUSTOMER, [CartItem(1, 1)], "lagos_mainland", "BOGUS")
        assert exc.value.code == "BOGUS"

    def test_uncovered_zone_raises_with_quote(self):
        with pytest.raises(DeliveryZoneUncoveredError, match="not available") as exc:
            _pipeline().price(CUSTOMER, [CartItem(1, 1)], "outside_coverage")
        assert exc.value.zone.name == "Outside Coverage"

    def test_unknown_zone_raises(self):
        with pytest.raises(InvalidDeliveryZoneError):
            _pipeline().price(CUSTOMER, [CartItem(1, 1)], "mars")

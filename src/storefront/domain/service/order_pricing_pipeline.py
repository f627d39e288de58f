"""Domain service: Order pricing pipeline.

Turns a client-supplied cart into a fully priced order.  The stages run
in a fixed order, each feeding the next:

    resolve_items -> coupon -> promotions -> delivery -> grand_total -> risk

The order is a business decision: coupon and promotions are both measured
against the raw subtotal, and delivery is priced on what is left after
both discounts.  Nothing is persisted here; a failure in any stage
raises before the caller commits anything.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from storefront.domain.exceptions import (
    DeliveryZoneUncoveredError,
    EmptyCartError,
    InvalidCouponError,
)
from storefront.domain.model.coupon import Coupon
from storefront.domain.model.delivery_zone import DeliveryQuote
from storefront.domain.model.order import CartItem, Customer, OrderLineItem
from storefront.domain.model.risk import RiskAssessment
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.coupon_validator import CouponValidator
from storefront.domain.service.delivery_zone_calculator import DeliveryZoneCalculator
from storefront.domain.service.promo_rule_engine import PromoApplication, PromoRuleEngine
from storefront.domain.service.risk_scorer import RiskScorer

PRICING_STAGES: tuple[str, ...] = (
    "resolve_items",
    "coupon",
    "promotions",
    "delivery",
    "grand_total",
    "risk",
)


@dataclass(frozen=True)
class PricedOrder:
    """Everything checkout needs to persist an order."""

    customer: Customer
    items: tuple[OrderLineItem, ...]
    subtotal_amount: Money
    coupon: Coupon | None
    discount_amount: Money
    promotions: PromoApplication
    promo_discount_amount: Money
    discounted_subtotal: Money
    delivery: DeliveryQuote
    grand_total: Money
    risk: RiskAssessment
    stage_log: tuple[str, ...]

    @property
    def delivery_fee(self) -> Money:
        return self.delivery.delivery_fee


@dataclass
class _PricingState:
    customer: Customer
    cart: Sequence[CartItem]
    zone_code: str
    coupon_code: str | None
    currency: str
    items: list[OrderLineItem] = field(default_factory=list)
    subtotal: Money | None = None
    coupon: Coupon | None = None
    coupon_discount: Money | None = None
    promotions: PromoApplication | None = None
    promo_discount: Money | None = None
    discounted_subtotal: Money | None = None
    delivery: DeliveryQuote | None = None
    grand_total: Money | None = None
    risk: RiskAssessment | None = None
    stage_log: list[str] = field(default_factory=list)


class OrderPricingPipeline:

    def __init__(
        self,
        product_repo: ProductRepository,
        coupon_validator: CouponValidator,
        promo_engine: PromoRuleEngine,
        delivery_calculator: DeliveryZoneCalculator,
        risk_scorer: RiskScorer,
        currency: str = "NGN",
    ) -> None:
        self._product_repo = product_repo
        self._coupon_validator = coupon_validator
        self._promo_engine = promo_engine
        self._delivery_calculator = delivery_calculator
        self._risk_scorer = risk_scorer
        self._currency = currency

    def price(
        self,
        customer: Customer,
        cart: Sequence[CartItem],
        delivery_zone_code: str,
        coupon_code: str | None = None,
    ) -> PricedOrder:
        state = _PricingState(
            customer=customer,
            cart=cart,
            zone_code=delivery_zone_code,
            coupon_code=coupon_code,
            currency=self._currency,
        )
        for stage in PRICING_STAGES:
            getattr(self, f"_stage_{stage}")(state)
            state.stage_log.append(stage)

        return PricedOrder(
            customer=customer,
            items=tuple(state.items),
            subtotal_amount=state.subtotal,
            coupon=state.coupon,
            discount_amount=state.coupon_discount,
            promotions=state.promotions,
            promo_discount_amount=state.promo_discount,
            discounted_subtotal=state.discounted_subtotal,
            delivery=state.delivery,
            grand_total=state.grand_total,
            risk=state.risk,
            stage_log=tuple(state.stage_log),
        )

    # --- Stages ---------------------------------------------------------------

    def _stage_resolve_items(self, state: _PricingState) -> None:
        """Re-price the cart from the catalog, dropping lines we cannot sell."""
        requested: dict[int, int] = {}
        for line in state.cart:
            if not _is_positive_int(line.product_id) or not _is_positive_int(line.quantity):
                continue
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

        products = {p.id: p for p in self._product_repo.fetch_by_ids(list(requested))}

        subtotal = Money.zero(state.currency)
        for product_id, quantity in requested.items():
            product = products.get(product_id)
            if product is None or quantity > product.stock_quantity:
                continue
            item = OrderLineItem(
                product_id=product.id,
                product_name=product.name,
                category=product.category,
                quantity=Quantity(quantity),
                unit_price=product.price,
            )
            state.items.append(item)
            subtotal = subtotal + item.line_total

        if not state.items:
            raise EmptyCartError()
        state.subtotal = subtotal

    def _stage_coupon(self, state: _PricingState) -> None:
        result = self._coupon_validator.validate(
            state.coupon_code, state.subtotal, state.customer.email
        )
        if not result.valid:
            raise InvalidCouponError(state.coupon_code or "", result.error, result.coupon)
        state.coupon = result.coupon
        state.coupon_discount = result.discount_amount

    def _stage_promotions(self, state: _PricingState) -> None:
        # Only what the coupon left of the subtotal can still be discounted.
        available = state.subtotal - state.coupon_discount
        state.promotions = self._promo_engine.apply(state.items, state.subtotal).capped(available)
        state.promo_discount = state.promotions.promo_discount
        state.discounted_subtotal = available - state.promo_discount

    def _stage_delivery(self, state: _PricingState) -> None:
        quote = self._delivery_calculator.calculate(state.zone_code, state.discounted_subtotal)
        if not quote.is_covered:
            raise DeliveryZoneUncoveredError(quote)
        state.delivery = quote

    def _stage_grand_total(self, state: _PricingState) -> None:
        state.grand_total = state.discounted_subtotal + state.delivery.delivery_fee

    def _stage_risk(self, state: _PricingState) -> None:
        state.risk = self._risk_scorer.score(
            customer_email=state.customer.email,
            customer_phone=state.customer.phone,
            amount=state.grand_total,
            is_guest=state.customer.is_guest,
        )


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0

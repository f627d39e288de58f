"""Application service: Place Order use case.

The checkout path.  Pricing, coupon redemption, the order itself, the
coupon usage row and the first timeline event all happen inside one
unit of work, so either every write lands or none do.  Notifications go
out only after the commit and never fail the checkout.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from storefront.application.dto import CartItemSpec, CustomerSpec, OrderDTO
from storefront.application.ports import NotificationService, RateLimiter
from storefront.domain.exceptions import CouponExhaustedError, RateLimitExceededError
from storefront.domain.model.coupon import CouponUsage
from storefront.domain.model.order import (
    CartItem,
    CheckoutChannel,
    Customer,
    Order,
    generate_reference,
)
from storefront.domain.model.value_objects import utc_now
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.domain.service.coupon_validator import CouponValidator
from storefront.domain.service.delivery_zone_calculator import DeliveryZoneCalculator
from storefront.domain.service.order_lifecycle import OrderLifecycle
from storefront.domain.service.order_pricing_pipeline import OrderPricingPipeline
from storefront.domain.service.promo_rule_engine import PromoRuleEngine
from storefront.domain.service.risk_scorer import RiskScorer
from storefront.logging import get_logger

logger = get_logger(__name__)

CHECKOUT_ROUTE = "checkout"


def pricing_pipeline(
    uow: UnitOfWork,
    risk_scorer: RiskScorer,
    clock: Callable[[], datetime] = utc_now,
    currency: str = "NGN",
) -> OrderPricingPipeline:
    """Build a pipeline that reads through the repositories of ``uow``."""
    return OrderPricingPipeline(
        product_repo=uow.products,
        coupon_validator=CouponValidator(uow.coupons, clock),
        promo_engine=PromoRuleEngine(uow.promo_rules, clock),
        delivery_calculator=DeliveryZoneCalculator(uow.zones),
        risk_scorer=risk_scorer,
        currency=currency,
    )


class PlaceOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: NotificationService,
        risk_scorer: RiskScorer | None = None,
        rate_limiter: RateLimiter | None = None,
        clock: Callable[[], datetime] = utc_now,
        currency: str = "NGN",
    ) -> None:
        self._uow = uow
        self._notifier = notifier
        self._risk_scorer = risk_scorer or RiskScorer()
        self._rate_limiter = rate_limiter
        self._clock = clock
        self._currency = currency
        self._lifecycle = OrderLifecycle(clock)

    def handle(
        self,
        customer: CustomerSpec,
        items: Sequence[CartItemSpec],
        delivery_zone_code: str,
        coupon_code: str | None = None,
        channel: CheckoutChannel | str = CheckoutChannel.CARD,
        client_id: str | None = None,
    ) -> OrderDTO:
        order = self.place(
            customer, items, delivery_zone_code, coupon_code, channel, client_id
        )
        return OrderDTO.from_order(order)

    def place(
        self,
        customer: CustomerSpec,
        items: Sequence[CartItemSpec],
        delivery_zone_code: str,
        coupon_code: str | None = None,
        channel: CheckoutChannel | str = CheckoutChannel.CARD,
        client_id: str | None = None,
    ) -> Order:
        """Price the cart and persist the order.

        Steps:
        1. Throttle the client (when a rate limiter is wired in).
        2. Validate the customer and run the pricing pipeline.
        3. Redeem the coupon with a conditional increment; losing the
           race at the usage limit aborts the whole checkout.
        4. Save order, coupon usage and the creation event, then commit.
        5. Hand the committed order to the notifier.
        """
        self._throttle(client_id)

        if not isinstance(channel, CheckoutChannel):
            channel = CheckoutChannel.parse(channel)
        buyer = Customer(
            name=customer.name,
            email=customer.email,
            phone=customer.phone,
            address=customer.address,
            notes=customer.notes,
            user_id=customer.user_id,
        ).validated()
        cart = [CartItem(product_id=i.product_id, quantity=i.quantity) for i in items]

        with self._uow as uow:
            priced = pricing_pipeline(
                uow, self._risk_scorer, self._clock, self._currency
            ).price(buyer, cart, delivery_zone_code, coupon_code)

            now = self._clock()
            coupon = priced.coupon
            order = Order.create(
                reference=generate_reference(now),
                channel=channel,
                customer=buyer,
                items=list(priced.items),
                subtotal_amount=priced.subtotal_amount,
                delivery_fee=priced.delivery_fee,
                discount_amount=priced.discount_amount,
                promo_discount_amount=priced.promo_discount_amount,
                grand_total=priced.grand_total,
                delivery_zone_code=priced.delivery.zone.code,
                delivery_zone_name=priced.delivery.zone.name,
                risk=priced.risk,
                status=self._lifecycle.initial_status(channel),
                coupon_code=coupon.code if coupon else None,
                coupon_id=coupon.id if coupon else None,
                promo_rule_ids=list(priced.promotions.applied_rule_ids),
                now=now,
            )

            if coupon is not None and not uow.coupons.redeem(coupon.id):
                raise CouponExhaustedError(coupon.code, coupon)

            order.id = uow.orders.next_id()
            event = self._lifecycle.open_order(order)
            uow.orders.save(order)
            if coupon is not None:
                uow.coupons.add_usage(
                    CouponUsage(
                        coupon_id=coupon.id,
                        order_id=order.id,
                        customer_email=buyer.email,
                        created_at=now,
                    )
                )
            uow.timeline.append(event)
            uow.commit()

        logger.info(
            "Order {} created: channel={} total={} risk={}",
            order.reference,
            order.channel.value,
            order.grand_total,
            order.risk_level.value,
        )
        if coupon is not None:
            logger.info("Coupon {} redeemed by order {}", coupon.code, order.reference)

        self._notifier.notify_new_order(order)
        return order

    def _throttle(self, client_id: str | None) -> None:
        if self._rate_limiter is None or not client_id:
            return
        if not self._rate_limiter.allow(f"{client_id}:{CHECKOUT_ROUTE}"):
            logger.warning("Checkout rate limit hit for client {}", client_id)
            raise RateLimitExceededError(
                "Too many checkout attempts. Please wait a moment and try again."
            )

"""Application service: Start Card Checkout use case.

Places a card order, then opens a hosted payment for it.  The order is
committed before the gateway is called: if the gateway fails the order
stays in ``pending_payment`` and is simply abandoned.
"""

from __future__ import annotations

from collections.abc import Sequence

from storefront.application.dto import CardCheckoutDTO, CartItemSpec, CustomerSpec, OrderDTO
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.ports import PaymentGateway
from storefront.domain.exceptions import EntityNotFoundError
from storefront.domain.model.order import CheckoutChannel
from storefront.domain.repository.unit_of_work import UnitOfWork
from storefront.logging import get_logger

logger = get_logger(__name__)


class StartCardCheckoutHandler:

    def __init__(
        self,
        place_order: PlaceOrderHandler,
        gateway: PaymentGateway,
        uow: UnitOfWork,
        base_url: str,
    ) -> None:
        self._place_order = place_order
        self._gateway = gateway
        self._uow = uow
        self._base_url = base_url.rstrip("/")

    def handle(
        self,
        customer: CustomerSpec,
        items: Sequence[CartItemSpec],
        delivery_zone_code: str,
        coupon_code: str | None = None,
        client_id: str | None = None,
    ) -> CardCheckoutDTO:
        order = self._place_order.place(
            customer,
            items,
            delivery_zone_code,
            coupon_code=coupon_code,
            channel=CheckoutChannel.CARD,
            client_id=client_id,
        )

        payment = self._gateway.initialize_transaction(
            amount=order.grand_total,
            reference=order.reference,
            email=order.customer.email,
            callback_url=f"{self._base_url}/checkout/success?reference={order.reference}",
            metadata={
                "order_id": order.id,
                "user_id": order.customer.user_id,
                "customer_name": order.customer.name,
            },
        )

        with self._uow as uow:
            stored = uow.orders.get_by_id(order.id)
            if stored is None:
                raise EntityNotFoundError(f"Order #{order.id} not found")
            stored.payment_access_code = payment.access_code
            uow.orders.save(stored)
            uow.commit()

        logger.info("Card payment opened for order {}", order.reference)
        return CardCheckoutDTO(
            order=OrderDTO.from_order(stored),
            authorization_url=payment.authorization_url,
        )

"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from storefront.application.add_order_note import AddOrderNoteHandler
from storefront.application.dto import CartItemSpec, CustomerSpec, OrderDTO
from storefront.application.list_orders import (
    ListOrdersHandler,
    RiskQueueHandler,
    ShowTimelineHandler,
)
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.application.start_card_checkout import StartCardCheckoutHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.application.verify_payment import VerifyPaymentHandler
from storefront.config import get_config
from storefront.domain.exceptions import (
    DeliveryZoneUncoveredError,
    DomainException,
    InvalidCouponError,
)
from storefront.domain.model.order import OrderStatus
from storefront.domain.model.value_objects import Money
from storefront.infrastructure.bootstrap import (
    notifier,
    payment_gateway,
    rate_limiter,
    risk_scorer,
    unit_of_work,
)
from storefront.infrastructure.cli.admin_commands import ADMIN_ACTOR, admin_required

_STATUSES = [s.value for s in OrderStatus]


def _parse_items(raw: str) -> list[CartItemSpec]:
    """Parse '1:2,4:3' (product id : quantity) into CartItemSpec list."""
    specs: list[CartItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        id_str, qty_str = pair.split(":", 1)
        try:
            specs.append(CartItemSpec(product_id=int(id_str), quantity=int(qty_str)))
        except ValueError:
            raise click.BadParameter(f"Invalid item '{pair}'. Both parts must be integers.")
    return specs


def _money(amount: int, currency: str) -> str:
    return str(Money(amount, currency))


def _place_order_handler() -> PlaceOrderHandler:
    config = get_config()
    return PlaceOrderHandler(
        uow=unit_of_work(),
        notifier=notifier(),
        risk_scorer=risk_scorer(),
        rate_limiter=rate_limiter(),
        currency=config.currency,
    )


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    c = dto.currency
    click.echo(f"Order #{dto.id}  {dto.reference}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_name} <{dto.customer_email}> {dto.customer_phone}")
    click.echo(f"Channel:  {dto.channel}")
    click.echo(f"Delivery: {dto.delivery_zone_name}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()

    click.echo(f"  {'Product':<28} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*64}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<28} {item.quantity:>5} "
            f"{_money(item.unit_price, c):>14} {_money(item.line_total, c):>14}"
        )
    click.echo(f"  {'-'*64}")
    click.echo(f"  {'Subtotal':<34} {_money(dto.subtotal_amount, c):>30}")
    if dto.discount_amount:
        click.echo(f"  {'Coupon ' + (dto.coupon_code or ''):<34} {'-' + _money(dto.discount_amount, c):>30}")
    if dto.promo_discount_amount:
        click.echo(f"  {'Promotions':<34} {'-' + _money(dto.promo_discount_amount, c):>30}")
    click.echo(f"  {'Delivery':<34} {_money(dto.delivery_fee, c):>30}")
    click.echo(f"  {'Grand Total':<34} {_money(dto.grand_total, c):>30}")
    click.echo()
    flags = ", ".join(dto.risk_flags) or "none"
    click.echo(f"Risk: {dto.risk_score} ({dto.risk_level}, review={dto.manual_review_status}) flags: {flags}")
    for note in dto.internal_notes:
        click.echo(f"Note: {note}")


def _checkout_error(exc: DomainException) -> click.ClickException:
    if isinstance(exc, DeliveryZoneUncoveredError):
        return click.ClickException(
            f"{exc} (zone '{exc.zone.code}'). Choose another delivery location."
        )
    if isinstance(exc, InvalidCouponError):
        return click.ClickException(f"Coupon {exc.code.upper()}: {exc.reason}")
    return click.ClickException(str(exc))


@click.command("checkout")
@click.option("--name", required=True, help="Customer name.")
@click.option("--email", required=True, help="Customer email.")
@click.option("--phone", default="", help="Customer phone.")
@click.option("--address", default="", help="Delivery address.")
@click.option("--notes", default="", help="Delivery notes.")
@click.option("--user-id", type=int, default=None, help="Account ID (omit for guest checkout).")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.option("--zone", "zone_code", required=True, help="Delivery zone code.")
@click.option("--coupon", "coupon_code", default=None, help="Coupon code.")
@click.option("--channel", type=click.Choice(["card", "whatsapp"]), default="card", show_default=True)
@click.option("--client", "client_id", default=None, help="Client key for checkout throttling.")
def order_checkout(
    name: str,
    email: str,
    phone: str,
    address: str,
    notes: str,
    user_id: int | None,
    items: str,
    zone_code: str,
    coupon_code: str | None,
    channel: str,
    client_id: str | None,
) -> None:
    """Price a cart and place an order."""
    specs = _parse_items(items)
    customer = CustomerSpec(
        name=name, email=email, phone=phone, address=address, notes=notes, user_id=user_id
    )

    try:
        if channel == "card":
            handler = StartCardCheckoutHandler(
                place_order=_place_order_handler(),
                gateway=payment_gateway(),
                uow=unit_of_work(),
                base_url=get_config().base_url,
            )
            result = handler.handle(customer, specs, zone_code, coupon_code, client_id)
            dto = result.order
        else:
            result = None
            dto = _place_order_handler().handle(
                customer, specs, zone_code, coupon_code, channel, client_id
            )
    except DomainException as exc:
        raise _checkout_error(exc)

    _display_order(dto)
    if result is not None:
        click.echo()
        click.echo(f"Pay here: {result.authorization_url}")


@click.command("show")
@click.option("--id", "order_id", type=int, default=None, help="Order ID to display.")
@click.option("--reference", default=None, help="Order reference (VB-...).")
def order_show(order_id: int | None, reference: str | None) -> None:
    """Show details of an existing order."""
    if (order_id is None) == (reference is None):
        raise click.UsageError("Pass exactly one of --id or --reference.")
    handler = ShowOrderHandler(uow=unit_of_work())

    try:
        dto = handler.handle(order_id) if order_id is not None else handler.handle_by_reference(reference)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


def _display_order_rows(orders: list[OrderDTO]) -> None:
    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<5} {'Reference':<26} {'Status':<16} {'Total':>14} {'Risk':>5}  Customer")
    click.echo("-" * 90)
    for o in orders:
        click.echo(
            f"{o.id:<5} {o.reference:<26} {o.status:<16} "
            f"{_money(o.grand_total, o.currency):>14} {o.risk_score:>5}  {o.customer_email}"
        )


@click.command("list")
@click.option("--status", type=click.Choice(_STATUSES), default=None, help="Filter by status.")
@click.option("--user-id", type=int, default=None, help="Only orders placed by this customer account.")
@admin_required
def order_list(status: str | None, user_id: int | None) -> None:
    """List orders, newest first."""
    try:
        orders = ListOrdersHandler(uow=unit_of_work()).handle(status, user_id=user_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    _display_order_rows(orders)


@click.command("risk-queue")
@admin_required
def order_risk_queue() -> None:
    """List orders waiting for manual risk review."""
    _display_order_rows(RiskQueueHandler(uow=unit_of_work()).handle())


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--to", "status", required=True, type=click.Choice(_STATUSES), help="New status.")
@admin_required
def order_status(order_id: int, status: str) -> None:
    """Move an order to another status."""
    handler = UpdateOrderStatusHandler(uow=unit_of_work(), notifier=notifier())

    try:
        dto = handler.handle(order_id, status, ADMIN_ACTOR)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} is now {dto.status}.")


@click.command("note")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--text", required=True, help="Internal note.")
@admin_required
def order_note(order_id: int, text: str) -> None:
    """Attach an internal note to an order."""
    handler = AddOrderNoteHandler(uow=unit_of_work())

    try:
        handler.handle(order_id, text, ADMIN_ACTOR)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Note added to order #{order_id}.")


@click.command("timeline")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@admin_required
def order_timeline(order_id: int) -> None:
    """Show the history of an order."""
    try:
        events = ShowTimelineHandler(uow=unit_of_work()).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for e in events:
        click.echo(f"{e.created_at}  {e.event_type:<18} {e.actor:<8} {e.message}")


@click.command("verify-payment")
@click.option("--reference", required=True, help="Order reference (VB-...).")
def order_verify_payment(reference: str) -> None:
    """Check a card payment with the gateway and mark the order paid."""
    handler = VerifyPaymentHandler(
        uow=unit_of_work(), gateway=payment_gateway(), notifier=notifier()
    )

    try:
        outcome = handler.handle(reference)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment {reference}: {outcome.value}")

"""CLI commands for coupons and automatic promotions."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from storefront.application.add_coupon import AddCouponHandler
from storefront.application.add_promo_rule import AddPromoRuleHandler
from storefront.application.list_catalog import ListCouponsHandler, ListPromoRulesHandler
from storefront.application.quote_delivery import CheckCouponHandler
from storefront.config import get_config
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import unit_of_work
from storefront.infrastructure.cli.admin_commands import admin_required

_DATE = click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"])


def _utc(moment: datetime | None) -> datetime | None:
    """Dates typed on the command line are taken as UTC."""
    if moment is None:
        return None
    return moment.replace(tzinfo=timezone.utc)


def _window(starts_at: datetime | None, ends_at: datetime | None) -> str:
    start = starts_at.strftime("%Y-%m-%d") if starts_at else "-"
    end = ends_at.strftime("%Y-%m-%d") if ends_at else "-"
    return f"{start} .. {end}"


# --- Coupons ------------------------------------------------------------------

@click.command("add")
@click.option("--code", required=True, help="Coupon code (stored upper-case).")
@click.option("--type", "discount_type", required=True, type=click.Choice(["fixed", "percent"]))
@click.option("--value", "discount_value", required=True, type=int, help="Naira off, or percent.")
@click.option("--description", default="", help="Shown to admins only.")
@click.option("--min-order", default=None, help="Minimum subtotal in Naira.")
@click.option("--max-discount", default=None, help="Cap on the discount in Naira.")
@click.option("--starts", type=_DATE, default=None, help="First valid day (UTC).")
@click.option("--ends", type=_DATE, default=None, help="Last valid moment (UTC).")
@click.option("--usage-limit", type=int, default=None, help="Total redemptions allowed.")
@click.option("--per-customer-limit", type=int, default=None, help="Redemptions per email.")
@click.option("--inactive", is_flag=True, default=False, help="Create switched off.")
@admin_required
def coupon_add(
    code: str,
    discount_type: str,
    discount_value: int,
    description: str,
    min_order: str | None,
    max_discount: str | None,
    starts: datetime | None,
    ends: datetime | None,
    usage_limit: int | None,
    per_customer_limit: int | None,
    inactive: bool,
) -> None:
    """Create a coupon code."""
    handler = AddCouponHandler(uow=unit_of_work(), currency=get_config().currency)

    try:
        coupon = handler.handle(
            code=code,
            discount_type=discount_type,
            discount_value=discount_value,
            description=description,
            min_order_amount=min_order,
            max_discount_amount=max_discount,
            starts_at=_utc(starts),
            ends_at=_utc(ends),
            usage_limit=usage_limit,
            per_customer_limit=per_customer_limit,
            is_active=not inactive,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {coupon.code} created (#{coupon.id})")


@click.command("list")
@admin_required
def coupon_list() -> None:
    """List all coupons."""
    coupons = ListCouponsHandler(uow=unit_of_work()).handle()

    if not coupons:
        click.echo("No coupons found.")
        return

    click.echo(f"{'Code':<16} {'Discount':>12} {'Used':>9}  {'Active':<6} Window")
    click.echo("-" * 70)
    for c in coupons:
        discount = f"{c.discount_value}%" if c.discount_type.value == "percent" else f"₦{c.discount_value:,}"
        used = f"{c.used_count}/{c.usage_limit}" if c.usage_limit is not None else str(c.used_count)
        click.echo(
            f"{c.code:<16} {discount:>12} {used:>9}  {'yes' if c.is_active else 'no':<6} "
            f"{_window(c.starts_at, c.ends_at)}"
        )


@click.command("check")
@click.option("--code", required=True, help="Coupon code.")
@click.option("--subtotal", required=True, help="Cart subtotal in Naira.")
@click.option("--email", default=None, help="Customer email (for per-customer limits).")
def coupon_check(code: str, subtotal: str, email: str | None) -> None:
    """Preview what a coupon is worth without redeeming it."""
    handler = CheckCouponHandler(uow=unit_of_work(), currency=get_config().currency)

    try:
        result = handler.handle(code, subtotal, email)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.valid:
        raise click.ClickException(result.error)
    click.echo(f"Coupon valid: {result.discount_amount} off")


# --- Promo rules --------------------------------------------------------------

@click.command("add")
@click.option("--name", required=True, help="Rule name.")
@click.option("--type", "rule_type", required=True, type=click.Choice(["discount", "bogo"]))
@click.option("--min-cart", default="0", show_default=True, help="Minimum subtotal in Naira.")
@click.option("--category", default=None, type=click.Choice(["car", "grocery"]))
@click.option("--discount-type", default="fixed", type=click.Choice(["fixed", "percent"]))
@click.option("--value", "discount_value", default=0, type=int, help="Naira off, or percent.")
@click.option("--product-id", "bogo_product_id", type=int, default=None, help="BOGO target product.")
@click.option("--buy", "bogo_buy_qty", default=1, type=int, show_default=True)
@click.option("--get", "bogo_get_qty", default=1, type=int, show_default=True)
@click.option("--starts", type=_DATE, default=None)
@click.option("--ends", type=_DATE, default=None)
@click.option("--inactive", is_flag=True, default=False)
@admin_required
def promo_add(
    name: str,
    rule_type: str,
    min_cart: str,
    category: str | None,
    discount_type: str,
    discount_value: int,
    bogo_product_id: int | None,
    bogo_buy_qty: int,
    bogo_get_qty: int,
    starts: datetime | None,
    ends: datetime | None,
    inactive: bool,
) -> None:
    """Create an automatic promotion."""
    handler = AddPromoRuleHandler(uow=unit_of_work(), currency=get_config().currency)

    try:
        rule = handler.handle(
            name=name,
            rule_type=rule_type,
            min_cart_amount=min_cart,
            category=category,
            discount_type=discount_type,
            discount_value=discount_value,
            bogo_product_id=bogo_product_id,
            bogo_buy_qty=bogo_buy_qty,
            bogo_get_qty=bogo_get_qty,
            starts_at=_utc(starts),
            ends_at=_utc(ends),
            is_active=not inactive,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Promo rule #{rule.id} '{rule.name}' created")


@click.command("list")
@admin_required
def promo_list() -> None:
    """List promo rules, newest first."""
    rules = ListPromoRulesHandler(uow=unit_of_work()).handle()

    if not rules:
        click.echo("No promo rules found.")
        return

    click.echo(f"{'ID':<4} {'Name':<24} {'Type':<9} {'Min cart':>12}  {'Active':<6} Window")
    click.echo("-" * 76)
    for r in rules:
        click.echo(
            f"{r.id:<4} {r.name:<24} {r.rule_type.value:<9} {str(r.min_cart_amount):>12}  "
            f"{'yes' if r.is_active else 'no':<6} {_window(r.starts_at, r.ends_at)}"
        )

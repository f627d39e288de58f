import click

from storefront.infrastructure import bootstrap
from storefront.infrastructure.cli.admin_commands import admin_login
from storefront.infrastructure.cli.catalog_commands import (
    product_add,
    product_delete,
    product_list,
    product_low_stock_summary,
    product_restock,
    product_update,
    seed,
    zone_list,
    zone_quote,
)
from storefront.infrastructure.cli.order_commands import (
    order_checkout,
    order_list,
    order_note,
    order_risk_queue,
    order_show,
    order_status,
    order_timeline,
    order_verify_payment,
)
from storefront.infrastructure.cli.promotion_commands import (
    coupon_add,
    coupon_check,
    coupon_list,
    promo_add,
    promo_list,
)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Storefront: order pricing and fulfilment"""
    ctx.call_on_close(bootstrap.shutdown)


@cli.group()
def order() -> None:
    """Check out and manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def zone() -> None:
    """Delivery zones and quotes."""


@cli.group()
def coupon() -> None:
    """Manage coupon codes."""


@cli.group()
def promo() -> None:
    """Manage automatic promotions."""


@cli.group()
def admin() -> None:
    """Admin authentication."""


# Register subcommands
cli.add_command(seed)
order.add_command(order_checkout)
order.add_command(order_list)
order.add_command(order_note)
order.add_command(order_risk_queue)
order.add_command(order_show)
order.add_command(order_status)
order.add_command(order_timeline)
order.add_command(order_verify_payment)
product.add_command(product_add)
product.add_command(product_delete)
product.add_command(product_list)
product.add_command(product_low_stock_summary)
product.add_command(product_restock)
product.add_command(product_update)
zone.add_command(zone_list)
zone.add_command(zone_quote)
coupon.add_command(coupon_add)
coupon.add_command(coupon_check)
coupon.add_command(coupon_list)
promo.add_command(promo_add)
promo.add_command(promo_list)
admin.add_command(admin_login)

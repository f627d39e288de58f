"""CLI commands for the catalog: products, delivery zones and demo data."""

from __future__ import annotations

import json

import click

from storefront.application.add_product import AddProductHandler
from storefront.application.list_catalog import ListProductsHandler, ListZonesHandler
from storefront.application.low_stock_summary import LowStockSummaryHandler
from storefront.application.quote_delivery import QuoteDeliveryHandler
from storefront.application.seed_catalog import SeedCatalogHandler
from storefront.application.update_product import (
    DeleteProductHandler,
    RestockProductHandler,
    UpdateProductHandler,
)
from storefront.config import get_config
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import stock_alerts, unit_of_work
from storefront.infrastructure.cli.admin_commands import admin_required


def _parse_metadata(raw: str | None) -> dict | None:
    """Parse 'fuel=Petrol,year=2018' (or a JSON object) into a dict."""
    if raw is None:
        return None
    raw = raw.strip()
    if raw.startswith("{"):
        try:
            return json.loads(raw)
        except ValueError:
            raise click.BadParameter("Metadata is not valid JSON.")

    result: dict[str, str] = {}
    for pair in filter(None, (p.strip() for p in raw.split(","))):
        if "=" not in pair:
            raise click.BadParameter(f"Invalid metadata '{pair}'. Expected 'key=value'.")
        key, value = pair.split("=", 1)
        result[key.strip()] = value.strip()
    return result


@click.command("seed")
def seed() -> None:
    """Load the demo catalog and delivery zones."""
    try:
        result = SeedCatalogHandler(uow=unit_of_work()).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Delivery zones upserted: {result.zones_upserted}")
    if result.products_added:
        click.echo(f"Products added: {result.products_added}")
    else:
        click.echo("Catalog already has products; none added.")


# --- Products -----------------------------------------------------------------

@click.command("list")
@click.option("--category", default=None, help="Only 'car' or 'grocery'.")
@click.option("--low-stock", is_flag=True, default=False, help="Only products at or below their threshold.")
def product_list(category: str | None, low_stock: bool) -> None:
    """List products in the catalog."""
    try:
        products = ListProductsHandler(uow=unit_of_work()).handle(category, low_stock)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<5} {'Name':<28} {'Category':<9} {'Price':>14} {'Stock':>6}")
    click.echo("-" * 66)
    for p in products:
        flag = " !" if p.is_low_stock else ""
        click.echo(
            f"{p.id:<5} {p.name:<28} {p.category.value:<9} {str(p.price):>14} {p.stock_quantity:>6}{flag}"
        )


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--category", required=True, type=click.Choice(["car", "grocery"]))
@click.option("--price", required=True, help="Price in Naira (e.g. 75,000).")
@click.option("--stock", default=0, type=int, show_default=True, help="Units in stock.")
@click.option("--description", default="", help="Short description.")
@click.option("--image-url", default="", help="Product image URL.")
@click.option("--low-stock-threshold", default=5, type=int, show_default=True)
@click.option("--metadata", default=None, help="'key=value,...' or a JSON object.")
@admin_required
def product_add(
    name: str,
    category: str,
    price: str,
    stock: int,
    description: str,
    image_url: str,
    low_stock_threshold: int,
    metadata: str | None,
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(uow=unit_of_work())

    try:
        product = handler.handle(
            name=name,
            category=category,
            price=price,
            stock_quantity=stock,
            description=description,
            image_url=image_url,
            low_stock_threshold=low_stock_threshold,
            metadata=_parse_metadata(metadata),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("update")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.option("--price", default=None, help="New price in Naira.")
@click.option("--stock", default=None, type=int, help="Set the stock level.")
@click.option("--description", default=None, help="New description.")
@click.option("--metadata", default=None, help="'key=value,...' or a JSON object.")
@admin_required
def product_update(
    product_id: int,
    price: str | None,
    stock: int | None,
    description: str | None,
    metadata: str | None,
) -> None:
    """Update a product's price, stock, description or metadata."""
    handler = UpdateProductHandler(uow=unit_of_work())

    try:
        product = handler.handle(
            product_id=product_id,
            new_price=price,
            stock_quantity=stock,
            description=description,
            metadata=_parse_metadata(metadata),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id} updated: price {product.price}, stock {product.stock_quantity}"
    )


@click.command("restock")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units received.")
@admin_required
def product_restock(product_id: int, quantity: int) -> None:
    """Add received units to a product's stock."""
    handler = RestockProductHandler(uow=unit_of_work())

    try:
        product = handler.handle(product_id=product_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} now has {product.stock_quantity} in stock")


@click.command("delete")
@click.option("--id", "product_id", required=True, type=int, help="Product ID.")
@admin_required
def product_delete(product_id: int) -> None:
    """Remove a product from the catalog."""
    try:
        product = DeleteProductHandler(uow=unit_of_work()).handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' deleted")


@click.command("low-stock-summary")
@admin_required
def product_low_stock_summary() -> None:
    """Email the admins a summary of products at or below their threshold."""
    run = LowStockSummaryHandler(uow=unit_of_work(), alerts=stock_alerts()).handle()
    summary = run.summary

    click.echo(f"Low-stock alerts: {summary.low_stock_count}")
    click.echo(f"In-stock products tracked: {summary.total_in_stock_products}")
    for p in summary.products:
        click.echo(f"  #{p.id} {p.name}: {p.stock_quantity} / threshold {p.low_stock_threshold}")

    if run.delivery.skipped:
        click.echo("Email skipped: see the notification log.")
    else:
        click.echo(f"Emails sent: {run.delivery.sent}, failed: {run.delivery.failed}")


# --- Delivery zones -----------------------------------------------------------

@click.command("list")
def zone_list() -> None:
    """List active delivery zones."""
    zones = ListZonesHandler(uow=unit_of_work()).handle()

    if not zones:
        click.echo("No delivery zones. Run 'storefront seed' first.")
        return

    click.echo(f"{'Code':<18} {'Name':<20} {'Fee':>10}  Covered")
    click.echo("-" * 58)
    for z in zones:
        click.echo(
            f"{z.code:<18} {z.name:<20} {str(z.flat_fee):>10}  {'yes' if z.is_covered else 'no'}"
        )


@click.command("quote")
@click.option("--zone", "zone_code", required=True, help="Delivery zone code.")
@click.option("--subtotal", required=True, help="Cart subtotal in Naira.")
def zone_quote(zone_code: str, subtotal: str) -> None:
    """Preview the delivery fee and grand total for a zone."""
    handler = QuoteDeliveryHandler(uow=unit_of_work(), currency=get_config().currency)

    try:
        quote = handler.handle(zone_code, subtotal)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Zone:        {quote.zone.name} ({quote.zone.code})")
    if not quote.is_covered:
        click.echo(f"Status:      {quote.error}")
        return
    click.echo(f"Subtotal:    {quote.subtotal}")
    click.echo(f"Delivery:    {quote.delivery_fee}")
    click.echo(f"Grand total: {quote.grand_total}")

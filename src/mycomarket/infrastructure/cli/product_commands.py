"""CLI commands for the product catalog and stock."""

from __future__ import annotations

import click

from mycomarket.application.add_product import AddProductHandler
from mycomarket.application.restock import RestockHandler
from mycomarket.application.show_catalog import ShowCatalogHandler
from mycomarket.application.update_product import UpdateProductPriceHandler
from mycomarket.domain.exceptions import DomainException
from mycomarket.infrastructure.bootstrap import unit_of_work


@click.command("add")
@click.option("--producer", "producer_id", required=True, help="Producer ID.")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Unit price (e.g. 15.00).")
@click.option("--unit", default="kg", show_default=True, help="Selling unit.")
@click.option("--id", "product_id", default=None, help="Product ID (auto-assigned if omitted).")
def product_add(producer_id: str, name: str, price: str, unit: str, product_id: str | None) -> None:
    """Add a product to the catalog."""
    handler = AddProductHandler(unit_of_work())

    try:
        product = handler.handle(
            producer_id=producer_id, name=name, price=price, unit=unit, product_id=product_id
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}/{product.unit}")


@click.command("list")
def product_list() -> None:
    """List all products with their available stock."""
    lines = ShowCatalogHandler(unit_of_work()).handle()

    if not lines:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Producer':<12} {'Price':>12} {'Available':>10}")
    click.echo("-" * 64)
    for line in lines:
        click.echo(
            f"{line.product_id:<6} {line.name:<20} {line.producer_id:<12} "
            f"{line.price:>12} {line.available + ' ' + line.unit:>10}"
        )


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", required=True, help="New price (e.g. 29.99).")
def product_update(product_id: str, price: str) -> None:
    """Update a product's price (existing bookings keep theirs)."""
    handler = UpdateProductPriceHandler(unit_of_work())

    try:
        product = handler.handle(product_id=product_id, new_price=price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product_id} price updated to {product.price}")


@click.command("restock")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, help="Quantity to add (e.g. 12.5).")
def stock_restock(product_id: str, quantity: str) -> None:
    """Add harvested stock to a product."""
    handler = RestockHandler(unit_of_work())

    try:
        stock = handler.handle(product_id=product_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for product #{product_id} is now {stock.quantity.normalize():f}")

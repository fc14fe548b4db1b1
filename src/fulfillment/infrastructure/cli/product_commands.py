"""CLI commands for the Product catalog."""

from __future__ import annotations

import click

from fulfillment.application.add_product import AddProductHandler
from fulfillment.domain.exceptions import DomainException
from fulfillment.infrastructure.bootstrap import product_repository


@click.command("add")
@click.option("--id", "product_id", default=None, help="Product ID (auto-assigned if omitted).")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, type=int, show_default=True, help="Opening stock.")
@click.option("--no-track", is_flag=True, default=False, help="Do not track inventory.")
@click.option("--inactive", is_flag=True, default=False, help="Add as unavailable.")
@click.option("--image", "images", multiple=True, help="Image URL; the first is primary.")
def product_add(
    product_id: str | None,
    name: str,
    price: str,
    stock: int,
    no_track: bool,
    inactive: bool,
    images: tuple[str, ...],
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        product = handler.handle(
            name=name,
            price=price,
            stock=stock,
            product_id=product_id,
            track_inventory=not no_track,
            is_active=not inactive,
            images=list(images),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product #{product.id} '{product.name}' added at {product.price}")


@click.command("list")
def product_list() -> None:
    """List all products with stock and sales counters."""
    products = product_repository().list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Price':>10} {'Stock':>7} {'Sold':>6} {'Revenue':>12}")
    click.echo("-" * 66)
    for p in products:
        stock = str(p.stock_quantity) if p.track_inventory else "-"
        name = p.name if p.is_active else f"{p.name} (off)"
        click.echo(
            f"{p.id:<6} {name:<20} {str(p.price):>10} {stock:>7} "
            f"{p.sales_count:>6} {p.sales_revenue:>12.2f}"
        )

import click

from fulfillment.infrastructure.cli.order_commands import (
    order_create,
    order_list,
    order_show,
    order_status,
)
from fulfillment.infrastructure.cli.product_commands import product_add, product_list
from fulfillment.infrastructure.config import get_settings
from fulfillment.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """Order fulfillment — orders, stock and order numbers."""
    configure_logging(get_settings())


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage the product catalog."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_status)
product.add_command(product_add)
product.add_command(product_list)

"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from fulfillment.application.access import Requester
from fulfillment.application.dto import OrderDTO, OrderItemSpec, PaymentSpec
from fulfillment.domain.exceptions import DomainException
from fulfillment.domain.model.value_objects import Address, Variant
from fulfillment.domain.service.pricing_calculator import PricingOverride
from fulfillment.infrastructure.bootstrap import (
    create_order_handler,
    list_orders_handler,
    show_order_handler,
    update_order_status_handler,
)


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:3,7:1:size=XL' into OrderItemSpecs (variant is optional)."""
    specs: list[OrderItemSpec] = []
    for entry in filter(None, (part.strip() for part in raw.split(","))):
        fields = entry.split(":")
        if len(fields) not in (2, 3):
            raise click.BadParameter(
                f"Cannot read item '{entry}'. Expected 'ProductId:Quantity[:name=value]'."
            )
        product_id, qty_str = fields[0].strip(), fields[1].strip()
        if not qty_str.lstrip("-").isdigit():
            raise click.BadParameter(f"Quantity '{qty_str}' for product '{product_id}' is not a number.")

        variant = None
        if len(fields) == 3:
            variant_name, sep, variant_value = fields[2].partition("=")
            if not sep:
                raise click.BadParameter(f"Variant '{fields[2]}' must look like name=value.")
            variant = Variant(variant_name.strip(), variant_value.strip())

        specs.append(OrderItemSpec(product_id, int(qty_str), variant))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    test_marker = "  [TEST]" if dto.is_test else ""
    click.echo(f"Order {dto.order_number} (#{dto.id}, status={dto.status}){test_marker}")
    click.echo(f"Customer: {dto.user_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Payment:  {dto.payment_method} ({dto.payment_status})")
    if dto.tracking_number:
        click.echo(f"Tracking: {dto.tracking_number}")
    if dto.cancelled_at:
        reason = f" ({dto.cancel_reason})" if dto.cancel_reason else ""
        click.echo(f"Cancelled: {dto.cancelled_at}{reason}")
    click.echo()

    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
        if item.variant:
            click.echo(f"    ({item.variant})")
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>20}")
    click.echo(f"  {'Shipping':<27} {dto.shipping:>20}")
    click.echo(f"  {'Tax':<27} {dto.tax:>20}")
    click.echo(f"  {'Discount':<27} {dto.discount:>20}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")


@click.command("create")
@click.option("--user", "user_id", required=True, help="Owning user ID.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty[:name=value],...'.")
@click.option("--name", default="", help="Recipient name.")
@click.option("--phone", default="", help="Recipient phone.")
@click.option("--street", default="", help="Shipping street.")
@click.option("--city", default="", help="Shipping city.")
@click.option("--state", default="", help="Shipping state.")
@click.option("--zip-code", default="", help="Shipping ZIP code.")
@click.option("--country", default="", help="Shipping country.")
@click.option("--payment-method", default="cash", show_default=True,
              help="cash, card, bank_transfer or stripe.")
@click.option("--transaction-id", default=None, help="Payment transaction reference.")
@click.option("--account-number", default=None, help="Payer account number.")
@click.option("--subtotal", default=None, help="Override the computed subtotal.")
@click.option("--shipping", default=None, help="Shipping cost.")
@click.option("--tax", default=None, help="Tax amount.")
@click.option("--discount", default=None, help="Discount amount.")
@click.option("--total", default=None, help="Override the computed total.")
@click.option("--notes", default=None, help="Free-form notes.")
@click.option("--test", "is_test", is_flag=True, default=False,
              help="Test order: skips stock checks, TEST- order number.")
def order_create(
    user_id: str,
    items: str,
    name: str,
    phone: str,
    street: str,
    city: str,
    state: str,
    zip_code: str,
    country: str,
    payment_method: str,
    transaction_id: str | None,
    account_number: str | None,
    subtotal: str | None,
    shipping: str | None,
    tax: str | None,
    discount: str | None,
    total: str | None,
    notes: str | None,
    is_test: bool,
) -> None:
    """Create a new order and reserve its stock."""
    specs = _parse_items(items)
    address = Address(
        name=name, phone=phone, street=street, city=city,
        state=state, zip_code=zip_code, country=country,
    )

    try:
        dto = create_order_handler().handle(
            user_id=user_id,
            item_specs=specs,
            shipping_address=address,
            pricing=PricingOverride(
                subtotal=subtotal, shipping=shipping, tax=tax,
                discount=discount, total=total,
            ),
            payment=PaymentSpec(
                method=payment_method,
                transaction_id=transaction_id,
                account_number=account_number,
            ),
            notes=notes,
            is_test=is_test,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} created  (status={dto.status})")
    click.echo()
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.option("--user", "user_id", required=True, help="Requesting user ID.")
@click.option("--admin", is_flag=True, default=False, help="Request as administrator.")
def order_show(order_id: int, user_id: str, admin: bool) -> None:
    """Show details of an existing order."""
    try:
        dto = show_order_handler().handle(order_id, Requester(user_id, is_admin=admin))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--user", "user_id", required=True, help="Requesting user ID.")
@click.option("--admin", is_flag=True, default=False, help="List every user's orders.")
@click.option("--page", default=1, type=int, show_default=True)
@click.option("--limit", default=10, type=int, show_default=True)
def order_list(user_id: str, admin: bool, page: int, limit: int) -> None:
    """List orders, newest first."""
    try:
        result = list_orders_handler().handle(
            Requester(user_id, is_admin=admin), page=page, limit=limit
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Order Number':<24} {'Status':<11} {'Total':>10}  Created")
    click.echo("-" * 76)
    for dto in result.orders:
        click.echo(
            f"{dto.id:<6} {dto.order_number:<24} {dto.status:<11} {dto.total:>10}  {dto.created_at}"
        )
    click.echo(f"Page {result.page} of {result.pages}  ({result.total} orders)")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option("--status", required=True, help="New status.")
@click.option("--tracking-number", default=None, help="Carrier tracking number.")
@click.option("--estimated-delivery", default=None,
              type=click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"]),
              help="Estimated delivery date (UTC).")
@click.option("--reason", default=None, help="Cancellation reason.")
def order_status(
    order_id: int,
    status: str,
    tracking_number: str | None,
    estimated_delivery: datetime | None,
    reason: str | None,
) -> None:
    """Change an order's status (cancelling restores stock)."""
    if estimated_delivery is not None:
        estimated_delivery = estimated_delivery.replace(tzinfo=timezone.utc)

    try:
        dto = update_order_status_handler().handle(
            order_id,
            status,
            tracking_number=tracking_number,
            estimated_delivery=estimated_delivery,
            cancel_reason=reason,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} is now {dto.status}.")

"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fulfillment.domain.model.order import Order
from fulfillment.domain.model.value_objects import Variant


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for (product reference + quantity)."""

    product_id: str
    quantity: int
    variant: Variant | None = None


@dataclass(frozen=True)
class PaymentSpec:
    """Input: payment metadata as submitted by the client."""

    method: str = "cash"
    transaction_id: str | None = None
    account_number: str | None = None


@dataclass(frozen=True)
class OrderItemDTO:
    """Output: a single order item as displayed to the user."""

    product_id: str
    name: str
    image: str
    variant: str | None
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    user_id: str
    status: str
    items: list[OrderItemDTO]
    subtotal: str
    shipping: str
    tax: str
    discount: str
    total: str
    payment_method: str
    payment_status: str
    is_test: bool
    created_at: str
    notes: str | None = None
    tracking_number: str | None = None
    estimated_delivery: str | None = None
    shipped_at: str | None = None
    delivered_at: str | None = None
    cancelled_at: str | None = None
    cancel_reason: str | None = None


@dataclass(frozen=True)
class OrderPageDTO:
    orders: list[OrderDTO]
    total: int
    page: int
    pages: int


def _fmt(moment: datetime | None) -> str | None:
    return moment.strftime("%Y-%m-%d %H:%M UTC") if moment else None


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number or "",
        user_id=order.user_id,
        status=order.status.value,
        items=[
            OrderItemDTO(
                product_id=item.product_id,
                name=item.name,
                image=item.image,
                variant=f"{item.variant.name}: {item.variant.value}" if item.variant else None,
                quantity=item.quantity.value,
                unit_price=str(item.price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
        subtotal=str(order.pricing.subtotal),
        shipping=str(order.pricing.shipping),
        tax=str(order.pricing.tax),
        discount=str(order.pricing.discount),
        total=str(order.pricing.total),
        payment_method=order.payment.method.value,
        payment_status=order.payment.status.value,
        is_test=order.is_test,
        created_at=_fmt(order.created_at),  # type: ignore[arg-type]
        notes=order.notes,
        tracking_number=order.shipping.tracking_number,
        estimated_delivery=_fmt(order.shipping.estimated_delivery),
        shipped_at=_fmt(order.shipping.shipped_at),
        delivered_at=_fmt(order.shipping.delivered_at),
        cancelled_at=_fmt(order.cancelled_at),
        cancel_reason=order.cancel_reason,
    )

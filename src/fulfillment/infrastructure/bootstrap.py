"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.  Settings are read on
every call so the data directory can be redirected through the
environment.
"""

from __future__ import annotations

from fulfillment.application.create_order import CreateOrderHandler
from fulfillment.application.list_orders import ListOrdersHandler
from fulfillment.application.show_order import ShowOrderHandler
from fulfillment.application.update_order_status import UpdateOrderStatusHandler
from fulfillment.domain.service.inventory_ledger import InventoryLedger
from fulfillment.domain.service.order_number_generator import OrderNumberGenerator
from fulfillment.infrastructure.config import get_settings
from fulfillment.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from fulfillment.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from fulfillment.infrastructure.persistence.json_sequence_repository import (
    JsonSequenceRepository,
)


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(get_settings().data_dir / "products.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(get_settings().data_dir / "orders.json")


def sequence_repository() -> JsonSequenceRepository:
    return JsonSequenceRepository(get_settings().data_dir / "sequences.json")


def create_order_handler() -> CreateOrderHandler:
    settings = get_settings()
    orders = order_repository()
    products = product_repository()
    return CreateOrderHandler(
        order_repo=orders,
        product_repo=products,
        ledger=InventoryLedger(products),
        numbers=OrderNumberGenerator(
            orders,
            sequence_repository(),
            max_attempts=settings.order_number_max_attempts,
            padding=settings.order_number_padding,
        ),
    )


def update_order_status_handler() -> UpdateOrderStatusHandler:
    return UpdateOrderStatusHandler(
        order_repo=order_repository(),
        ledger=InventoryLedger(product_repository()),
    )


def show_order_handler() -> ShowOrderHandler:
    return ShowOrderHandler(order_repo=order_repository())


def list_orders_handler() -> ListOrdersHandler:
    return ListOrdersHandler(
        order_repo=order_repository(),
        max_page_size=get_settings().max_page_size,
    )

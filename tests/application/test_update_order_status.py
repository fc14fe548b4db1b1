"""Integration tests for the UpdateOrderStatus use case."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from fulfillment.application.create_order import CreateOrderHandler
from fulfillment.application.dto import OrderItemSpec
from fulfillment.application.update_order_status import UpdateOrderStatusHandler
from fulfillment.domain.exceptions import (
    EntityNotFoundError,
    InvalidStatusError,
    InvalidTransitionError,
)
from fulfillment.domain.model.order import OrderStatus
from fulfillment.domain.service.inventory_ledger import InventoryLedger
from fulfillment.domain.service.order_number_generator import OrderNumberGenerator
from tests.fakes import (
    FakeOrderRepository,
    FakeProductRepository,
    FakeSequenceRepository,
    make_address,
    make_product,
)

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def _setup(order_repo=None):
    products = [
        make_product("1", "Widget", "15.00", stock=10),
        make_product("2", "Gadget", "25.00", stock=5),
    ]
    order_repo = order_repo or FakeOrderRepository()
    product_repo = FakeProductRepository(products)
    ledger = InventoryLedger(product_repo)
    create = CreateOrderHandler(
        order_repo,
        product_repo,
        ledger,
        OrderNumberGenerator(order_repo, FakeSequenceRepository()),
    )
    update = UpdateOrderStatusHandler(order_repo, ledger, clock=lambda: NOW)
    return create, update, order_repo, product_repo


class _InterleavingOrderRepository(FakeOrderRepository):
    """Runs one queued request just before the next update reaches the store."""

    def __init__(self):
        super().__init__()
        self.before_next_update = None

    def update(self, order_id, change):
        pending, self.before_next_update = self.before_next_update, None
        if pending is not None:
            pending()
        return super().update(order_id, change)


def _place(create: CreateOrderHandler) -> int:
    dto = create.handle(
        "alice",
        [OrderItemSpec("1", 3), OrderItemSpec("2", 2)],
        shipping_address=make_address(),
    )
    return dto.id


class TestStatusUpdates:

    def test_moves_order_forward(self):
        create, update, order_repo, _ = _setup()
        order_id = _place(create)

        dto = update.handle(order_id, "confirmed")

        assert dto.status == "confirmed"
        assert order_repo.get_by_id(order_id).status == OrderStatus.CONFIRMED

    def test_shipping_records_time_and_tracking(self):
        create, update, order_repo, _ = _setup()
        order_id = _place(create)
        eta = NOW + timedelta(days=2)

        update.handle(order_id, "shipped", tracking_number="TRK-42", estimated_delivery=eta)

        order = order_repo.get_by_id(order_id)
        assert order.shipping.shipped_at == NOW
        assert order.shipping.tracking_number == "TRK-42"
        assert order.shipping.estimated_delivery == eta

    def test_tracking_attached_without_status_change(self):
        create, update, order_repo, _ = _setup()
        order_id = _place(create)

        update.handle(order_id, "pending", tracking_number="TRK-7")

        order = order_repo.get_by_id(order_id)
        assert order.status == OrderStatus.PENDING
        assert order.shipping.tracking_number == "TRK-7"

    def test_unknown_order_rejected(self):
        _, update, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="not found"):
            update.handle(999, "confirmed")

    def test_unrecognized_status_leaves_order_unchanged(self):
        create, update, order_repo, _ = _setup()
        order_id = _place(create)

        with pytest.raises(InvalidStatusError):
            update.handle(order_id, "teleported")

        assert order_repo.get_by_id(order_id).status == OrderStatus.PENDING

    def test_delivered_order_cannot_be_cancelled(self):
        create, update, order_repo, product_repo = _setup()
        order_id = _place(create)
        update.handle(order_id, "delivered")

        with pytest.raises(InvalidTransitionError):
            update.handle(order_id, "cancelled")

        assert order_repo.get_by_id(order_id).cancelled_at is None
        assert product_repo.get_by_id("1").stock_quantity == 7


class TestCancellation:

    def test_cancel_restores_stock_and_sales(self):
        create, update, order_repo, product_repo = _setup()
        order_id = _place(create)

        dto = update.handle(order_id, "cancelled", cancel_reason="changed mind")

        assert dto.status == "cancelled"
        order = order_repo.get_by_id(order_id)
        assert order.cancelled_at == NOW
        assert order.cancel_reason == "changed mind"
        for product_id, stock in (("1", 10), ("2", 5)):
            product = product_repo.get_by_id(product_id)
            assert product.stock_quantity == stock
            assert product.sales_count == 0
            assert product.sales_revenue == Decimal("0")

    def test_cancelling_twice_restores_once(self):
        create, update, _, product_repo = _setup()
        order_id = _place(create)

        update.handle(order_id, "cancelled")
        update.handle(order_id, "cancelled")

        assert product_repo.get_by_id("1").stock_quantity == 10
        assert product_repo.get_by_id("2").stock_quantity == 5

    def test_cancel_after_shipping(self):
        create, update, _, product_repo = _setup()
        order_id = _place(create)
        update.handle(order_id, "shipped")

        update.handle(order_id, "cancelled")

        assert product_repo.get_by_id("1").stock_quantity == 10

    def test_stock_stays_with_other_orders(self):
        create, update, _, product_repo = _setup()
        first = _place(create)
        _place(create)

        update.handle(first, "cancelled")

        assert product_repo.get_by_id("1").stock_quantity == 7
        assert product_repo.get_by_id("1").sales_count == 3

    def test_cancel_landing_before_ship_wins(self):
        order_repo = _InterleavingOrderRepository()
        create, update, _, product_repo = _setup(order_repo)
        order_id = _place(create)
        order_repo.before_next_update = lambda: update.handle(order_id, "cancelled")

        with pytest.raises(InvalidTransitionError):
            update.handle(order_id, "shipped", tracking_number="TRK-1")

        order = order_repo.get_by_id(order_id)
        assert order.status == OrderStatus.CANCELLED
        assert order.shipping.shipped_at is None
        assert order.shipping.tracking_number is None

        update.handle(order_id, "cancelled")

        assert product_repo.get_by_id("1").stock_quantity == 10
        assert product_repo.get_by_id("2").stock_quantity == 5
        assert product_repo.get_by_id("1").sales_count == 0

    def test_cancel_reason_stored_with_cancellation(self):
        create, update, order_repo, _ = _setup()
        order_id = _place(create)

        update.handle(order_id, "cancelled", cancel_reason="duplicate")
        update.handle(order_id, "cancelled", cancel_reason="ignored")

        assert order_repo.get_by_id(order_id).cancel_reason == "duplicate"

"""Integration tests for the ShowOrder and ListOrders use cases."""

from datetime import datetime, timedelta, timezone

import pytest

from fulfillment.application.access import Requester
from fulfillment.application.list_orders import ListOrdersHandler
from fulfillment.application.show_order import ShowOrderHandler
from fulfillment.domain.exceptions import EntityNotFoundError, ForbiddenError, ValidationError
from fulfillment.domain.model.order import Order, OrderItem
from fulfillment.domain.model.value_objects import Money, Pricing, Quantity
from tests.fakes import FakeOrderRepository, make_address

T0 = datetime(2026, 10, 1, tzinfo=timezone.utc)


def _store_order(repo: FakeOrderRepository, user_id: str, minutes: int) -> Order:
    price = Money.of("10.00")
    order = Order.create(
        user_id=user_id,
        items=[OrderItem("1", "Widget", price, Quantity(1))],
        shipping_address=make_address(),
        pricing=Pricing(price, Money.zero(), Money.zero(), Money.zero(), price),
        now=T0 + timedelta(minutes=minutes),
    )
    order.order_number = f"ORD-20261001-{minutes:05d}"
    repo.save(order)
    return order


class TestShowOrder:

    def test_owner_can_view(self):
        repo = FakeOrderRepository()
        order = _store_order(repo, "alice", 1)
        dto = ShowOrderHandler(repo).handle(order.id, Requester("alice"))
        assert dto.order_number == order.order_number

    def test_admin_can_view_any(self):
        repo = FakeOrderRepository()
        order = _store_order(repo, "alice", 1)
        dto = ShowOrderHandler(repo).handle(order.id, Requester("root", is_admin=True))
        assert dto.user_id == "alice"

    def test_stranger_forbidden(self):
        repo = FakeOrderRepository()
        order = _store_order(repo, "alice", 1)
        with pytest.raises(ForbiddenError):
            ShowOrderHandler(repo).handle(order.id, Requester("mallory"))

    def test_custom_access_policy(self):
        repo = FakeOrderRepository()
        order = _store_order(repo, "alice", 1)
        handler = ShowOrderHandler(repo, access_policy=lambda requester, _: requester.user_id == "support")
        assert handler.handle(order.id, Requester("support")).id == order.id

    def test_unknown_order(self):
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(FakeOrderRepository()).handle(5, Requester("alice"))


class TestListOrders:

    def _repo(self) -> FakeOrderRepository:
        repo = FakeOrderRepository()
        for minutes in range(5):
            _store_order(repo, "alice", minutes)
        _store_order(repo, "bob", 10)
        return repo

    def test_user_sees_own_orders_newest_first(self):
        result = ListOrdersHandler(self._repo()).handle(Requester("alice"), page=1, limit=10)
        assert result.total == 5
        assert [o.order_number[-2:] for o in result.orders] == ["04", "03", "02", "01", "00"]
        assert all(o.user_id == "alice" for o in result.orders)

    def test_admin_sees_everything(self):
        result = ListOrdersHandler(self._repo()).handle(Requester("root", is_admin=True))
        assert result.total == 6
        assert result.orders[0].user_id == "bob"

    def test_pagination(self):
        result = ListOrdersHandler(self._repo()).handle(Requester("alice"), page=2, limit=2)
        assert result.page == 2
        assert result.pages == 3
        assert len(result.orders) == 2
        assert result.orders[0].order_number.endswith("00002")

    def test_page_past_the_end_is_empty(self):
        result = ListOrdersHandler(self._repo()).handle(Requester("alice"), page=9, limit=2)
        assert result.orders == []
        assert result.total == 5

    def test_no_orders(self):
        result = ListOrdersHandler(FakeOrderRepository()).handle(Requester("alice"))
        assert result.total == 0
        assert result.pages == 0

    @pytest.mark.parametrize("page, limit, field", [(0, 10, "page"), (1, 0, "limit"), (1, 101, "limit")])
    def test_bounds_enforced(self, page, limit, field):
        with pytest.raises(ValidationError) as exc_info:
            ListOrdersHandler(FakeOrderRepository()).handle(Requester("alice"), page, limit)
        assert exc_info.value.field == field

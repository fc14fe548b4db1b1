"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, TypeVar

from fulfillment.domain.model.order import Order

T = TypeVar("T")


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order.

        Raises DuplicateOrderNumberError if another order already holds
        ``order.order_number``.
        """

    @abstractmethod
    def exists_order_number(self, order_number: str) -> bool:
        """True if any stored order carries this order number."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored orders."""

    @abstractmethod
    def list_orders(
        self, user_id: str | None, offset: int, limit: int
    ) -> tuple[list[Order], int]:
        """Return a page of orders, newest first, and the unpaged total.

        ``user_id=None`` lists every user's orders.
        """

    @abstractmethod
    def update(
        self, order_id: int, change: Callable[[Order], T]
    ) -> tuple[Order, T] | None:
        """Run *change* on the stored order and persist it, as one atomic step.

        No other write to the order can land between the read and the
        write.  If *change* raises, nothing is stored.  Returns the updated
        order with the value *change* returned, or None if the order does
        not exist.
        """

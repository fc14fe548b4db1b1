"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in a dict. No file I/O, no side effects.

Like a real store they hand out copies and serialize writers with a
lock, so aliasing bugs and races show up in tests.
"""

from __future__ import annotations

import threading
from copy import deepcopy
from typing import Callable, TypeVar

from fulfillment.domain.exceptions import DuplicateOrderNumberError, EntityNotFoundError
from fulfillment.domain.model.inventory import StockMovement
from fulfillment.domain.model.order import Order
from fulfillment.domain.model.product import Product
from fulfillment.domain.model.value_objects import Address, Money
from fulfillment.domain.repository.order_repository import OrderRepository
from fulfillment.domain.repository.product_repository import ProductRepository
from fulfillment.domain.repository.sequence_repository import SequenceRepository

T = TypeVar("T")


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def next_id(self) -> int:
        return self._next_id

    def get_by_id(self, order_id: int) -> Order | None:
        with self._lock:
            order = self._store.get(order_id)
            return deepcopy(order) if order is not None else None

    def save(self, order: Order) -> None:
        with self._lock:
            if order.order_number and any(
                o.order_number == order.order_number and o.id != order.id
                for o in self._store.values()
            ):
                raise DuplicateOrderNumberError(order.order_number)
            if order.id is None:
                order.id = self._next_id
                self._next_id += 1
            self._store[order.id] = deepcopy(order)

    def exists_order_number(self, order_number: str) -> bool:
        with self._lock:
            return any(o.order_number == order_number for o in self._store.values())

    def count(self) -> int:
        return len(self._store)

    def list_orders(
        self, user_id: str | None, offset: int, limit: int
    ) -> tuple[list[Order], int]:
        with self._lock:
            matching = [
                o for o in self._store.values() if user_id is None or o.user_id == user_id
            ]
        matching.sort(key=lambda o: (o.created_at, o.id), reverse=True)
        return [deepcopy(o) for o in matching[offset:offset + limit]], len(matching)

    def update(
        self, order_id: int, change: Callable[[Order], T]
    ) -> tuple[Order, T] | None:
        with self._lock:
            stored = self._store.get(order_id)
            if stored is None:
                return None
            order = deepcopy(stored)
            result = change(order)
            self._store[order_id] = deepcopy(order)
            return order, result


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[str, Product] = {}
        self._lock = threading.RLock()
        for p in products or []:
            self._store[p.id] = deepcopy(p)

    def get_by_id(self, product_id: str) -> Product | None:
        with self._lock:
            product = self._store.get(product_id)
            return deepcopy(product) if product is not None else None

    def list_all(self) -> list[Product]:
        with self._lock:
            return [deepcopy(p) for p in self._store.values()]

    def save(self, product: Product) -> None:
        with self._lock:
            self._store[product.id] = deepcopy(product)

    def apply_movement(self, movement: StockMovement) -> int | None:
        with self._lock:
            product = self._store.get(movement.product_id)
            if product is None:
                raise EntityNotFoundError(movement.product_id)
            return movement.apply_to(product)


class FakeSequenceRepository(SequenceRepository):

    def __init__(self, start: dict[str, int] | None = None) -> None:
        self._counters: dict[str, int] = dict(start or {})
        self._lock = threading.Lock()

    def increment(self, key: str) -> int:
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + 1
            return self._counters[key]


# --- Builders -----------------------------------------------------------------


def make_product(
    product_id: str = "1",
    name: str = "Widget",
    price: str = "15.00",
    stock: int = 100,
    track_inventory: bool = True,
    is_active: bool = True,
) -> Product:
    return Product(
        id=product_id,
        name=name,
        price=Money.of(price),
        stock_quantity=stock,
        track_inventory=track_inventory,
        is_active=is_active,
        images=[f"https://cdn.example.com/{product_id}.jpg"],
    )


def make_address(city: str = "Cairo") -> Address:
    return Address(
        name="Alice",
        phone="0100000000",
        street="12 Nile St",
        city=city,
        country="Egypt",
    )

"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, TypeVar

from fulfillment.domain.exceptions import DuplicateOrderNumberError
from fulfillment.domain.model.order import Order, OrderItem, OrderStatus, ShippingInfo
from fulfillment.domain.model.value_objects import (
    Address,
    Money,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Pricing,
    Quantity,
    Variant,
)
from fulfillment.domain.repository.order_repository import OrderRepository
from fulfillment.infrastructure.persistence.json_file import JsonFile

T = TypeVar("T")


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        orders = self._file.load()
        if not orders:
            return 1
        return max(o["id"] for o in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def save(self, order: Order) -> None:
        with self._file.lock:
            orders = self._file.load()

            if order.order_number and any(
                raw["order_number"] == order.order_number and raw["id"] != order.id
                for raw in orders
            ):
                raise DuplicateOrderNumberError(
                    f"Order number {order.order_number} is already taken"
                )

            if order.id is None:
                order.id = self.next_id()

            # Upsert: replace if exists, otherwise append
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    orders[i] = self._to_raw(order)
                    break
            else:
                orders.append(self._to_raw(order))

            self._file.persist(orders)

    def exists_order_number(self, order_number: str) -> bool:
        return any(raw["order_number"] == order_number for raw in self._file.load())

    def count(self) -> int:
        return len(self._file.load())

    def list_orders(
        self, user_id: str | None, offset: int, limit: int
    ) -> tuple[list[Order], int]:
        matching = [
            raw for raw in self._file.load()
            if user_id is None or raw["user_id"] == user_id
        ]
        matching.sort(key=lambda raw: (raw["created_at"], raw["id"]), reverse=True)
        page = matching[offset:offset + limit]
        return [self._to_domain(raw) for raw in page], len(matching)

    def update(
        self, order_id: int, change: Callable[[Order], T]
    ) -> tuple[Order, T] | None:
        with self._file.lock:
            orders = self._file.load()
            for i, raw in enumerate(orders):
                if raw["id"] == order_id:
                    order = self._to_domain(raw)
                    result = change(order)
                    orders[i] = self._to_raw(order)
                    self._file.persist(orders)
                    return order, result
        return None

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "status": order.status.value,
            "items": [
                {
                    "product_id": item.product_id,
                    "name": item.name,
                    "price": str(item.price.amount),
                    "currency": item.price.currency,
                    "quantity": item.quantity.value,
                    "image": item.image,
                    "variant": (
                        {"name": item.variant.name, "value": item.variant.value}
                        if item.variant else None
                    ),
                    "inventory_tracked": item.inventory_tracked,
                    "stock_deducted": item.stock_deducted,
                }
                for item in order.items
            ],
            "shipping_address": _address_to_raw(order.shipping_address),
            "billing_address": _address_to_raw(order.billing_address),
            "pricing": {
                "subtotal": str(order.pricing.subtotal.amount),
                "shipping": str(order.pricing.shipping.amount),
                "tax": str(order.pricing.tax.amount),
                "discount": str(order.pricing.discount.amount),
                "total": str(order.pricing.total.amount),
            },
            "payment": {
                "method": order.payment.method.value,
                "status": order.payment.status.value,
                "transaction_id": order.payment.transaction_id,
                "account_number": order.payment.account_number,
            },
            "shipping": {
                "method": order.shipping.method,
                "tracking_number": order.shipping.tracking_number,
                "estimated_delivery": _dt_to_raw(order.shipping.estimated_delivery),
                "shipped_at": _dt_to_raw(order.shipping.shipped_at),
                "delivered_at": _dt_to_raw(order.shipping.delivered_at),
            },
            "notes": order.notes,
            "cancelled_at": _dt_to_raw(order.cancelled_at),
            "cancel_reason": order.cancel_reason,
            "is_test": order.is_test,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderItem(
                product_id=i["product_id"],
                name=i["name"],
                price=Money(Decimal(i["price"]), i.get("currency", "USD")),
                quantity=Quantity(i["quantity"]),
                image=i.get("image", ""),
                variant=Variant(**i["variant"]) if i.get("variant") else None,
                inventory_tracked=i.get("inventory_tracked", False),
                stock_deducted=i.get("stock_deducted", 0),
            )
            for i in raw["items"]
        ]
        pricing = raw["pricing"]
        payment = raw["payment"]
        shipping = raw.get("shipping") or {}
        return Order(
            id=raw["id"],
            order_number=raw.get("order_number"),
            user_id=raw["user_id"],
            items=items,
            shipping_address=Address(**raw["shipping_address"]),
            billing_address=Address(**raw["billing_address"]),
            pricing=Pricing(
                subtotal=Money(Decimal(pricing["subtotal"])),
                shipping=Money(Decimal(pricing["shipping"])),
                tax=Money(Decimal(pricing["tax"])),
                discount=Money(Decimal(pricing["discount"])),
                total=Money(Decimal(pricing["total"])),
            ),
            payment=Payment(
                method=PaymentMethod(payment["method"]),
                status=PaymentStatus(payment["status"]),
                transaction_id=payment.get("transaction_id"),
                account_number=payment.get("account_number"),
            ),
            status=OrderStatus(raw["status"]),
            shipping=ShippingInfo(
                method=shipping.get("method"),
                tracking_number=shipping.get("tracking_number"),
                estimated_delivery=_dt_from_raw(shipping.get("estimated_delivery")),
                shipped_at=_dt_from_raw(shipping.get("shipped_at")),
                delivered_at=_dt_from_raw(shipping.get("delivered_at")),
            ),
            notes=raw.get("notes"),
            cancelled_at=_dt_from_raw(raw.get("cancelled_at")),
            cancel_reason=raw.get("cancel_reason"),
            is_test=raw.get("is_test", False),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )


def _address_to_raw(address: Address) -> dict:
    return {
        "name": address.name,
        "phone": address.phone,
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "zip_code": address.zip_code,
        "country": address.country,
    }


def _dt_to_raw(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment else None


def _dt_from_raw(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None

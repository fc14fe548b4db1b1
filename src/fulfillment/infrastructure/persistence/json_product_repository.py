"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from fulfillment.domain.exceptions import EntityNotFoundError
from fulfillment.domain.model.inventory import StockMovement
from fulfillment.domain.model.product import Product
from fulfillment.domain.model.value_objects import Money
from fulfillment.domain.repository.product_repository import ProductRepository
from fulfillment.infrastructure.persistence.json_file import JsonFile


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._file.load():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, product: Product) -> None:
        with self._file.lock:
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["id"] == product.id:
                    records[i] = self._to_raw(product)
                    break
            else:
                records.append(self._to_raw(product))
            self._file.persist(records)

    def apply_movement(self, movement: StockMovement) -> int | None:
        with self._file.lock:
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["id"] == movement.product_id:
                    product = self._to_domain(raw)
                    applied = movement.apply_to(product)
                    if applied is None:
                        return None
                    records[i] = self._to_raw(product)
                    self._file.persist(records)
                    return applied
        raise EntityNotFoundError(f"Product with ID '{movement.product_id}' not found")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "stock_quantity": product.stock_quantity,
            "track_inventory": product.track_inventory,
            "sales_count": product.sales_count,
            "sales_revenue": str(product.sales_revenue),
            "is_active": product.is_active,
            "images": list(product.images),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=Money(Decimal(raw["price"]), raw.get("currency", "USD")),
            stock_quantity=raw.get("stock_quantity", 0),
            track_inventory=raw.get("track_inventory", True),
            sales_count=raw.get("sales_count", 0),
            sales_revenue=Decimal(raw.get("sales_revenue", "0")),
            is_active=raw.get("is_active", True),
            images=list(raw.get("images", [])),
        )

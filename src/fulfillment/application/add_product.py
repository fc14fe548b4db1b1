"""Application service: Add Product use case.

Seeds the catalog with a product and its opening stock.  Stock of an
existing product is never changed here; only the inventory ledger moves it.
"""

from __future__ import annotations

from fulfillment.domain.exceptions import ValidationError
from fulfillment.domain.model.product import Product
from fulfillment.domain.model.value_objects import Money
from fulfillment.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        name: str,
        price: str,
        stock: int = 0,
        product_id: str | None = None,
        track_inventory: bool = True,
        is_active: bool = True,
        images: list[str] | None = None,
    ) -> Product:
        """Add a new product to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Product name is required", "name")
        if stock < 0:
            raise ValidationError("Opening stock cannot be negative", "stock")

        if product_id is None:
            # Auto-assign ID based on existing numeric IDs
            numeric = [int(p.id) for p in self._product_repo.list_all() if p.id.isdigit()]
            product_id = str(max(numeric) + 1) if numeric else "1"
        elif self._product_repo.get_by_id(product_id) is not None:
            raise ValidationError(f"Product '{product_id}' already exists", "id")

        product = Product(
            id=product_id,
            name=name.strip(),
            price=Money.of(price, field="price"),
            stock_quantity=stock,
            track_inventory=track_inventory,
            is_active=is_active,
            images=list(images or []),
        )
        self._product_repo.save(product)
        return product

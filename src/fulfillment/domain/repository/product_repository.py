"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory) live in the
infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fulfillment.domain.model.inventory import StockMovement
from fulfillment.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product (catalog seeding)."""

    @abstractmethod
    def apply_movement(self, movement: StockMovement) -> int | None:
        """Atomically apply a stock movement to one product.

        Must behave as a single conditional update relative to every
        other writer of the same product.  Returns the stock delta
        applied, or None when the movement was refused.  Raises
        EntityNotFoundError if the product does not exist.
        """

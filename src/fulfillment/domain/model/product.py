"""Product aggregate.

Products live independently of orders and are owned by the catalog.
Order handling reads their price, availability and images, and mutates
only the stock and sales counters, always through a StockMovement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from fulfillment.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog.

    Invariant: when ``track_inventory`` is true, ``stock_quantity`` is
    never negative.
    """

    id: str
    name: str
    price: Money
    stock_quantity: int = 0
    track_inventory: bool = True
    sales_count: int = 0
    sales_revenue: Decimal = Decimal("0")
    is_active: bool = True
    images: list[str] = field(default_factory=list)

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else ""

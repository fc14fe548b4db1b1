"""Stock movements — the only way product counters change.

A StockMovement describes one product's delta for stock, sales count and
sales revenue.  Repositories apply it as a single atomic, conditional
update so that a check and its decrement can never be split by a
concurrent writer.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from fulfillment.domain.model.product import Product


@dataclass(frozen=True)
class StockMovement:
    product_id: str
    stock_delta: int
    sales_count_delta: int
    sales_revenue_delta: Decimal
    # Deduct whatever is left instead of refusing (used by test orders)
    clamp_at_zero: bool = False

    def apply_to(self, product: Product) -> int | None:
        """Mutate *product* in place.

        Returns the stock delta actually applied, or None (and leaves the
        product untouched) when the movement would drive stock negative.
        """
        stock_delta = self.stock_delta
        if product.stock_quantity + stock_delta < 0:
            if not self.clamp_at_zero:
                return None
            stock_delta = -product.stock_quantity

        product.stock_quantity += stock_delta
        product.sales_count += self.sales_count_delta
        product.sales_revenue += self.sales_revenue_delta
        return stock_delta

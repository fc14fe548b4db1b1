"""Domain service: Inventory Ledger.

Keeps product stock and sales counters consistent with the set of
non-cancelled orders.  It is the only code that builds StockMovements.

Reservation is two-phase:
  Phase 1 — load and validate every product in the set.  Fails fast
            before any mutation.
  Phase 2 — apply one conditional movement per tracked line.  A movement
            refused by the store means a concurrent order took the stock
            after phase 1; the movements already applied are reversed
            before the error propagates, so the set is all-or-nothing.
"""

from __future__ import annotations

from dataclasses import replace

import structlog

from fulfillment.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ProductUnavailableError,
)
from fulfillment.domain.model.inventory import StockMovement
from fulfillment.domain.model.order import OrderItem
from fulfillment.domain.model.product import Product
from fulfillment.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class InventoryLedger:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def reserve(self, items: list[OrderItem], is_test: bool = False) -> list[OrderItem]:
        """Decrement stock for every tracked line of an order.

        Test orders skip the sufficiency check; their decrement is clamped
        at zero instead of being refused.

        Returns the items with ``inventory_tracked`` and ``stock_deducted``
        filled in, in the same order.
        """
        # Phase 1: load all products and validate
        products = self._load_products(items)
        if not is_test:
            self._check_sufficient_stock(items, products)

        # Phase 2: mutate through conditional movements
        reserved: list[OrderItem] = []
        try:
            for item in items:
                product = products[item.product_id]
                if not product.track_inventory:
                    reserved.append(replace(item, inventory_tracked=False, stock_deducted=0))
                    continue

                qty = item.quantity.value
                try:
                    applied = self._product_repo.apply_movement(
                        StockMovement(
                            product_id=item.product_id,
                            stock_delta=-qty,
                            sales_count_delta=qty,
                            sales_revenue_delta=item.line_total.amount,
                            clamp_at_zero=is_test,
                        )
                    )
                except EntityNotFoundError:
                    # Removed from the catalog after phase 1
                    raise ProductUnavailableError(
                        f"Product not found (ID: {item.product_id})"
                    ) from None
                if applied is None:
                    raise InsufficientStockError(
                        f"Insufficient stock for {item.name} (need {qty})"
                    )
                reserved.append(replace(item, inventory_tracked=True, stock_deducted=-applied))
        except Exception:
            logger.warning(
                "Reservation rolled back",
                applied_lines=len(reserved),
                total_lines=len(items),
            )
            self.restore(reserved)
            raise

        logger.info(
            "Stock reserved",
            products=[item.product_id for item in reserved if item.inventory_tracked],
            is_test=is_test,
        )
        return reserved

    def restore(self, items: list[OrderItem]) -> None:
        """Reverse exactly what ``reserve`` applied for these items.

        Must run at most once per order; the caller guarantees that.
        """
        for item in items:
            if not item.inventory_tracked:
                continue
            qty = item.quantity.value
            movement = StockMovement(
                product_id=item.product_id,
                stock_delta=item.stock_deducted,
                sales_count_delta=-qty,
                sales_revenue_delta=-item.line_total.amount,
            )
            try:
                self._product_repo.apply_movement(movement)
            except EntityNotFoundError:
                logger.warning("Stock not restored, product is gone", product_id=item.product_id)
                continue
            logger.info(
                "Stock restored",
                product_id=item.product_id,
                quantity=qty,
                stock_restored=item.stock_deducted,
            )

    # --- Internal helpers -----------------------------------------------------

    def _load_products(self, items: list[OrderItem]) -> dict[str, Product]:
        products: dict[str, Product] = {}
        for item in items:
            if item.product_id in products:
                continue
            product = self._product_repo.get_by_id(item.product_id)
            if product is None:
                raise ProductUnavailableError(f"Product not found (ID: {item.product_id})")
            if not product.is_active:
                raise ProductUnavailableError(f"Product {product.name} is not available")
            products[item.product_id] = product
        return products

    @staticmethod
    def _check_sufficient_stock(
        items: list[OrderItem], products: dict[str, Product]
    ) -> None:
        # The same product may appear on several lines (different variants)
        demand: dict[str, int] = {}
        for item in items:
            demand[item.product_id] = demand.get(item.product_id, 0) + item.quantity.value

        for product_id, qty in demand.items():
            product = products[product_id]
            if product.track_inventory and product.stock_quantity < qty:
                raise InsufficientStockError(
                    f"Insufficient stock for {product.name} "
                    f"(need {qty}, have {product.stock_quantity} available)"
                )

"""Application service: Create Order use case.

Orchestrates the flow between repositories and the domain services.
This is the only place that coordinates Product lookup, pricing,
inventory reservation, numbering and Order persistence.

Either the whole operation succeeds (stock reserved, order stored) or
it fails with no stock movement left behind and no order stored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import structlog

from fulfillment.application.dto import OrderDTO, OrderItemSpec, PaymentSpec, to_order_dto
from fulfillment.domain.exceptions import (
    DuplicateOrderNumberError,
    MissingTransactionIdError,
    ProductUnavailableError,
    ValidationError,
)
from fulfillment.domain.model.order import Order, OrderItem, utcnow
from fulfillment.domain.model.value_objects import (
    Address,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Quantity,
)
from fulfillment.domain.repository.order_repository import OrderRepository
from fulfillment.domain.repository.product_repository import ProductRepository
from fulfillment.domain.service.inventory_ledger import InventoryLedger
from fulfillment.domain.service.order_number_generator import OrderNumberGenerator
from fulfillment.domain.service.pricing_calculator import (
    PricingCalculator,
    PricingOverride,
)

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        ledger: InventoryLedger,
        numbers: OrderNumberGenerator,
        pricing: PricingCalculator | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._ledger = ledger
        self._numbers = numbers
        self._pricing = pricing or PricingCalculator()
        self._clock = clock

    def handle(
        self,
        user_id: str,
        item_specs: list[OrderItemSpec],
        shipping_address: Address,
        billing_address: Address | None = None,
        pricing: PricingOverride | None = None,
        payment: PaymentSpec | None = None,
        notes: str | None = None,
        is_test: bool = False,
    ) -> OrderDTO:
        """Create a new pending order.

        Steps:
        1. Validate payment metadata and snapshot every item from its product.
        2. Compute pricing.
        3. Let the Order aggregate validate the remaining business rules.
        4. Reserve stock (all-or-nothing).
        5. Assign an order number and persist; undo the reservation if
           persisting fails.
        """
        order_payment = self._build_payment(payment)
        items = self._snapshot_items(item_specs)
        order_pricing = self._pricing.calculate(items, pricing)

        order = Order.create(
            user_id=user_id,
            items=items,
            shipping_address=shipping_address,
            pricing=order_pricing,
            billing_address=billing_address,
            payment=order_payment,
            notes=notes,
            is_test=is_test,
            now=self._clock(),
        )

        order.items = self._ledger.reserve(order.items, is_test=order.is_test)

        try:
            self._persist_new(order)
        except Exception:
            try:
                self._ledger.restore(order.items)
            except Exception:
                logger.exception("Could not undo stock reservation", user_id=order.user_id)
            raise

        if not order.order_number:
            logger.warning("Order saved without order number", order_id=order.id)

        logger.info(
            "Order created",
            order_id=order.id,
            order_number=order.order_number,
            items=len(order.items),
            total=str(order.pricing.total.amount),
            payment_method=order.payment.method.value,
            is_test=order.is_test,
        )
        return to_order_dto(order)

    # --- Steps ----------------------------------------------------------------

    @staticmethod
    def _build_payment(spec: PaymentSpec | None) -> Payment:
        if spec is None:
            return Payment()
        try:
            method = PaymentMethod((spec.method or "cash").strip().lower())
        except ValueError:
            raise ValidationError(
                f"Invalid payment method: {spec.method!r}", "payment.method"
            ) from None

        if method is PaymentMethod.BANK_TRANSFER and not spec.transaction_id:
            raise MissingTransactionIdError("Transaction ID is required for bank transfers")

        # Payment status is never taken from the client
        return Payment(
            method=method,
            status=PaymentStatus.PENDING,
            transaction_id=spec.transaction_id or None,
            account_number=spec.account_number or None,
        )

    def _snapshot_items(self, item_specs: list[OrderItemSpec]) -> list[OrderItem]:
        if not item_specs:
            raise ValidationError("Order must contain at least one item", "items")

        items: list[OrderItem] = []
        for index, spec in enumerate(item_specs):
            if not spec.product_id:
                raise ValidationError("Product ID is missing", f"items[{index}].product")
            try:
                quantity = Quantity(spec.quantity)
            except ValidationError as exc:
                raise ValidationError(str(exc), f"items[{index}].quantity") from exc

            product = self._product_repo.get_by_id(spec.product_id)
            if product is None:
                raise ProductUnavailableError(f"Product not found (ID: {spec.product_id})")
            if not product.is_active:
                raise ProductUnavailableError(f"Product {product.name} is not available")

            items.append(
                OrderItem(
                    product_id=product.id,
                    name=product.name,
                    price=product.price,  # <-- price snapshot
                    quantity=quantity,
                    image=product.primary_image,
                    variant=spec.variant,
                )
            )
        return items

    def _persist_new(self, order: Order) -> None:
        order.order_number = self._numbers.generate(order.is_test, order.created_at)
        try:
            self._order_repo.save(order)
            return
        except DuplicateOrderNumberError:
            taken = order.order_number

        # Another writer stored this number between probe and save
        order.order_number = self._numbers.generate(order.is_test, order.created_at)
        logger.warning(
            "Order number claimed concurrently, drawing again",
            taken=taken,
            order_number=order.order_number,
        )
        try:
            self._order_repo.save(order)
        except DuplicateOrderNumberError:
            order.order_number = OrderNumberGenerator.fallback(
                OrderNumberGenerator.day_key(order.is_test, order.created_at)
            )
            logger.warning("Using fallback order number", order_number=order.order_number)
            self._order_repo.save(order)

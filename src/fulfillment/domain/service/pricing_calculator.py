"""Domain service: Pricing Calculator.

Pure function of the order lines and the caller's overrides.  Any
component the caller supplies is taken verbatim; the rest are derived.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from fulfillment.domain.exceptions import ValidationError
from fulfillment.domain.model.order import OrderItem
from fulfillment.domain.model.value_objects import Money, Pricing

Amount = Decimal | str | int | float


@dataclass(frozen=True)
class PricingOverride:
    """Client-supplied pricing; ``None`` means "not supplied"."""

    subtotal: Amount | None = None
    shipping: Amount | None = None
    tax: Amount | None = None
    discount: Amount | None = None
    total: Amount | None = None


class PricingCalculator:

    def calculate(
        self, items: list[OrderItem], override: PricingOverride | None = None
    ) -> Pricing:
        override = override or PricingOverride()

        subtotal = self._component(override.subtotal, "subtotal")
        if subtotal is None:
            subtotal = Money.zero()
            for item in items:
                subtotal = subtotal + item.line_total

        shipping = self._component(override.shipping, "shipping") or Money.zero()
        tax = self._component(override.tax, "tax") or Money.zero()
        discount = self._component(override.discount, "discount") or Money.zero()

        total = self._component(override.total, "total")
        if total is None:
            amount = subtotal.amount + shipping.amount + tax.amount - discount.amount
            if amount < 0:
                raise ValidationError(
                    f"Discount {discount} exceeds the order amount", "pricing.discount"
                )
            total = Money(amount)

        return Pricing(
            subtotal=subtotal,
            shipping=shipping,
            tax=tax,
            discount=discount,
            total=total,
        )

    @staticmethod
    def _component(value: Amount | None, name: str) -> Money | None:
        if value is None:
            return None
        return Money.of(value, field=f"pricing.{name}")

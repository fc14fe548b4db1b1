"""Immutable values shared by products, orders and pricing.

Each one validates itself on construction, so the aggregates never hold
a negative price, a zero quantity or an unknown payment method.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum

from fulfillment.domain.exceptions import ValidationError


@dataclass(frozen=True)
class Money:
    """Non-negative Decimal amount in a single currency.

    Every price, line total and pricing component on an order is a Money,
    so a negative figure is rejected where it is constructed.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money needs a Decimal amount, not {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money cannot be negative ({self.amount})")

    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._check_currency(other)
        if other.amount > self.amount:
            raise ValidationError(f"Subtracting {other} from {self} goes negative")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, quantity: int) -> Money:
        if not isinstance(quantity, int):
            raise TypeError(f"Money scales by int only, got {type(quantity).__name__}")
        return Money(self.amount * quantity, self.currency)

    def __str__(self) -> str:
        return f"${self.amount:.2f}"

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")

    @staticmethod
    def of(amount: str | float | int | Decimal, field: str | None = None) -> Money:
        """Parse a client-supplied amount, reporting failures against *field*."""
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}", field) from exc
        if not value.is_finite():
            raise ValidationError(f"Invalid money amount: {amount!r}", field)
        if value < 0:
            raise ValidationError(f"Amount cannot be negative, got {amount}", field)
        return Money(value)

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))


@dataclass(frozen=True)
class Quantity:
    """How many units of a product an order line asks for (at least one)."""

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass but never a valid quantity
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Address:
    name: str = ""
    phone: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""

    def validate(self, field: str) -> None:
        """Require the parts a carrier cannot deliver without."""
        for part in ("street", "city"):
            if not getattr(self, part).strip():
                raise ValidationError(f"{field}.{part} is required", f"{field}.{part}")


@dataclass(frozen=True)
class Variant:
    name: str
    value: str


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    STRIPE = "stripe"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


@dataclass(frozen=True)
class Payment:
    """Payment metadata recorded on the order. No money is moved here."""

    method: PaymentMethod = PaymentMethod.CASH
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: str | None = None
    account_number: str | None = None


@dataclass(frozen=True)
class Pricing:
    """Pricing snapshot frozen on the order at creation time."""

    subtotal: Money
    shipping: Money
    tax: Money
    discount: Money
    total: Money

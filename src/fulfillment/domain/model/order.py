"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its item snapshots, its pricing
snapshot and its status.  After creation it changes only through status
transitions and shipping metadata; it is never deleted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from fulfillment.domain.exceptions import (
    InvalidStatusError,
    InvalidTransitionError,
    ValidationError,
)
from fulfillment.domain.model.value_objects import (
    Address,
    Money,
    Payment,
    Pricing,
    Quantity,
    Variant,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    @staticmethod
    def parse(value: str | OrderStatus) -> OrderStatus:
        if isinstance(value, OrderStatus):
            return value
        try:
            return OrderStatus(str(value).strip().lower())
        except ValueError:
            raise InvalidStatusError(f"Unknown order status: {value!r}") from None


# Forward path; CANCELLED sits outside it and is reachable from any
# non-terminal status.
_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of a product at order-creation time.

    ``name``, ``price`` and ``image`` are copies: later changes to the
    product never reach an existing order.  ``inventory_tracked`` and
    ``stock_deducted`` record what the inventory ledger did for this
    line, so a cancellation can reverse exactly that.
    """

    product_id: str
    name: str
    price: Money  # locked at order-creation time
    quantity: Quantity
    image: str = ""
    variant: Variant | None = None
    inventory_tracked: bool = False
    stock_deducted: int = 0

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity.value


@dataclass(frozen=True)
class StatusChange:
    """Outcome of one status update."""

    previous: OrderStatus
    current: OrderStatus
    # This update is the one that cancelled the order
    cancelled: bool


@dataclass
class ShippingInfo:
    method: str | None = None
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    user_id: str
    items: list[OrderItem]
    shipping_address: Address
    billing_address: Address
    pricing: Pricing
    payment: Payment = field(default_factory=Payment)
    order_number: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    shipping: ShippingInfo = field(default_factory=ShippingInfo)
    notes: str | None = None
    cancelled_at: datetime | None = None
    cancel_reason: str | None = None
    is_test: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        user_id: str,
        items: list[OrderItem],
        shipping_address: Address,
        pricing: Pricing,
        billing_address: Address | None = None,
        payment: Payment | None = None,
        notes: str | None = None,
        is_test: bool = False,
        now: datetime | None = None,
    ) -> Order:
        """Create a new pending order, enforcing all invariants."""
        if not user_id or not str(user_id).strip():
            raise ValidationError("Order owner is required", "user")

        if not items:
            raise ValidationError("Order must contain at least one item", "items")

        shipping_address.validate("shippingAddress")

        created = now or utcnow()
        return Order(
            id=None,
            user_id=str(user_id).strip(),
            items=list(items),
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            pricing=pricing,
            payment=payment or Payment(),
            notes=notes,
            is_test=is_test,
            created_at=created,
            updated_at=created,
        )

    # --- State transitions ----------------------------------------------------

    def change_status(
        self,
        new_status: OrderStatus,
        now: datetime | None = None,
        cancel_reason: str | None = None,
    ) -> None:
        """Move the order to *new_status*, applying the transition side effects.

        Moving to the current status is a no-op.  Timestamps are set only
        the first time the matching status is reached.
        """
        if new_status is self.status:
            return
        self._assert_can_move_to(new_status)

        moment = now or utcnow()
        if new_status is OrderStatus.SHIPPED and self.shipping.shipped_at is None:
            self.shipping.shipped_at = moment
        if new_status is OrderStatus.DELIVERED and self.shipping.delivered_at is None:
            self.shipping.delivered_at = moment
        if new_status is OrderStatus.CANCELLED:
            self.claim_cancellation(moment, cancel_reason)

        self.status = new_status
        self.updated_at = moment

    def apply_status_update(
        self,
        new_status: OrderStatus,
        now: datetime,
        tracking_number: str | None = None,
        estimated_delivery: datetime | None = None,
        cancel_reason: str | None = None,
    ) -> StatusChange:
        """Transition, attach shipping metadata and touch ``updated_at``.

        Stores run this against the stored order while holding their write
        lock, so the transition is checked against the latest state and
        ``cancelled`` is True for exactly one caller per order.
        """
        previous = self.status
        was_cancelled = self.cancelled_at is not None
        self.change_status(new_status, now, cancel_reason)
        self.attach_tracking(tracking_number, estimated_delivery)
        self.updated_at = now
        return StatusChange(
            previous=previous,
            current=self.status,
            cancelled=not was_cancelled and self.cancelled_at is not None,
        )

    def claim_cancellation(self, now: datetime, reason: str | None = None) -> bool:
        """Set ``cancelled_at`` if it is still unset.

        Returns True exactly once per order: the caller that gets True is
        the one that must restore inventory.
        """
        if self.cancelled_at is not None:
            return False
        if self.status.is_terminal:
            return False
        self.cancelled_at = now
        self.cancel_reason = reason
        self.status = OrderStatus.CANCELLED
        self.updated_at = now
        return True

    def attach_tracking(
        self,
        tracking_number: str | None = None,
        estimated_delivery: datetime | None = None,
    ) -> None:
        """Overwrite shipping metadata only where a value is supplied."""
        if tracking_number:
            self.shipping.tracking_number = tracking_number
        if estimated_delivery is not None:
            self.shipping.estimated_delivery = estimated_delivery

    # --- Computed properties --------------------------------------------------

    @property
    def items_total(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def is_cancelled(self) -> bool:
        return self.status is OrderStatus.CANCELLED

    # --- Internal helpers -----------------------------------------------------

    def _assert_can_move_to(self, new_status: OrderStatus) -> None:
        if self.status.is_terminal:
            raise InvalidTransitionError(
                f"Cannot change order status — {self.status.value} is final"
            )
        if new_status is OrderStatus.CANCELLED:
            return
        if _FLOW.index(new_status) < _FLOW.index(self.status):
            raise InvalidTransitionError(
                f"Cannot move order from {self.status.value} back to {new_status.value}"
            )

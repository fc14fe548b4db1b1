"""Application service: Update Order Status use case.

The transition is checked and written in one store step against the
stored order, so a status update can never overwrite a cancellation
that landed after the order was read.  The update that sets
``cancelled_at`` is the only one that gives the reserved stock back,
which makes retried or concurrent cancellations no-ops.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import structlog

from fulfillment.application.dto import OrderDTO, to_order_dto
from fulfillment.domain.exceptions import EntityNotFoundError
from fulfillment.domain.model.order import OrderStatus, utcnow
from fulfillment.domain.repository.order_repository import OrderRepository
from fulfillment.domain.service.inventory_ledger import InventoryLedger

logger = structlog.get_logger(__name__)


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        ledger: InventoryLedger,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._order_repo = order_repo
        self._ledger = ledger
        self._clock = clock

    def handle(
        self,
        order_id: int,
        status: str | OrderStatus,
        tracking_number: str | None = None,
        estimated_delivery: datetime | None = None,
        cancel_reason: str | None = None,
    ) -> OrderDTO:
        new_status = OrderStatus.parse(status)
        now = self._clock()

        updated = self._order_repo.update(
            order_id,
            lambda order: order.apply_status_update(
                new_status,
                now,
                tracking_number=tracking_number,
                estimated_delivery=estimated_delivery,
                cancel_reason=cancel_reason,
            ),
        )
        if updated is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        order, change = updated

        if change.cancelled:
            self._ledger.restore(order.items)
            logger.info(
                "Order cancelled",
                order_id=order_id,
                order_number=order.order_number,
                reason=cancel_reason,
            )

        if change.current is not change.previous:
            logger.info(
                "Order status changed",
                order_id=order_id,
                order_number=order.order_number,
                from_status=change.previous.value,
                to_status=change.current.value,
            )
        return to_order_dto(order)

"""Domain service: Order Number Generator.

Order numbers look like ``ORD-20261017-00042`` (``TEST-`` for test
orders).  The sequence comes from an atomic per-day counter, so
concurrent generators never draw the same value; the existence probe
only guards against counters that lag behind stored orders.  When the
probe budget runs out, a number unique by construction is used instead
of failing the order.
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime
from typing import Callable

import structlog

from fulfillment.domain.model.order import utcnow
from fulfillment.domain.repository.order_repository import OrderRepository
from fulfillment.domain.repository.sequence_repository import SequenceRepository

logger = structlog.get_logger(__name__)

ORDER_PREFIX = "ORD"
TEST_ORDER_PREFIX = "TEST"


class OrderNumberGenerator:

    def __init__(
        self,
        order_repo: OrderRepository,
        sequence_repo: SequenceRepository,
        max_attempts: int = 100,
        padding: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._order_repo = order_repo
        self._sequence_repo = sequence_repo
        self._max_attempts = max_attempts
        self._padding = padding
        self._clock = clock

    def generate(self, is_test: bool = False, on: datetime | None = None) -> str:
        key = self.day_key(is_test, on or self._clock())

        for attempt in range(1, self._max_attempts + 1):
            sequence = self._sequence_repo.increment(key)
            candidate = f"{key}-{sequence:0{self._padding}d}"
            if not self._order_repo.exists_order_number(candidate):
                return candidate
            logger.info("Order number taken, probing next", order_number=candidate, attempt=attempt)

        number = self.fallback(key)
        logger.warning(
            "Order number probe budget exhausted, using fallback",
            order_number=number,
            attempts=self._max_attempts,
        )
        return number

    @staticmethod
    def day_key(is_test: bool, on: datetime) -> str:
        prefix = TEST_ORDER_PREFIX if is_test else ORDER_PREFIX
        return f"{prefix}-{on:%Y%m%d}"

    @staticmethod
    def fallback(key: str) -> str:
        """Nanosecond clock tick plus a random suffix."""
        return f"{key}-{time.time_ns()}{secrets.token_hex(3).upper()}"

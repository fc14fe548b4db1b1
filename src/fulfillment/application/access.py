"""Who is asking, and may they see an order.

Authentication lives outside this package; callers hand in a Requester
they already trust.  The policy is a plain callable so an outer layer
can swap in its own rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from fulfillment.domain.model.order import Order


@dataclass(frozen=True)
class Requester:
    user_id: str
    is_admin: bool = False


AccessPolicy = Callable[[Requester, Order], bool]


def owner_or_admin(requester: Requester, order: Order) -> bool:
    return requester.is_admin or order.user_id == requester.user_id

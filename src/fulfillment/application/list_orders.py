"""Application service: List Orders use case (query).

Regular users see their own orders; admins see everyone's.  Newest
first, offset pagination.
"""

from __future__ import annotations

import math

from fulfillment.application.access import Requester
from fulfillment.application.dto import OrderPageDTO, to_order_dto
from fulfillment.domain.exceptions import ValidationError
from fulfillment.domain.repository.order_repository import OrderRepository

DEFAULT_PAGE_SIZE = 10


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository, max_page_size: int = 100) -> None:
        self._order_repo = order_repo
        self._max_page_size = max_page_size

    def handle(
        self, requester: Requester, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> OrderPageDTO:
        if page < 1:
            raise ValidationError("Page must be 1 or greater", "page")
        if not 1 <= limit <= self._max_page_size:
            raise ValidationError(
                f"Limit must be between 1 and {self._max_page_size}", "limit"
            )

        user_id = None if requester.is_admin else requester.user_id
        orders, total = self._order_repo.list_orders(
            user_id, offset=(page - 1) * limit, limit=limit
        )
        return OrderPageDTO(
            orders=[to_order_dto(order) for order in orders],
            total=total,
            page=page,
            pages=math.ceil(total / limit),
        )

"""Application service: Show Order use case (query)."""

from __future__ import annotations

from fulfillment.application.access import AccessPolicy, Requester, owner_or_admin
from fulfillment.application.dto import OrderDTO, to_order_dto
from fulfillment.domain.exceptions import EntityNotFoundError, ForbiddenError
from fulfillment.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        access_policy: AccessPolicy = owner_or_admin,
    ) -> None:
        self._order_repo = order_repo
        self._access_policy = access_policy

    def handle(self, order_id: int, requester: Requester) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        if not self._access_policy(requester, order):
            raise ForbiddenError(f"Not allowed to view order #{order_id}")
        return to_order_dto(order)

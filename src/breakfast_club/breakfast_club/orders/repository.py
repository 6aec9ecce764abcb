from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import OrderStatus
from .model import NewOrder, Order


class OrderRepository(Protocol):
    def get_by_id(self, order_id: int) -> Optional[Order]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: str, order_date: str) -> Optional[Order]:
        raise NotImplementedError

    def create_order(self, *, user_id: str, order_date: str, order: NewOrder, created_at: datetime) -> Order:
        """Insert a pending order.

        Must be atomic on (user_id, order_date): raises DuplicateOrderError when
        another order for that pair already exists.
        """

        raise NotImplementedError

    def list_for_date(self, order_date: str, *, status: Optional[OrderStatus] = None) -> Sequence[Order]:
        """Orders for ``order_date`` ordered by creation time (oldest first)."""

        raise NotImplementedError

    def set_status(self, order_id: int, status: OrderStatus) -> bool:
        raise NotImplementedError

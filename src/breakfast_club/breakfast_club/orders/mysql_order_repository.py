from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.timestamps import normalize_timestamp
from ..core.enums import FoodType, OrderStatus
from ..core.exceptions import DuplicateOrderError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    normalize_mysql_date,
    to_db_datetime,
)
from .model import NewOrder, Order
from .repository import OrderRepository

_COLUMNS = (
    "order_id, user_id, order_date, food_type, with_potatoes, with_cheese, "
    "dietary_notes, special_requests, created_at, status"
)


def _row_to_order(r: Dict[str, Any]) -> Order:
    return Order(
        order_id=int(r["order_id"]),
        user_id=r["user_id"],
        order_date=normalize_mysql_date(r["order_date"]),
        food_type=FoodType(r["food_type"]),
        with_potatoes=bool(r.get("with_potatoes")),
        with_cheese=bool(r.get("with_cheese")),
        dietary_notes=r.get("dietary_notes") or "",
        special_requests=r.get("special_requests") or "",
        created_at=normalize_timestamp(r["created_at"]),
        status=OrderStatus(r["status"]),
    )


class MySQLOrderRepository(OrderRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, order_id: int) -> Optional[Order]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM daily_orders WHERE order_id=%s", (int(order_id),))
            r = fetchone(cur)
            return _row_to_order(r) if r else None

    def get_for_user_and_date(self, user_id: str, order_date: str) -> Optional[Order]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_orders WHERE user_id=%s AND order_date=%s",
                (user_id, order_date),
            )
            r = fetchone(cur)
            return _row_to_order(r) if r else None

    def create_order(self, *, user_id: str, order_date: str, order: NewOrder, created_at: datetime) -> Order:
        # uq_orders_user_date makes the insert itself the uniqueness check.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO daily_orders(user_id, order_date, food_type, with_potatoes, with_cheese,
                                             dietary_notes, special_requests, created_at, status)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        user_id,
                        order_date,
                        order.food_type.value,
                        1 if order.with_potatoes else 0,
                        1 if order.with_cheese else 0,
                        order.dietary_notes,
                        order.special_requests,
                        to_db_datetime(created_at),
                        OrderStatus.PENDING.value,
                    ),
                )
                order_id = int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicateOrderError("You already have an order for this date")
            raise

        return Order(
            order_id=order_id,
            user_id=user_id,
            order_date=order_date,
            food_type=order.food_type,
            with_potatoes=order.with_potatoes,
            with_cheese=order.with_cheese,
            dietary_notes=order.dietary_notes,
            special_requests=order.special_requests,
            created_at=created_at,
            status=OrderStatus.PENDING,
        )

    def list_for_date(self, order_date: str, *, status: Optional[OrderStatus] = None) -> Sequence[Order]:
        sql = f"SELECT {_COLUMNS} FROM daily_orders WHERE order_date=%s"
        params: tuple = (order_date,)
        if status is not None:
            sql += " AND status=%s"
            params += (status.value,)
        sql += " ORDER BY created_at ASC, order_id ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_order(r) for r in fetchall(cur)]

    def set_status(self, order_id: int, status: OrderStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE daily_orders SET status=%s WHERE order_id=%s",
                (status.value, int(order_id)),
            )
            return cur.rowcount > 0

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, List, Mapping, Optional

from ..business_day.policy import BusinessCalendar
from ..common.datetime_utils import parse_date_key
from ..common.validators import optional_text, require_bool
from ..core.constants import MAX_NOTES_LENGTH
from ..core.enums import FoodType, OrderStatus
from ..core.exceptions import (
    AuthorizationError,
    DuplicateOrderError,
    InvalidSelectionError,
    NotFoundError,
    OrderWindowClosedError,
    ValidationError,
)
from ..users.model import User, summarize
from ..users.repository import UserRepository
from .model import BatchConfirmResult, DailyOrders, NewOrder, Order, OrderListing, OrderSummary
from .repository import OrderRepository

logger = logging.getLogger(__name__)


def parse_selection(data: Mapping[str, Any]) -> NewOrder:
    """Validate the raw order payload (camelCase keys as sent by clients)."""

    food_type = data.get("foodType", data.get("bagelType"))
    try:
        food = FoodType(food_type)
    except ValueError:
        raise InvalidSelectionError("Invalid food type")

    return NewOrder(
        food_type=food,
        with_potatoes=require_bool(data.get("withPotatoes"), "withPotatoes"),
        with_cheese=require_bool(data.get("withCheese"), "withCheese"),
        dietary_notes=optional_text(data.get("dietaryNotes"), "Dietary notes", MAX_NOTES_LENGTH),
        special_requests=optional_text(data.get("specialRequests"), "Special requests", MAX_NOTES_LENGTH),
    )


def summarize_orders(orders: List[Order]) -> OrderSummary:
    breakdown: dict[str, int] = {}
    potatoes = cheese = 0
    for o in orders:
        breakdown[o.food_type.value] = breakdown.get(o.food_type.value, 0) + 1
        potatoes += 1 if o.with_potatoes else 0
        cheese += 1 if o.with_cheese else 0
    return OrderSummary(
        total_orders=len(orders),
        food_breakdown=breakdown,
        with_potatoes=potatoes,
        with_cheese=cheese,
    )


class OrderService:
    """Use case: place, read and confirm daily orders."""

    def __init__(self, orders: OrderRepository, users: UserRepository, calendar: BusinessCalendar):
        self._orders = orders
        self._users = users
        self._calendar = calendar

    @staticmethod
    def food_types() -> List[str]:
        return [f.value for f in FoodType]

    def target_date(self, now: Optional[datetime] = None) -> str:
        return self._calendar.order_target_date(now)

    def create_order(
        self,
        user: User,
        selection: NewOrder | Mapping[str, Any],
        *,
        order_date: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Order:
        now = now or self._calendar.now()
        if not isinstance(selection, NewOrder):
            selection = parse_selection(selection)

        decision = self._calendar.orders_allowed(now)
        if not decision.allowed:
            raise OrderWindowClosedError(decision.reason or "Orders are closed right now")

        order_date = parse_date_key(order_date) if order_date else self._calendar.order_target_date(now)

        if self._orders.get_for_user_and_date(user.uid, order_date):
            raise DuplicateOrderError("You already have an order for this date")

        order = self._orders.create_order(user_id=user.uid, order_date=order_date, order=selection, created_at=now)
        logger.info("Order %s created by %s for %s (%s)", order.order_id, user.uid, order_date, order.food_type.value)
        return order

    def get_order(self, user: User, order_date: str) -> Optional[Order]:
        return self._orders.get_for_user_and_date(user.uid, parse_date_key(order_date))

    def get_current_order(self, user: User, *, now: Optional[datetime] = None) -> Optional[Order]:
        return self.get_order(user, self._calendar.order_target_date(now))

    def confirm_order(self, admin: User, order_id: Any) -> Order:
        if not admin.is_admin:
            raise AuthorizationError("Admin privileges required to confirm orders")
        if order_id is None or order_id == "":
            raise ValidationError("Order ID is required")
        try:
            order_id = int(order_id)
        except (TypeError, ValueError):
            raise ValidationError("Order ID is invalid")

        order = self._orders.get_by_id(order_id)
        if not order:
            raise NotFoundError("Order not found")
        if order.status == OrderStatus.CONFIRMED:
            return order

        self._orders.set_status(order_id, OrderStatus.CONFIRMED)
        logger.info("Order %s confirmed by %s", order_id, admin.uid)
        return replace(order, status=OrderStatus.CONFIRMED)

    def confirm_all_pending(self, admin: User, order_date: Optional[str]) -> BatchConfirmResult:
        """Best effort: each pending order is confirmed independently, failures are reported."""

        if not admin.is_admin:
            raise AuthorizationError("Admin privileges required to confirm orders")
        order_date = parse_date_key(order_date)

        confirmed = 0
        failed: list[int] = []
        for order in self._orders.list_for_date(order_date, status=OrderStatus.PENDING):
            try:
                ok = self._orders.set_status(order.order_id, OrderStatus.CONFIRMED)
            except Exception:
                logger.exception("Failed to confirm order %s", order.order_id)
                ok = False
            if ok:
                confirmed += 1
            else:
                failed.append(order.order_id)

        logger.info(
            "Batch confirm for %s by %s: %d confirmed, %d failed", order_date, admin.uid, confirmed, len(failed)
        )
        return BatchConfirmResult(confirmed_count=confirmed, failed_ids=failed)

    def list_orders_for_date(self, order_date: str) -> DailyOrders:
        order_date = parse_date_key(order_date)
        orders = sorted(self._orders.list_for_date(order_date), key=lambda o: (o.created_at, o.order_id))
        users = self._users.get_many(o.user_id for o in orders)
        return DailyOrders(
            order_date=order_date,
            orders=[OrderListing(order=o, user=summarize(users.get(o.user_id), o.user_id)) for o in orders],
            summary=summarize_orders(orders),
        )

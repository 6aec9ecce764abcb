from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from ..core.enums import FoodType, OrderStatus
from ..users.model import UserSummary


@dataclass(frozen=True)
class Order:
    """Domain entity: one user's breakfast order for one business date."""

    order_id: int
    user_id: str
    order_date: str
    food_type: FoodType
    with_potatoes: bool
    with_cheese: bool
    dietary_notes: str
    special_requests: str
    created_at: datetime
    status: OrderStatus = OrderStatus.PENDING


@dataclass(frozen=True)
class NewOrder:
    """Validated selection submitted by a user."""

    food_type: FoodType
    with_potatoes: bool = False
    with_cheese: bool = False
    dietary_notes: str = ""
    special_requests: str = ""


@dataclass(frozen=True)
class OrderListing:
    order: Order
    user: UserSummary


@dataclass(frozen=True)
class OrderSummary:
    """Read-time aggregation over one day's orders (never persisted)."""

    total_orders: int = 0
    food_breakdown: Dict[str, int] = field(default_factory=dict)
    with_potatoes: int = 0
    with_cheese: int = 0


@dataclass(frozen=True)
class DailyOrders:
    order_date: str
    orders: List[OrderListing]
    summary: OrderSummary


@dataclass(frozen=True)
class BatchConfirmResult:
    confirmed_count: int
    failed_ids: List[int] = field(default_factory=list)

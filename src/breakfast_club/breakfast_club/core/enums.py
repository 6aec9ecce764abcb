from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    """Order lifecycle. Only admins move an order forward (pending -> confirmed)."""

    PENDING = "pending"
    CONFIRMED = "confirmed"


class FoodType(str, Enum):
    """Closed menu of breakfast choices."""

    PLAIN = "plain"
    SESAME = "sesame"
    EVERYTHING = "everything"
    WRAP = "wrap"
    NO_BAGEL = "no_bagel"


class OrderWindowPolicy(str, Enum):
    """Which order-window rule the deployment runs with (never both)."""

    NEXT_DAY = "next_day"
    SAME_DAY_HOURS = "same_day_hours"

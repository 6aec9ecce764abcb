from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_ORDER_END_HOUR, DEFAULT_ORDER_START_HOUR
from ..core.enums import OrderWindowPolicy
from .strategies.base import OrderWindowStrategy
from .strategies.next_day_strategy import NextDayStrategy
from .strategies.same_day_strategy import SameDayHoursStrategy


@dataclass
class OrderWindowFactory:
    """Factory Pattern: build the one strategy the deployment is configured for."""

    start_hour: int = DEFAULT_ORDER_START_HOUR
    end_hour: int = DEFAULT_ORDER_END_HOUR

    def for_policy(self, policy: OrderWindowPolicy | str) -> OrderWindowStrategy:
        try:
            policy = OrderWindowPolicy(policy)
        except ValueError:
            raise ValueError(f"Unknown order window policy: {policy!r}")

        if policy == OrderWindowPolicy.SAME_DAY_HOURS:
            if not 0 <= self.start_hour < self.end_hour <= 24:
                raise ValueError(f"Invalid order hours {self.start_hour}-{self.end_hour}")
            return SameDayHoursStrategy(start_hour=self.start_hour, end_hour=self.end_hour)
        return NextDayStrategy()

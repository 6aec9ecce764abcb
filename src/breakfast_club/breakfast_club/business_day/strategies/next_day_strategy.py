from __future__ import annotations

from datetime import date, datetime, timedelta

from .base import OrderWindowStrategy, WindowDecision


class NextDayStrategy(OrderWindowStrategy):
    """Orders are always for tomorrow and always open."""

    def target_date(self, *, local_now: datetime) -> date:
        return local_now.date() + timedelta(days=1)

    def decide(self, *, local_now: datetime) -> WindowDecision:
        return WindowDecision(allowed=True)

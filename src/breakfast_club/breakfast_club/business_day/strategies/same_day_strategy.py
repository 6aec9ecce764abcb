from __future__ import annotations

from datetime import date, datetime

from .base import OrderWindowStrategy, WindowDecision


def _hour_label(hour: int) -> str:
    # end_hour may be 24, i.e. midnight.
    hour %= 24
    suffix = "AM" if hour < 12 else "PM"
    return f"{(hour % 12) or 12} {suffix}"


class SameDayHoursStrategy(OrderWindowStrategy):
    """Orders are for today and only accepted between ``start_hour`` and ``end_hour``."""

    def __init__(self, *, start_hour: int, end_hour: int):
        self._start_hour = int(start_hour)
        self._end_hour = int(end_hour)

    def target_date(self, *, local_now: datetime) -> date:
        return local_now.date()

    def decide(self, *, local_now: datetime) -> WindowDecision:
        if self._start_hour <= local_now.hour < self._end_hour:
            return WindowDecision(allowed=True)
        return WindowDecision(
            allowed=False,
            reason=(
                f"Orders are accepted between {_hour_label(self._start_hour)} "
                f"and {_hour_label(self._end_hour)}"
            ),
        )

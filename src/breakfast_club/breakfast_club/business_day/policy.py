from __future__ import annotations

from datetime import datetime, time
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import now_utc, to_date_key
from .strategies.base import OrderWindowStrategy, WindowDecision
from .strategies.next_day_strategy import NextDayStrategy


class BusinessCalendar:
    """Single source of truth for "what day is it" and "may orders be placed".

    Dates are keyed as YYYY-MM-DD in a fixed civil timezone. The order window
    rule is delegated to one :class:`OrderWindowStrategy`.
    """

    def __init__(
        self,
        tz: ZoneInfo | str,
        *,
        window: OrderWindowStrategy | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._tz = tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)
        self._window = window or NextDayStrategy()
        self._clock = clock or now_utc

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        return self._clock()

    def local_now(self, now: Optional[datetime] = None) -> datetime:
        return (now or self._clock()).astimezone(self._tz)

    def business_date(self, now: Optional[datetime] = None) -> str:
        return to_date_key(self.local_now(now).date())

    def order_target_date(self, now: Optional[datetime] = None) -> str:
        return to_date_key(self._window.target_date(local_now=self.local_now(now)))

    def orders_allowed(self, now: Optional[datetime] = None) -> WindowDecision:
        return self._window.decide(local_now=self.local_now(now))

    def end_of_day(self, now: Optional[datetime] = None) -> datetime:
        """23:59:59.999 local time of the current business date, as an aware instant."""
        local = self.local_now(now)
        return datetime.combine(local.date(), time(23, 59, 59, 999000), tzinfo=self._tz)

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class WindowDecision:
    allowed: bool
    reason: Optional[str] = None


class OrderWindowStrategy(ABC):
    """Strategy Pattern: encapsulate which day an order is for and when it may be placed.

    Both methods receive ``local_now``, the current instant already converted to
    the business timezone.
    """

    @abstractmethod
    def target_date(self, *, local_now: datetime) -> date:
        raise NotImplementedError

    @abstractmethod
    def decide(self, *, local_now: datetime) -> WindowDecision:
        raise NotImplementedError

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class QRCode:
    """Domain entity: the redeemable check-in code for one business date.

    ``code`` is an opaque keyed hash; it proves nothing by itself and is only
    valid while a matching active record exists.
    """

    qr_code_id: int
    code_date: str
    code: str
    created_by: str
    is_active: bool
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class IssueResult:
    qr_code: QRCode
    created: bool

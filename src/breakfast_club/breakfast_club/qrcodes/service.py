from __future__ import annotations

import hashlib
import hmac
import io
import logging
import secrets
from datetime import datetime
from typing import Callable, Optional

import qrcode

from ..business_day.policy import BusinessCalendar
from ..core.constants import QR_NONCE_BYTES
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..users.model import User
from .model import IssueResult, QRCode
from .repository import QRCodeRepository

logger = logging.getLogger(__name__)


def sign_code(secret: str, code_date: str, nonce: str) -> str:
    """HMAC-SHA256 over "<date>-<nonce>", hex encoded."""
    return hmac.new(secret.encode("utf-8"), f"{code_date}-{nonce}".encode("utf-8"), hashlib.sha256).hexdigest()


class QRCodeService:
    """Use case: issue and look up the daily check-in code (admin only)."""

    def __init__(
        self,
        qr_codes: QRCodeRepository,
        calendar: BusinessCalendar,
        *,
        secret: str,
        nonce_factory: Callable[[], str] | None = None,
    ):
        if not secret:
            raise ValueError("QR signing secret must not be empty")
        self._qr_codes = qr_codes
        self._calendar = calendar
        self._secret = secret
        self._nonce_factory = nonce_factory or (lambda: secrets.token_hex(QR_NONCE_BYTES))

    @staticmethod
    def _require_admin(user: User, action: str) -> None:
        if not user.is_admin:
            raise AuthorizationError(f"Admin privileges required to {action} QR codes")

    def issue_for_today(self, admin: User, *, now: Optional[datetime] = None) -> IssueResult:
        self._require_admin(admin, "generate")
        now = now or self._calendar.now()
        today = self._calendar.business_date(now)

        existing = self._qr_codes.get_active_for_date(today)
        if existing:
            return IssueResult(qr_code=existing, created=False)

        retired = self._qr_codes.deactivate_before(today)
        if retired:
            logger.info("Deactivated %d QR code(s) from earlier days", retired)

        try:
            qr = self._qr_codes.create_code(
                code_date=today,
                code=sign_code(self._secret, today, self._nonce_factory()),
                created_by=admin.uid,
                created_at=now,
                expires_at=self._calendar.end_of_day(now),
            )
        except ConflictError:
            # Another admin issued concurrently; hand back the winner.
            existing = self._qr_codes.get_active_for_date(today)
            if existing is None:
                raise
            return IssueResult(qr_code=existing, created=False)

        logger.info("QR code %s issued for %s by %s", qr.qr_code_id, today, admin.uid)
        return IssueResult(qr_code=qr, created=True)

    def get_active_for_today(self, admin: User, *, now: Optional[datetime] = None) -> QRCode:
        self._require_admin(admin, "view")
        now = now or self._calendar.now()
        qr = self._qr_codes.get_active_for_date(self._calendar.business_date(now))
        if not qr or qr.is_expired(now):
            raise NotFoundError("No active QR code found for today")
        return qr

    @staticmethod
    def render_png(qr: QRCode) -> bytes:
        img_qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=2,
        )
        img_qr.add_data(qr.code)
        img_qr.make(fit=True)

        buf = io.BytesIO()
        img_qr.make_image(fill_color="black", back_color="white").save(buf, format="PNG")
        return buf.getvalue()

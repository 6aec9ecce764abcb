from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import QRCode


class QRCodeRepository(Protocol):
    def get_active_for_date(self, code_date: str) -> Optional[QRCode]:
        raise NotImplementedError

    def find_active_by_code(self, code: str, code_date: str) -> Optional[QRCode]:
        raise NotImplementedError

    def create_code(
        self,
        *,
        code_date: str,
        code: str,
        created_by: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> QRCode:
        """Insert an active code.

        Must be atomic on (code_date, active): raises ConflictError when an
        active code for ``code_date`` already exists.
        """

        raise NotImplementedError

    def deactivate_before(self, code_date: str) -> int:
        """Deactivate active codes of earlier dates. Returns how many were changed."""

        raise NotImplementedError

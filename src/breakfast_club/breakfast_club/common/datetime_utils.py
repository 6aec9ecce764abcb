from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from ..core.constants import DATE_KEY_FORMAT
from ..core.exceptions import ValidationError


def parse_date_key(value: Optional[str], field_name: str = "date") -> str:
    """Validate a YYYY-MM-DD string and return it unchanged."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    try:
        datetime.strptime(value.strip(), DATE_KEY_FORMAT)
    except ValueError:
        raise ValidationError(f"{field_name} must use the YYYY-MM-DD format")
    return value.strip()


def to_date_key(value: date) -> str:
    return value.strftime(DATE_KEY_FORMAT)


def now_utc() -> datetime:
    """Current instant (aware, UTC).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

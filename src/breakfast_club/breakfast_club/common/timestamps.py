"""Normalization of stored timestamp values.

Timestamps reach the services in several shapes depending on where they were
written (this service, client SDKs exporting documents, older imports). Each
shape is a tag in :class:`TimestampShape`; :func:`normalize_timestamp` walks
the tags in priority order and uses the first converter that succeeds.

When nothing matches the current instant is returned and a warning is logged.
That keeps listings readable when a single record is malformed, at the price of
showing a wrong time for that record.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Tuple

from .datetime_utils import now_utc

logger = logging.getLogger(__name__)


class TimestampShape(str, Enum):
    INSTANT = "instant"
    CONVERTIBLE = "convertible"
    EPOCH_STRUCT = "epoch_struct"
    UNDERSCORE_EPOCH_STRUCT = "underscore_epoch_struct"
    ISO_STRING = "iso_string"
    VERBOSE_STRING = "verbose_string"
    EPOCH_MILLIS = "epoch_millis"


# e.g. "June 1, 2024 at 9:30:00 AM UTC-4"
_VERBOSE_RE = re.compile(
    r"^(?P<month>[A-Za-z]+)\s+(?P<day>\d{1,2}),\s*(?P<year>\d{4})\s+at\s+"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})\s*(?P<ampm>[AaPp][Mm])\s*"
    r"UTC(?:(?P<sign>[+-])(?P<off_h>\d{1,2})(?::?(?P<off_m>\d{2}))?)?$"
)

_CONVERTER_METHODS = ("to_datetime", "ToDatetime", "toDate")


def _field(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_utc(value: datetime) -> datetime:
    # Naive values come from DATETIME columns, which are stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _from_epoch(seconds: Any, nanos: Any) -> datetime:
    if not _is_number(seconds):
        raise TypeError("seconds must be numeric")
    extra = nanos if _is_number(nanos) else 0
    return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(microseconds=extra / 1000)


def _has_epoch_fields(value: Any, seconds_key: str) -> bool:
    return not isinstance(value, (str, bytes)) and _field(value, seconds_key) is not None


def _convert_instant(value: datetime) -> datetime:
    return _as_utc(value)


def _convert_convertible(value: Any) -> datetime:
    for name in _CONVERTER_METHODS:
        method = getattr(value, name, None)
        if callable(method):
            result = method()
            if isinstance(result, datetime):
                return _as_utc(result)
    raise TypeError("converter did not return a datetime")


def _convert_epoch_struct(value: Any) -> datetime:
    return _from_epoch(_field(value, "seconds"), _field(value, "nanoseconds"))


def _convert_underscore_epoch_struct(value: Any) -> datetime:
    return _from_epoch(_field(value, "_seconds"), _field(value, "_nanoseconds"))


def _convert_iso_string(value: str) -> datetime:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return _as_utc(datetime.fromisoformat(text))


def _convert_verbose_string(value: str) -> datetime:
    m = _VERBOSE_RE.match(value.strip())
    if not m:
        raise ValueError(f"Not a verbose timestamp: {value!r}")

    local = datetime.strptime(
        f"{m['month']} {m['day']} {m['year']} {m['hour']}:{m['minute']}:{m['second']} {m['ampm'].upper()}",
        "%B %d %Y %I:%M:%S %p",
    )
    offset = timedelta(hours=int(m["off_h"] or 0), minutes=int(m["off_m"] or 0))
    if m["sign"] == "-":
        offset = -offset
    return local.replace(tzinfo=timezone(offset)).astimezone(timezone.utc)


def _convert_epoch_millis(value: Any) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


_Normalizer = Tuple[TimestampShape, Callable[[Any], bool], Callable[[Any], datetime]]

NORMALIZERS: Sequence[_Normalizer] = (
    (TimestampShape.INSTANT, lambda v: isinstance(v, datetime), _convert_instant),
    (
        TimestampShape.CONVERTIBLE,
        lambda v: any(callable(getattr(v, n, None)) for n in _CONVERTER_METHODS),
        _convert_convertible,
    ),
    (TimestampShape.EPOCH_STRUCT, lambda v: _has_epoch_fields(v, "seconds"), _convert_epoch_struct),
    (
        TimestampShape.UNDERSCORE_EPOCH_STRUCT,
        lambda v: _has_epoch_fields(v, "_seconds"),
        _convert_underscore_epoch_struct,
    ),
    (TimestampShape.ISO_STRING, lambda v: isinstance(v, str), _convert_iso_string),
    (TimestampShape.VERBOSE_STRING, lambda v: isinstance(v, str), _convert_verbose_string),
    (TimestampShape.EPOCH_MILLIS, _is_number, _convert_epoch_millis),
)


def classify_timestamp(value: Any) -> Optional[TimestampShape]:
    """Return the first shape whose converter accepts ``value``, or None."""
    for shape, matches, convert in NORMALIZERS:
        if not matches(value):
            continue
        try:
            convert(value)
        except (TypeError, ValueError, OverflowError, OSError):
            continue
        return shape
    return None


def normalize_timestamp(value: Any) -> datetime:
    """Convert any recognized timestamp shape into an aware UTC datetime."""
    for shape, matches, convert in NORMALIZERS:
        if not matches(value):
            continue
        try:
            return convert(value)
        except (TypeError, ValueError, OverflowError, OSError):
            logger.debug("Timestamp %r did not convert as %s", value, shape.value)
            continue

    logger.warning("Unrecognized timestamp value %r; falling back to current time", value)
    return now_utc()

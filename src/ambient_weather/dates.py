"""Calendar date and epoch-millisecond conversions."""

from __future__ import annotations

import re
import time
from datetime import UTC, datetime

from ambient_weather.errors import MalformedDateError, RegexEngineError

DATE_PATTERN = r"\d{4}-\d{2}-\d{2}"
DATE_FORMAT = "%Y-%m-%d"

MS_PER_DAY = 86_400_000


def to_epoch_ms(date_string: str) -> int:
    """
    Convert a ``YYYY-MM-DD`` date to milliseconds since the Unix epoch.

    The date is read as UTC midnight.  The shape is checked before parsing,
    so ``11-15-2021`` and ``2021-11-15T12:00`` are rejected even though a
    looser parser might accept them.

    Raises:
        MalformedDateError: Wrong shape, or not a real calendar date.
        RegexEngineError: The pattern engine itself failed.
    """
    try:
        matched = re.fullmatch(DATE_PATTERN, date_string, flags=re.ASCII)
    except re.error as exc:
        raise RegexEngineError(DATE_PATTERN, str(exc)) from exc
    except TypeError as exc:
        raise MalformedDateError(repr(date_string)) from exc

    if matched is None:
        raise MalformedDateError(date_string)

    try:
        parsed = datetime.strptime(date_string, DATE_FORMAT).replace(tzinfo=UTC)
    except ValueError as exc:
        raise MalformedDateError(date_string) from exc

    return datetime_to_epoch_ms(parsed)


def datetime_to_epoch_ms(dt: datetime) -> int:
    """Milliseconds since the epoch for ``dt``; naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)


def epoch_ms_to_datetime(epoch_ms: int) -> datetime:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=UTC)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000

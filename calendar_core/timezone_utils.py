"""
Timezone and day-truncation utilities for calendar_core.

The store works on naive local datetimes. Timezone-aware values handed in by
callers are converted to the configured local timezone and made naive before
they reach the store; dates are always compared at day granularity.
"""

from datetime import date, datetime, time
from typing import Union
import pytz


# Default timezone - can be overridden by config
_local_timezone_name: str = "UTC"

DateLike = Union[date, datetime]


def set_timezone(timezone_name: str) -> None:
    """Set the local timezone used for aware-to-naive conversion.

    Raises pytz.UnknownTimeZoneError for names pytz does not know.
    """
    global _local_timezone_name
    pytz.timezone(timezone_name)
    _local_timezone_name = timezone_name


def get_timezone_name() -> str:
    return _local_timezone_name


def get_local_timezone():
    """
    Get the local timezone as a pytz timezone object.

    Returns:
        pytz timezone object for the configured local timezone.
    """
    return pytz.timezone(_local_timezone_name)


def to_local_naive(dt: datetime) -> datetime:
    """
    Convert a datetime to a naive local datetime.

    Args:
        dt: A datetime object, aware or naive.

    Returns:
        A naive datetime representing local time. Naive input is returned
        unchanged.
    """
    if dt.tzinfo is not None:
        return dt.astimezone(get_local_timezone()).replace(tzinfo=None)
    return dt


def now_local() -> datetime:
    """Current instant as a naive local datetime."""
    return datetime.now(pytz.UTC).astimezone(get_local_timezone()).replace(tzinfo=None)


def as_datetime(value: DateLike) -> datetime:
    """Naive local datetime for a date or datetime; a plain date means midnight."""
    if isinstance(value, datetime):
        return to_local_naive(value)
    return datetime.combine(value, time.min)


def as_date(value: DateLike) -> date:
    """Truncate a date or datetime to its (local) calendar day."""
    if isinstance(value, datetime):
        return to_local_naive(value).date()
    return value


def is_day_start(dt: datetime) -> bool:
    """True when dt falls exactly on midnight."""
    return dt.time() == time.min

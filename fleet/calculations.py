"""Helper functions for service interval calculations."""

import math
from datetime import date, datetime
from typing import Optional, Union

from dateutil.parser import isoparse

from .status import Status

DateLike = Union[str, date, datetime, None]


def parse_date(value: DateLike) -> Optional[date]:
    """
    Parse an ISO date or timestamp into a date.

    Accepts date/datetime objects as-is. Returns None for empty or
    unparseable input instead of raising.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return isoparse(str(value).strip()).date()
    except (ValueError, OverflowError):
        return None


def clamp_miles(value) -> Optional[int]:
    """
    Coerce a mileage value to a non-negative integer.

    None, non-numeric and non-finite input give None; negative values
    clamp to 0.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return max(0, int(round(value)))


def calc_miles_since(current_miles: int, last_service_miles: int) -> int:
    """Miles driven since the last service, never negative."""
    return max(0, current_miles - last_service_miles)


def calc_miles_until_due(miles_since: int, interval: int) -> int:
    """Miles left before the interval is reached, never negative."""
    return max(0, interval - miles_since)


def check_status(miles_since: int, interval: int, warning_threshold: int) -> Status:
    """Determine status by comparing miles since service to the interval."""
    if miles_since >= interval:
        return Status.OVERDUE
    if interval - miles_since <= warning_threshold:
        return Status.WARNING
    return Status.OK


def days_between(earlier: date, later: date) -> int:
    """Whole days from earlier to later (negative if later is before earlier)."""
    return (later - earlier).days

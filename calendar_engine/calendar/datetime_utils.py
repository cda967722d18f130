"""Date and time-of-day helpers for calendar events.

Events carry a calendar date and wall-clock start/end times with no time zone.
These helpers parse the persisted string forms and combine them into naive
datetimes that can be compared against the scheduler's clock.
"""

import datetime
import logging
import re
from typing import Any

from dateutil import parser as date_parser

from calendar_engine.exceptions import InvalidDateError

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M"

# Persisted calendar dates are exactly YYYY-MM-DD
_CALENDAR_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_calendar_date(value: Any) -> datetime.date:
    """Parse a calendar date from a ``date``, ``datetime`` or ``YYYY-MM-DD`` string.

    Other ISO 8601 forms (datetimes, compact or week dates) are rejected.

    Args:
        value: Date value, e.g. ``"2025-10-15"``

    Returns:
        The calendar date

    Raises:
        InvalidDateError: If the value is not a valid calendar date
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = value.strip() if isinstance(value, str) else ""
    if not _CALENDAR_DATE.match(text):
        raise InvalidDateError(f"Invalid calendar date: {value!r}")

    try:
        parsed = date_parser.isoparse(text)
    except (ValueError, OverflowError) as e:
        raise InvalidDateError(f"Invalid calendar date: {value!r}") from e
    return parsed.date()


def parse_time_of_day(value: Any) -> datetime.time:
    """Parse an ``HH:MM`` time of day.

    Raises:
        ValueError: If the value is not a valid time of day
    """
    if isinstance(value, datetime.time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if not isinstance(value, str):
        raise ValueError(f"Invalid time of day: {value!r}")
    return datetime.datetime.strptime(value.strip(), TIME_FORMAT).time()


def format_time_of_day(value: datetime.time) -> str:
    """Format a time of day as ``HH:MM``."""
    return value.strftime(TIME_FORMAT)


def is_leap_year(year: int) -> bool:
    """Gregorian leap year check."""
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def combine_wall_clock(day: datetime.date, time_of_day: datetime.time) -> datetime.datetime:
    """Combine a date and a time of day into a naive wall-clock datetime."""
    return datetime.datetime.combine(day, time_of_day)


def to_wall_clock(now: datetime.datetime) -> datetime.datetime:
    """Normalize a timestamp to naive local wall-clock time.

    Aware datetimes are converted to the host's local zone before the tzinfo is
    dropped; naive datetimes are assumed to already be local.
    """
    if now.tzinfo is None:
        return now
    return now.astimezone().replace(tzinfo=None)

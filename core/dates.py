"""
Calendar date helpers.

Stored dates are plain ``YYYY-MM-DD`` strings that always mean a UTC
calendar day. A user west of UTC who picks "today" must not end up with
yesterday's date in the store, so conversions go through the *calendar*
fields of the input (year, month, day) and never through an instant.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

STORED_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _calendar_date(value):
    if isinstance(value, datetime):
        # naive datetimes are the caller's local wall clock; aware ones keep
        # their own zone. Either way the calendar day is what was picked.
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"Expected a date, got {type(value).__name__}")


def local_date_to_utc_midnight(value):
    """Same year/month/day as ``value``, as an aware UTC-midnight datetime."""
    day = _calendar_date(value)
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def format_date_for_storage(value):
    return local_date_to_utc_midnight(value).date().isoformat()


def parse_stored_date(date_string):
    match = STORED_DATE_RE.fullmatch(date_string or "")
    if not match:
        raise ValidationError(f"Invalid date format: {date_string}")
    year, month, day = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        raise ValidationError(f"Invalid date: {date_string}")


def format_display_date(date_string):
    """``2025-01-05`` -> ``January 5, 2025``."""
    parsed = parse_stored_date(date_string)
    return f"{MONTH_NAMES[parsed.month - 1]} {parsed.day}, {parsed.year}"


def format_safe_date(date_string):
    """Display form of a stored date or ISO timestamp, never raises."""
    if not date_string:
        return "Invalid date"
    try:
        if "T" in date_string:
            instant = datetime.fromisoformat(date_string.replace("Z", "+00:00"))
            if instant.tzinfo is not None:
                instant = instant.astimezone(timezone.utc)
            return format_display_date(instant.date().isoformat())
        return format_display_date(date_string)
    except (ValueError, ValidationError) as e:
        logger.warning(f"Error formatting date {date_string!r}: {e}")
        return "Invalid date"


def create_week_dates(start):
    first = local_date_to_utc_midnight(start)
    return [first + timedelta(days=offset) for offset in range(7)]


def date_range(start_date, end_date):
    """Inclusive list of stored date strings between two stored dates."""
    start = parse_stored_date(start_date)
    end = parse_stored_date(end_date)
    if end < start:
        raise ValidationError("endDate must not be before startDate")
    days = (end - start).days
    return [(start + timedelta(days=offset)).date().isoformat() for offset in range(days + 1)]


def today_in_timezone(tz_name):
    return datetime.now(ZoneInfo(tz_name)).date().isoformat()


def yesterday_in_timezone(tz_name):
    return (datetime.now(ZoneInfo(tz_name)) - timedelta(days=1)).date().isoformat()

"""Date helpers shared by the expense and statistics modules.

Expense dates are naive wall-clock datetimes in the configured TIMEZONE.
Session timestamps are naive UTC.
"""
import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple

import pytz

from app.config import settings

# Canonical format for dates crossing the HTTP boundary
FORM_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

# datetime-local inputs omit seconds when they are zero
_FORM_DATETIME_FALLBACK = "%Y-%m-%dT%H:%M"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_now(tz_name: Optional[str] = None) -> datetime:
    tz = pytz.timezone(tz_name or settings.TIMEZONE)
    return datetime.now(tz).replace(tzinfo=None)


def parse_form_datetime(value: str) -> datetime:
    """Parse a date submitted by a form.

    Raises ValueError when the value matches neither the canonical format
    nor the minute-precision fallback.
    """
    value = value.strip()
    try:
        return datetime.strptime(value, FORM_DATETIME_FORMAT)
    except ValueError:
        return datetime.strptime(value, _FORM_DATETIME_FALLBACK)


def format_form_datetime(value: datetime) -> str:
    return value.strftime(FORM_DATETIME_FORMAT)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    start = datetime(year, month, 1)
    if month == 12:
        return start, datetime(year + 1, 1, 1)
    return start, datetime(year, month + 1, 1)


def year_bounds(year: int) -> Tuple[datetime, datetime]:
    return datetime(year, 1, 1), datetime(year + 1, 1, 1)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def format_group_title(day: date, today: Optional[date] = None) -> str:
    today = today or local_now().date()
    if day == today:
        return "TODAY"
    if day == today - timedelta(days=1):
        return "YESTERDAY"
    return day.strftime("%a, %d %b '%y").upper()

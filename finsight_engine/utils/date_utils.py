"""Date manipulation utilities"""

from datetime import date, datetime, timedelta
from typing import Any, List, Optional


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def to_calendar_day(value: Any) -> Optional[date]:
    """
    Reduce a date-ish value to a timezone-naive calendar day.

    Accepts date, datetime (time part dropped) and ISO-8601 strings.
    Returns None for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) >= 10:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start's month to end's month (day of month ignored)"""
    return (end.year - start.year) * 12 + (end.month - start.month)


def fractional_months_between(start: date, end: date) -> float:
    """Elapsed months using the average month length of 30.44 days"""
    return (end - start).days / 30.44

"""Date manipulation utilities"""

from datetime import date, datetime, timedelta


def as_date(value: date) -> date:
    """Truncate datetimes to their calendar day; plain dates pass through"""
    if isinstance(value, datetime):
        return value.date()
    return value


def add_calendar_days(from_date: date, days: int) -> date:
    """Add calendar days to a date (weekends and holidays count)"""
    return as_date(from_date) + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative when end is earlier)"""
    return (as_date(end) - as_date(start)).days

"""Calendar date helpers for billing cycles"""

import calendar
from datetime import date, datetime
from typing import Tuple


def to_calendar_date(value: date | datetime | str) -> date:
    """
    Normalize a date-like value to a plain calendar date.

    Time-of-day and timezone are dropped so that a purchase recorded late at
    night never shifts to the neighbouring day. ISO strings with a time part
    ("2024-03-20T03:00:00.000Z") keep only their date part.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.split("T")[0].strip())
    raise TypeError(f"Cannot convert {type(value).__name__} to a calendar date")


def shift_month(year: int, month: int, months: int) -> Tuple[int, int]:
    """Add (or subtract) months to a (year, month) pair, rolling the year over"""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, clamping day to the last valid day of the month (31 in April -> 30)"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month"""
    return date(year, month, 1), clamp_day(year, month, 31)


def parse_month(value: str) -> Tuple[int, int]:
    """Parse a "YYYY-MM" month key"""
    year_str, month_str = value.split("-")
    year, month = int(year_str), int(month_str)
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {value}")
    return year, month


def format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"

"""
Planning cycle arithmetic.

This module is the only place that decides which month is open for planning
and allocation. Months are 1..12 throughout the system.
"""

import calendar
from datetime import date, datetime
from typing import NamedTuple, Union


class MonthKey(NamedTuple):
    """A calendar month, ``month`` in 1..12."""
    month: int
    year: int

    @classmethod
    def of(cls, day: date) -> "MonthKey":
        """Get the month containing a date."""
        return cls(day.month, day.year)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def validate_month(month: int, year: int) -> MonthKey:
    """Return a MonthKey or raise ValueError for a month outside 1..12."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be in 1..12 (got {month})")
    if not 1 <= year <= 9999:
        raise ValueError(f"Year out of range (got {year})")
    return MonthKey(month, year)


def shift_month(key: MonthKey, offset: int) -> MonthKey:
    """Move a month key by ``offset`` months, wrapping years."""
    index = key.year * 12 + (key.month - 1) + offset
    return MonthKey(index % 12 + 1, index // 12)


def active_month(today: date, allocate_for_current_month: bool) -> MonthKey:
    """
    Get the month currently open for planning and allocation.

    Args:
        today: The current date
        allocate_for_current_month: When true the current month is open,
            otherwise the next calendar month is

    Returns:
        MonthKey with a 1-based month
    """
    current = MonthKey.of(today)
    if allocate_for_current_month:
        return current
    return shift_month(current, 1)


def days_in_month(year: int, month: int) -> int:
    """Get the number of days in a month."""
    return calendar.monthrange(year, month)[1]


def month_title(key: MonthKey) -> str:
    """Human readable month title, e.g. 'June 2025'."""
    return f"{calendar.month_name[key.month]} {key.year}"


def parse_iso_date(value: Union[str, date]) -> date:
    """
    Parse a calendar date.

    Accepts ``YYYY-MM-DD`` or a full ISO timestamp (only the date part is
    kept, no time zone conversion is applied).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    return date.fromisoformat(text[:10])

"""Date utilities for paytrack.

Pure functions over calendar dates. Dates are plain ``datetime.date``
values: no time of day, no timezone.
"""

import calendar
from datetime import date, datetime

from paytrack.domain.models import Month


def parse_iso_date(value: str) -> date:
    """Parse a YYYY-MM-DD calendar string.

    Raises:
        ValueError: If the string is not a valid ISO calendar date.
    """
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def format_iso_date(value: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return value.strftime("%Y-%m-%d")


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def start_of_month(value: date) -> date:
    return value.replace(day=1)


def end_of_month(value: date) -> date:
    return value.replace(day=days_in_month(value.year, value.month))


def start_of_year(value: date) -> date:
    return date(value.year, 1, 1)


def end_of_year(value: date) -> date:
    return date(value.year, 12, 31)


def add_months(value: date, months: int) -> date:
    """Move a date by whole months, clamping the day to the target month.

    Jan 31 + 1 month is Feb 28 (or Feb 29 in a leap year).
    """
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    return date(year, month + 1, min(value.day, days_in_month(year, month + 1)))


def add_years(value: date, years: int) -> date:
    """Move a date by whole years; Feb 29 becomes Feb 28 in non-leap years."""
    year = value.year + years
    return date(year, value.month, min(value.day, days_in_month(year, value.month)))


def month_range(month: Month) -> tuple[date, date, str]:
    """Calculate date range and label for a month.

    Args:
        month: Month in YYYY-MM format.

    Returns:
        Tuple of (first_day, last_day, label), e.g. label "January 2025".

    Raises:
        ValueError: If the month is not a valid YYYY-MM string.
    """
    first = datetime.strptime(month, "%Y-%m").date()
    return first, end_of_month(first), first.strftime("%B %Y")

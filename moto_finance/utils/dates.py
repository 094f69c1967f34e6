"""Date arithmetic for schedules and lateness."""

from datetime import date, datetime

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta


def to_date(value: date | datetime | str) -> date:
    """Normalize a date, datetime or ISO string to a calendar day.

    Time-of-day is discarded, so every comparison happens at start of day.

    Raises
    ------
    ValueError
        If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return isoparse(value.strip()).date()
    raise ValueError(f"Not a date: {value!r}")


start_of_day = to_date


def add_months(value: date | datetime | str, months: int) -> date:
    """Calendar month addition; the day is clamped to the target month's end.

    ``add_months(date(2024, 1, 31), 1)`` is ``date(2024, 2, 29)``.
    """
    return to_date(value) + relativedelta(months=months)


def days_between(later: date, earlier: date) -> int:
    """Whole days from ``earlier`` to ``later`` (negative if reversed)."""
    return (later - earlier).days


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month."""
    first = date(year, month, 1)
    return first, first + relativedelta(months=1, days=-1)

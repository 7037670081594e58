"""Calendar helpers shared by the normalizer and the schedule builders."""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Optional


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def is_last_day_of_month(d: date) -> bool:
    return d.day == days_in_month(d.year, d.month)


def add_months(anchor: date, months: int) -> date:
    """Same day-of-month `months` later, clamped to the end of a shorter month."""
    year = anchor.year
    month = anchor.month + months
    while month > 12:
        month -= 12
        year += 1
    while month < 1:
        month += 12
        year -= 1
    day = min(anchor.day, days_in_month(year, month))
    return date(year, month, day)


def add_years(anchor: date, years: int) -> date:
    return add_months(anchor, 12 * years)


def block_end(start: date, months: int) -> date:
    """Last day of a block of `months` months that begins on `start`."""
    return add_months(start, months) - timedelta(days=1)


def calendar_month_diff(start: date, end: date) -> int:
    """Whole calendar months from start to end; day of month ignored."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def months_since(anchor: date, d: date) -> int:
    """Whole months elapsed from anchor to d, counting a month once its anchor day is reached."""
    months = calendar_month_diff(anchor, d)
    if d.day < anchor.day:
        months -= 1
    return max(0, months)


def months_from_dates(start: Optional[date], end: Optional[date]) -> Optional[int]:
    """
    Lease term in months implied by a commencement and an expiration.

    The calendar difference ignores the day of month; an expiration on the
    last day of its month counts that month as well, so 2024-01-01 to
    2028-12-31 is 60 months. Non-positive results are None.
    """
    if start is None or end is None:
        return None
    total = calendar_month_diff(start, end)
    if is_last_day_of_month(end):
        total += 1
    return total if total > 0 else None


def overlapping_months(a_start: date, a_end: date, b_start: date, b_end: date) -> int:
    """
    Months in the overlap of two inclusive ranges (0 if disjoint). A trailing
    partial month only counts once the end day reaches the start day.
    """
    start = max(a_start, b_start)
    end = min(a_end, b_end)
    if start > end:
        return 0
    months = calendar_month_diff(start, end) + 1
    if end.day < start.day:
        months -= 1
    return max(0, months)

"""
Calendar helpers for budget windows and reporting filters.

All ranges are closed: both ``start`` and ``end`` are part of the range.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, slots=True)
class DateRange:
    """Closed calendar range ``[start, end]``."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"start ({self.start}) cannot be after end ({self.end})")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def overlaps(self, other: DateRange) -> bool:
        return ranges_overlap(self.start, self.end, other.start, other.end)

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


def is_date_in_range(day: date, start: date, end: date) -> bool:
    """Inclusive containment test: ``start <= day <= end``."""
    return start <= day <= end


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Two closed ranges overlap iff ``start_a <= end_b and start_b <= end_a``."""
    return start_a <= end_b and start_b <= end_a


def end_of_month(day: date) -> date:
    last = calendar.monthrange(day.year, day.month)[1]
    return date(day.year, day.month, last)


def end_of_year(day: date) -> date:
    return date(day.year, 12, 31)


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    last = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last))


def add_years(day: date, years: int) -> date:
    """Shift by whole years; 29 February becomes 28 February in common years."""
    return add_months(day, years * 12)


def month_key(day: date) -> str:
    """``YYYY-MM`` bucket key used by monthly trends."""
    return f"{day.year:04d}-{day.month:02d}"

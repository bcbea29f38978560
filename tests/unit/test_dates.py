"""Unit tests for the closed-range calendar helpers."""

from datetime import date

import pytest

from budget_kernel.domain.dates import (
    DateRange,
    add_months,
    add_years,
    end_of_month,
    end_of_year,
    is_date_in_range,
    month_key,
    ranges_overlap,
)


class TestRanges:
    def test_endpoints_are_inclusive(self):
        start, end = date(2024, 1, 1), date(2024, 1, 31)
        assert is_date_in_range(start, start, end)
        assert is_date_in_range(end, start, end)
        assert not is_date_in_range(date(2024, 2, 1), start, end)

    def test_touching_ranges_overlap(self):
        assert ranges_overlap(date(2024, 1, 1), date(2024, 1, 31), date(2024, 1, 31), date(2024, 2, 29))

    def test_adjacent_ranges_do_not_overlap(self):
        assert not ranges_overlap(date(2024, 1, 1), date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 29))

    def test_date_range_rejects_inverted(self):
        with pytest.raises(ValueError):
            DateRange(date(2024, 2, 1), date(2024, 1, 1))

    def test_date_range_days(self):
        assert DateRange(date(2024, 2, 1), date(2024, 2, 29)).days == 29

    def test_date_range_overlaps(self):
        jan = DateRange(date(2024, 1, 1), date(2024, 1, 31))
        mid = DateRange(date(2024, 1, 15), date(2024, 2, 15))
        assert jan.overlaps(mid)
        assert jan.contains(date(2024, 1, 20))


class TestCalendarArithmetic:
    def test_end_of_month_leap_february(self):
        assert end_of_month(date(2024, 2, 10)) == date(2024, 2, 29)

    def test_end_of_month_common_february(self):
        assert end_of_month(date(2023, 2, 10)) == date(2023, 2, 28)

    def test_end_of_year(self):
        assert end_of_year(date(2024, 6, 1)) == date(2024, 12, 31)

    def test_add_months_clamps_day(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_add_months_crosses_year(self):
        assert add_months(date(2024, 12, 15), 1) == date(2025, 1, 15)

    def test_add_months_negative(self):
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_add_years_leap_day(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)

    def test_month_key(self):
        assert month_key(date(2024, 3, 9)) == "2024-03"

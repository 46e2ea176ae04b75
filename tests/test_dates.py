"""
Unit Tests for the date utilities

Month arithmetic must clamp at month end instead of overflowing.
"""

from datetime import date, datetime

import pytest

from contract_engine.dates import (
    add_days,
    add_months,
    days_between,
    format_br_date,
    parse_br_date,
    parse_iso_date,
    reference_month,
)
from contract_engine.exceptions import InvalidInput


class TestAddMonths:
    """Calendar-correct month addition."""

    def test_simple_addition(self):
        assert add_months(date(2024, 3, 15), 12) == date(2025, 3, 15)

    def test_jan_31_plus_one_month_leap_year(self):
        """2024-01-31 + 1 month = 2024-02-29 (not March 2)."""
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_jan_31_plus_one_month_common_year(self):
        """2025-01-31 + 1 month = 2025-02-28."""
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)

    def test_leap_day_plus_twelve_months(self):
        """2024-02-29 + 12 months = 2025-02-28."""
        assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)

    def test_aug_31_plus_one_month(self):
        assert add_months(date(2024, 8, 31), 1) == date(2024, 9, 30)

    def test_sixty_months(self):
        assert add_months(date(2024, 3, 15), 60) == date(2029, 3, 15)

    def test_negative_months(self):
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)


class TestDayCounts:

    def test_days_between_forward(self):
        assert days_between(date(2024, 10, 1), date(2025, 1, 10)) == 101

    def test_days_between_backward_is_negative(self):
        assert days_between(date(2025, 1, 10), date(2025, 1, 1)) == -9

    def test_add_days_crosses_year(self):
        assert add_days(date(2024, 12, 31), 1) == date(2025, 1, 1)

    def test_reference_month(self):
        assert reference_month(date(2025, 6, 18)) == date(2025, 6, 1)


class TestParseIsoDate:

    def test_parses_string(self):
        assert parse_iso_date("2024-03-15") == date(2024, 3, 15)

    def test_ignores_time_part(self):
        assert parse_iso_date("2024-03-15T10:30:00+00:00") == date(2024, 3, 15)

    def test_accepts_date_and_datetime(self):
        assert parse_iso_date(date(2024, 3, 15)) == date(2024, 3, 15)
        assert parse_iso_date(datetime(2024, 3, 15, 8, 0)) == date(2024, 3, 15)

    def test_empty_is_none(self):
        assert parse_iso_date(None) is None
        assert parse_iso_date("") is None

    def test_malformed_raises(self):
        with pytest.raises(InvalidInput, match="data_vencimento"):
            parse_iso_date("15/03/2024", "data_vencimento")

    def test_wrong_type_raises(self):
        with pytest.raises(InvalidInput):
            parse_iso_date(20240315)


class TestBrazilianDates:
    """The loosely typed dd/mm input."""

    @pytest.fixture
    def today(self):
        return date(2025, 6, 18)

    def test_full_date_with_slashes(self, today):
        assert parse_br_date("15/03/2024", today) == date(2024, 3, 15)

    def test_full_date_digits_only(self, today):
        assert parse_br_date("15032024", today) == date(2024, 3, 15)

    def test_day_month_uses_current_year(self, today):
        assert parse_br_date("12/05", today) == date(2025, 5, 12)

    def test_four_digits_uses_current_year(self, today):
        assert parse_br_date("0102", today) == date(2025, 2, 1)

    def test_unrecognized_length_returns_none(self, today):
        assert parse_br_date("12", today) is None
        assert parse_br_date("", today) is None
        assert parse_br_date(None, today) is None
        assert parse_br_date("1503202", today) is None

    def test_month_out_of_range_raises(self, today):
        with pytest.raises(InvalidInput, match="Invalid date"):
            parse_br_date("15/13/2024", today)

    def test_impossible_day_raises(self, today):
        """31/02 passes the range check but is not a real date."""
        with pytest.raises(InvalidInput, match="Invalid date"):
            parse_br_date("31/02/2025", today)

    def test_year_before_1900_raises(self, today):
        with pytest.raises(InvalidInput):
            parse_br_date("01/01/1899", today)

    def test_format(self):
        assert format_br_date(date(2024, 3, 5)) == "05/03/2024"

    def test_format_none(self):
        assert format_br_date(None) == "-"

"""
Unit Tests for Deadline Calculator

Tests verify suggestions and reports against known expected dates.
"""

from datetime import date, timedelta

import pytest

from contract_engine.calculators.deadlines import DeadlineCalculator, compute_deadlines
from contract_engine.exceptions import InvalidInput
from contract_engine.models import DateSuggestion, MergePolicy


class TestDefaultTermSuggestion:
    """No expiration yet: suggest default-term dates."""

    @pytest.fixture
    def calculator(self):
        return DeadlineCalculator()

    def test_defaults(self, calculator):
        assert calculator.LEGAL_TERM_MONTHS == 60
        assert calculator.RENEWAL_WINDOW_DAYS == 120
        assert calculator.DEFAULT_TERM_MONTHS == 12

    def test_signed_2024_03_15(self):
        """2024-03-15 -> expiration 2025-03-14, legal limit 2029-03-15."""
        info = compute_deadlines(date(2024, 3, 15), None, today=date(2024, 3, 15))

        assert info.report is None
        assert info.suggestion.suggested_expiration == date(2025, 3, 14)
        assert info.suggestion.legal_limit == date(2029, 3, 15)

    @pytest.mark.parametrize("signature", [
        date(2024, 1, 1),
        date(2023, 12, 31),
        date(2025, 7, 10),
    ])
    def test_suggestion_formula(self, calculator, signature):
        suggestion = calculator.suggest(signature)

        one_year = date(signature.year + 1, signature.month, signature.day)
        assert suggestion.suggested_expiration == one_year - timedelta(days=1)
        assert suggestion.legal_limit.year == signature.year + 5

    def test_leap_day_signature(self, calculator):
        """2024-02-29 + 12 months clamps to 2025-02-28, minus one day."""
        suggestion = calculator.suggest(date(2024, 2, 29))

        assert suggestion.suggested_expiration == date(2025, 2, 27)
        assert suggestion.legal_limit == date(2029, 2, 28)

    def test_custom_terms(self):
        info = compute_deadlines(
            date(2024, 1, 31), None, today=date(2024, 1, 31),
            legal_term_months=1, default_term_months=1,
        )

        assert info.suggestion.suggested_expiration == date(2024, 2, 28)
        assert info.suggestion.legal_limit == date(2024, 2, 29)

    def test_missing_both_dates_raises(self, calculator):
        with pytest.raises(InvalidInput, match="signature date is required"):
            calculator.compute(None, None, date(2024, 1, 1))


class TestDeadlineReport:
    """Expiration present: renewal window report."""

    @pytest.fixture
    def calculator(self):
        return DeadlineCalculator()

    def test_inside_critical_window(self, calculator):
        """2025-01-10 seen on 2024-10-01: 101 days left, 101 <= 120 is critical."""
        info = calculator.compute(date(2024, 1, 11), date(2025, 1, 10), date(2024, 10, 1))
        report = info.report

        assert info.suggestion is None
        assert report.days_remaining == 101
        assert report.is_critical_window is True
        assert report.is_expired is False
        assert report.renewal_request_deadline == date(2024, 9, 12)
        assert report.is_past_renewal_deadline is True
        assert report.alert_level == "critical"

    def test_signature_not_needed_for_report(self, calculator):
        info = calculator.compute(None, date(2025, 1, 10), date(2024, 10, 1))
        assert info.report.days_remaining == 101

    def test_boundary_is_inclusive(self, calculator):
        """Exactly 120 days left is critical; 121 is not."""
        expiration = date(2025, 5, 1)

        at_boundary = calculator.report(expiration, expiration - timedelta(days=120))
        outside = calculator.report(expiration, expiration - timedelta(days=121))

        assert at_boundary.is_critical_window is True
        assert at_boundary.is_past_renewal_deadline is False
        assert outside.is_critical_window is False
        assert outside.alert_level == "ok"

    def test_past_renewal_deadline_starts_day_after(self, calculator):
        expiration = date(2025, 5, 1)
        report = calculator.report(expiration, expiration - timedelta(days=119))

        assert report.is_past_renewal_deadline is True

    def test_expired_contract_is_critical(self, calculator):
        report = calculator.report(date(2024, 6, 30), date(2024, 7, 1))

        assert report.days_remaining == -1
        assert report.is_expired is True
        assert report.is_critical_window is True
        assert report.alert_level == "expired"

    def test_expiring_today_is_not_expired(self, calculator):
        report = calculator.report(date(2024, 7, 1), date(2024, 7, 1))

        assert report.days_remaining == 0
        assert report.is_expired is False
        assert report.is_critical_window is True

    @pytest.mark.parametrize("offset", [-400, -1, 0, 1, 119, 120, 121, 365])
    def test_expired_implies_critical(self, calculator, offset):
        today = date(2025, 3, 1)
        report = calculator.report(today + timedelta(days=offset), today)

        assert report.is_expired == (report.expiration_date < today)
        if report.is_expired:
            assert report.is_critical_window

    def test_custom_window(self):
        calculator = DeadlineCalculator(renewal_window_days=30)
        report = calculator.report(date(2025, 1, 10), date(2024, 10, 1))

        assert report.is_critical_window is False
        assert report.renewal_request_deadline == date(2024, 12, 11)


class TestMergeSuggestion:
    """Merge policy for computed dates."""

    @pytest.fixture
    def suggestion(self):
        return DateSuggestion(suggested_expiration=date(2025, 3, 14), legal_limit=date(2029, 3, 15))

    def test_fill_if_empty_keeps_existing(self, suggestion):
        form = {"data_vencimento": "2024-12-31", "data_limite_legal": ""}

        merged = DeadlineCalculator.merge_suggestion(form, suggestion, MergePolicy.FILL_IF_EMPTY)

        assert merged["data_vencimento"] == "2024-12-31"
        assert merged["data_limite_legal"] == date(2029, 3, 15)

    def test_fill_if_empty_fills_missing_keys(self, suggestion):
        merged = DeadlineCalculator.merge_suggestion({}, suggestion, MergePolicy.FILL_IF_EMPTY)

        assert merged["data_vencimento"] == date(2025, 3, 14)
        assert merged["data_limite_legal"] == date(2029, 3, 15)

    def test_overwrite_replaces(self, suggestion):
        form = {"data_vencimento": "2024-12-31", "data_limite_legal": "2030-01-01"}

        merged = DeadlineCalculator.merge_suggestion(form, suggestion, MergePolicy.OVERWRITE)

        assert merged["data_vencimento"] == date(2025, 3, 14)
        assert merged["data_limite_legal"] == date(2029, 3, 15)

    def test_original_form_untouched(self, suggestion):
        form = {"data_vencimento": ""}
        DeadlineCalculator.merge_suggestion(form, suggestion, MergePolicy.OVERWRITE)

        assert form == {"data_vencimento": ""}

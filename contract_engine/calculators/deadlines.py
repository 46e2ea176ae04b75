"""
Deadline Calculator

Derives default-term suggestions and renewal/expiration status for a
contract. ``today`` is always supplied by the caller.
"""

from datetime import date

from ..dates import add_days, add_months, days_between
from ..exceptions import InvalidInput
from ..models import DateSuggestion, DeadlineInfo, DeadlineReport, MergePolicy

# Form/payload fields written by merge_suggestion
EXPIRATION_FIELD = "data_vencimento"
LEGAL_LIMIT_FIELD = "data_limite_legal"


class DeadlineCalculator:
    """Computes contract deadlines from signature and expiration dates."""

    # Lei 8.666/14.133 ceiling for continued services
    LEGAL_TERM_MONTHS = 60
    RENEWAL_WINDOW_DAYS = 120
    DEFAULT_TERM_MONTHS = 12

    def __init__(
        self,
        legal_term_months: int = LEGAL_TERM_MONTHS,
        renewal_window_days: int = RENEWAL_WINDOW_DAYS,
        default_term_months: int = DEFAULT_TERM_MONTHS,
    ):
        self.legal_term_months = legal_term_months
        self.renewal_window_days = renewal_window_days
        self.default_term_months = default_term_months

    def compute(
        self,
        signature_date: date | None,
        current_expiration_date: date | None,
        today: date,
    ) -> DeadlineInfo:
        """
        Without an expiration, suggest default-term dates from the signature.
        With an expiration, report on the renewal window instead.
        """
        if current_expiration_date is not None:
            return DeadlineInfo(report=self.report(current_expiration_date, today))

        if signature_date is None:
            raise InvalidInput("signature date is required when no expiration date is set")

        return DeadlineInfo(suggestion=self.suggest(signature_date))

    def suggest(self, signature_date: date) -> DateSuggestion:
        """signature + default term - 1 day, and signature + legal term."""
        return DateSuggestion(
            suggested_expiration=add_days(add_months(signature_date, self.default_term_months), -1),
            legal_limit=add_months(signature_date, self.legal_term_months),
        )

    def report(self, expiration_date: date, today: date) -> DeadlineReport:
        days_remaining = days_between(today, expiration_date)
        renewal_deadline = add_days(expiration_date, -self.renewal_window_days)

        return DeadlineReport(
            expiration_date=expiration_date,
            today=today,
            days_remaining=days_remaining,
            renewal_request_deadline=renewal_deadline,
            is_expired=days_remaining < 0,
            # Inclusive boundary; a negative count is always inside the window
            is_critical_window=days_remaining <= self.renewal_window_days,
            is_past_renewal_deadline=today > renewal_deadline,
        )

    @staticmethod
    def merge_suggestion(form: dict, suggestion: DateSuggestion, policy: MergePolicy) -> dict:
        """
        Merge suggested dates into a copy of a contract form.

        OVERWRITE always replaces both dates; FILL_IF_EMPTY only writes fields
        that are missing or blank.
        """
        merged = dict(form)
        values = {
            EXPIRATION_FIELD: suggestion.suggested_expiration,
            LEGAL_LIMIT_FIELD: suggestion.legal_limit,
        }
        for key, value in values.items():
            if policy is MergePolicy.OVERWRITE or not merged.get(key):
                merged[key] = value
        return merged


def compute_deadlines(
    signature_date: date | None,
    current_expiration_date: date | None,
    today: date,
    legal_term_months: int = DeadlineCalculator.LEGAL_TERM_MONTHS,
    renewal_window_days: int = DeadlineCalculator.RENEWAL_WINDOW_DAYS,
    default_term_months: int = DeadlineCalculator.DEFAULT_TERM_MONTHS,
) -> DeadlineInfo:
    calculator = DeadlineCalculator(legal_term_months, renewal_window_days, default_term_months)
    return calculator.compute(signature_date, current_expiration_date, today)
